"""
Configuration Management Module

Handles loading and saving site configuration from config.json and the
per-page field declarations from page_vars.json.
Missing files fall back to defaults; user values are merged over defaults.
"""

import copy
import json
import logging
from pathlib import Path

import filelock

from .constants import BCRYPT_COST_FACTOR

logger = logging.getLogger("quwius")

DEFAULT_CONFIG = {
    "site": {
        "name": "Quwius",
        "copyright": "2015 Quwius Inc.",
        "default_page": "Home",
    },
    "security": {
        "bcrypt_rounds": BCRYPT_COST_FACTOR,
        "session_lifetime_hours": 24,
        "secure_cookies": False,
    },
    "logging": {
        "level": "INFO",
    },
}

# Field declarations per page. Every page the router may dispatch to
# is listed here, including pages without form fields.
DEFAULT_PAGE_VARS = {
    "Home": {},
    "Courses": {},
    "Streams": {},
    "Logout": {},
    "Profile": {
        "course_id": {"type": "entry", "label": "Course",
                      "errormessage": "Course: Choose a course to remove."},
    },
    "AddCourse": {
        "course_id": {"type": "entry", "label": "Course",
                      "errormessage": "Course: Choose a course to add."},
    },
    "Login": {
        "email": {"type": "email", "label": "Email"},
        "password": {"type": "entry", "label": "Password",
                     "errormessage": "Password: Please enter your password."},
    },
    "SignUp": {
        "name": {"type": "simpletext", "label": "Full name"},
        "email": {"type": "email", "label": "Email"},
        "password": {"type": "password", "label": "Password"},
        "confirm_password": {"type": "entry", "label": "Confirm password"},
    },
    "NewCourse": {
        "course_name": {"type": "entry", "label": "Course name"},
        "faculty_dept_name": {"type": "entry", "label": "Faculty/Department"},
        "instructor_name": {"type": "simpletext", "label": "Instructor"},
        "course_image": {"type": "entry", "label": "Course image", "emptyallowed": "yes"},
    },
}


def load_config():
    """
    Load configuration from config.json with sensible defaults

    Returns:
        dict: Configuration dictionary
    """
    from .constants import CONFIG_FILE

    defaults = copy.deepcopy(DEFAULT_CONFIG)

    if not CONFIG_FILE.exists():
        _save_config(CONFIG_FILE, defaults)
        return defaults

    try:
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            config = json.load(f)

        # Merge with defaults to ensure all keys exist
        merged = _deep_merge(defaults, config)

        if merged != config:
            _save_config(CONFIG_FILE, merged)

        return merged
    except json.JSONDecodeError as e:
        logger.error(f"Config file corrupted: {e}. Using defaults.")
        return defaults
    except OSError as e:
        logger.error(f"Error loading config: {e}. Using defaults.")
        return defaults


def load_page_vars(path=None):
    """
    Load the page variable declarations.

    Args:
        path: Optional override of PAGE_VARS_FILE (mainly for tests)

    Returns:
        dict: page name -> {field name -> options}
    """
    from .constants import PAGE_VARS_FILE

    page_vars_file = Path(path) if path is not None else PAGE_VARS_FILE
    if not page_vars_file.exists():
        return copy.deepcopy(DEFAULT_PAGE_VARS)

    try:
        with open(page_vars_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Page variable file unreadable: {e}. Using defaults.")
        return copy.deepcopy(DEFAULT_PAGE_VARS)

    if not isinstance(data, dict):
        logger.error(f"Page variable file {page_vars_file} must hold an object. Using defaults.")
        return copy.deepcopy(DEFAULT_PAGE_VARS)

    pages = {}
    for page, fields in data.items():
        if not isinstance(fields, dict):
            logger.warning(f"Ignoring page '{page}': field map must be an object")
            continue
        pages[page] = {name: dict(opts) for name, opts in fields.items() if isinstance(opts, dict)}
    return pages


def _deep_merge(defaults: dict, override: dict) -> dict:
    """
    Deep merge override config into defaults, preserving new defaults

    Args:
        defaults: Default configuration
        override: User-provided configuration

    Returns:
        dict: Merged configuration
    """
    result = defaults.copy()
    for key, value in override.items():
        if key in defaults and isinstance(defaults[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(defaults[key], value)
        else:
            result[key] = value
    return result


def _save_config(config_file: Path, config: dict):
    """
    Save configuration to file under a file lock

    Args:
        config_file: Path to config file
        config: Configuration dictionary
    """
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        lock = filelock.FileLock(str(config_file) + '.lock', timeout=10)
        with lock:
            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=4)
    except (OSError, filelock.Timeout) as e:
        logger.error(f"Failed to save config: {e}")
