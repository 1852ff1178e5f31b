"""
================================================================================
CONSTANTS - Site-Wide Configuration Values
================================================================================

Centralized repository for the hardcoded constants used by the course
enrollment site. Organized by functional category.

Constant Categories:
    1. File Paths - Directory and file locations
    2. Course Catalogue - Seed data and display defaults
    3. Validation - Field types and password rules
    4. Security - Session, CSRF and rate limit settings

File Path Constants:
    Runtime files (database, logs, configs) live relative to BASE_DIR,
    the working directory the site is started from (or $QUWIUS_HOME).
    Templates and static assets live relative to PROJECT_DIR, the
    checkout the package was imported from.
    Supports monkeypatching for test isolation.

    Example:
        DB_FILE = BASE_DIR / 'quwius.db'
        PAGE_VARS_FILE = BASE_DIR / 'configs' / 'page_vars.json'

Note:
    Values in this file are STATIC. For runtime-configurable settings,
    use config.json via quwius.utils.config module.
================================================================================
"""

import os
from pathlib import Path

# ==========================================
# FILE PATHS
# ==========================================
PROJECT_DIR = Path(__file__).resolve().parent.parent.parent
TEMPLATE_DIR = PROJECT_DIR / 'web_templates'
STATIC_DIR = PROJECT_DIR / 'web_static'

BASE_DIR = Path(os.environ.get('QUWIUS_HOME') or Path.cwd())
OUTPUT_DIR = BASE_DIR / 'outputs'
LOG_DIR = OUTPUT_DIR / 'logs'
AUDIT_LOG_FILE = LOG_DIR / 'audit.log'
DB_FILE = BASE_DIR / 'quwius.db'
CONFIG_FILE = BASE_DIR / 'configs' / 'config.json'
PAGE_VARS_FILE = BASE_DIR / 'configs' / 'page_vars.json'

# ==========================================
# COURSE CATALOGUE
# ==========================================
DEFAULT_COURSE_IMAGE = 'course.svg'

DEFAULT_COURSES = [
    {
        'course_name': 'Introduction to Computing I',
        'faculty_dept_name': 'Computing',
        'instructor_name': 'Dr. Ellis Ramdass',
        'course_image': 'course.svg',
    },
    {
        'course_name': 'Object-Oriented Programming',
        'faculty_dept_name': 'Computing',
        'instructor_name': 'Prof. Natalie Greaves',
        'course_image': 'course.svg',
    },
    {
        'course_name': 'Principles of Accounting',
        'faculty_dept_name': 'Management Studies',
        'instructor_name': 'Mr. Kevin Alleyne',
        'course_image': 'course.svg',
    },
    {
        'course_name': 'Caribbean Civilisation',
        'faculty_dept_name': 'Humanities and Education',
        'instructor_name': 'Dr. Maria Joseph',
        'course_image': 'course.svg',
    },
    {
        'course_name': 'Calculus I',
        'faculty_dept_name': 'Mathematics',
        'instructor_name': 'Dr. Anand Persad',
        'course_image': 'course.svg',
    },
]

# ==========================================
# VALIDATION
# ==========================================
PASSWORD_MIN_LENGTH = 10
SELECT_PLACEHOLDERS = ('--', '-- Select One --')

# ==========================================
# SECURITY CONSTANTS
# ==========================================
LOGIN_RATE_LIMIT = "5 per 15 minutes"
PAGE_RATE_LIMIT = "300 per hour"
CSRF_TOKEN_ROTATION_INTERVAL = 3600  # seconds
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = 'Lax'
BCRYPT_COST_FACTOR = 12

TEST_MODE = os.environ.get('TEST_MODE') == '1'
