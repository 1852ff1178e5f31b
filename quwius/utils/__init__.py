"""
================================================================================
UTILS MODULE - Shared Utilities and Helpers
================================================================================

Shared infrastructure used across all site components.

Exported Functions:
    Logging:
        - setup_logging() - Initialize logging infrastructure
        - set_run_context(context) - Set execution context
        - logger - Main application logger

    Configuration:
        - load_config() - Load site configuration from config.json
        - load_page_vars() - Load per-page field declarations

Usage:
    from quwius.utils import logger, load_config
    from quwius.utils.constants import DB_FILE
================================================================================
"""

from .logger import setup_logging, set_run_context, logger
from .config import load_config, load_page_vars

__all__ = [
    'setup_logging',
    'set_run_context',
    'logger',
    'load_config',
    'load_page_vars',
]
