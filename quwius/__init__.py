"""
================================================================================
QUWIUS PACKAGE - Course Enrollment Site
================================================================================

Package Structure:
    quwius/core/            - Storage and accounts (database, accounts)
    quwius/utils/           - Shared utilities (logging, config, constants)
    quwius/web/             - Flask server and page controllers
    quwius/validator.py     - Form validation base class
    quwius/form_validator.py - Validator used by the site's pages
================================================================================
"""

__version__ = "2026.1"
