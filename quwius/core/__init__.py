"""
================================================================================
CORE MODULE - Storage and Accounts
================================================================================

Components:
    database.py - SQLite catalogue, users and enrolments
    accounts.py - bcrypt password hashing, registration and login

Usage:
    from quwius.core import DatabaseManager
    db = DatabaseManager()
    db.list_courses()
================================================================================
"""

from .database import DatabaseManager, DuplicateRecordError

__all__ = [
    'DatabaseManager',
    'DuplicateRecordError',
]
