"""
================================================================================
WEB MODULE - Course Enrollment Site
================================================================================

Components:
    server.py - Flask app, security headers and page dispatch
    controllers.py - One controller per page name
    support.py - Request-scoped helpers (db, user, CSRF, audit log)

Note:
    The server is imported directly by cli.py and start_web_ui.py.
    No exports in __init__.py to avoid loading the app on package import.
================================================================================
"""

__all__ = []
