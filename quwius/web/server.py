#!/usr/bin/env python3
"""
================================================================================
WEB SERVER - Quwius Course Enrollment Site
================================================================================

Flask application serving the server-rendered course enrollment pages.

Routing:
    Every page is reached through one dispatcher mounted at / and
    /index.php. The ``controller`` query parameter names the page:

        GET  /index.php?controller=Courses    - Course listing
        GET  /index.php?controller=Streams    - Courses by faculty/department
        POST /index.php?controller=AddCourse  - Enrol in a course
        GET  /index.php?controller=Profile    - Enrolled courses
        POST /index.php?controller=Profile    - Unenrol from a course
        GET  /index.php?controller=SignUp     - Account creation form
        POST /index.php?controller=SignUp     - Create account
        GET  /index.php?controller=Login      - Login form
        POST /index.php?controller=Login      - Authenticate
        GET  /index.php?controller=Logout     - End session
        GET  /index.php?controller=Home       - About page (default)

    Page names are checked by the form validator against the page
    variable declarations before dispatch; anything else is a 404.

Security Features:
    - bcrypt password hashing
    - Session CSRF token checked on every POST
    - Rate limiting on login attempts
    - Secure headers (CSP, X-Frame-Options, nosniff)
    - Template auto-escaping

File Structure:
    web_templates/ - Jinja2 HTML templates
    web_static/ - CSS and images
    configs/config.json - Site settings
    configs/page_vars.json - Page field declarations

Usage:
    python cli.py web
    python start_web_ui.py

    Access at: http://localhost:5000
================================================================================
"""

import os
import secrets
import time as _time
import logging
from datetime import timedelta

from flask import Flask, render_template, request, session, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from quwius.utils.config import load_config
from quwius.utils.logger import setup_logging, setup_audit_logging
from quwius.utils.constants import (
    TEMPLATE_DIR,
    STATIC_DIR,
    LOGIN_RATE_LIMIT,
    PAGE_RATE_LIMIT,
    CSRF_TOKEN_ROTATION_INTERVAL,
    SESSION_COOKIE_HTTPONLY,
    SESSION_COOKIE_SAMESITE,
    TEST_MODE,
)
from quwius.web.controllers import CONTROLLERS
from quwius.web.support import (
    get_db,
    close_db,
    get_validator,
    current_user,
    generate_csrf_token,
    rotate_csrf_token,
    validate_csrf_token,
)

logger = logging.getLogger("quwius")

CONFIG = load_config()

# Create Flask app
app = Flask(__name__,
            template_folder=str(TEMPLATE_DIR),
            static_folder=str(STATIC_DIR))
app.config['SECRET_KEY'] = os.environ.get('QUWIUS_SECRET_KEY') or secrets.token_hex(32)
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024

# Session configuration
app.config['SESSION_COOKIE_SECURE'] = bool(CONFIG['security']['secure_cookies'])
app.config['SESSION_COOKIE_HTTPONLY'] = SESSION_COOKIE_HTTPONLY
app.config['SESSION_COOKIE_SAMESITE'] = SESSION_COOKIE_SAMESITE
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=CONFIG['security']['session_lifetime_hours'])

app.teardown_appcontext(close_db)


def _requested_page():
    page = request.args.get('controller')
    if page is None:
        return CONFIG['site']['default_page']
    return page


# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    app=app,
    default_limits=[PAGE_RATE_LIMIT],
    storage_uri="memory://",
    enabled=not TEST_MODE,
)


# ====================================================================================
# SECURITY HEADERS & TEMPLATE CONTEXT
# ====================================================================================
@app.before_request
def generate_nonce():
    """Generate a nonce for CSP and rotate CSRF token if needed"""
    g.csp_nonce = secrets.token_hex(16)

    if 'user_id' in session and 'csrf_created_at' in session:
        age = _time.time() - session['csrf_created_at']
        if age > CSRF_TOKEN_ROTATION_INTERVAL and request.method == 'GET':
            rotate_csrf_token()


@app.context_processor
def inject_globals():
    """Values every template may use"""
    return dict(
        csp_nonce=getattr(g, 'csp_nonce', ''),
        csrf_token=generate_csrf_token,
        current_user=current_user(),
        site=CONFIG['site'],
    )


@app.after_request
def add_security_headers(response):
    """Add security headers to response"""
    nonce = getattr(g, 'csp_nonce', '')
    csp = (
        "default-src 'self'; "
        f"script-src 'self' 'nonce-{nonce}'; "
        "style-src 'self'; "
        "img-src 'self' data:; "
        "frame-ancestors 'none'; "
        "form-action 'self';"
    )
    response.headers['Content-Security-Policy'] = csp
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'same-origin'
    return response


# ====================================================================================
# DISPATCH
# ====================================================================================
@app.route('/', methods=['GET', 'POST'])
@app.route('/index.php', methods=['GET', 'POST'])
@limiter.limit(LOGIN_RATE_LIMIT, methods=['POST'], exempt_when=lambda: _requested_page() != 'Login')
def index():
    """Dispatch to the controller named by the ``controller`` parameter"""
    page = _requested_page()

    if not get_validator().is_page_name_valid(page) or page not in CONTROLLERS:
        logger.info(f"Unknown page requested: {page!r}")
        return render_template('not_found.html', page=page), 404

    if request.method == 'POST' and not validate_csrf_token(request.form.get('csrf_token')):
        logger.warning(f"Rejected POST to {page} with missing or stale CSRF token")
        return render_template('error.html', message='Your session has expired. Please try again.'), 400

    return CONTROLLERS[page]()


@app.errorhandler(404)
def page_not_found(e):
    return render_template('not_found.html', page=request.path), 404


@app.errorhandler(429)
def too_many_requests(e):
    return render_template('error.html', message='Too many attempts. Please wait and try again.'), 429


def init_db(seed=True):
    """Create tables and, optionally, the default course catalogue"""
    with app.app_context():
        db = get_db()
        added = db.seed_default_courses() if seed else 0
        if added:
            logger.info(f"Seeded {added} default courses")


def main(host='127.0.0.1', port=5000, debug=False):
    """Start the web server"""
    setup_logging('web', CONFIG['logging']['level'])
    setup_audit_logging()
    init_db()

    print("=" * 60)
    print(f"{CONFIG['site']['name']} - Course Enrollment Site")
    print(f"Listening on: http://{host}:{port}")
    print("=" * 60)

    # One request at a time: the validator singleton holds per-pass state
    app.run(host=host, port=port, debug=debug, threaded=False)


if __name__ == '__main__':
    main()
