"""
Request-scoped helpers shared by the server and the page controllers:
database handle, logged-in user, CSRF tokens, audit logging and
validation of submitted page data.
"""

import secrets
import time as _time
from functools import wraps

from flask import g, session, request, redirect, url_for

from quwius.core.database import DatabaseManager
from quwius.form_validator import FormValidator
from quwius.utils.logger import audit_logger
from quwius.utils import constants


def get_db():
    """One DatabaseManager per request, closed on app-context teardown."""
    if 'db' not in g:
        g.db = DatabaseManager(constants.DB_FILE)
    return g.db


def close_db(exc=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


def get_validator():
    return FormValidator.make_validator_singleton()


def validate_page(page_name, data):
    """Validate submitted data against the page's declared fields."""
    validator = get_validator()
    return validator.validate(data, validator.page_vars_for(page_name))


def current_user():
    user_id = session.get('user_id')
    if user_id is None:
        return None
    if 'user' not in g:
        g.user = get_db().get_user(user_id)
        if g.user is None:
            # Account vanished; drop the stale session
            session.pop('user_id', None)
    return g.user


def login_required(f):
    """Decorator to require login for controllers"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            return redirect(url_for('index', controller='Login'))
        return f(*args, **kwargs)
    return decorated_function


def generate_csrf_token():
    """Generate CSRF token for form validation"""
    if 'csrf_token' not in session:
        session['csrf_token'] = secrets.token_hex(32)
        session['csrf_created_at'] = _time.time()
    return session['csrf_token']


def rotate_csrf_token():
    session['csrf_token'] = secrets.token_hex(32)
    session['csrf_created_at'] = _time.time()


def validate_csrf_token(token):
    expected = session.get('csrf_token')
    return bool(token) and bool(expected) and secrets.compare_digest(token.encode(), expected.encode())


def audit_log(action, details='', user=None):
    """Log account and enrolment events"""
    if user is None:
        user = session.get('user_id', 'anonymous')
    ip = request.remote_addr if request else 'unknown'
    audit_logger.info('', extra={'action': action, 'details': details, 'user': user, 'ip': ip})
