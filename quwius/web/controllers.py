"""
Page controllers.

Each controller is registered under the page name the router receives in
the ``controller`` query parameter. POST requests reach a controller only
after the router has checked their CSRF token.
"""

import logging

from flask import render_template, request, redirect, url_for, session

from quwius.core.accounts import register_user, authenticate
from quwius.core.database import DuplicateRecordError
from quwius.web.support import (
    get_db, current_user, login_required, validate_page, rotate_csrf_token, audit_log
)

logger = logging.getLogger("quwius")

CONTROLLERS = {}


def controller(name):
    def register(f):
        CONTROLLERS[name] = f
        return f
    return register


def _redirect_to(page):
    return redirect(url_for('index', controller=page))


@controller('Home')
def home():
    return render_template('home.html')


@controller('Courses')
def courses():
    db = get_db()
    user = current_user()
    enrolled_ids = set()
    if user:
        enrolled_ids = {c['course_id'] for c in db.get_user_courses(user['user_id'])}
    return render_template('courses.html', courses=db.list_courses(), enrolled_ids=enrolled_ids)


@controller('Streams')
def streams():
    return render_template('streams.html', streams=get_db().courses_by_faculty())


@controller('AddCourse')
@login_required
def add_course():
    """Enrol the logged-in user in the posted course and show it."""
    if request.method != 'POST':
        return _redirect_to('Courses')

    result = validate_page('AddCourse', request.form)
    if not result.ok:
        return render_template('add_course.html', errors=result.messages), 400

    db = get_db()
    user = current_user()
    course = db.get_course(request.form['course_id'])
    if course is None:
        return render_template('add_course.html', errors=['Course: That course does not exist.']), 404

    if db.enroll(user['user_id'], course['course_id']):
        audit_log('ENROLL', f"course {course['course_id']}")
        logger.info(f"Enrolled user {user['user_id']} in course {course['course_id']}")
        message = 'You are now enrolled in this course.'
    else:
        message = 'You are already enrolled in this course.'
    return render_template('add_course.html', course=course, message=message)


@controller('Profile')
@login_required
def profile():
    db = get_db()
    user = current_user()
    message = None
    errors = []

    if request.method == 'POST':
        result = validate_page('Profile', request.form)
        if not result.ok:
            errors = result.messages
        elif db.unenroll(user['user_id'], request.form['course_id']):
            audit_log('UNENROLL', f"course {request.form['course_id']}")
            message = 'You have been removed from the course.'
        else:
            errors = ['Course: You are not enrolled in that course.']

    return render_template(
        'profile.html', user=user, courses=db.get_user_courses(user['user_id']),
        message=message, errors=errors
    )


@controller('SignUp')
def sign_up():
    if current_user() is not None:
        return _redirect_to('Profile')
    if request.method != 'POST':
        return render_template('signup.html', form={})

    form = request.form
    result = validate_page('SignUp', form)
    errors = result.messages
    if result.ok and form.get('password') != form.get('confirm_password'):
        errors.append('Confirm password: Passwords do not match.')

    if not errors:
        try:
            user_id = register_user(get_db(), form['name'], form['email'], form['password'])
        except DuplicateRecordError:
            errors.append('Email: An account with this email address already exists.')
        else:
            session.clear()
            session['user_id'] = user_id
            session.permanent = True
            rotate_csrf_token()
            audit_log('SIGNUP', 'account created', user_id)
            return _redirect_to('Profile')

    return render_template('signup.html', form=form, errors=errors), 400


@controller('Login')
def login():
    if current_user() is not None:
        return _redirect_to('Courses')
    if request.method != 'POST':
        return render_template('login.html', form={})

    form = request.form
    result = validate_page('Login', form)
    if not result.ok:
        return render_template('login.html', form=form, errors=result.messages), 400

    user = authenticate(get_db(), form['email'], form['password'])
    if user is None:
        audit_log('LOGIN_FAILED', f"email {form['email']}")
        return render_template('login.html', form=form, errors=['Invalid email or password.']), 401

    # Regenerate session to prevent session fixation
    session.clear()
    session['user_id'] = user['user_id']
    session.permanent = True
    rotate_csrf_token()
    audit_log('LOGIN_SUCCESS', 'logged in', user['user_id'])
    return _redirect_to('Courses')


@controller('Logout')
def logout():
    if 'user_id' in session:
        audit_log('LOGOUT', 'logged out')
    session.clear()
    return _redirect_to('Home')
