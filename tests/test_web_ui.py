"""
================================================================================
TEST: Web UI - Dispatch, Accounts and Enrolment
================================================================================

Test Coverage:
    - Routing by the controller query parameter
    - Unknown and malformed page names
    - CSRF protection on POST
    - Sign up, login and logout
    - Enrolling and unenrolling
    - Security headers
================================================================================
"""

import pytest

from quwius.core.accounts import register_user
from quwius.core.database import DatabaseManager
from quwius.utils import constants

STRONG_PASSWORD = 'Enrolment2026'


def _register(name='Ann Joseph', email='ann@uwi.edu', password=STRONG_PASSWORD):
    db = DatabaseManager(constants.DB_FILE)
    try:
        return register_user(db, name, email, password)
    finally:
        db.close()


def _db():
    return DatabaseManager(constants.DB_FILE)


# ------------------------------------------------------------------
# Dispatch
# ------------------------------------------------------------------

def test_default_page_is_home(client):
    resp = client.get('/')
    assert resp.status_code == 200
    assert b'About Quwius' in resp.data


@pytest.mark.parametrize('path', ['/index.php?controller=Courses', '/?controller=Courses'])
def test_course_listing(client, path):
    resp = client.get(path)
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    for course in constants.DEFAULT_COURSES:
        assert course['course_name'] in body


def test_streams_group_by_faculty(client):
    body = client.get('/index.php?controller=Streams').get_data(as_text=True)
    assert body.count('<h2>Computing</h2>') == 1
    assert 'Object-Oriented Programming' in body


@pytest.mark.parametrize('page', ['Admin', '1Courses', 'Sign Up', '../etc/passwd', '', 'NewCourse'])
def test_unknown_or_invalid_page_is_404(client, page):
    resp = client.get('/index.php', query_string={'controller': page})
    assert resp.status_code == 404
    assert b'Page not found' in resp.data


def test_unknown_path_is_404(client):
    assert client.get('/courses.php').status_code == 404


def test_security_headers(client):
    resp = client.get('/')
    assert resp.headers['X-Frame-Options'] == 'DENY'
    assert resp.headers['X-Content-Type-Options'] == 'nosniff'
    assert "frame-ancestors 'none'" in resp.headers['Content-Security-Policy']


def test_post_without_csrf_rejected(client):
    resp = client.post('/index.php?controller=Login', data={'email': 'ann@uwi.edu', 'password': 'x'})
    assert resp.status_code == 400
    assert b'Your session has expired' in resp.data


def test_post_with_wrong_csrf_rejected(client, csrf):
    resp = client.post('/index.php?controller=Login',
                       data={'email': 'ann@uwi.edu', 'password': 'x', 'csrf_token': 'forged'})
    assert resp.status_code == 400


# ------------------------------------------------------------------
# Sign up
# ------------------------------------------------------------------

def test_signup_form_renders(client):
    resp = client.get('/index.php?controller=SignUp')
    assert resp.status_code == 200
    assert b'name="csrf_token"' in resp.data


def test_signup_creates_account_and_logs_in(client, csrf):
    resp = client.post('/index.php?controller=SignUp', data={
        'csrf_token': csrf, 'name': 'Ann Joseph', 'email': 'ann@uwi.edu',
        'password': STRONG_PASSWORD, 'confirm_password': STRONG_PASSWORD,
    })
    assert resp.status_code == 302
    assert 'controller=Profile' in resp.headers['Location']

    db = _db()
    try:
        user = db.get_user_by_email('ann@uwi.edu')
    finally:
        db.close()
    assert user is not None
    assert user['password_hash'] != STRONG_PASSWORD

    with client.session_transaction() as sess:
        assert sess['user_id'] == user['user_id']
        assert sess['csrf_token'] != csrf

    profile = client.get('/index.php?controller=Profile')
    assert profile.status_code == 200
    assert b'Ann Joseph' in profile.data


def test_signup_shows_validation_errors(client, csrf):
    resp = client.post('/index.php?controller=SignUp', data={
        'csrf_token': csrf, 'name': '', 'email': 'not-an-email',
        'password': 'weak', 'confirm_password': 'weak',
    })
    assert resp.status_code == 400
    body = resp.get_data(as_text=True)
    assert 'Email: Invalid email address format.' in body
    assert 'Password: Must be at least 10 characters' in body
    assert 'Full name: Only letters' in body
    # Entered email is kept, passwords are not
    assert 'value="not-an-email"' in body
    assert 'value="weak"' not in body


def test_signup_empty_email(client, csrf):
    resp = client.post('/index.php?controller=SignUp', data={
        'csrf_token': csrf, 'name': 'Ann', 'email': '',
        'password': STRONG_PASSWORD, 'confirm_password': STRONG_PASSWORD,
    })
    assert resp.status_code == 400
    assert resp.get_data(as_text=True).count('Email: cannot be empty.') == 1


def test_signup_password_mismatch(client, csrf):
    resp = client.post('/index.php?controller=SignUp', data={
        'csrf_token': csrf, 'name': 'Ann', 'email': 'ann@uwi.edu',
        'password': STRONG_PASSWORD, 'confirm_password': STRONG_PASSWORD + 'x',
    })
    assert resp.status_code == 400
    assert b'Passwords do not match' in resp.data


def test_signup_duplicate_email(client, csrf):
    _register()
    resp = client.post('/index.php?controller=SignUp', data={
        'csrf_token': csrf, 'name': 'Ann Again', 'email': 'ANN@uwi.edu',
        'password': STRONG_PASSWORD, 'confirm_password': STRONG_PASSWORD,
    })
    assert resp.status_code == 400
    assert b'already exists' in resp.data


# ------------------------------------------------------------------
# Login / logout
# ------------------------------------------------------------------

def test_login_success(client, csrf):
    user_id = _register()
    resp = client.post('/index.php?controller=Login', data={
        'csrf_token': csrf, 'email': 'ann@uwi.edu', 'password': STRONG_PASSWORD,
    })
    assert resp.status_code == 302
    assert 'controller=Courses' in resp.headers['Location']
    with client.session_transaction() as sess:
        assert sess['user_id'] == user_id


def test_login_wrong_password(client, csrf):
    _register()
    resp = client.post('/index.php?controller=Login', data={
        'csrf_token': csrf, 'email': 'ann@uwi.edu', 'password': 'Wrong2026pass',
    })
    assert resp.status_code == 401
    assert b'Invalid email or password.' in resp.data
    with client.session_transaction() as sess:
        assert 'user_id' not in sess


def test_login_validation_errors(client, csrf):
    resp = client.post('/index.php?controller=Login', data={'csrf_token': csrf, 'email': '', 'password': ''})
    assert resp.status_code == 400
    body = resp.get_data(as_text=True)
    assert 'Email: cannot be empty.' in body
    assert 'Password: Please enter your password.' in body


def test_logged_in_user_skips_login_form(client, login_as):
    login_as(_register())
    resp = client.get('/index.php?controller=Login')
    assert resp.status_code == 302


def test_logout_clears_session(client, login_as):
    login_as(_register())
    resp = client.get('/index.php?controller=Logout')
    assert resp.status_code == 302
    assert 'controller=Home' in resp.headers['Location']
    with client.session_transaction() as sess:
        assert 'user_id' not in sess


def test_nav_changes_when_logged_in(client, login_as):
    assert b'controller=SignUp' in client.get('/').data
    login_as(_register())
    body = client.get('/').data
    assert b'controller=Logout' in body
    assert b'controller=SignUp' not in body


def test_stale_session_user_is_dropped(client, login_as):
    login_as(9999)
    resp = client.get('/index.php?controller=Profile')
    assert resp.status_code == 302
    assert 'controller=Login' in resp.headers['Location']


# ------------------------------------------------------------------
# Enrolment
# ------------------------------------------------------------------

def test_add_course_requires_login(client, csrf):
    resp = client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '1'})
    assert resp.status_code == 302
    assert 'controller=Login' in resp.headers['Location']


def test_add_course_get_redirects_to_courses(client, login_as):
    login_as(_register())
    resp = client.get('/index.php?controller=AddCourse')
    assert resp.status_code == 302
    assert 'controller=Courses' in resp.headers['Location']


def test_enroll_in_course(client, login_as, csrf):
    user_id = _register()
    login_as(user_id)
    resp = client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '1'})
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'You are now enrolled in this course.' in body
    assert constants.DEFAULT_COURSES[0]['course_name'] in body

    db = _db()
    try:
        assert db.is_enrolled(user_id, 1)
    finally:
        db.close()

    again = client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '1'})
    assert b'You are already enrolled in this course.' in again.data


def test_enroll_missing_course_id(client, login_as, csrf):
    login_as(_register())
    resp = client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf})
    assert resp.status_code == 400
    assert b'Course: Choose a course to add.' in resp.data


def test_enroll_unknown_course(client, login_as, csrf):
    login_as(_register())
    resp = client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '999'})
    assert resp.status_code == 404
    assert b'That course does not exist.' in resp.data


def test_courses_page_marks_enrolled(client, login_as, csrf):
    user_id = _register()
    login_as(user_id)
    client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '1'})
    body = client.get('/index.php?controller=Courses').get_data(as_text=True)
    assert body.count('>Enrolled</a>') == 1


def test_profile_lists_and_unenrolls(client, login_as, csrf):
    user_id = _register()
    login_as(user_id)
    client.post('/index.php?controller=AddCourse', data={'csrf_token': csrf, 'course_id': '2'})

    body = client.get('/index.php?controller=Profile').get_data(as_text=True)
    assert constants.DEFAULT_COURSES[1]['course_name'] in body

    resp = client.post('/index.php?controller=Profile', data={'csrf_token': csrf, 'course_id': '2'})
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'You have been removed from the course.' in body
    assert 'You are not enrolled in any courses.' in body

    again = client.post('/index.php?controller=Profile', data={'csrf_token': csrf, 'course_id': '2'})
    assert b'You are not enrolled in that course.' in again.data


def test_profile_requires_login(client):
    resp = client.get('/index.php?controller=Profile')
    assert resp.status_code == 302
    assert 'controller=Login' in resp.headers['Location']
