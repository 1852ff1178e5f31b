"""
================================================================================
PYTEST CONFIGURATION
================================================================================

Pytest configuration and shared fixtures for the entire test suite.

Test Isolation Strategy:
    pytest_configure points QUWIUS_HOME at a fresh temp directory and sets
    TEST_MODE=1 BEFORE any test module imports the package, so config,
    database and log files never land in the real working directory.

Fixtures:
    - db: DatabaseManager on a per-test SQLite file
    - page_vars: default page variable declarations
    - client: Flask test client on a seeded per-test database
    - csrf: installs a known CSRF token in the client session
    - login_as: puts a user id in the client session
================================================================================
"""
import os
import sys
import shutil
import tempfile
from pathlib import Path

import pytest

# Ensure project root is on sys.path for cli.py imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_TEST_HOME = None
TEST_CSRF_TOKEN = 'test-csrf-token'


def pytest_configure(config):
    global _TEST_HOME
    os.environ['TEST_MODE'] = '1'
    _TEST_HOME = Path(tempfile.mkdtemp(prefix="quwius_test_"))
    os.environ['QUWIUS_HOME'] = str(_TEST_HOME)


def pytest_unconfigure(config):
    if _TEST_HOME and _TEST_HOME.exists():
        shutil.rmtree(_TEST_HOME, ignore_errors=True)
    os.environ.pop('TEST_MODE', None)
    os.environ.pop('QUWIUS_HOME', None)


@pytest.fixture()
def db(tmp_path):
    from quwius.core.database import DatabaseManager

    manager = DatabaseManager(tmp_path / "test.db")
    yield manager
    manager.close()


@pytest.fixture()
def page_vars():
    from quwius.utils.config import DEFAULT_PAGE_VARS
    import copy

    return copy.deepcopy(DEFAULT_PAGE_VARS)


@pytest.fixture()
def client(tmp_path, monkeypatch):
    from quwius.utils import constants
    from quwius.form_validator import FormValidator
    from quwius.core.database import DatabaseManager

    db_file = tmp_path / "site.db"
    monkeypatch.setattr(constants, 'DB_FILE', db_file)
    FormValidator.reset_singleton()

    seed = DatabaseManager(db_file)
    seed.seed_default_courses()
    seed.close()

    from quwius.web import server
    server.app.config['TESTING'] = True
    with server.app.test_client() as test_client:
        yield test_client
    FormValidator.reset_singleton()


@pytest.fixture()
def csrf(client):
    with client.session_transaction() as sess:
        sess['csrf_token'] = TEST_CSRF_TOKEN
    return TEST_CSRF_TOKEN


@pytest.fixture()
def login_as(client):
    def _login(user_id):
        with client.session_transaction() as sess:
            sess['user_id'] = user_id
    return _login
