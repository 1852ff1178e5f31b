"""
User account helpers: bcrypt password hashing, registration and login.
"""

import logging

import bcrypt

from quwius.utils.config import load_config
from quwius.utils.constants import BCRYPT_COST_FACTOR, TEST_MODE
from quwius.core.database import DatabaseManager

logger = logging.getLogger("quwius")


def _default_rounds() -> int:
    """bcrypt cost: security.bcrypt_rounds from config.json, 4 under tests."""
    if TEST_MODE:
        return 4
    return int(load_config()['security'].get('bcrypt_rounds', BCRYPT_COST_FACTOR))


def hash_password(password: str, rounds: int = None) -> str:
    salt = bcrypt.gensalt(rounds or _default_rounds())
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, stored_hash) -> bool:
    """
    Check password against stored_hash - timing-attack resistant.

    A missing hash still costs one bcrypt comparison so unknown accounts
    take as long as known ones.
    """
    if not stored_hash:
        dummy_hash = bcrypt.hashpw(b'dummy', bcrypt.gensalt(_default_rounds()))
        bcrypt.checkpw((password or '').encode('utf-8'), dummy_hash)
        return False
    return bcrypt.checkpw((password or '').encode('utf-8'), stored_hash.encode('utf-8'))


def register_user(db: DatabaseManager, name: str, email: str, password: str, rounds: int = None) -> int:
    """
    Create an account and return its user id.

    Raises:
        DuplicateRecordError: email already registered
    """
    user_id = db.create_user(name, email, hash_password(password, rounds))
    logger.info(f"Registered user {user_id}")
    return user_id


def authenticate(db: DatabaseManager, email: str, password: str):
    """Return the user row on success, None otherwise."""
    user = db.get_user_by_email(email)
    stored_hash = user['password_hash'] if user else None
    if verify_password(password, stored_hash):
        return user
    return None
