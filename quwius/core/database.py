"""
Database Management Module

Provides database operations for the enrollment site:
- SQLite connection management
- Course catalogue CRUD operations
- User accounts and course enrolments
"""

import sqlite3
import logging
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path

from quwius.utils import constants

logger = logging.getLogger("quwius")


class DuplicateRecordError(Exception):
    """Insert would violate a uniqueness rule."""


def _now():
    return datetime.now(timezone.utc).isoformat()


class DatabaseManager:
    """
    Manages SQLite database operations for courses, users and enrolments.

    Rows are returned as plain dicts so templates can index them by
    column name.
    """

    def __init__(self, db_path=None):
        self.db_path = Path(db_path) if db_path is not None else constants.DB_FILE
        if str(self.db_path) != ':memory:':
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.cursor = self.conn.cursor()
        self._init_tables()

    def _init_tables(self):
        """Create tables if they don't exist."""
        self.cursor.executescript("""
            CREATE TABLE IF NOT EXISTS courses (
                course_id INTEGER PRIMARY KEY AUTOINCREMENT,
                course_name TEXT NOT NULL,
                faculty_dept_name TEXT NOT NULL,
                instructor_name TEXT NOT NULL,
                course_image TEXT NOT NULL,
                UNIQUE (course_name, faculty_dept_name)
            );
            CREATE TABLE IF NOT EXISTS users (
                user_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS enrollments (
                user_id INTEGER NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
                course_id INTEGER NOT NULL REFERENCES courses(course_id) ON DELETE CASCADE,
                enrolled_at TEXT NOT NULL,
                PRIMARY KEY (user_id, course_id)
            );
        """)
        self.conn.commit()

    def close(self):
        self.conn.close()

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def list_courses(self):
        rows = self.cursor.execute(
            "SELECT * FROM courses ORDER BY faculty_dept_name, course_name"
        ).fetchall()
        return [dict(r) for r in rows]

    def get_course(self, course_id):
        try:
            course_id = int(course_id)
        except (TypeError, ValueError):
            return None
        row = self.cursor.execute(
            "SELECT * FROM courses WHERE course_id = ?", (course_id,)
        ).fetchone()
        return dict(row) if row else None

    def add_course(self, course_name, faculty_dept_name, instructor_name, course_image=None):
        """
        Insert a course and return its id.

        Raises:
            DuplicateRecordError: course already listed for that faculty/department
        """
        image = (course_image or '').strip() or constants.DEFAULT_COURSE_IMAGE
        try:
            self.cursor.execute(
                "INSERT INTO courses (course_name, faculty_dept_name, instructor_name, course_image) "
                "VALUES (?, ?, ?, ?)",
                (course_name.strip(), faculty_dept_name.strip(), instructor_name.strip(), image)
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateRecordError(
                f"Course '{course_name}' already exists in '{faculty_dept_name}'"
            ) from e
        self.conn.commit()
        logger.info(f"Added course {self.cursor.lastrowid}: {course_name}")
        return self.cursor.lastrowid

    def courses_by_faculty(self):
        """Courses grouped by faculty/department, in display order."""
        streams = OrderedDict()
        for course in self.list_courses():
            streams.setdefault(course['faculty_dept_name'], []).append(course)
        return streams

    def seed_default_courses(self):
        """Insert the default catalogue if no courses exist. Returns rows added."""
        count = self.cursor.execute("SELECT COUNT(*) FROM courses").fetchone()[0]
        if count:
            return 0
        for course in constants.DEFAULT_COURSES:
            self.add_course(**course)
        return len(constants.DEFAULT_COURSES)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, name, email, password_hash):
        """
        Insert a user and return the new id.

        Raises:
            DuplicateRecordError: email already registered
        """
        try:
            self.cursor.execute(
                "INSERT INTO users (name, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (name.strip(), email.strip().lower(), password_hash, _now())
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateRecordError(f"Email '{email}' is already registered") from e
        self.conn.commit()
        return self.cursor.lastrowid

    def get_user(self, user_id):
        row = self.cursor.execute("SELECT * FROM users WHERE user_id = ?", (user_id,)).fetchone()
        return dict(row) if row else None

    def get_user_by_email(self, email):
        row = self.cursor.execute(
            "SELECT * FROM users WHERE email = ?", ((email or '').strip().lower(),)
        ).fetchone()
        return dict(row) if row else None

    # ------------------------------------------------------------------
    # Enrolments
    # ------------------------------------------------------------------

    def is_enrolled(self, user_id, course_id):
        row = self.cursor.execute(
            "SELECT 1 FROM enrollments WHERE user_id = ? AND course_id = ?", (user_id, course_id)
        ).fetchone()
        return row is not None

    def enroll(self, user_id, course_id):
        """
        Enrol a user in a course.

        Returns:
            bool: False if the user was already enrolled
        """
        if self.is_enrolled(user_id, course_id):
            return False
        self.cursor.execute(
            "INSERT INTO enrollments (user_id, course_id, enrolled_at) VALUES (?, ?, ?)",
            (user_id, course_id, _now())
        )
        self.conn.commit()
        return True

    def unenroll(self, user_id, course_id):
        """Returns False if there was nothing to remove."""
        self.cursor.execute(
            "DELETE FROM enrollments WHERE user_id = ? AND course_id = ?", (user_id, course_id)
        )
        self.conn.commit()
        return self.cursor.rowcount > 0

    def get_user_courses(self, user_id):
        rows = self.cursor.execute("""
            SELECT c.* FROM courses c
            JOIN enrollments e ON e.course_id = c.course_id
            WHERE e.user_id = ?
            ORDER BY e.enrolled_at, c.course_name
        """, (user_id,)).fetchall()
        return [dict(r) for r in rows]
