#!/usr/bin/env python3
"""
================================================================================
CLI - Command Line Interface
================================================================================

Administrative access to the course enrollment site:
    - Database initialisation and default catalogue seeding
    - Course catalogue listing and additions
    - Account creation
    - Page name checks against the page variable declarations
    - Web server launcher

Course and account data entered here goes through the same form
validator the web pages use.

Usage:
    python cli.py [command] [options]
    python cli.py --help
================================================================================
"""

import sys
import json
import argparse
from getpass import getpass
from typing import Any

from quwius.core.accounts import register_user
from quwius.core.database import DatabaseManager, DuplicateRecordError
from quwius.form_validator import FormValidator
from quwius.utils.logger import setup_logging
from quwius.utils import constants


# ANSI color codes
class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_header(text):
    """Print formatted header"""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text:^70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}\n")


def print_success(text):
    print(f"{Colors.GREEN}✓{Colors.ENDC} {text}")


def print_error(text):
    print(f"{Colors.RED}✗{Colors.ENDC} {text}")


def print_info(text):
    print(f"{Colors.CYAN}ℹ{Colors.ENDC} {text}")


def _pretty_json(payload: Any):
    """Render JSON to stdout with stable formatting."""
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _open_db(args):
    return DatabaseManager(args.db or constants.DB_FILE)


def _validate(page, data):
    """Run the page's declared checks; print errors and return success."""
    validator = FormValidator()
    result = validator.validate(data, validator.page_vars_for(page))
    for message in result.messages:
        print_error(message)
    return result.ok


# ==================================
# DATABASE & CATALOGUE
# ==================================

def cmd_init_db(args):
    db = _open_db(args)
    try:
        added = 0 if args.no_seed else db.seed_default_courses()
        print_success(f"Database ready at {db.db_path}")
        if added:
            print_success(f"Seeded {added} default courses")
        return True
    finally:
        db.close()


def cmd_list_courses(args):
    db = _open_db(args)
    try:
        courses = db.list_courses()
    finally:
        db.close()

    if args.json:
        _pretty_json(courses)
        return True
    if not courses:
        print_info("No courses in the catalogue.")
        return True
    for c in courses:
        print(f"{c['course_id']:>4} | {c['faculty_dept_name']} | {c['course_name']} | {c['instructor_name']}")
    return True


def cmd_add_course(args):
    data = {
        'course_name': args.name,
        'faculty_dept_name': args.faculty,
        'instructor_name': args.instructor,
        'course_image': args.image or '',
    }
    if not _validate('NewCourse', data):
        return False

    db = _open_db(args)
    try:
        course_id = db.add_course(**data)
    except DuplicateRecordError as e:
        print_error(str(e))
        return False
    finally:
        db.close()
    print_success(f"Course created with id {course_id}")
    return True


# ==================================
# ACCOUNTS
# ==================================

def cmd_create_user(args):
    password = args.password
    if password is None:
        password = getpass('Password: ')
        confirm = getpass('Confirm password: ')
        if password != confirm:
            print_error("Passwords do not match")
            return False

    data = {'name': args.name, 'email': args.email, 'password': password, 'confirm_password': password}
    if not _validate('SignUp', data):
        return False

    db = _open_db(args)
    try:
        user_id = register_user(db, args.name, args.email, password)
    except DuplicateRecordError as e:
        print_error(str(e))
        return False
    finally:
        db.close()
    print_success(f"User created with id {user_id}")
    return True


def cmd_check_page(args):
    validator = FormValidator()
    if validator.is_page_name_valid(args.page):
        fields = validator.page_vars_for(args.page)
        print_success(f"{args.page} is a valid page ({len(fields)} declared fields)")
        for name, options in fields.items():
            print(f"    {name}: {options.get('type', 'entry')}")
        return True
    print_error(f"{args.page} is not a valid page name")
    return False


def cmd_web(args):
    from quwius.web import server
    server.main(host=args.host, port=args.port, debug=args.debug)
    return True


def build_parser():
    parser = argparse.ArgumentParser(
        prog='quwius',
        description='Quwius - Course Enrollment Site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s init-db                 # Create tables and seed default courses
  %(prog)s list-courses --json     # Dump the catalogue
  %(prog)s add-course --name "Data Structures" --faculty Computing --instructor "Dr. Lee"
  %(prog)s create-user --name "Ann Marie" --email ann@uwi.edu
  %(prog)s check-page SignUp       # Show the fields a page validates
  %(prog)s web --port 8080         # Start the web server
        '''
    )
    parser.add_argument('--db', help='SQLite database file (default: quwius.db in the working directory)')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    parser_init = subparsers.add_parser('init-db', help='Create tables and seed default courses')
    parser_init.add_argument('--no-seed', action='store_true', help='Do not add the default catalogue')
    parser_init.set_defaults(func=cmd_init_db)

    parser_list = subparsers.add_parser('list-courses', help='List courses')
    parser_list.add_argument('--json', action='store_true', help='Print as JSON')
    parser_list.set_defaults(func=cmd_list_courses)

    parser_add = subparsers.add_parser('add-course', help='Add a course to the catalogue')
    parser_add.add_argument('--name', required=True, help='Course name')
    parser_add.add_argument('--faculty', required=True, help='Faculty or department')
    parser_add.add_argument('--instructor', required=True, help='Instructor name')
    parser_add.add_argument('--image', help='Image file name under web_static/images')
    parser_add.set_defaults(func=cmd_add_course)

    parser_user = subparsers.add_parser('create-user', help='Create a user account')
    parser_user.add_argument('--name', required=True, help='Full name')
    parser_user.add_argument('--email', required=True, help='Email address')
    parser_user.add_argument('--password', help='Password (prompted if omitted)')
    parser_user.set_defaults(func=cmd_create_user)

    parser_page = subparsers.add_parser('check-page', help='Check a page name and list its fields')
    parser_page.add_argument('page', help='Page name, e.g. SignUp')
    parser_page.set_defaults(func=cmd_check_page)

    parser_web = subparsers.add_parser('web', help='Start the web server')
    parser_web.add_argument('--host', default='127.0.0.1')
    parser_web.add_argument('--port', type=int, default=5000)
    parser_web.add_argument('--debug', action='store_true')
    parser_web.set_defaults(func=cmd_web)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command != 'web':
        setup_logging('cli')

    try:
        success = args.func(args)
        return 0 if success else 1
    except KeyboardInterrupt:
        print_info("\nOperation cancelled by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
