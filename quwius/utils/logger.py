"""
================================================================================
LOGGER - Unified Logging Configuration
================================================================================

Centralized logging infrastructure for all application contexts.

Logging Contexts:
    - 'cli' - Command-line interface operations
    - 'web' - Web server and page requests
    - 'test' - Unit and integration tests
    - 'imported' - Library/module imports (minimal logging)

Log Destinations:
    1. File Logs - outputs/logs/{timestamp}.{context}.log
    2. Console Output - stdout
    3. Rotating Backups - 5MB max per file, 5 backup files
    4. Audit Log - outputs/logs/audit.log (logins, sign-ups, enrolments)

Log Format:
    {timestamp} {level} [{context}]: {message}
    Example: 2026-10-19 10:30:45 INFO [web]: Enrolled user 3 in course 2

Usage:
    from quwius.utils.logger import set_run_context, logger

    set_run_context('cli')
    logger.info('Seeding course catalogue')

Test mode (TEST_MODE=1) never writes log files.
================================================================================
"""

import os
import sys
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

logger = logging.getLogger("quwius")
logger.setLevel(logging.INFO)

audit_logger = logging.getLogger("quwius.audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(run_context)s]: %(message)s"
AUDIT_FORMAT = "%(asctime)s - USER:%(user)s - IP:%(ip)s - ACTION:%(action)s - DETAILS:%(details)s"

# Global run context state
_RUN_CONTEXT = 'imported'


class RunContextFilter(logging.Filter):
    """
    Logging filter that adds run context to all log records
    Allows distinguishing between different execution contexts
    """

    def filter(self, record):
        record.run_context = _RUN_CONTEXT
        return True


def _test_mode():
    return os.environ.get('TEST_MODE') == '1'


def set_run_context(context: str):
    """
    Set the execution context for logging

    Args:
        context: String identifier ('web', 'cli', 'test', etc)
    """
    global _RUN_CONTEXT
    _RUN_CONTEXT = context

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    if not _test_mode():
        from quwius.utils import constants

        try:
            constants.LOG_DIR.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            log_file = constants.LOG_DIR / f"{timestamp}.{context}.log"

            file_handler = RotatingFileHandler(
                str(log_file),
                maxBytes=5_000_000,  # 5MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.addFilter(RunContextFilter())
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"Log file unavailable, logging to console only: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING if _test_mode() else logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(RunContextFilter())
    logger.addHandler(console_handler)


def setup_audit_logging():
    """Attach the audit file handler once. No-op in test mode."""
    if audit_logger.handlers or _test_mode():
        return audit_logger

    from quwius.utils import constants

    try:
        constants.AUDIT_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(constants.AUDIT_LOG_FILE, encoding='utf-8')
        handler.setFormatter(logging.Formatter(AUDIT_FORMAT))
        audit_logger.addHandler(handler)
    except OSError as e:
        logger.warning(f"Audit log unavailable: {e}")
    return audit_logger


def setup_logging(context: str = 'imported', level: str = 'INFO'):
    """
    Initialize logging for the application

    Args:
        context: Execution context identifier
        level: Level name for the application logger
    """
    set_run_context(context)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return logger
