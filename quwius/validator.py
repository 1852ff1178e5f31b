"""
Form validation base class.

BaseValidator holds the field checks used to validate submitted form data
but leaves the decision of which checks run for which field to subclasses.
Subclasses usually read that decision from the page variable declarations
(see quwius.utils.config.load_page_vars).

Two kinds of failure are kept apart:
    - user input problems are collected as FieldError entries and shown
      back on the page
    - programmer or environment faults raise ParameterError or
      ValidatorEnvironmentError and are not meant to be caught by pages
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from email_validator import validate_email, EmailNotValidError

from quwius.utils.constants import SELECT_PLACEHOLDERS

logger = logging.getLogger("quwius")

VARIABLE_NAME_PATTERN = re.compile(rb'[a-zA-Z_\x7f-\xff][a-zA-Z0-9_\x7f-\xff]*')
SIMPLETEXT_PATTERN = re.compile(r'^[a-zA-Z\s-]+$', re.IGNORECASE)
# TODO: empty pattern accepts every value; restrict it to printable keyboard
# characters once the allowed set for free-text fields is agreed.
ENTRY_ALLOWED_PATTERN = re.compile('')


class ParameterError(Exception):
    """A method received an argument that breaks its contract."""


class ValidatorEnvironmentError(RuntimeError):
    """The pattern matching machinery itself failed."""


@dataclass
class FieldError:
    field: str
    label: str
    message: str
    key: Optional[str] = None


@dataclass
class ValidationResult:
    ok: bool
    errors: List[FieldError] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]


def _is_empty(value) -> bool:
    # Same notion of "empty" as the form layer it replaced: "0" counts.
    return not value or value == '0'


def _abort(message: str, exc_class=ParameterError):
    logger.critical(message, stack_info=True)
    raise exc_class(message)


class BaseValidator(ABC):
    """
    Performs data validation.

    Contains the checks themselves; how they are called is up to the
    subclass. Error messages accumulate in the instance until
    clear_validation_errors() is called.
    """

    _instance = None

    def __init__(self):
        self._errors: List[FieldError] = []
        self._page_var_data: Dict[str, dict] = {}

    @classmethod
    @abstractmethod
    def make_validator_singleton(cls):
        """Return the process-wide validator, creating it on first use."""

    @abstractmethod
    def is_request_data_valid(self, request_data: dict, page_vars: dict) -> bool:
        """
        Run the checks declared in page_vars against request_data.

        Args:
            request_data: Submitted values (form or query arguments)
            page_vars: Registered page variables, field name -> options

        Returns:
            bool: True if no errors were produced
        """

    @abstractmethod
    def is_page_name_valid(self, page_name) -> bool:
        """Return True if page_name may be dispatched to."""

    @abstractmethod
    def _check_password(self, variable_name, value, label):
        """
        Check a password field. It cannot be empty; on failure one error
        naming the label is added, saying either that the field cannot be
        empty or what the expected format is.
        """

    def validate(self, request_data: dict, page_vars: dict) -> ValidationResult:
        """Run one clean validation pass and return a structured result."""
        self.clear_validation_errors()
        ok = self.is_request_data_valid(request_data, page_vars)
        return ValidationResult(ok=ok and not self._errors, errors=list(self._errors))

    def get_validation_errors(self) -> List[str]:
        """Messages produced by the validation process, in order."""
        return [e.message for e in self._errors]

    def get_field_errors(self) -> List[FieldError]:
        return list(self._errors)

    def clear_validation_errors(self):
        self._errors = []

    def _add_error(self, variable_name, label, message, key=None):
        if key is not None:
            self._errors = [e for e in self._errors if e.key != key]
        self._errors.append(FieldError(variable_name, label, message, key))

    @staticmethod
    def is_variable_name_valid(name) -> bool:
        """
        Checks a name against identifier rules: a letter, underscore or
        high byte first, then letters, digits, underscores or high bytes.

        The name is matched as UTF-8 bytes, so any non-ASCII character
        counts as a high byte.
        """
        try:
            return VARIABLE_NAME_PATTERN.fullmatch(name.encode('utf-8')) is not None
        except (AttributeError, UnicodeEncodeError) as e:
            _abort(f"Testing of variable name failed: {e}", ValidatorEnvironmentError)

    @staticmethod
    def ensure_parameter_not_empty(param, msg=''):
        """
        Raise ParameterError if param is empty.

        For checking arguments of your own methods only. This is not
        user-friendly and must not be used for form validation.
        """
        if _is_empty(param):
            _abort(msg or 'Invalid parameter received. Cannot be empty')

    @staticmethod
    def ensure_parameter_is_string(param):
        """Raise ParameterError unless param is a str."""
        if not isinstance(param, str):
            _abort('Invalid parameter received. Parameter must be a string')

    @staticmethod
    def ensure_parameters_not_empty(params):
        """
        Raise ParameterError if params, or any item in it, is empty.

        A mapping is checked by its values.
        """
        if isinstance(params, Mapping):
            params = list(params.values())
        elif not isinstance(params, (list, tuple)):
            _abort('Invalid parameter received. Expected a list of parameters')
        if not params:
            _abort('Invalid parameter received. Cannot be empty')
        for p in params:
            if _is_empty(p):
                _abort('Invalid parameter received in the parameter list. Cannot be empty')

    def empty_is_allowed(self, param, value) -> bool:
        """True if the field is declared emptyallowed=yes and value is blank."""
        options = self._page_var_data.get(param) or {}
        return options.get('emptyallowed') == 'yes' and str(value or '').strip() == ''

    def _check_entry(self, variable_name, value, label):
        """
        Free text that may contain editorial marks such as quotes and
        slashes. Blank values and select placeholders are rejected.
        """
        value = '' if value is None else str(value)
        if value.strip() == '' or value in SELECT_PLACEHOLDERS:
            custom = (self._page_var_data.get(variable_name) or {}).get('errormessage')
            self._add_error(
                variable_name, label,
                custom or f"{label}: Select or enter a value. Field cannot be all spaces or empty."
            )
        elif not ENTRY_ALLOWED_PATTERN.search(value):
            self._add_error(variable_name, label, f"{label}: Your text contains unaccepted characters.")

    def _check_simpletext(self, variable_name, value, label):
        """Words, spaces and hyphens."""
        value = '' if value is None else str(value)
        if value.strip() == '' and not SIMPLETEXT_PATTERN.match(value):
            self._add_error(
                variable_name, label,
                f"{label}: Only letters, numbers, spaces, underscores, apostrophes, percent signs and hyphens."
            )

    def _check_email(self, variable_name, value, label):
        if self.empty_is_allowed(variable_name, value):
            return

        value = '' if value is None else str(value)
        if value.strip() == '':
            self._add_error(variable_name, label, f"{label}: cannot be empty.", key='email')
            return
        try:
            validate_email(value, check_deliverability=False, allow_smtputf8=False)
        except EmailNotValidError:
            self._add_error(variable_name, label, f"{label}: Invalid email address format.", key='email')
