"""
Validator used by the site's pages.

Each page declares its fields in page_vars.json; the field's "type"
selects which BaseValidator check runs against the submitted value.
"""

import re
import logging
from typing import Optional

from quwius.validator import BaseValidator, ParameterError
from quwius.utils.config import load_page_vars
from quwius.utils.constants import PASSWORD_MIN_LENGTH

logger = logging.getLogger("quwius")

PASSWORD_PATTERN = re.compile(r'^(?=.*[A-Z])(?=.*\d).{%d,}$' % PASSWORD_MIN_LENGTH)


class FormValidator(BaseValidator):
    """Validates page names and submitted form data against page declarations."""

    CHECKS = {
        'password': '_check_password',
        'email': '_check_email',
        'entry': '_check_entry',
        'simpletext': '_check_simpletext',
    }

    def __init__(self, pages: Optional[dict] = None):
        super().__init__()
        self.pages = pages if pages is not None else load_page_vars()

    @classmethod
    def make_validator_singleton(cls):
        if not isinstance(BaseValidator._instance, cls):
            BaseValidator._instance = cls()
        return BaseValidator._instance

    @classmethod
    def reset_singleton(cls):
        BaseValidator._instance = None

    def page_vars_for(self, page_name: str) -> dict:
        return self.pages.get(page_name, {})

    def is_page_name_valid(self, page_name) -> bool:
        if not isinstance(page_name, str) or not page_name:
            return False
        return self.is_variable_name_valid(page_name) and page_name in self.pages

    def is_request_data_valid(self, request_data: dict, page_vars: dict) -> bool:
        self._page_var_data = page_vars
        before = len(self._errors)

        for name, options in page_vars.items():
            field_type = options.get('type', 'entry')
            check = self.CHECKS.get(field_type)
            if check is None:
                raise ParameterError(f"Unknown field type '{field_type}' declared for '{name}'")

            value = request_data.get(name, '')
            if self.empty_is_allowed(name, value):
                continue
            getattr(self, check)(name, value, options.get('label', name))

        if len(self._errors) > before:
            logger.debug(f"Validation failed for fields: {[e.field for e in self._errors[before:]]}")
        return len(self._errors) == before

    def _check_password(self, variable_name, value, label):
        value = '' if value is None else str(value)
        if value.strip() == '':
            self._add_error(variable_name, label, f"{label}: cannot be empty.")
        elif not PASSWORD_PATTERN.match(value):
            self._add_error(
                variable_name, label,
                f"{label}: Must be at least {PASSWORD_MIN_LENGTH} characters long and contain "
                f"at least one upper case letter and one digit."
            )
