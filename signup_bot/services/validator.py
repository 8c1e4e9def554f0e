from __future__ import annotations

"""Ordered client-side checks for the sign-up form."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.signup_form import SignupForm

# Same shape as the EMAIL_ADDRESS pattern used by mobile platforms.
EMAIL_ADDRESS = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


class ValidationError(str, Enum):
    IMAGE_MISSING = "image_missing"
    FIRST_NAME_MISSING = "first_name_missing"
    LAST_NAME_MISSING = "last_name_missing"
    EMAIL_MISSING = "email_missing"
    EMAIL_INVALID = "email_invalid"
    PASSWORD_MISSING = "password_missing"
    CONFIRM_PASSWORD_MISSING = "confirm_password_missing"
    PASSWORD_MISMATCH = "password_mismatch"

    @property
    def message_key(self) -> str:
        return f"error_{self.value}"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: Optional[ValidationError] = None


class FormValidator:
    """Stops at the first failing check; never aggregates errors."""

    def validate(self, form: SignupForm) -> ValidationResult:
        error = self._first_error(form)
        if error is None:
            return ValidationResult(True)
        return ValidationResult(False, error)

    def _first_error(self, form: SignupForm) -> Optional[ValidationError]:
        if not form.has_image():
            return ValidationError.IMAGE_MISSING
        if not form.first_name.strip():
            return ValidationError.FIRST_NAME_MISSING
        if not form.last_name.strip():
            return ValidationError.LAST_NAME_MISSING
        if not form.email.strip():
            return ValidationError.EMAIL_MISSING
        if not self.is_valid_email(form.email):
            return ValidationError.EMAIL_INVALID
        if not form.password.strip():
            return ValidationError.PASSWORD_MISSING
        if not form.confirm_password.strip():
            return ValidationError.CONFIRM_PASSWORD_MISSING
        if form.password != form.confirm_password:
            return ValidationError.PASSWORD_MISMATCH
        return None

    @staticmethod
    def is_valid_email(email: str) -> bool:
        return EMAIL_ADDRESS.fullmatch(email) is not None
