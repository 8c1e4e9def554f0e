from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

FORM_FIELDS = ("first_name", "last_name", "email", "password", "confirm_password")
SECRET_FIELDS = ("password", "confirm_password")


class SignupForm(BaseModel):
    """Field values typed into the sign-up screen for one submission attempt."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    encoded_image: Optional[str] = Field(default=None, min_length=1)

    def with_field(self, name: str, value: str) -> "SignupForm":
        if name not in FORM_FIELDS:
            raise ValueError(f"Unknown sign-up field: {name}")
        return self.model_copy(update={name: value})

    def has_image(self) -> bool:
        return self.encoded_image is not None
