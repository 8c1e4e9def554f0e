from __future__ import annotations

from typing import Dict
from pydantic import BaseModel, ConfigDict

from .signup_form import SignupForm

KEY_FIRST_NAME = "firstName"
KEY_LAST_NAME = "lastName"
KEY_EMAIL = "email"
KEY_PASSWORD = "password"
KEY_IMAGE = "image"


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str
    password: str
    encoded_image: str

    @classmethod
    def from_form(cls, form: SignupForm) -> "UserRecord":
        if form.encoded_image is None:
            raise ValueError("A user record requires an encoded image")
        # Values are stored as typed; trimming only applies to validation.
        return cls(
            first_name=form.first_name,
            last_name=form.last_name,
            email=form.email,
            password=form.password,
            encoded_image=form.encoded_image,
        )

    def to_fields(self) -> Dict[str, str]:
        return {
            KEY_FIRST_NAME: self.first_name,
            KEY_LAST_NAME: self.last_name,
            KEY_EMAIL: self.email,
            KEY_PASSWORD: self.password,
            KEY_IMAGE: self.encoded_image,
        }
