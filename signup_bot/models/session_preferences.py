from __future__ import annotations

from pydantic import BaseModel

KEY_IS_SIGNED_IN = "isSignedIn"


class SessionPreferences(BaseModel):
    is_signed_in: bool = False
    first_name: str = ""
    last_name: str = ""
    encoded_image: str = ""
