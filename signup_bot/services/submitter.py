from __future__ import annotations

"""Persists a validated sign-up form and moves the user to the main screen."""
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from ..models.screen_state import SignupScreenState
from ..models.session_preferences import KEY_IS_SIGNED_IN
from ..models.signup_form import SignupForm
from ..models.user_record import KEY_FIRST_NAME, KEY_IMAGE, KEY_LAST_NAME, UserRecord
from .document_store import DocumentRef
from .navigation import Navigator, Notifier, Screen

LOGGER = logging.getLogger(__name__)


class DocumentWriter(Protocol):
    async def add_document(self, collection: str, fields: Mapping[str, str]) -> DocumentRef:
        ...


class Preferences(Protocol):
    async def put_bool(self, key: str, value: bool) -> None:
        ...

    async def put_string(self, key: str, value: str) -> None:
        ...


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    document_ref: Optional[DocumentRef] = None
    error_message: Optional[str] = None


class SignupSubmitter:
    def __init__(
        self,
        documents: DocumentWriter,
        preferences: Preferences,
        navigator: Navigator,
        notifier: Notifier,
        *,
        collection: str = "users",
        fallback_message: str = "Sign up failed",
    ) -> None:
        self._documents = documents
        self._preferences = preferences
        self._navigator = navigator
        self._notifier = notifier
        self._collection = collection
        self._fallback_message = fallback_message

    async def submit(self, form: SignupForm, state: SignupScreenState) -> SubmissionResult:
        """Write the record once; the caller must have validated ``form`` already.

        Loading is switched off before either navigation or the error toast.
        Re-entrancy is left to the screen, which hides the submit button while
        ``state.loading`` is set.
        """
        await state.set_loading(True)
        record = UserRecord.from_form(form)
        try:
            ref = await self._documents.add_document(self._collection, record.to_fields())
        except Exception as exc:
            LOGGER.warning("Sign-up write to %s failed: %s", self._collection, exc)
            await state.set_loading(False)
            message = str(exc) or self._fallback_message
            await self._notifier.show_toast(message)
            return SubmissionResult(False, error_message=message)

        await state.set_loading(False)
        await self._preferences.put_bool(KEY_IS_SIGNED_IN, True)
        await self._preferences.put_string(KEY_FIRST_NAME, record.first_name)
        await self._preferences.put_string(KEY_LAST_NAME, record.last_name)
        await self._preferences.put_string(KEY_IMAGE, record.encoded_image)
        LOGGER.info("Signed up user as %s", ref.path)
        await self._navigator.start_screen(Screen.MAIN, clear_history=True)
        return SubmissionResult(True, document_ref=ref)
