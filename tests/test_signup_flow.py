import base64
import io
from pathlib import Path
import sys
from types import SimpleNamespace
from typing import Dict, List, Mapping, Optional

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from signup_bot.handlers.menu import handle_navigation
from signup_bot.handlers.screen import FORM_KEY, HISTORY_KEY, get_state
from signup_bot.handlers.signup import handle_field_input, handle_field_select, handle_photo, handle_submit
from signup_bot.handlers.start import handle_start
from signup_bot.i18n import Translator
from signup_bot.models.screen_state import SignupScreenState
from signup_bot.models.signup_form import SignupForm
from signup_bot.services.document_store import DocumentRef, DocumentStore, DocumentStoreError
from signup_bot.services.image_encoder import ImageEncoder
from signup_bot.services.image_safety import ImageSafetyService
from signup_bot.services.navigation import Screen
from signup_bot.services.preferences import PreferenceStore
from signup_bot.services.submitter import SignupSubmitter
from signup_bot.services.validator import FormValidator

ENCODED = ImageEncoder().encode(Image.new("RGB", (300, 200), color="green"))


def filled_form(**overrides) -> SignupForm:
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "password": "x",
        "confirm_password": "x",
        "encoded_image": ENCODED,
    }
    data.update(overrides)
    return SignupForm(**data)


class RecordingDocuments:
    """Test double for the document store that can be told to fail."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.writes: List[tuple] = []

    async def add_document(self, collection: str, fields: Mapping[str, str]) -> DocumentRef:
        self.writes.append((collection, dict(fields)))
        if self.error is not None:
            raise self.error
        return DocumentRef(collection, f"doc{len(self.writes)}")


class RecordingPreferences:
    def __init__(self, events: List[tuple]) -> None:
        self.values: Dict[str, object] = {}
        self._events = events

    async def put_bool(self, key: str, value: bool) -> None:
        self.values[key] = value
        self._events.append(("pref", key))

    async def put_string(self, key: str, value: str) -> None:
        self.values[key] = value
        self._events.append(("pref", key))


class RecordingScreen:
    def __init__(self, events: List[tuple]) -> None:
        self._events = events

    async def start_screen(self, target: Screen, clear_history: bool) -> None:
        self._events.append(("navigate", target, clear_history))

    async def show_toast(self, message: str) -> None:
        self._events.append(("toast", message))


def recording_setup(error: Optional[Exception] = None):
    events: List[tuple] = []
    documents = RecordingDocuments(error)
    preferences = RecordingPreferences(events)
    screen = RecordingScreen(events)
    state = SignupScreenState()

    async def on_loading(loading: bool) -> None:
        events.append(("loading", loading))

    state.listeners.append(on_loading)
    submitter = SignupSubmitter(documents, preferences, screen, screen)
    return submitter, state, documents, preferences, events


@pytest.mark.asyncio
async def test_successful_submission_signs_in_and_navigates_once() -> None:
    submitter, state, documents, preferences, events = recording_setup()
    result = await submitter.submit(filled_form(first_name=" Ada"), state)

    assert result.ok and result.document_ref == DocumentRef("users", "doc1")
    assert documents.writes == [
        (
            "users",
            {
                "firstName": " Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "password": "x",
                "image": ENCODED,
            },
        )
    ]
    assert preferences.values == {
        "isSignedIn": True,
        "firstName": " Ada",
        "lastName": "Lovelace",
        "image": ENCODED,
    }
    loading = [event for event in events if event[0] == "loading"]
    assert loading == [("loading", True), ("loading", False)]
    navigations = [event for event in events if event[0] == "navigate"]
    assert navigations == [("navigate", Screen.MAIN, True)]
    assert events.index(("loading", False)) < events.index(navigations[0])
    assert not state.loading


@pytest.mark.asyncio
async def test_failed_submission_shows_error_verbatim() -> None:
    submitter, state, documents, preferences, events = recording_setup(DocumentStoreError("network down"))
    result = await submitter.submit(filled_form(), state)

    assert not result.ok
    assert result.error_message == "network down"
    assert len(documents.writes) == 1
    assert preferences.values == {}
    assert events == [("loading", True), ("loading", False), ("toast", "network down")]


class FakeBot:
    def __init__(self) -> None:
        self.sent: List[dict] = []
        self.edits: List[dict] = []
        self.deleted: List[int] = []
        self._next_id = 100

    def _message(self, **payload) -> SimpleNamespace:
        self._next_id += 1
        payload["message_id"] = self._next_id
        self.sent.append(payload)
        return SimpleNamespace(message_id=self._next_id)

    async def send_message(self, chat_id, text, reply_markup=None):
        return self._message(kind="text", chat_id=chat_id, text=text, reply_markup=reply_markup)

    async def send_photo(self, chat_id, photo, caption=None, reply_markup=None):
        return self._message(kind="photo", chat_id=chat_id, photo=photo, caption=caption, reply_markup=reply_markup)

    async def edit_message_text(self, text, chat_id=None, message_id=None, reply_markup=None):
        self.edits.append({"text": text, "message_id": message_id, "reply_markup": reply_markup})

    async def delete_message(self, chat_id, message_id):
        self.deleted.append(message_id)


class FakeQuery:
    def __init__(self, data: str) -> None:
        self.data = data
        self.answers: List[Optional[str]] = []

    async def answer(self, text: Optional[str] = None) -> None:
        self.answers.append(text)


class FakeMessage:
    def __init__(self, text: str, message_id: int = 7) -> None:
        self.text = text
        self.message_id = message_id
        self.chat_id = 1
        self.deleted = False

    async def delete(self) -> None:
        self.deleted = True


async def build_context(tmp_path: Path, documents=None) -> SimpleNamespace:
    preferences = PreferenceStore(tmp_path / "db.sqlite3")
    await preferences.init_schema()
    if documents is None:
        documents = DocumentStore(tmp_path / "db.sqlite3")
        await documents.init_schema()
    bot_data = {
        "settings": SimpleNamespace(locale="en", users_collection="users"),
        "translator": Translator(),
        "validator": FormValidator(),
        "documents": documents,
        "preferences": preferences,
        "safety": ImageSafetyService(),
        "encoder": ImageEncoder(),
    }
    return SimpleNamespace(application=SimpleNamespace(bot_data=bot_data), user_data={}, bot=FakeBot())


def callback_update(data: str) -> SimpleNamespace:
    return SimpleNamespace(effective_chat=SimpleNamespace(id=1), callback_query=FakeQuery(data), message=None)


def text_update(text: str) -> SimpleNamespace:
    return SimpleNamespace(effective_chat=SimpleNamespace(id=1), callback_query=None, message=FakeMessage(text))


@pytest.mark.asyncio
async def test_start_shows_signup_screen(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    await handle_start(callback_update("unused"), context)
    assert context.bot.sent[0]["text"].startswith("Create a new account")
    callbacks = [button.callback_data for row in context.bot.sent[0]["reply_markup"].inline_keyboard for button in row]
    assert "signup:submit" in callbacks
    assert "field:image" in callbacks


@pytest.mark.asyncio
async def test_submit_without_image_toasts_validation_message(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    update = callback_update("signup:submit")
    await handle_submit(update, context)
    assert update.callback_query.answers == ["Please select your image"]
    assert await context.application.bot_data["preferences"].for_chat(1).get_bool("isSignedIn") is False


@pytest.mark.asyncio
async def test_field_entry_hides_passwords(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    await handle_start(callback_update("unused"), context)
    await handle_field_select(callback_update("field:password"), context)
    assert context.bot.sent[-1]["text"] == "Send your password"
    update = text_update("hunter2")
    await handle_field_input(update, context)
    assert context.user_data[FORM_KEY].password == "hunter2"
    assert update.message.deleted
    assert "hunter2" not in context.bot.edits[-1]["text"]


@pytest.mark.asyncio
async def test_signup_end_to_end_navigates_to_main_screen(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    await handle_start(callback_update("unused"), context)
    signup_message = context.bot.sent[0]["message_id"]
    context.user_data[FORM_KEY] = filled_form()

    update = callback_update("signup:submit")
    await handle_submit(update, context)

    preferences = context.application.bot_data["preferences"].for_chat(1)
    session = await preferences.load_session()
    assert session.is_signed_in
    assert session.first_name == "Ada"
    assert session.encoded_image == ENCODED
    documents = await context.application.bot_data["documents"].list_documents("users")
    assert len(documents) == 1

    loading_edit, idle_edit = context.bot.edits[:2]
    assert "Signing up…" in loading_edit["text"]
    assert "Signing up…" not in idle_edit["text"]

    photos = [message for message in context.bot.sent if message["kind"] == "photo"]
    assert len(photos) == 1
    assert photos[0]["caption"] == "Hi, Ada!"
    assert photos[0]["photo"] == base64.b64decode(ENCODED)
    assert signup_message in context.bot.deleted
    assert context.user_data[HISTORY_KEY] == [photos[0]["message_id"]]
    assert FORM_KEY not in context.user_data
    assert update.callback_query.answers == [None]


@pytest.mark.asyncio
async def test_signup_failure_keeps_form_and_screen(tmp_path: Path) -> None:
    documents = RecordingDocuments(DocumentStoreError("network down"))
    context = await build_context(tmp_path, documents=documents)
    await handle_start(callback_update("unused"), context)
    form = filled_form()
    context.user_data[FORM_KEY] = form

    update = callback_update("signup:submit")
    await handle_submit(update, context)

    assert update.callback_query.answers == ["network down"]
    assert context.user_data[FORM_KEY] == form
    assert context.bot.deleted == []
    assert not any(message["kind"] == "photo" for message in context.bot.sent)
    preferences = context.application.bot_data["preferences"].for_chat(1)
    assert not (await preferences.load_session()).is_signed_in


@pytest.mark.asyncio
async def test_start_with_cached_session_skips_signup(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    preferences = context.application.bot_data["preferences"].for_chat(1)
    await preferences.put_bool("isSignedIn", True)
    await preferences.put_string("firstName", "Grace")
    await handle_start(callback_update("unused"), context)
    assert context.bot.sent == [
        {
            "kind": "text",
            "chat_id": 1,
            "text": "Hi, Grace!",
            "reply_markup": context.bot.sent[0]["reply_markup"],
            "message_id": 101,
        }
    ]


@pytest.mark.asyncio
async def test_sign_out_clears_session(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    preferences = context.application.bot_data["preferences"].for_chat(1)
    await preferences.put_bool("isSignedIn", True)
    await handle_start(callback_update("unused"), context)
    await handle_navigation(callback_update("nav:sign_out"), context)
    assert not (await preferences.load_session()).is_signed_in
    assert context.bot.sent[-1]["text"].startswith("Create a new account")
    assert context.bot.deleted == [101]


class FakeFile:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    async def download_as_bytearray(self) -> bytearray:
        return bytearray(self._payload)


class FakePhotoSize:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    async def get_file(self) -> FakeFile:
        return FakeFile(self._payload)


def jpeg_bytes(size) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color="navy").save(buffer, format="JPEG")
    return buffer.getvalue()


def photo_update(payload: bytes) -> SimpleNamespace:
    message = SimpleNamespace(message_id=9, photo=[FakePhotoSize(b"thumbnail"), FakePhotoSize(payload)])
    return SimpleNamespace(effective_chat=SimpleNamespace(id=1), callback_query=None, message=message)


@pytest.mark.asyncio
async def test_photo_sets_encoded_image_on_form(tmp_path: Path) -> None:
    context = await build_context(tmp_path)
    await handle_start(callback_update("unused"), context)
    await handle_photo(photo_update(jpeg_bytes((640, 480))), context)

    encoded = context.user_data[FORM_KEY].encoded_image
    assert Image.open(io.BytesIO(base64.b64decode(encoded))).size == (150, 112)
    assert "Profile image: added" in context.bot.edits[-1]["text"]
    assert len(context.bot.sent) == 1


@pytest.mark.parametrize(
    "payload, toast",
    [
        (b"not an image at all " * 10, "Unable to read the selected image"),
        (b"\xff\xd8\xff", "The selected image is too small"),
        (jpeg_bytes((16, 16)), "The selected image must be at least 32x32 pixels"),
        (jpeg_bytes((1200, 60)), "The selected image is too narrow"),
    ],
)
@pytest.mark.asyncio
async def test_rejected_photo_toasts_and_leaves_form_without_image(tmp_path: Path, payload: bytes, toast: str) -> None:
    context = await build_context(tmp_path)
    await handle_start(callback_update("unused"), context)
    await handle_photo(photo_update(payload), context)

    assert context.bot.sent[-1]["text"] == toast
    assert not context.user_data[FORM_KEY].has_image()
    assert context.bot.edits == []


@pytest.mark.asyncio
async def test_submit_while_loading_is_ignored(tmp_path: Path) -> None:
    documents = RecordingDocuments()
    context = await build_context(tmp_path, documents=documents)
    context.user_data[FORM_KEY] = filled_form()
    get_state(context).loading = True

    update = callback_update("signup:submit")
    await handle_submit(update, context)

    assert documents.writes == []
    assert update.callback_query.answers == [None]
    assert context.bot.sent == []


@pytest.mark.asyncio
async def test_blank_store_error_uses_generic_message(tmp_path: Path) -> None:
    context = await build_context(tmp_path, documents=RecordingDocuments(DocumentStoreError("")))
    context.user_data[FORM_KEY] = filled_form()

    update = callback_update("signup:submit")
    await handle_submit(update, context)

    assert update.callback_query.answers == ["Sign up failed, please try again"]


@pytest.mark.asyncio
async def test_submitter_default_message_for_blank_error() -> None:
    submitter, state, _, _, events = recording_setup(RuntimeError())
    result = await submitter.submit(filled_form(), state)
    assert result.error_message == "Sign up failed"
    assert events[-1] == ("toast", "Sign up failed")
