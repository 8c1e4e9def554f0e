from __future__ import annotations

"""Telegram rendering of the sign-up, sign-in and main screens."""
import base64
import binascii
import logging
from typing import List, Optional

from telegram import CallbackQuery, Update
from telegram.error import BadRequest
from telegram.ext import CallbackContext

from ..i18n import Translator
from ..keyboards.main_menu import main_menu_keyboard, signin_menu_keyboard
from ..keyboards.signup_menu import signup_menu_keyboard
from ..models.screen_state import SignupScreenState
from ..models.signup_form import FORM_FIELDS, SECRET_FIELDS, SignupForm
from ..services.navigation import Screen
from ..services.preferences import ChatPreferences, PreferenceStore

LOGGER = logging.getLogger(__name__)

FORM_KEY = "signup_form"
STATE_KEY = "signup_state"
AWAITING_KEY = "awaiting_field"
SIGNUP_MESSAGE_KEY = "signup_message_id"
HISTORY_KEY = "screen_history"


def get_form(context: CallbackContext) -> SignupForm:
    form = context.user_data.get(FORM_KEY)
    if form is None:
        form = SignupForm()
        context.user_data[FORM_KEY] = form
    return form


def get_state(context: CallbackContext) -> SignupScreenState:
    state = context.user_data.get(STATE_KEY)
    if state is None:
        state = SignupScreenState()
        context.user_data[STATE_KEY] = state
    return state


def render_signup(form: SignupForm, translator: Translator, locale: str, *, loading: bool = False) -> str:
    lines = [translator.translate("signup_title", locale), ""]
    image = translator.translate("image_added" if form.has_image() else "field_empty", locale)
    lines.append(f"{translator.translate('field_image', locale)}: {image}")
    for name in FORM_FIELDS:
        value = getattr(form, name)
        if not value:
            shown = translator.translate("field_empty", locale)
        elif name in SECRET_FIELDS:
            shown = translator.translate("field_hidden", locale)
        else:
            shown = value
        lines.append(f"{translator.translate(f'field_{name}', locale)}: {shown}")
    if loading:
        lines.extend(["", translator.translate("loading", locale)])
    return "\n".join(lines)


class TelegramScreen:
    """Navigator and notifier for one chat."""

    def __init__(
        self,
        context: CallbackContext,
        chat_id: int,
        preferences: ChatPreferences,
        *,
        query: Optional[CallbackQuery] = None,
    ) -> None:
        self._context = context
        self._chat_id = chat_id
        self._preferences = preferences
        self._query = query
        self._answered = False
        self._translator: Translator = context.application.bot_data["translator"]
        self._locale: str = context.application.bot_data["settings"].locale

    @property
    def translator(self) -> Translator:
        return self._translator

    @property
    def locale(self) -> str:
        return self._locale

    def text(self, key: str, **params: str) -> str:
        return self._translator.translate(key, self._locale, **params)

    async def show_toast(self, message: str) -> None:
        if self._query is not None and not self._answered:
            self._answered = True
            await self._query.answer(message)
            return
        await self._context.bot.send_message(self._chat_id, message)

    async def acknowledge(self) -> None:
        if self._query is not None and not self._answered:
            self._answered = True
            await self._query.answer()

    async def start_screen(self, target: Screen, clear_history: bool) -> None:
        history: List[int] = self._context.user_data.setdefault(HISTORY_KEY, [])
        if clear_history:
            await self._delete_messages(history)
            history.clear()
            for key in (FORM_KEY, STATE_KEY, AWAITING_KEY, SIGNUP_MESSAGE_KEY):
                self._context.user_data.pop(key, None)
        LOGGER.debug("Chat %s navigating to %s (clear_history=%s)", self._chat_id, target.value, clear_history)
        if target is Screen.MAIN:
            message_id = await self._send_main()
        elif target is Screen.SIGN_IN:
            message = await self._context.bot.send_message(
                self._chat_id,
                self.text("signin_title"),
                reply_markup=signin_menu_keyboard(self._translator, self._locale),
            )
            message_id = message.message_id
        else:
            message_id = await self._send_signup()
        history.append(message_id)

    async def refresh_signup(self) -> None:
        message_id = self._context.user_data.get(SIGNUP_MESSAGE_KEY)
        if message_id is None:
            self._context.user_data.setdefault(HISTORY_KEY, []).append(await self._send_signup())
            return
        state = get_state(self._context)
        try:
            await self._context.bot.edit_message_text(
                render_signup(get_form(self._context), self._translator, self._locale, loading=state.loading),
                chat_id=self._chat_id,
                message_id=message_id,
                reply_markup=signup_menu_keyboard(self._translator, self._locale, loading=state.loading),
            )
        except BadRequest as exc:
            # Telegram rejects edits that leave the message unchanged.
            LOGGER.debug("Sign-up screen not edited: %s", exc)

    async def on_loading(self, loading: bool) -> None:
        await self.refresh_signup()

    async def _send_signup(self) -> int:
        state = get_state(self._context)
        message = await self._context.bot.send_message(
            self._chat_id,
            render_signup(get_form(self._context), self._translator, self._locale, loading=state.loading),
            reply_markup=signup_menu_keyboard(self._translator, self._locale, loading=state.loading),
        )
        self._context.user_data[SIGNUP_MESSAGE_KEY] = message.message_id
        return message.message_id

    async def _send_main(self) -> int:
        session = await self._preferences.load_session()
        caption = self.text("main_title", name=session.first_name)
        keyboard = main_menu_keyboard(self._translator, self._locale)
        photo = _decode_preview(session.encoded_image)
        if photo:
            message = await self._context.bot.send_photo(self._chat_id, photo=photo, caption=caption, reply_markup=keyboard)
        else:
            message = await self._context.bot.send_message(self._chat_id, caption, reply_markup=keyboard)
        return message.message_id

    async def _delete_messages(self, message_ids: List[int]) -> None:
        for message_id in message_ids:
            try:
                await self._context.bot.delete_message(self._chat_id, message_id)
            except BadRequest as exc:
                LOGGER.warning("Could not delete message %s in chat %s: %s", message_id, self._chat_id, exc)


def _decode_preview(encoded_image: str) -> Optional[bytes]:
    if not encoded_image:
        return None
    try:
        return base64.b64decode(encoded_image)
    except binascii.Error:
        LOGGER.warning("Cached profile image is not valid base64")
        return None


def screen_for(update: Update, context: CallbackContext) -> TelegramScreen:
    preferences: PreferenceStore = context.application.bot_data["preferences"]
    chat_id = update.effective_chat.id
    return TelegramScreen(context, chat_id, preferences.for_chat(chat_id), query=update.callback_query)
