from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import CallbackContext

from ..services.navigation import Screen
from ..services.preferences import PreferenceStore
from .screen import screen_for

LOGGER = logging.getLogger(__name__)


async def handle_navigation(update: Update, context: CallbackContext) -> None:
    query = update.callback_query
    if not query or not query.data:
        return
    screen = screen_for(update, context)
    await screen.acknowledge()
    target = query.data.split(":", 1)[1]
    if target == "sign_in":
        await screen.start_screen(Screen.SIGN_IN, clear_history=False)
    elif target == "sign_up":
        await screen.start_screen(Screen.SIGN_UP, clear_history=False)
    elif target == "sign_out":
        preferences: PreferenceStore = context.application.bot_data["preferences"]
        await preferences.for_chat(update.effective_chat.id).clear()
        LOGGER.info("Chat %s signed out", update.effective_chat.id)
        await screen.start_screen(Screen.SIGN_UP, clear_history=True)
