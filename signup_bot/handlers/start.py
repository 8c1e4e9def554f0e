from __future__ import annotations

"""Start handler: resumes a cached session or opens the sign-up screen."""
from telegram import Update
from telegram.ext import ContextTypes

from ..services.navigation import Screen
from .screen import screen_for


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    screen = screen_for(update, context)
    preferences = context.application.bot_data["preferences"].for_chat(update.effective_chat.id)
    session = await preferences.load_session()
    if session.is_signed_in:
        await screen.start_screen(Screen.MAIN, clear_history=True)
    else:
        await screen.start_screen(Screen.SIGN_UP, clear_history=False)
