from __future__ import annotations

from telegram import InlineKeyboardButton, InlineKeyboardMarkup


def main_menu_keyboard(translator, locale: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(translator.translate("btn_sign_out", locale), callback_data="nav:sign_out")],
        ]
    )


def signin_menu_keyboard(translator, locale: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(translator.translate("btn_sign_up", locale), callback_data="nav:sign_up")],
        ]
    )
