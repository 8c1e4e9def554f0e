from __future__ import annotations

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..models.signup_form import FORM_FIELDS


def signup_menu_keyboard(translator, locale: str, *, loading: bool = False) -> InlineKeyboardMarkup:
    rows = [[InlineKeyboardButton(translator.translate("field_image", locale), callback_data="field:image")]]
    for name in FORM_FIELDS:
        rows.append([InlineKeyboardButton(translator.translate(f"field_{name}", locale), callback_data=f"field:{name}")])
    if not loading:
        rows.append([InlineKeyboardButton(translator.translate("btn_sign_up", locale), callback_data="signup:submit")])
    rows.append([InlineKeyboardButton(translator.translate("btn_sign_in", locale), callback_data="nav:sign_in")])
    return InlineKeyboardMarkup(rows)
