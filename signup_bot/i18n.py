from __future__ import annotations

"""Simple translation helper supporting EN/RU locales."""
from dataclasses import dataclass, field
from typing import Dict

FALLBACK_LOCALE = "en"


@dataclass
class Translator:
    default_locale: str = "en"
    _translations: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self._translations:
            return
        self._translations = {
            "en": {
                "signup_title": "Create a new account",
                "signin_title": "Sign in to continue",
                "main_title": "Hi, {name}!",
                "field_first_name": "First name",
                "field_last_name": "Last name",
                "field_email": "Email",
                "field_password": "Password",
                "field_confirm_password": "Confirm password",
                "field_image": "Profile image",
                "field_empty": "—",
                "field_hidden": "••••••",
                "image_added": "added",
                "prompt_field": "Send your {field}",
                "prompt_image": "Send a photo to use as your profile image",
                "btn_sign_up": "Sign up",
                "btn_sign_in": "Already have an account? Sign in",
                "btn_sign_out": "Sign out",
                "loading": "Signing up…",
                "image_low_resolution": "The selected image must be at least {size}x{size} pixels",
                "signup_failed": "Sign up failed, please try again",
                "image_bad_aspect_ratio": "The selected image is too narrow",
                "image_unreadable": "Unable to read the selected image",
                "image_too_small": "The selected image is too small",
                "image_too_large": "The selected image is too large",
                "error_image_missing": "Please select your image",
                "error_first_name_missing": "Please enter your first name",
                "error_last_name_missing": "Please enter your last name",
                "error_email_missing": "Please enter your email",
                "error_email_invalid": "Please enter a valid email",
                "error_password_missing": "Please enter your password",
                "error_confirm_password_missing": "Please confirm your password",
                "error_password_mismatch": "Passwords must match",
            },
            "ru": {
                "signup_title": "Создайте новый аккаунт",
                "signin_title": "Войдите, чтобы продолжить",
                "main_title": "Привет, {name}!",
                "field_first_name": "Имя",
                "field_last_name": "Фамилия",
                "field_email": "Email",
                "field_password": "Пароль",
                "field_confirm_password": "Повтор пароля",
                "field_image": "Фото профиля",
                "field_empty": "—",
                "field_hidden": "••••••",
                "image_added": "добавлено",
                "prompt_field": "Отправьте поле «{field}»",
                "prompt_image": "Отправьте фото для профиля",
                "btn_sign_up": "Зарегистрироваться",
                "btn_sign_in": "Уже есть аккаунт? Войти",
                "btn_sign_out": "Выйти",
                "loading": "Регистрирую…",
                "image_low_resolution": "Изображение должно быть не меньше {size}x{size} пикселей",
                "signup_failed": "Не удалось зарегистрироваться, попробуйте ещё раз",
                "image_bad_aspect_ratio": "Изображение слишком вытянутое",
                "image_unreadable": "Не удалось прочитать выбранное изображение",
                "image_too_small": "Изображение слишком маленькое",
                "image_too_large": "Изображение слишком большое",
                "error_image_missing": "Выберите изображение",
                "error_first_name_missing": "Введите имя",
                "error_last_name_missing": "Введите фамилию",
                "error_email_missing": "Введите email",
                "error_email_invalid": "Введите корректный email",
                "error_password_missing": "Введите пароль",
                "error_confirm_password_missing": "Подтвердите пароль",
                "error_password_mismatch": "Пароли должны совпадать",
            },
        }

    def translate(self, key: str, locale: str | None = None, **params: str) -> str:
        catalog = (
            self._translations.get(locale or self.default_locale)
            or self._translations.get(self.default_locale)
            or self._translations[FALLBACK_LOCALE]
        )
        text = catalog.get(key, key)
        return text.format(**params) if params else text
