from __future__ import annotations

import asyncio
import logging

from telegram.ext import (
    AIORateLimiter,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from .config import load_settings
from .handlers.menu import handle_navigation
from .handlers.signup import handle_field_input, handle_field_select, handle_photo, handle_submit
from .handlers.start import handle_start
from .i18n import Translator
from .services.document_store import DocumentStore
from .services.image_encoder import ImageEncoder
from .services.image_safety import ImageSafetyService
from .services.preferences import PreferenceStore
from .services.validator import FormValidator

logging.basicConfig(level=logging.INFO)
LOGGER = logging.getLogger(__name__)


def build_application():
    settings = load_settings()
    documents = DocumentStore(settings.database_path)
    preferences = PreferenceStore(settings.database_path)
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(documents.init_schema())
    loop.run_until_complete(preferences.init_schema())
    translator = Translator(default_locale=settings.locale)
    encoder = ImageEncoder(width=settings.preview_width, quality=settings.jpeg_quality)
    safety = ImageSafetyService(max_size=settings.max_photo_bytes)
    validator = FormValidator()

    application = (
        ApplicationBuilder()
        .token(settings.bot_token)
        .rate_limiter(AIORateLimiter())
        .build()
    )

    application.bot_data.update(
        {
            "settings": settings,
            "documents": documents,
            "preferences": preferences,
            "translator": translator,
            "encoder": encoder,
            "safety": safety,
            "validator": validator,
        }
    )

    application.add_handler(CommandHandler("start", handle_start))
    application.add_handler(CallbackQueryHandler(handle_navigation, pattern=r"^nav:"))
    application.add_handler(CallbackQueryHandler(handle_field_select, pattern=r"^field:"))
    application.add_handler(CallbackQueryHandler(handle_submit, pattern=r"^signup:submit$"))
    application.add_handler(MessageHandler(filters.PHOTO, handle_photo))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_field_input))

    return application


def main() -> None:
    application = build_application()
    LOGGER.info("Starting sign-up bot")
    application.run_polling(close_loop=False)


if __name__ == "__main__":
    main()
