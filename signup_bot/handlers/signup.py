from __future__ import annotations

"""Sign-up screen handlers: image picking, field entry and submission."""
import logging

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import CallbackContext

from ..models.signup_form import FORM_FIELDS, SECRET_FIELDS
from ..services.document_store import DocumentStore
from ..services.image_encoder import ImageDecodeError, ImageEncoder
from ..services.image_safety import ImageSafetyService
from ..services.preferences import PreferenceStore
from ..services.submitter import SignupSubmitter
from ..services.validator import FormValidator
from .screen import AWAITING_KEY, FORM_KEY, HISTORY_KEY, get_form, get_state, screen_for

LOGGER = logging.getLogger(__name__)


async def handle_field_select(update: Update, context: CallbackContext) -> None:
    query = update.callback_query
    if not query or not query.data:
        return
    screen = screen_for(update, context)
    await screen.acknowledge()
    field_name = query.data.split(":", 1)[1]
    if field_name == "image":
        prompt = screen.text("prompt_image")
    elif field_name in FORM_FIELDS:
        context.user_data[AWAITING_KEY] = field_name
        prompt = screen.text("prompt_field", field=screen.text(f"field_{field_name}").lower())
    else:
        LOGGER.warning("Unknown field callback %s", query.data)
        return
    message = await context.bot.send_message(update.effective_chat.id, prompt)
    context.user_data.setdefault(HISTORY_KEY, []).append(message.message_id)


async def handle_field_input(update: Update, context: CallbackContext) -> None:
    message = update.message
    field_name = context.user_data.pop(AWAITING_KEY, None)
    if not message or message.text is None or field_name is None:
        return
    context.user_data[FORM_KEY] = get_form(context).with_field(field_name, message.text)
    if field_name in SECRET_FIELDS:
        try:
            await message.delete()
        except BadRequest as exc:
            LOGGER.warning("Could not delete %s message in chat %s: %s", field_name, message.chat_id, exc)
    else:
        context.user_data.setdefault(HISTORY_KEY, []).append(message.message_id)
    await screen_for(update, context).refresh_signup()


async def handle_photo(update: Update, context: CallbackContext) -> None:
    safety: ImageSafetyService = context.application.bot_data["safety"]
    encoder: ImageEncoder = context.application.bot_data["encoder"]
    if not update.message or not update.message.photo:
        return
    screen = screen_for(update, context)
    context.user_data.setdefault(HISTORY_KEY, []).append(update.message.message_id)
    photo = update.message.photo[-1]
    file = await photo.get_file()
    image_bytes = bytes(await file.download_as_bytearray())
    report = safety.validate(image_bytes)
    if not report.ok:
        await screen.show_toast(screen.text(f"image_{report.reason}"))
        return
    try:
        image = encoder.decode(image_bytes)
    except ImageDecodeError as exc:
        LOGGER.warning("Profile image rejected in chat %s: %s", update.effective_chat.id, exc)
        await screen.show_toast(screen.text("image_unreadable"))
        return
    report = safety.validate_dimensions(image)
    if not report.ok:
        LOGGER.info("Profile image %sx%s rejected: %s", image.width, image.height, report.reason)
        await screen.show_toast(screen.text(f"image_{report.reason}", size=str(safety.min_dimension)))
        return
    context.user_data[FORM_KEY] = get_form(context).model_copy(update={"encoded_image": encoder.encode(image)})
    await screen.refresh_signup()


async def handle_submit(update: Update, context: CallbackContext) -> None:
    validator: FormValidator = context.application.bot_data["validator"]
    documents: DocumentStore = context.application.bot_data["documents"]
    preferences: PreferenceStore = context.application.bot_data["preferences"]
    settings = context.application.bot_data["settings"]
    screen = screen_for(update, context)
    state = get_state(context)
    if state.loading:
        await screen.acknowledge()
        return
    form = get_form(context)
    result = validator.validate(form)
    if not result.ok:
        await screen.show_toast(screen.text(result.error.message_key))
        return
    state.listeners = [screen.on_loading]
    submitter = SignupSubmitter(
        documents,
        preferences.for_chat(update.effective_chat.id),
        screen,
        screen,
        collection=settings.users_collection,
        fallback_message=screen.text("signup_failed"),
    )
    await submitter.submit(form, state)
    await screen.acknowledge()
