from __future__ import annotations

import logging

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from aliya.bot.keyboards import main_menu_keyboard
from aliya.bot.router import CommandRouter
from aliya.core.i18n import t

logger = logging.getLogger("aliya-bot")


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.effective_chat or not update.message or update.message.text is None:
        return
    router: CommandRouter = context.bot_data["router"]
    reply = await router.route(str(update.effective_chat.id), update.message.text)
    await update.message.reply_text(reply, reply_markup=main_menu_keyboard())


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.exception("Unhandled error while processing update", exc_info=context.error)
    if not isinstance(update, Update) or not update.effective_message:
        return
    try:
        await update.effective_message.reply_text(t("common.error"), reply_markup=main_menu_keyboard())
    except TelegramError:
        logger.warning("Could not deliver error reply", exc_info=True)


def build_handlers(app: Application, *, router: CommandRouter) -> None:
    app.bot_data["router"] = router
    # Commands are plain text too; the router tells them apart.
    app.add_handler(MessageHandler(filters.TEXT, on_text))
    app.add_error_handler(on_error)
