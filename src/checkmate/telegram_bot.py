"""CheckMate Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from .config import Config, load_config
from . import telegram_handlers as h
from .telegram_states import AddStates, ContextStates

logger = logging.getLogger(__name__)

# One-shot commands: name -> handler
COMMANDS = {
    "start": h.start_handler,
    "help": h.help_handler,
    "tasks": h.tasks_handler,
    "suggest": h.suggest_handler,
    "progress": h.progress_handler,
    "done": h.done_handler,
    "delete": h.delete_handler,
}


class AuthFilter(filters.BaseFilter):
    """Let through only the configured Telegram user ids (everyone if none are set)."""

    def __init__(self, allowed_users: list[int]):
        super().__init__(name="AuthFilter")
        self.allowed_users = set(allowed_users)

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True
        user = update.effective_user
        return user is not None and user.id in self.allowed_users


def _context_conversation(auth_filter: AuthFilter) -> ConversationHandler:
    """/context: time -> energy -> location, then suggestions."""
    return ConversationHandler(
        entry_points=[CommandHandler("context", h.context_start_handler, filters=auth_filter)],
        states={
            ContextStates.TIME: [CallbackQueryHandler(h.context_time_handler, pattern=r"^time:")],
            ContextStates.ENERGY: [CallbackQueryHandler(h.context_energy_handler, pattern=r"^energy:")],
            ContextStates.LOCATION: [CallbackQueryHandler(h.context_location_handler, pattern=r"^place:")],
        },
        fallbacks=[CommandHandler("cancel", h.cancel_handler)],
        per_user=True,
    )


def _add_conversation(auth_filter: AuthFilter) -> ConversationHandler:
    """/add: title -> time -> load -> location -> priority, then save."""
    return ConversationHandler(
        entry_points=[CommandHandler("add", h.add_start_handler, filters=auth_filter)],
        states={
            AddStates.TITLE: [MessageHandler(filters.TEXT & ~filters.COMMAND, h.add_title_handler)],
            AddStates.TIME: [CallbackQueryHandler(h.add_time_handler, pattern=r"^time:")],
            AddStates.LOAD: [CallbackQueryHandler(h.add_load_handler, pattern=r"^load:")],
            AddStates.LOCATION: [CallbackQueryHandler(h.add_location_handler, pattern=r"^where:")],
            AddStates.PRIORITY: [CallbackQueryHandler(h.add_priority_handler, pattern=r"^priority:")],
        },
        fallbacks=[CommandHandler("cancel", h.cancel_handler)],
        per_user=True,
    )


async def unauthorized_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    user = update.effective_user
    logger.warning(f"Rejected message from user {user.id} ({user.username})")
    if update.message:
        await update.message.reply_text(
            "This CheckMate bot is private.\n"
            "Owner? Add your Telegram user id to TELEGRAM_ALLOWED_USERS in checkmate.conf"
        )


def create_application(config: Config | None = None) -> Application:
    """Build the bot application with every handler registered."""
    config = config or load_config()
    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather and add it to checkmate.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    auth_filter = AuthFilter(config.telegram_allowed_users)

    for name, handler in COMMANDS.items():
        app.add_handler(CommandHandler(name, handler, filters=auth_filter))
    app.add_handler(_context_conversation(auth_filter))
    app.add_handler(_add_conversation(auth_filter))

    if config.telegram_allowed_users:
        app.add_handler(MessageHandler(~auth_filter & filters.ALL, unauthorized_handler))

    return app


def run_bot():
    """Run the Telegram bot until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)

    if config.telegram_allowed_users:
        logger.info(f"Bot restricted to users: {sorted(config.telegram_allowed_users)}")
    else:
        logger.warning("TELEGRAM_ALLOWED_USERS is empty - anyone can use this bot")

    logger.info("Starting CheckMate Telegram bot")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
