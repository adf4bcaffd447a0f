"""Telegram command handlers."""

import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes, ConversationHandler

from .config import load_config
from .core.context import UserContext
from .core.progress import format_report
from .core.recommend import headline
from .core.tasks import (
    Location,
    MentalLoad,
    Priority,
    SortOrder,
    TaskNotFoundError,
    TaskStatus,
    TaskValidationError,
    TimeEstimate,
    filter_by_status,
    sort_tasks,
)
from .ports.task_store import StoreError
from .telegram_format import send_markdown, task_markdown
from .telegram_states import AddStates, ContextStates
from .workflows import create_task, load_tasks, progress, remove_task, suggest, toggle_completion

logger = logging.getLogger(__name__)


def _keyboard(prefix: str, options: list[tuple[str, str]]) -> InlineKeyboardMarkup:
    """One row of buttons; callback data is "<prefix>:<value>"."""
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(text, callback_data=f"{prefix}:{value}") for value, text in options]]
    )


TIME_OPTIONS = [(t.label, t.short_label) for t in TimeEstimate]
LOAD_OPTIONS = [(m.label, m.label.title()) for m in MentalLoad]
PRIORITY_OPTIONS = [(p.label, p.label.title()) for p in Priority]
TASK_LOCATION_OPTIONS = [(loc.label, loc.label.title()) for loc in Location]
PLACE_OPTIONS = [(loc.label, loc.label.title()) for loc in Location if loc != Location.ANYWHERE]


def _current_context(context: ContextTypes.DEFAULT_TYPE, config) -> UserContext:
    """The chat's declared context, or the configured default."""
    return context.user_data.get("context") or config.default_context()


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hey! I'm CheckMate. Tell me your situation and I'll suggest what to do.\n\n"
        "Commands:\n"
        "/context - Set your time, energy and location\n"
        "/suggest - What fits right now\n"
        "/tasks - List active tasks\n"
        "/add - Add a task\n"
        "/done <id> - Toggle a task done\n"
        "/progress - Your stats\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(
        "*CheckMate Commands*\n\n"
        "/context - Set your current time, energy and location\n"
        "/suggest - Tasks that fit your current context\n"
        "/tasks - List active tasks by priority\n"
        "/add [title] - Add a task step by step\n"
        "/done <id> - Mark a task done (or reopen it)\n"
        "/delete <id> - Delete a task\n"
        "/progress - Completion rate and patterns\n"
        "/cancel - Cancel current operation\n",
        parse_mode="Markdown",
    )


async def tasks_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /tasks command - list active tasks."""
    config = load_config()
    try:
        tasks = load_tasks(config)
    except StoreError as e:
        logger.error(f"Failed to load tasks: {e}")
        await update.message.reply_text("Task store unavailable. Check logs.")
        return

    active = sort_tasks(filter_by_status(tasks, TaskStatus.ACTIVE), SortOrder.PRIORITY)
    if not active:
        await update.message.reply_text("No active tasks. Use /add to create one.")
        return

    lines = [task_markdown(t) for t in active]
    await send_markdown(update.message, "**Active Tasks**\n\n" + "\n".join(lines))


async def _reply_suggestions(message, context: ContextTypes.DEFAULT_TYPE):
    config = load_config()
    ctx = _current_context(context, config)
    try:
        picks = suggest(config, ctx)
    except StoreError as e:
        logger.error(f"Failed to load tasks for suggestions: {e}")
        await message.reply_text("Task store unavailable. Check logs.")
        return

    if not picks:
        await message.reply_text(f"Context: {ctx.describe()}\n\nNothing fits right now.")
        return

    top = headline(picks, config.headline_count)
    text = f"_Context: {ctx.describe()}_\n\n**Perfect for right now**\n"
    text += "\n".join(task_markdown(t) for t in top)
    rest = picks[len(top):]
    if rest:
        text += "\n\n**Also fits**\n" + "\n".join(task_markdown(t) for t in rest)
    await send_markdown(message, text)


async def suggest_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /suggest command."""
    await _reply_suggestions(update.message, context)


async def progress_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /progress command."""
    config = load_config()
    try:
        report = progress(config)
    except StoreError as e:
        logger.error(f"Failed to load tasks for progress: {e}")
        await update.message.reply_text("Task store unavailable. Check logs.")
        return

    await send_markdown(update.message, f"**Your Progress**\n\n```\n{format_report(report)}\n```")


async def done_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /done <id> - toggle completion."""
    if not context.args:
        await update.message.reply_text("Usage: /done <task id>")
        return

    try:
        task = toggle_completion(load_config(), context.args[0])
    except TaskNotFoundError as e:
        await update.message.reply_text(str(e))
        return
    except StoreError as e:
        logger.error(f"Failed to toggle task: {e}")
        await update.message.reply_text("Could not save. Check logs.")
        return

    verb = "Done" if task.completed else "Reopened"
    await update.message.reply_text(f"{verb}: {task.title}")


async def delete_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /delete <id>."""
    if not context.args:
        await update.message.reply_text("Usage: /delete <task id>")
        return

    try:
        task = remove_task(load_config(), context.args[0])
    except TaskNotFoundError as e:
        await update.message.reply_text(str(e))
        return
    except StoreError as e:
        logger.error(f"Failed to delete task: {e}")
        await update.message.reply_text("Could not save. Check logs.")
        return

    await update.message.reply_text(f"Deleted: {task.title}")


# ============== Context Conversation ==============


async def context_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the /context conversation."""
    context.user_data["context_draft"] = {}
    await update.message.reply_text(
        "How much time do you have?",
        reply_markup=_keyboard("time", TIME_OPTIONS),
    )
    return ContextStates.TIME


async def context_time_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle available time selection."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("time:"):
        return ContextStates.TIME

    context.user_data["context_draft"]["time"] = query.data[5:]
    await query.edit_message_text(
        "How's your energy?",
        reply_markup=_keyboard("energy", LOAD_OPTIONS),
    )
    return ContextStates.ENERGY


async def context_energy_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle energy level selection."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("energy:"):
        return ContextStates.ENERGY

    context.user_data["context_draft"]["energy"] = query.data[7:]
    await query.edit_message_text(
        "Where are you?",
        reply_markup=_keyboard("place", PLACE_OPTIONS),
    )
    return ContextStates.LOCATION


async def context_location_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle location selection, store the context and show suggestions."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("place:"):
        return ContextStates.LOCATION

    draft = context.user_data.pop("context_draft", {})
    try:
        ctx = UserContext.parse(draft.get("time", ""), draft.get("energy", ""), query.data[6:])
    except ValueError as e:
        logger.warning(f"Invalid context selection {draft}: {e}")
        await query.edit_message_text("Something went wrong. Try /context again.")
        return ConversationHandler.END

    context.user_data["context"] = ctx
    await query.edit_message_text(f"Context set: {ctx.describe()}")
    await _reply_suggestions(query.message, context)
    return ConversationHandler.END


# ============== Add Conversation ==============


async def add_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the /add conversation. `/add Buy milk` skips the title prompt."""
    context.user_data["task_draft"] = {}
    if context.args:
        context.user_data["task_draft"]["title"] = " ".join(context.args)
        return await _prompt_for_time(update.message)

    await update.message.reply_text("What needs to be done?")
    return AddStates.TITLE


async def _prompt_for_time(message):
    await message.reply_text(
        "How long will it take?",
        reply_markup=_keyboard("time", TIME_OPTIONS),
    )
    return AddStates.TIME


async def add_title_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the task title."""
    title = update.message.text.strip()
    if not title:
        await update.message.reply_text("The title can't be empty. What needs to be done?")
        return AddStates.TITLE

    context.user_data["task_draft"]["title"] = title
    return await _prompt_for_time(update.message)


async def add_time_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle time estimate selection."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("time:"):
        return AddStates.TIME

    context.user_data["task_draft"]["time"] = query.data[5:]
    await query.edit_message_text(
        "How much focus does it need?",
        reply_markup=_keyboard("load", LOAD_OPTIONS),
    )
    return AddStates.LOAD


async def add_load_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle mental load selection."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("load:"):
        return AddStates.LOAD

    context.user_data["task_draft"]["load"] = query.data[5:]
    await query.edit_message_text(
        "Where can you do it?",
        reply_markup=_keyboard("where", TASK_LOCATION_OPTIONS),
    )
    return AddStates.LOCATION


async def add_location_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle location selection."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("where:"):
        return AddStates.LOCATION

    context.user_data["task_draft"]["location"] = query.data[6:]
    await query.edit_message_text(
        "Priority?",
        reply_markup=_keyboard("priority", PRIORITY_OPTIONS),
    )
    return AddStates.PRIORITY


async def add_priority_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle priority selection and save the task."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("priority:"):
        return AddStates.PRIORITY

    draft = context.user_data.pop("task_draft", {})
    try:
        task = create_task(
            load_config(),
            draft.get("title", ""),
            time_estimate=TimeEstimate.parse(draft.get("time", "")),
            mental_load=MentalLoad.parse(draft.get("load", "")),
            location=Location.parse(draft.get("location", "")),
            priority=Priority.parse(query.data[9:]),
        )
    except TaskValidationError as e:
        await query.edit_message_text(f"Could not add task: {e}")
        return ConversationHandler.END
    except StoreError as e:
        logger.error(f"Failed to save new task: {e}")
        await query.edit_message_text("Could not save. Check logs.")
        return ConversationHandler.END

    await query.edit_message_text(
        f"Added: {task.title}\n"
        f"{task.time_estimate.short_label} · {task.mental_load.label} load · "
        f"{task.location.label} · {task.priority.label} priority\n"
        f"id: {task.id[:8]}"
    )
    return ConversationHandler.END


async def cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel the current conversation."""
    context.user_data.pop("context_draft", None)
    context.user_data.pop("task_draft", None)
    await update.message.reply_text("Cancelled.")
    return ConversationHandler.END
