"""Telegram message formatting utilities."""

import telegramify_markdown

from .core.tasks import Task

CHUNK_SIZE = 4000


def task_markdown(task: Task) -> str:
    """One task as a markdown bullet."""
    return (
        f"- **{task.title}** `{task.id[:8]}`\n"
        f"  {task.time_estimate.short_label} · {task.mental_load.label} load · "
        f"{task.location.label} · {task.priority.label} priority"
    )


async def send_markdown(bot_or_msg, text: str, *, chat_id: int | None = None):
    """Send markdown text to Telegram, converting to MarkdownV2.

    bot_or_msg: a Bot instance (pass chat_id) or an Update.message (calls reply_text).
    """
    converted = telegramify_markdown.markdownify(text)
    chunks = [converted[i : i + CHUNK_SIZE] for i in range(0, len(converted), CHUNK_SIZE)]
    for chunk in chunks:
        if chat_id is not None:
            await bot_or_msg.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2")
        else:
            await bot_or_msg.reply_text(chunk, parse_mode="MarkdownV2")
