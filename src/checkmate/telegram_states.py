"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class ContextStates(IntEnum):
    """States for the /context conversation."""

    TIME = auto()
    ENERGY = auto()
    LOCATION = auto()


class AddStates(IntEnum):
    """States for the /add conversation."""

    TITLE = auto()
    TIME = auto()
    LOAD = auto()
    LOCATION = auto()
    PRIORITY = auto()
