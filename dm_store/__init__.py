"""Storage backends for dialog maps and topics."""

from .base import DIALOG_MAPS, SETTINGS, TOPICS, DialogMapStore, Record
from .json_file import JsonFileStore
from .memory import InMemoryStore

__all__ = [
    "DIALOG_MAPS",
    "SETTINGS",
    "TOPICS",
    "DialogMapStore",
    "InMemoryStore",
    "JsonFileStore",
    "Record",
]
