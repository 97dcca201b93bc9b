"""Persistence backends for the Lazarus Pit."""

from .base import (
    FORMAT_VERSION,
    BasePersistence,
    PitSnapshot,
    decode_snapshot,
    encode_snapshot,
)
from .json_file import DEFAULT_FILENAME, JsonFilePersistence, atomic_write_text
from .memory import MemoryPersistence

__all__ = [
    "BasePersistence",
    "DEFAULT_FILENAME",
    "FORMAT_VERSION",
    "JsonFilePersistence",
    "MemoryPersistence",
    "PitSnapshot",
    "atomic_write_text",
    "decode_snapshot",
    "encode_snapshot",
]
