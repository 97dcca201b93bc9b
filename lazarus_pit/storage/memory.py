"""In-memory persistence for ephemeral pits and tests."""

import json
from collections.abc import Sequence

from ..exceptions import PersistenceReadError
from ..models import PitEntry
from .base import BasePersistence, decode_snapshot, encode_snapshot


class MemoryPersistence(BasePersistence):
    """Keeps the serialized snapshot document in memory.

    Entries go through the same JSON encoding as the file backend, so
    loaded entries never share state with the ones that were saved.
    """

    def __init__(self, document: str | None = None):
        """Initialize memory persistence.

        Args:
            document: Optional pre-existing serialized snapshot
        """
        self.document = document
        self.save_count = 0

    def load_all(self) -> list[PitEntry]:
        """Decode the held document."""
        if self.document is None or not self.document.strip():
            return []

        try:
            data = json.loads(self.document)
        except json.JSONDecodeError as e:
            raise PersistenceReadError(f"Stored document is not valid JSON: {e}") from e

        return decode_snapshot(data, source=self.location)

    def save_all(self, entries: Sequence[PitEntry]) -> None:
        """Replace the held document."""
        self.document = encode_snapshot(entries).model_dump_json()
        self.save_count += 1
