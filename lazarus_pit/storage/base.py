"""Abstract persistence interface and the snapshot document schema."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any, Literal

from pydantic import Field, ValidationError

from ..exceptions import PersistenceReadError
from ..models import PitEntry, PitModel, Timestamp, utc_now

FORMAT_VERSION = 1


class PitSnapshot(PitModel):
    """On-disk document holding the full entry collection."""

    format_version: Literal[1] = FORMAT_VERSION
    saved_at: Timestamp = Field(default_factory=utc_now)
    entries: list[PitEntry] = Field(default_factory=list)


def encode_snapshot(entries: Iterable[PitEntry]) -> PitSnapshot:
    """Wrap entries into a snapshot document."""
    return PitSnapshot(entries=list(entries))


def decode_snapshot(data: Any, source: str | None = None) -> list[PitEntry]:
    """Validate a decoded snapshot document and return its entries.

    Args:
        data: Parsed JSON document
        source: Where the document came from, for error messages

    Raises:
        PersistenceReadError: If the document does not match the schema
            or holds duplicate entry ids
    """
    try:
        snapshot = PitSnapshot.model_validate(data)
    except ValidationError as e:
        raise PersistenceReadError(
            f"Backing store does not match the snapshot schema: "
            f"{e.error_count()} validation error(s)",
            path=source,
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    seen: set[str] = set()
    for entry in snapshot.entries:
        if entry.id in seen:
            raise PersistenceReadError(
                f"Backing store holds duplicate entry id '{entry.id}'",
                path=source,
            )
        seen.add(entry.id)

    return snapshot.entries


class BasePersistence(ABC):
    """Durable full-snapshot storage for the entry collection."""

    @abstractmethod
    def load_all(self) -> list[PitEntry]:
        """Load every stored entry.

        A missing or empty backing store yields an empty list.

        Raises:
            PersistenceReadError: If the store exists but is unreadable
        """
        pass

    @abstractmethod
    def save_all(self, entries: Sequence[PitEntry]) -> None:
        """Replace the stored collection with ``entries``.

        Either the whole collection is written or the previous contents
        stay in place.

        Raises:
            PersistenceWriteError: If the collection could not be written
        """
        pass

    @property
    def location(self) -> str:
        """Human-readable description of where data is kept."""
        return self.__class__.__name__
