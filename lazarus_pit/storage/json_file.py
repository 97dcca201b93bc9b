"""Single-file JSON persistence with atomic replace."""

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from ..exceptions import PersistenceReadError, PersistenceWriteError
from ..models import PitEntry
from .base import BasePersistence, decode_snapshot, encode_snapshot

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "pit-data.json"


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` without ever exposing a partial file.

    The text goes to a temporary file in the target directory, is flushed
    to disk, and is then moved over the target with ``os.replace``.

    Raises:
        OSError: If any step fails; the temporary file is removed and the
            previous target contents are untouched
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class JsonFilePersistence(BasePersistence):
    """Keeps the whole collection in one JSON document."""

    def __init__(self, path: str | Path, indent: int | None = 2):
        """Initialize JSON file persistence.

        Args:
            path: Backing file. It is always used as the file itself, even
                when a directory of that name exists
            indent: JSON indentation, None for compact output
        """
        self.path = Path(path)
        self.indent = indent

    @classmethod
    def in_directory(
        cls, directory: str | Path, indent: int | None = 2
    ) -> "JsonFilePersistence":
        """Create persistence backed by ``pit-data.json`` inside ``directory``.

        The directory does not need to exist yet; it is created on first save.
        """
        return cls(Path(directory) / DEFAULT_FILENAME, indent=indent)

    @property
    def location(self) -> str:
        """Path of the backing file."""
        return str(self.path)

    def load_all(self) -> list[PitEntry]:
        """Load every entry from the backing file."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No backing file at {self.path}, starting with empty pit")
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read backing file {self.path}: {e}")
            raise PersistenceReadError(
                f"Failed to read backing file: {e}", path=str(self.path)
            ) from e

        if not raw.strip():
            logger.info(f"Backing file {self.path} is empty, starting with empty pit")
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Backing file {self.path} is not valid JSON: {e}")
            raise PersistenceReadError(
                f"Backing file is not valid JSON: {e}", path=str(self.path)
            ) from e

        entries = decode_snapshot(data, source=str(self.path))
        logger.debug(f"Loaded {len(entries)} entries from {self.path}")
        return entries

    def save_all(self, entries: Sequence[PitEntry]) -> None:
        """Atomically rewrite the backing file with ``entries``."""
        content = encode_snapshot(entries).model_dump_json(indent=self.indent)
        try:
            atomic_write_text(self.path, content)
        except OSError as e:
            logger.error(f"Failed to write backing file {self.path}: {e}")
            raise PersistenceWriteError(
                f"Failed to write backing file: {e}", path=str(self.path)
            ) from e

        logger.debug(f"Saved {len(entries)} entries to {self.path}")
