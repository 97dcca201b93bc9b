"""
Test configuration and fixtures for Lazarus Pit tests.

Provides pit instances backed by temporary files or memory, plus factories
for repository summaries and discovery records.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from lazarus_pit import (
    DiscoveryRecord,
    JsonFilePersistence,
    LazarusPit,
    MemoryPersistence,
    PitEntry,
    RepositorySummary,
)
from lazarus_pit.exceptions import PersistenceWriteError

FIXED_TIME = datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=UTC)


class FailingPersistence(MemoryPersistence):
    """Memory persistence whose writes can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def save_all(self, entries: Sequence[PitEntry]) -> None:
        if self.fail_writes:
            raise PersistenceWriteError("simulated disk full")
        super().save_all(entries)


def build_summary(full_name: str = "octo/sample", **overrides: Any) -> RepositorySummary:
    data: dict[str, Any] = {
        "full_name": full_name,
        "url": f"https://github.com/{full_name}",
        "description": "A sample repository",
        "language": "TypeScript",
        "star_count": 120,
        "fork_count": 8,
        "open_issue_count": 3,
        "pushed_at": FIXED_TIME,
        "created_at": FIXED_TIME,
    }
    data.update(overrides)
    return RepositorySummary(**data)


def build_record(
    full_name: str = "octo/abandoned",
    abandonment_score: float = 80,
    revival_potential: float = 70,
    last_commit_age_days: float = 730,
    **summary_overrides: Any,
) -> DiscoveryRecord:
    return DiscoveryRecord(
        repository=build_summary(full_name, **summary_overrides),
        abandonment_score=abandonment_score,
        revival_potential=revival_potential,
        last_commit_age_days=last_commit_age_days,
        reasons=["No commits in two years"],
        recommendations=["Update dependencies"],
    )


@pytest.fixture
def summary_factory() -> Callable[..., RepositorySummary]:
    """
    Why: Tests need many repository summaries differing in a field or two
    What: Returns a factory building RepositorySummary with sensible defaults
    How: Wraps build_summary so keyword overrides replace defaults
    """
    return build_summary


@pytest.fixture
def record_factory() -> Callable[..., DiscoveryRecord]:
    """Factory for discovery records with configurable scores."""
    return build_record


@pytest.fixture
def backing_file(tmp_path: Path) -> Path:
    """Path to a not-yet-existing backing file in a temporary directory."""
    return tmp_path / "pit" / "pit-data.json"


@pytest.fixture
def pit(backing_file: Path) -> LazarusPit:
    """
    Why: Most store tests need an isolated, file-backed pit
    What: Provides a LazarusPit writing to a temporary JSON file
    How: Builds JsonFilePersistence on tmp_path; nothing is shared between tests
    """
    return LazarusPit(JsonFilePersistence(backing_file))


@pytest.fixture
def failing_persistence() -> FailingPersistence:
    """Persistence whose writes fail once ``fail_writes`` is set."""
    return FailingPersistence()


@pytest.fixture
def memory_pit(failing_persistence: FailingPersistence) -> LazarusPit:
    """Pit backed by FailingPersistence, for rollback tests."""
    return LazarusPit(failing_persistence)
