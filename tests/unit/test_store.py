"""
Unit tests for LazarusPit, the entry store.

Why: The store is the single source of truth; every mutation must be
     validated, persisted and audited, or leave no trace at all
What: Tests immerse, batch_immerse, extract, update_workflow, add_log and
      the read operations, including rollback when persistence fails
How: Runs the async API against temporary JSON files and a memory
     backend that can be told to fail
"""

import asyncio
import json
from pathlib import Path

import pytest

from lazarus_pit import (
    AuditLevel,
    EntryCategory,
    EntrySource,
    EntryStatus,
    JsonFilePersistence,
    LazarusPit,
    RepositorySummary,
    WorkflowUpdate,
)
from lazarus_pit.exceptions import (
    EntryValidationError,
    InvalidTransitionError,
    PersistenceReadError,
    PersistenceWriteError,
)
from lazarus_pit.store import IMMERSED_MESSAGE


class TestInitialize:
    """Test loading the backing store."""

    async def test_lazy_initialization(self, pit: LazarusPit) -> None:
        assert pit.is_loaded is False

        assert await pit.all() == []

        assert pit.is_loaded is True

    async def test_corrupt_backing_file_fails_fast(self, backing_file: Path) -> None:
        """
        Why: Starting empty on top of a corrupt file would silently lose data
        What: Tests initialize raises PersistenceReadError on a corrupt file
        How: Writes garbage to the backing file and initializes a pit on it
        """
        backing_file.parent.mkdir(parents=True)
        backing_file.write_text("{not json", encoding="utf-8")
        pit = LazarusPit(JsonFilePersistence(backing_file))

        with pytest.raises(PersistenceReadError):
            await pit.initialize()

        assert pit.is_loaded is False

    async def test_fresh_directory_holds_backing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        pit = LazarusPit(JsonFilePersistence.in_directory(".phoenix/lazarus-pit"))

        await pit.immerse("octo/sample")

        directory = tmp_path / ".phoenix" / "lazarus-pit"
        assert directory.is_dir()
        assert (directory / "pit-data.json").is_file()

    async def test_initialize_is_idempotent(self, pit: LazarusPit) -> None:
        await pit.immerse("octo/sample")
        await pit.initialize()
        await pit.initialize()
        assert len(pit) == 1


class TestImmerse:
    """Test creating entries."""

    async def test_immerse_by_name(self, pit: LazarusPit) -> None:
        """
        Why: Manual immersion from a repository name is the common CLI path
        What: Tests defaults of an entry immersed by name only
        How: Immerses a bare name and inspects the stored entry
        """
        entry_id = await pit.immerse("octo/sample")
        entry = await pit.get(entry_id)

        assert entry is not None
        assert entry.id == entry_id
        assert entry.full_name == "octo/sample"
        assert entry.repository.url == "https://github.com/octo/sample"
        assert entry.source_analysis is None
        assert entry.workflow.status == EntryStatus.PENDING
        assert entry.workflow.progress == 0
        assert entry.workflow.priority == 1
        assert entry.metadata.source == EntrySource.MANUAL
        assert entry.metadata.category == EntryCategory.OTHER
        assert entry.workflow.log[0].message == IMMERSED_MESSAGE
        assert entry.workflow.log[0].details == {"source": "manual"}

    async def test_immerse_with_options(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse(
            "octo/sample",
            priority=80,
            source="programmatic",
            tags=["cli", "popular"],
            notes="from API",
            category="cli-tool",
            assignee="maintainer",
        )
        entry = await pit.get(entry_id)

        assert entry is not None
        assert entry.workflow.priority == 80
        assert entry.metadata.source == EntrySource.PROGRAMMATIC
        assert entry.metadata.tags == ["cli", "popular"]
        assert entry.metadata.notes == "from API"
        assert entry.metadata.category == EntryCategory.CLI_TOOL
        assert entry.metadata.assignee == "maintainer"

    async def test_explicit_zero_priority_kept(self, pit: LazarusPit, record_factory) -> None:
        entry_id = await pit.immerse(record_factory(), priority=0)
        entry = await pit.get(entry_id)
        assert entry is not None and entry.workflow.priority == 0

    async def test_immerse_discovery_record(self, pit: LazarusPit, record_factory) -> None:
        record = record_factory("octo/abandoned")

        entry_id = await pit.immerse(record)
        entry = await pit.get(entry_id)

        assert entry is not None
        assert entry.metadata.source == EntrySource.DISCOVERED
        assert entry.workflow.priority == 46
        assert entry.source_analysis is not None
        assert entry.source_analysis.abandonment_score == 80
        assert entry.repository == record.repository

    async def test_immerse_summary(self, pit: LazarusPit, summary_factory) -> None:
        entry_id = await pit.immerse(summary_factory("octo/known", star_count=5000))
        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.repository.star_count == 5000
        assert entry.workflow.priority == 1

    async def test_custom_default_priority(self, backing_file: Path) -> None:
        pit = LazarusPit(JsonFilePersistence(backing_file), default_priority=5)
        entry = await pit.get(await pit.immerse("octo/sample"))
        assert entry is not None and entry.workflow.priority == 5

    async def test_uses_injected_fetcher(self, backing_file: Path, summary_factory) -> None:
        requested: list[str] = []

        async def fetcher(full_name: str) -> RepositorySummary:
            requested.append(full_name)
            return summary_factory(full_name, language="Python", star_count=42)

        pit = LazarusPit(JsonFilePersistence(backing_file), fetcher=fetcher)
        entry = await pit.get(await pit.immerse("  octo/fetched  "))

        assert requested == ["octo/fetched"]
        assert entry is not None
        assert entry.repository.language == "Python"

    async def test_identical_input_gets_distinct_ids(self, pit: LazarusPit) -> None:
        first = await pit.immerse("octo/sample")
        second = await pit.immerse("octo/sample")

        assert first != second
        assert len(pit) == 2

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"priority": 1.5},
            {"priority": "10"},
            {"source": "kraven"},
            {"category": "app"},
            {"tags": [1, 2]},
        ],
    )
    async def test_invalid_options_rejected(
        self, pit: LazarusPit, backing_file: Path, kwargs
    ) -> None:
        """
        Why: Validation failures must happen before any mutation
        What: Tests malformed options raise and leave the pit untouched
        How: Immerses with each bad option and checks memory and disk
        """
        with pytest.raises(EntryValidationError):
            await pit.immerse("octo/sample", **kwargs)

        assert len(pit) == 0
        assert not backing_file.exists()

    @pytest.mark.parametrize("name", ["", "   "])
    async def test_empty_name_rejected(self, pit: LazarusPit, name: str) -> None:
        with pytest.raises(EntryValidationError):
            await pit.immerse(name)

    async def test_unsupported_input_type_rejected(self, pit: LazarusPit) -> None:
        with pytest.raises(EntryValidationError):
            await pit.immerse(42)  # type: ignore[arg-type]

    async def test_write_failure_rolls_back(
        self, memory_pit: LazarusPit, failing_persistence
    ) -> None:
        await memory_pit.immerse("octo/kept")
        failing_persistence.fail_writes = True

        with pytest.raises(PersistenceWriteError):
            await memory_pit.immerse("octo/lost")

        entries = await memory_pit.all()
        assert [entry.full_name for entry in entries] == ["octo/kept"]


class TestBatchImmerse:
    """Test batch immersion of discovery records."""

    async def test_batch_categorizes_and_tags(self, pit: LazarusPit, record_factory) -> None:
        records = [
            record_factory("octo/fast-cli"),
            record_factory("octo/widget", description="A charting library"),
            record_factory("octo/plain", description="Nothing special"),
        ]

        ids = await pit.batch_immerse(records, tags=["kraven"])
        entries = [await pit.get(entry_id) for entry_id in ids]

        assert [entry.metadata.category for entry in entries] == [
            EntryCategory.CLI_TOOL,
            EntryCategory.LIBRARY,
            EntryCategory.OTHER,
        ]
        assert all(entry.metadata.tags == ["kraven"] for entry in entries)
        assert all(entry.metadata.source == EntrySource.DISCOVERED for entry in entries)

    async def test_batch_accepts_mappings(self, pit: LazarusPit, record_factory) -> None:
        ids = await pit.batch_immerse([record_factory().to_dict()])
        assert len(ids) == 1

    async def test_batch_is_all_or_nothing(self, pit: LazarusPit, record_factory) -> None:
        """
        Why: A partially imported batch is hard to retry cleanly
        What: Tests one malformed record rejects the whole batch
        How: Mixes a valid record with an invalid mapping
        """
        with pytest.raises(EntryValidationError):
            await pit.batch_immerse([record_factory(), {"repository": {}}])

        assert len(pit) == 0

    async def test_batch_writes_once(self, memory_pit: LazarusPit, failing_persistence, record_factory) -> None:
        await memory_pit.batch_immerse([record_factory("octo/a"), record_factory("octo/b")])
        assert failing_persistence.save_count == 1

    async def test_empty_batch(self, pit: LazarusPit) -> None:
        assert await pit.batch_immerse([]) == []


class TestExtract:
    """Test removing entries."""

    async def test_extract_twice(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")

        assert await pit.extract(entry_id) is True
        assert await pit.extract(entry_id) is False
        assert await pit.get(entry_id) is None

    async def test_extract_unknown(self, pit: LazarusPit) -> None:
        assert await pit.extract("pit_missing") is False

    async def test_extract_write_failure_keeps_entry(
        self, memory_pit: LazarusPit, failing_persistence
    ) -> None:
        entry_id = await memory_pit.immerse("octo/sample")
        failing_persistence.fail_writes = True

        with pytest.raises(PersistenceWriteError):
            await memory_pit.extract(entry_id)

        assert await memory_pit.get(entry_id) is not None


class TestUpdateWorkflow:
    """Test workflow updates."""

    async def test_status_change_is_audited(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")

        assert await pit.update_workflow(entry_id, {"status": "analyzing", "progress": 5})

        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.workflow.status == EntryStatus.ANALYZING
        assert entry.workflow.progress == 5
        event = entry.workflow.log[-1]
        assert event.message == "Status changed from pending to analyzing"
        assert event.level == AuditLevel.INFO
        assert event.details == {"status": "analyzing", "progress": 5}

    async def test_non_status_update_not_audited(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")
        before = await pit.get(entry_id)

        await pit.update_workflow(entry_id, WorkflowUpdate(priority=70, issues=["old deps"]))

        entry = await pit.get(entry_id)
        assert entry is not None and before is not None
        assert len(entry.workflow.log) == 1
        assert entry.workflow.priority == 70
        assert entry.workflow.issues == ["old deps"]
        assert entry.workflow.updated_at >= before.workflow.updated_at

    async def test_completion_logged_as_success(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")
        for status in ("analyzing", "modernizing", "community-building", "completed"):
            await pit.update_workflow(entry_id, {"status": status})

        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.workflow.log[-1].level == AuditLevel.SUCCESS
        assert entry.workflow.completed_at is not None

    async def test_unknown_id_returns_false(self, pit: LazarusPit) -> None:
        assert await pit.update_workflow("pit_missing", {"progress": 10}) is False

    async def test_invalid_transition_leaves_entry_untouched(self, pit: LazarusPit) -> None:
        """
        Why: Leaving a terminal status is rejected, not silently ignored
        What: Tests InvalidTransitionError and that the entry is unchanged
        How: Fails an entry, tries to reset it to pending, compares snapshots
        """
        entry_id = await pit.immerse("octo/sample")
        await pit.update_workflow(entry_id, {"status": "failed"})
        before = await pit.get(entry_id)

        with pytest.raises(InvalidTransitionError):
            await pit.update_workflow(entry_id, {"status": "pending", "progress": 0})

        assert await pit.get(entry_id) == before

    async def test_pause_cannot_reset_progress(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")
        await pit.update_workflow(entry_id, {"status": "analyzing", "progress": 60})

        with pytest.raises(EntryValidationError):
            await pit.update_workflow(entry_id, {"status": "paused", "progress": 0})

        await pit.update_workflow(entry_id, {"status": "paused"})
        await pit.update_workflow(entry_id, {"status": "analyzing"})

        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.workflow.status == EntryStatus.ANALYZING
        assert entry.workflow.progress == 60

    async def test_malformed_update_rejected(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")

        with pytest.raises(EntryValidationError):
            await pit.update_workflow(entry_id, {"status": "archived"})
        with pytest.raises(EntryValidationError):
            await pit.update_workflow(entry_id, {"added_at": "2020-01-01T00:00:00Z"})

    async def test_write_failure_rolls_back(
        self, memory_pit: LazarusPit, failing_persistence
    ) -> None:
        entry_id = await memory_pit.immerse("octo/sample")
        failing_persistence.fail_writes = True

        with pytest.raises(PersistenceWriteError):
            await memory_pit.update_workflow(entry_id, {"status": "analyzing"})

        entry = await memory_pit.get(entry_id)
        assert entry is not None
        assert entry.workflow.status == EntryStatus.PENDING
        assert len(entry.workflow.log) == 1


class TestAddLog:
    """Test free-form audit events."""

    async def test_add_log(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")

        assert await pit.add_log(entry_id, "warn", "Registry slow", {"ms": 900})

        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.workflow.log[-1].level == AuditLevel.WARN
        assert entry.workflow.log[-1].details == {"ms": 900}

    async def test_add_log_unknown_id(self, pit: LazarusPit) -> None:
        assert await pit.add_log("pit_missing", "info", "hello") is False

    async def test_add_log_invalid_level(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")
        with pytest.raises(EntryValidationError):
            await pit.add_log(entry_id, "verbose", "hello")

    async def test_add_log_unserializable_details(
        self, pit: LazarusPit, backing_file: Path
    ) -> None:
        """
        Why: Details are persisted as JSON; an opaque object must not reach the writer
        What: Tests non-JSON details raise EntryValidationError and store nothing
        How: Logs an object() value and compares entry and file before and after
        """
        entry_id = await pit.immerse("octo/sample")
        before = await pit.get(entry_id)
        saved = backing_file.read_text(encoding="utf-8")

        with pytest.raises(EntryValidationError):
            await pit.add_log(entry_id, "info", "msg", {"obj": object()})

        assert await pit.get(entry_id) == before
        assert backing_file.read_text(encoding="utf-8") == saved


class TestReads:
    """Test read operations and snapshot isolation."""

    async def test_returned_entries_are_copies(self, pit: LazarusPit) -> None:
        """
        Why: No caller may hold a mutable reference into the store
        What: Tests that mutating a returned entry does not affect the store
        How: Mutates entries returned by get, all and query, then re-reads
        """
        entry_id = await pit.immerse("octo/sample", tags=["cli"])

        fetched = await pit.get(entry_id)
        assert fetched is not None
        fetched.metadata.tags.append("hacked")
        (await pit.all())[0].workflow.issues.append("hacked")
        (await pit.query())[0].metadata.notes = "hacked"

        entry = await pit.get(entry_id)
        assert entry is not None
        assert entry.metadata.tags == ["cli"]
        assert entry.workflow.issues == []
        assert entry.metadata.notes == ""

    async def test_all_in_insertion_order(self, pit: LazarusPit) -> None:
        names = ["octo/c", "octo/a", "octo/b"]
        for name in names:
            await pit.immerse(name)

        assert [entry.full_name for entry in await pit.all()] == names

    async def test_query_mapping_and_next_pending(self, pit: LazarusPit) -> None:
        low = await pit.immerse("octo/low", priority=10)
        high = await pit.immerse("octo/high", priority=90)
        mid = await pit.immerse("octo/mid", priority=50)

        result = await pit.query({"statuses": ["pending"], "sort_order": "asc"})
        assert [entry.id for entry in result] == [low, mid, high]

        nxt = await pit.next_pending()
        assert nxt is not None and nxt.id == high
        await pit.extract(high)
        nxt = await pit.next_pending()
        assert nxt is not None and nxt.id == mid

    async def test_next_pending_empty(self, pit: LazarusPit) -> None:
        assert await pit.next_pending() is None

    async def test_stats(self, pit: LazarusPit) -> None:
        await pit.immerse("octo/a", priority=10)
        entry_id = await pit.immerse("octo/b", priority=30)
        await pit.update_workflow(entry_id, {"status": "failed"})

        stats = await pit.stats()

        assert stats.total == 2
        assert stats.avg_priority == 20
        assert stats.by_status[EntryStatus.FAILED] == 1
        assert stats.success_rate == 0

    async def test_contains(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/a")
        assert entry_id in pit
        assert "pit_missing" not in pit


class TestConcurrency:
    """Test serialization of concurrent mutations."""

    async def test_concurrent_immerse_loses_nothing(
        self, pit: LazarusPit, backing_file: Path
    ) -> None:
        """
        Why: Interleaved full-snapshot rewrites could drop entries
        What: Tests 25 concurrent immersions all survive in memory and on disk
        How: Runs immerse calls with asyncio.gather and reloads the file
        """
        ids = await asyncio.gather(*(pit.immerse(f"octo/repo-{i}") for i in range(25)))

        assert len(set(ids)) == 25
        assert len(pit) == 25

        document = json.loads(backing_file.read_text(encoding="utf-8"))
        assert {entry["id"] for entry in document["entries"]} == set(ids)

    async def test_concurrent_updates_are_all_applied(self, pit: LazarusPit) -> None:
        entry_id = await pit.immerse("octo/sample")

        await asyncio.gather(
            *(pit.add_log(entry_id, "info", f"step {i}") for i in range(10))
        )

        entry = await pit.get(entry_id)
        assert entry is not None
        assert len(entry.workflow.log) == 11
