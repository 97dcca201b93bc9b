"""The Lazarus Pit: authoritative store of repository revival candidates.

The store keeps the live collection in memory and writes the full
collection through its persistence backend before acknowledging any
mutation. Mutations are serialized with an ``asyncio.Lock`` and applied
copy-on-write: the changed collection is built aside, saved, and only
then published. Readers therefore always see the last committed
collection, and a failed save leaves memory exactly as it was.

Example usage:
    from lazarus_pit import JsonFilePersistence, LazarusPit

    pit = LazarusPit(JsonFilePersistence.in_directory(".phoenix/lazarus-pit"))
    entry_id = await pit.immerse("octo/sample", priority=80, tags=["cli"])
    await pit.update_workflow(entry_id, {"status": "analyzing"})
    next_entry = await pit.next_pending()
"""

import asyncio
import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .config.models import PitConfig
from .discovery import RepositoryFetcher, categorize_repository, offline_repository_summary
from .exceptions import EntryValidationError, PersistenceError
from .models import (
    AuditLevel,
    DiscoveryRecord,
    EntryCategory,
    EntryMetadata,
    EntrySource,
    EntryStatus,
    PitEntry,
    RepositorySummary,
    SourceAnalysis,
    WorkflowState,
    WorkflowUpdate,
    append_event,
    apply_update,
    utc_now,
)
from .query import (
    DEFAULT_PRIORITY,
    PitQuery,
    PitStats,
    calculate_priority,
    compute_stats,
    evaluate,
    next_pending,
)
from .storage import BasePersistence, JsonFilePersistence

logger = logging.getLogger(__name__)

RepositoryInput = str | RepositorySummary | DiscoveryRecord

IMMERSED_MESSAGE = "Project immersed in Lazarus Pit"

STATUS_EVENT_LEVELS = {
    EntryStatus.COMPLETED: AuditLevel.SUCCESS,
    EntryStatus.FAILED: AuditLevel.ERROR,
    EntryStatus.PAUSED: AuditLevel.WARN,
}


class LazarusPit:
    """In-memory entry collection with write-through persistence."""

    def __init__(
        self,
        persistence: BasePersistence,
        fetcher: RepositoryFetcher | None = None,
        default_priority: int = DEFAULT_PRIORITY,
    ):
        """Initialize the pit.

        Args:
            persistence: Backend holding the durable snapshot
            fetcher: Resolves bare repository names to metadata
            default_priority: Priority for entries with neither an explicit
                priority nor discovery scores
        """
        self.persistence = persistence
        self.fetcher = fetcher or offline_repository_summary
        self.default_priority = default_priority
        self._entries: dict[str, PitEntry] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<LazarusPit(location={self.persistence.location}, entries={len(self._entries)})>"

    def __len__(self) -> int:
        """Number of committed entries."""
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        """Check if an entry id is present."""
        return entry_id in self._entries

    @property
    def is_loaded(self) -> bool:
        """Check if the backing store has been loaded."""
        return self._loaded

    async def initialize(self) -> None:
        """Load the backing store into memory.

        Raises:
            PersistenceReadError: If the backing store is present but
                unreadable; the pit does not fall back to an empty state
        """
        async with self._lock:
            if self._loaded:
                return

            entries = await asyncio.to_thread(self.persistence.load_all)
            self._entries = {entry.id: entry for entry in entries}
            self._loaded = True

        logger.info(
            f"Lazarus Pit initialized with {len(self._entries)} entries "
            f"from {self.persistence.location}"
        )

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.initialize()

    # Mutations

    async def immerse(
        self,
        repository: RepositoryInput,
        *,
        priority: int | None = None,
        source: EntrySource | str | None = None,
        tags: Iterable[str] | None = None,
        notes: str | None = None,
        category: EntryCategory | str | None = None,
        assignee: str | None = None,
    ) -> str:
        """Add a repository to the pit.

        Args:
            repository: ``owner/repo`` name (resolved through the fetcher),
                a repository summary, or a pre-scored discovery record
            priority: Explicit priority; computed from discovery scores
                or set to the default priority when omitted
            source: How the entry arrived; ``discovered`` for discovery
                records and ``manual`` otherwise when omitted
            tags: Free-form tags
            notes: Free-form notes
            category: Project category, ``other`` when omitted
            assignee: Optional owner of the revival work

        Returns:
            Id of the new entry

        Raises:
            EntryValidationError: If any input is malformed; nothing is stored
            PersistenceWriteError: If the collection could not be saved
        """
        await self._ensure_loaded()

        summary, analysis, scored_priority = await self._resolve_repository(repository)
        draft = self._prepare_entry(
            summary,
            analysis,
            priority if priority is not None else scored_priority,
            source,
            tags,
            notes,
            category,
            assignee,
        )

        async with self._lock:
            entry = self._finalize_entry(draft, self._entries)
            entries = dict(self._entries)
            entries[entry.id] = entry
            await self._commit(entries)

        logger.info(f"{entry.full_name} immersed in Lazarus Pit (id={entry.id})")
        return entry.id

    async def batch_immerse(
        self,
        records: Iterable[DiscoveryRecord | Mapping[str, Any]],
        *,
        source: EntrySource | str | None = None,
        tags: Iterable[str] | None = None,
    ) -> list[str]:
        """Immerse many discovery records with a single write.

        Each entry is categorized from its repository name and description.
        The batch is all-or-nothing: a malformed record or a failed save
        leaves the pit untouched.

        Returns:
            Ids of the new entries, in input order
        """
        await self._ensure_loaded()

        tag_list = list(tags) if tags is not None else None
        drafts = []
        for record in records:
            if not isinstance(record, DiscoveryRecord):
                record = DiscoveryRecord.from_dict(record)
            summary, analysis, scored_priority = await self._resolve_repository(record)
            drafts.append(
                self._prepare_entry(
                    summary,
                    analysis,
                    scored_priority,
                    source,
                    tag_list,
                    None,
                    categorize_repository(summary),
                    None,
                )
            )

        if not drafts:
            return []

        async with self._lock:
            entries = dict(self._entries)
            ids = []
            for draft in drafts:
                entry = self._finalize_entry(draft, entries)
                entries[entry.id] = entry
                ids.append(entry.id)
            await self._commit(entries)

        logger.info(f"Batch immersed {len(ids)} projects into Lazarus Pit")
        return ids

    async def extract(self, entry_id: str) -> bool:
        """Remove an entry from the pit.

        Returns:
            True if the entry was removed, False if it was not present

        Raises:
            PersistenceWriteError: If the collection could not be saved
        """
        await self._ensure_loaded()

        async with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                return False

            entries = dict(self._entries)
            del entries[entry_id]
            await self._commit(entries)

        logger.info(f"{entry.full_name} extracted from Lazarus Pit (id={entry_id})")
        return True

    async def update_workflow(
        self, entry_id: str, update: WorkflowUpdate | Mapping[str, Any]
    ) -> bool:
        """Merge a partial update into an entry's workflow state.

        Status changes are checked against the workflow state machine and
        recorded in the entry's audit log.

        Returns:
            True if the entry exists and was updated, False if absent

        Raises:
            EntryValidationError: If the update is malformed
            InvalidTransitionError: If the status change is not permitted,
                including any attempt to leave ``completed`` or ``failed``
            PersistenceWriteError: If the collection could not be saved
        """
        if not isinstance(update, WorkflowUpdate):
            update = WorkflowUpdate.from_dict(update)

        await self._ensure_loaded()

        async with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                return False

            entry = current.model_copy(deep=True)
            previous = apply_update(entry.workflow, update)
            new_status = entry.workflow.status

            if previous is not None:
                append_event(
                    entry,
                    STATUS_EVENT_LEVELS.get(new_status, AuditLevel.INFO),
                    f"Status changed from {previous.value} to {new_status.value}",
                    details=update.model_dump(mode="json", exclude_unset=True),
                )

            entries = dict(self._entries)
            entries[entry_id] = entry
            await self._commit(entries)

        if previous is not None:
            logger.info(
                f"{entry.full_name} moved from {previous.value} to {new_status.value}"
            )
        else:
            logger.debug(f"Updated workflow of {entry.full_name} (id={entry_id})")
        return True

    async def add_log(
        self,
        entry_id: str,
        level: AuditLevel | str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> bool:
        """Append an audit event to an entry.

        Returns:
            True if the entry exists, False if absent

        Raises:
            EntryValidationError: If the level, message or details are invalid
            PersistenceWriteError: If the collection could not be saved
        """
        await self._ensure_loaded()

        async with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                return False

            entry = current.model_copy(deep=True)
            append_event(entry, level, message, details)
            entry.workflow.updated_at = utc_now()

            entries = dict(self._entries)
            entries[entry_id] = entry
            await self._commit(entries)

        return True

    # Reads

    async def get(self, entry_id: str) -> PitEntry | None:
        """Return a copy of an entry, or None if absent."""
        await self._ensure_loaded()
        entry = self._entries.get(entry_id)
        return entry.model_copy(deep=True) if entry is not None else None

    async def all(self) -> list[PitEntry]:
        """Return copies of all entries in insertion order."""
        await self._ensure_loaded()
        return [entry.model_copy(deep=True) for entry in self._entries.values()]

    async def query(
        self, query: PitQuery | Mapping[str, Any] | None = None
    ) -> list[PitEntry]:
        """Evaluate a query against the committed collection.

        Raises:
            EntryValidationError: If the query is malformed
        """
        if query is not None and not isinstance(query, PitQuery):
            query = PitQuery.from_dict(query)

        await self._ensure_loaded()
        results = evaluate(list(self._entries.values()), query)
        return [entry.model_copy(deep=True) for entry in results]

    async def next_pending(self) -> PitEntry | None:
        """Return the highest-priority pending entry, or None."""
        await self._ensure_loaded()
        entry = next_pending(list(self._entries.values()))
        return entry.model_copy(deep=True) if entry is not None else None

    async def stats(self) -> PitStats:
        """Compute statistics over the committed collection."""
        await self._ensure_loaded()
        return compute_stats(list(self._entries.values()))

    # Internals

    async def _resolve_repository(
        self, repository: RepositoryInput
    ) -> tuple[RepositorySummary, SourceAnalysis | None, int | None]:
        """Turn immerse input into a summary, optional scores and priority."""
        if isinstance(repository, DiscoveryRecord):
            return (
                repository.repository,
                repository.to_source_analysis(),
                calculate_priority(repository),
            )

        if isinstance(repository, RepositorySummary):
            return repository, None, None

        if isinstance(repository, str):
            full_name = repository.strip()
            if not full_name:
                raise EntryValidationError("Repository name must not be empty")

            summary = await self.fetcher(full_name)
            if not isinstance(summary, RepositorySummary):
                summary = RepositorySummary.from_dict(summary)
            return summary, None, None

        raise EntryValidationError(
            f"Cannot immerse object of type {type(repository).__name__}"
        )

    def _prepare_entry(
        self,
        summary: RepositorySummary,
        analysis: SourceAnalysis | None,
        priority: int | None,
        source: EntrySource | str | None,
        tags: Iterable[str] | None,
        notes: str | None,
        category: EntryCategory | str | None,
        assignee: str | None,
    ) -> dict[str, Any]:
        """Validate everything an entry needs except its id."""
        if source is None:
            source = EntrySource.DISCOVERED if analysis is not None else EntrySource.MANUAL

        metadata = EntryMetadata.from_dict(
            {
                "source": source,
                "tags": list(tags) if tags is not None else [],
                "notes": notes if notes is not None else "",
                "assignee": assignee,
                "category": category if category is not None else EntryCategory.OTHER,
            }
        )

        now = utc_now()
        workflow = WorkflowState.from_dict(
            {
                "priority": priority if priority is not None else self.default_priority,
                "status": EntryStatus.PENDING,
                "progress": 0,
                "added_at": now,
                "updated_at": now,
            }
        )

        return {
            "repository": summary,
            "source_analysis": analysis,
            "workflow": workflow,
            "metadata": metadata,
        }

    def _finalize_entry(
        self, draft: dict[str, Any], taken: Mapping[str, PitEntry]
    ) -> PitEntry:
        """Assign a fresh id and write the initial audit event."""
        entry_id = self._generate_id(taken)
        try:
            entry = PitEntry(id=entry_id, **draft)
        except ValidationError as e:
            raise EntryValidationError(
                f"Invalid entry: {e.error_count()} validation error(s)",
                validation_errors=e.errors(include_url=False),
            ) from e

        append_event(
            entry,
            AuditLevel.INFO,
            IMMERSED_MESSAGE,
            details={"source": entry.metadata.source.value},
        )
        return entry

    @staticmethod
    def _generate_id(taken: Mapping[str, PitEntry]) -> str:
        while True:
            entry_id = f"pit_{uuid.uuid4().hex[:16]}"
            if entry_id not in taken:
                return entry_id

    async def _commit(self, entries: dict[str, PitEntry]) -> None:
        """Persist ``entries`` and publish them as the live collection.

        Must be called with the lock held.
        """
        try:
            await asyncio.to_thread(self.persistence.save_all, list(entries.values()))
        except PersistenceError as e:
            logger.warning(f"Pit mutation rolled back: {e}")
            raise

        self._entries = entries


def create_pit(
    config: PitConfig, fetcher: RepositoryFetcher | None = None
) -> LazarusPit:
    """Build a file-backed pit from configuration."""
    persistence = JsonFilePersistence(config.storage.path, indent=config.storage.indent)
    return LazarusPit(
        persistence,
        fetcher=fetcher,
        default_priority=config.scheduling.default_priority,
    )
