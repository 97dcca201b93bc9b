"""Pit entry model: one repository candidate queued for revival."""

from pydantic import ConfigDict, Field, field_validator

from .base import PitModel, Timestamp, utc_now
from .enums import EntryCategory, EntrySource
from .workflow import WorkflowState


class RepositorySummary(PitModel):
    """Snapshot of external repository metadata taken at immersion."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    full_name: str
    url: str
    description: str | None = None
    language: str | None = None
    star_count: int = Field(default=0, ge=0)
    fork_count: int = Field(default=0, ge=0)
    open_issue_count: int = Field(default=0, ge=0)
    pushed_at: Timestamp = Field(default_factory=utc_now)
    created_at: Timestamp = Field(default_factory=utc_now)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        """Reject empty repository names."""
        value = value.strip()
        if not value:
            raise ValueError("full_name must not be empty")
        return value

    @property
    def owner(self) -> str | None:
        """Extract owner from full_name."""
        if "/" in self.full_name:
            return self.full_name.split("/")[0]
        return None

    @property
    def repo_name(self) -> str:
        """Extract repository name from full_name."""
        if "/" in self.full_name:
            return self.full_name.split("/", 1)[1]
        return self.full_name


class SourceAnalysis(PitModel):
    """Scores supplied by the external discovery process."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    abandonment_score: float
    revival_potential: float
    last_commit_age_days: float = Field(ge=0)
    reasons: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()


class DiscoveryRecord(PitModel):
    """Pre-scored repository handed over by the discovery process.

    The scores are carried into the entry as supplied; they are neither
    validated against nor re-derived from the repository metadata.
    """

    repository: RepositorySummary
    abandonment_score: float
    revival_potential: float
    last_commit_age_days: float = Field(ge=0)
    reasons: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    def to_source_analysis(self) -> SourceAnalysis:
        """Extract the immutable scoring part of the record."""
        return SourceAnalysis(
            abandonment_score=self.abandonment_score,
            revival_potential=self.revival_potential,
            last_commit_age_days=self.last_commit_age_days,
            reasons=tuple(self.reasons),
            recommendations=tuple(self.recommendations),
        )


class EntryMetadata(PitModel):
    """Free-form bookkeeping attached to an entry."""

    source: EntrySource = EntrySource.MANUAL
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    assignee: str | None = None
    category: EntryCategory = EntryCategory.OTHER

    @field_validator("tags")
    @classmethod
    def deduplicate_tags(cls, value: list[str]) -> list[str]:
        """Keep tags a set while preserving first-seen order."""
        return list(dict.fromkeys(value))


class PitEntry(PitModel):
    """One tracked repository candidate and its workflow state."""

    id: str = Field(min_length=1)
    repository: RepositorySummary
    source_analysis: SourceAnalysis | None = None
    workflow: WorkflowState = Field(default_factory=WorkflowState)
    metadata: EntryMetadata = Field(default_factory=EntryMetadata)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<PitEntry(id={self.id}, repository={self.repository.full_name}, "
            f"status={self.workflow.status.value})>"
        )

    @property
    def full_name(self) -> str:
        """Repository full name (owner/repo)."""
        return self.repository.full_name

    @property
    def language(self) -> str:
        """Primary language, ``unknown`` when the host reported none."""
        return self.repository.language or "unknown"

    def matches_text(self, needle: str) -> bool:
        """Case-insensitive substring match on name, description and notes."""
        needle = needle.lower()
        haystacks = (
            self.repository.full_name,
            self.repository.description or "",
            self.metadata.notes,
        )
        return any(needle in haystack.lower() for haystack in haystacks)
