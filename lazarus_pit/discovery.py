"""Intake helpers for repositories arriving from outside the pit."""

from collections.abc import Awaitable, Callable

from .models import EntryCategory, RepositorySummary, utc_now

RepositoryFetcher = Callable[[str], Awaitable[RepositorySummary]]
"""Async callable resolving ``owner/repo`` to repository metadata."""

# Checked in order; the first hit wins.
CATEGORY_KEYWORDS: tuple[tuple[EntryCategory, tuple[str, ...], tuple[str, ...]], ...] = (
    (EntryCategory.CLI_TOOL, ("cli",), ("command line",)),
    (EntryCategory.LIBRARY, ("lib",), ("library",)),
    (EntryCategory.FRAMEWORK, ("framework",), ("framework",)),
    (EntryCategory.APPLICATION, ("app",), ("application",)),
)


async def offline_repository_summary(full_name: str) -> RepositorySummary:
    """Build a placeholder summary without contacting the source host.

    Used when no fetcher is configured; counts are zero and both
    timestamps are the current time.
    """
    now = utc_now()
    return RepositorySummary(
        full_name=full_name,
        url=f"https://github.com/{full_name.strip()}",
        description=None,
        language=None,
        pushed_at=now,
        created_at=now,
    )


def categorize_repository(repository: RepositorySummary) -> EntryCategory:
    """Guess the project category from the repository name and description."""
    name = repository.full_name.lower()
    description = (repository.description or "").lower()

    for category, name_keywords, description_keywords in CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in name_keywords):
            return category
        if any(keyword in description for keyword in description_keywords):
            return category

    return EntryCategory.OTHER
