"""Export pit contents as static JSON for the web dashboard.

The document uses the key names the dashboard reads (``immersedAt``,
``stargazers_count``, ``html_url``, ``totalProjects`` and so on), not the
model field names.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .models import PitEntry, utc_now
from .query import PitStats
from .storage import atomic_write_text
from .store import LazarusPit

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"
EXPORT_FILENAME = "lazarus-pit.json"
MINIFIED_EXPORT_FILENAME = "lazarus-pit.min.json"


def project_view(entry: PitEntry) -> dict[str, Any]:
    """Flatten an entry into the shape the dashboard consumes."""
    repository = entry.repository
    workflow = entry.workflow
    return {
        "id": entry.id,
        "repository": {
            "full_name": repository.full_name,
            "name": repository.repo_name,
            "description": repository.description,
            "language": repository.language,
            "stargazers_count": repository.star_count,
            "html_url": repository.url,
            "updated_at": repository.pushed_at.isoformat(),
        },
        "status": workflow.status.value,
        "priority": workflow.priority,
        "progress": workflow.progress,
        "tags": list(entry.metadata.tags),
        "notes": entry.metadata.notes,
        "category": entry.metadata.category.value,
        "source": entry.metadata.source.value,
        "immersedAt": workflow.added_at.isoformat(),
        "lastUpdated": workflow.updated_at.isoformat(),
        "completedAt": workflow.completed_at.isoformat()
        if workflow.completed_at
        else None,
        "issues": list(workflow.issues),
        "estimatedEffort": workflow.estimated_duration,
    }


def build_export(entries: list[PitEntry], stats: PitStats) -> dict[str, Any]:
    """Assemble the export document."""
    summary = stats.to_dict()
    return {
        "projects": [project_view(entry) for entry in entries],
        "stats": {
            "totalProjects": summary["total"],
            "statusDistribution": summary["by_status"],
            "languageDistribution": summary["by_language"],
            "averagePriority": summary["avg_priority"],
            "averageProgress": summary["avg_progress"],
            "successRate": summary["success_rate"],
        },
        "lastExported": utc_now().isoformat(),
        "exportVersion": EXPORT_VERSION,
    }


async def export_web_snapshot(pit: LazarusPit, output_dir: str | Path) -> list[Path]:
    """Write the indented and minified dashboard exports.

    Projects are listed in default query order (priority, highest first).

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    entries = await pit.query()
    stats = await pit.stats()
    document = build_export(entries, stats)

    targets = [
        (output_dir / EXPORT_FILENAME, json.dumps(document, indent=2)),
        (output_dir / MINIFIED_EXPORT_FILENAME, json.dumps(document, separators=(",", ":"))),
    ]
    for path, content in targets:
        atomic_write_text(path, content)

    logger.info(f"Exported {len(entries)} projects to {output_dir}")
    return [path for path, _ in targets]
