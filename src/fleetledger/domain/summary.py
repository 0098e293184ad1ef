"""Run summary reported by every batch job."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RunSummary:
    """Counts of what a job run did, plus names needing manual follow-up."""

    job: str
    dry_run: bool = False
    examined: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    skipped: Counter = field(default_factory=Counter)
    ambiguous_names: set[str] = field(default_factory=set)
    unmatched_names: set[str] = field(default_factory=set)
    needs_review: set[str] = field(default_factory=set)

    def skip(self, reason: str) -> None:
        self.skipped[reason] += 1

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    def as_dict(self) -> dict[str, Any]:
        """Structured form for logs and callers."""
        return {
            "job": self.job,
            "dry_run": self.dry_run,
            "examined": self.examined,
            "created": self.created,
            "updated": self.updated,
            "skipped": dict(sorted(self.skipped.items())),
            "failed": self.failed,
            "ambiguous_names": sorted(self.ambiguous_names),
            "unmatched_names": sorted(self.unmatched_names),
            "needs_review": sorted(self.needs_review),
        }

    def format_lines(self) -> list[str]:
        """Human-readable lines for CLI output."""
        mode = " (dry run)" if self.dry_run else ""
        lines = [
            f"{self.job} complete{mode}:",
            f"  Examined: {self.examined}",
            f"  Created: {self.created}",
            f"  Updated: {self.updated}",
            f"  Skipped: {self.skipped_total}",
        ]
        for reason, count in sorted(self.skipped.items()):
            lines.append(f"    {reason}: {count}")
        lines.append(f"  Failed: {self.failed}")
        if self.ambiguous_names:
            lines.append(f"  Ambiguous names ({len(self.ambiguous_names)}), resolve manually:")
            lines.extend(f"    - {name}" for name in sorted(self.ambiguous_names))
        if self.unmatched_names:
            lines.append(f"  Unmatched names ({len(self.unmatched_names)}):")
            lines.extend(f"    - {name}" for name in sorted(self.unmatched_names))
        if self.needs_review:
            lines.append(f"  Needs review ({len(self.needs_review)}):")
            lines.extend(f"    - {record_id}" for record_id in sorted(self.needs_review))
        return lines
