"""
Analysis summary.

Totals and change-type counts over a set of classified files.
"""

from typing import Any, Dict, Optional, Sequence
from dataclasses import dataclass, field, asdict

from diffagent.analysis.classifier import ClassifiedFile
from diffagent.analysis.schemas import ChangeType, RiskAssessment


@dataclass
class AnalysisSummary:
    """High-level summary of one analyzed diff."""

    total_files: int
    total_additions: int
    total_deletions: int
    primary_change_type: str
    change_types: Dict[str, int] = field(default_factory=dict)
    risk_level: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def count_change_types(files: Sequence[ClassifiedFile]) -> Dict[str, int]:
    """Number of files per change type, in first-seen order."""
    counts: Dict[str, int] = {}
    for classified in files:
        change_type = classified.classification.change_type.value
        counts[change_type] = counts.get(change_type, 0) + 1
    return counts


def build_summary(
    files: Sequence[ClassifiedFile],
    risk: Optional[RiskAssessment] = None,
) -> AnalysisSummary:
    """
    Summarize classified files.

    The primary change type is the most frequent one; the first type seen
    wins ties. An empty diff has primary type "other".
    """
    change_types = count_change_types(files)

    primary_change_type = ChangeType.OTHER.value
    max_count = 0
    for change_type, count in change_types.items():
        if count > max_count:
            primary_change_type, max_count = change_type, count

    return AnalysisSummary(
        total_files=len(files),
        total_additions=sum(f.file.additions for f in files),
        total_deletions=sum(f.file.deletions for f in files),
        primary_change_type=primary_change_type,
        change_types=change_types,
        risk_level=risk.risk_level.value if risk is not None else "unknown",
    )
