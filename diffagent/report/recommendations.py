"""
Recommendation generator.

Turns classifications and the risk assessment into prioritized,
actionable review suggestions.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, field
from enum import Enum

from diffagent.config import Settings
from diffagent.analysis.classifier import ClassifiedFile
from diffagent.analysis.languages import LanguageTag, detect_language
from diffagent.analysis.schemas import ChangeType, RiskAssessment, RiskLevel

logger = logging.getLogger(__name__)


class Priority(str, Enum):
    """Recommendation priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

SOURCE_LANGUAGES = frozenset({
    LanguageTag.JAVASCRIPT,
    LanguageTag.TYPESCRIPT,
    LanguageTag.PYTHON,
    LanguageTag.JAVA,
    LanguageTag.KOTLIN,
    LanguageTag.GO,
})

TEST_PATH_MARKERS = ('test', 'spec', '__tests__')


@dataclass
class Recommendation:
    """A single review suggestion."""
    type: str  # review, warning, info
    priority: Priority
    message: str
    category: str
    files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority.value,
            "message": self.message,
            "category": self.category,
            "files": list(self.files),
        }


def is_test_path(path: str) -> bool:
    return any(marker in path.lower() for marker in TEST_PATH_MARKERS)


def is_source_path(path: str) -> bool:
    return detect_language(path) in SOURCE_LANGUAGES and not is_test_path(path)


class RecommendationGenerator:
    """Rule-based generator for review recommendations."""

    def __init__(self, large_diff_file_count: int = 5):
        """
        Args:
            large_diff_file_count: File count above which splitting the
                diff is suggested
        """
        self.large_diff_file_count = large_diff_file_count

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecommendationGenerator":
        return cls(large_diff_file_count=settings.LARGE_DIFF_FILE_COUNT)

    def generate(
        self,
        files: Sequence[ClassifiedFile],
        risk: Optional[RiskAssessment] = None,
    ) -> List[Recommendation]:
        """
        Generate recommendations for an analyzed diff.

        Args:
            files: Classified files
            risk: Risk assessment for the same files

        Returns:
            Recommendations ordered high, medium, low priority
        """
        recommendations: List[Recommendation] = []
        by_type = self._files_by_change_type(files)

        if ChangeType.BUG_FIX in by_type:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.HIGH,
                message="Bug fix detected. Ensure proper test coverage for the fixed issue.",
                category="testing",
                files=by_type[ChangeType.BUG_FIX],
            ))

        if ChangeType.SECURITY_FIX in by_type:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.HIGH,
                message="Security-related change detected. Request a security-focused review.",
                category="security",
                files=by_type[ChangeType.SECURITY_FIX],
            ))

        if ChangeType.FEATURE in by_type:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.MEDIUM,
                message="New feature added. Verify documentation and error handling.",
                category="documentation",
                files=by_type[ChangeType.FEATURE],
            ))

        if ChangeType.REFACTOR in by_type:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.MEDIUM,
                message="Code refactoring detected. Ensure no functional changes were introduced.",
                category="testing",
                files=by_type[ChangeType.REFACTOR],
            ))

        if ChangeType.PERFORMANCE_OPTIMIZATION in by_type:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.MEDIUM,
                message="Performance change detected. Benchmark before and after merging.",
                category="performance",
                files=by_type[ChangeType.PERFORMANCE_OPTIMIZATION],
            ))

        if risk is not None and risk.risk_level == RiskLevel.HIGH:
            recommendations.append(Recommendation(
                type="warning",
                priority=Priority.HIGH,
                message=f"High risk score ({risk.risk_score:.0%}). Requires thorough review.",
                category="risk",
            ))
        elif risk is not None and risk.risk_level == RiskLevel.MEDIUM:
            recommendations.append(Recommendation(
                type="info",
                priority=Priority.MEDIUM,
                message=f"Medium risk score ({risk.risk_score:.0%}). Standard review recommended.",
                category="risk",
            ))

        if len(files) > self.large_diff_file_count:
            recommendations.append(Recommendation(
                type="info",
                priority=Priority.LOW,
                message=(
                    f"Large diff detected (>{self.large_diff_file_count} files). "
                    f"Consider breaking into smaller PRs."
                ),
                category="process",
            ))

        source_files = [f.path for f in files if is_source_path(f.path)]
        has_tests = any(is_test_path(f.path) for f in files)
        if source_files and not has_tests:
            recommendations.append(Recommendation(
                type="review",
                priority=Priority.MEDIUM,
                message="Source code changed without test changes. Consider adding tests.",
                category="testing",
                files=source_files,
            ))

        recommendations.sort(key=lambda r: _PRIORITY_ORDER[r.priority])

        logger.debug(
            "Generated recommendations",
            extra={"recommendation_count": len(recommendations)},
        )
        return recommendations

    @staticmethod
    def _files_by_change_type(files: Sequence[ClassifiedFile]) -> Dict[ChangeType, List[str]]:
        grouped: Dict[ChangeType, List[str]] = {}
        for classified in files:
            grouped.setdefault(classified.classification.change_type, []).append(classified.path)
        return grouped
