"""
Risk assessor module.

Scores each classified file on three independent factors:
- File type (source code, configuration, documentation)
- Change type, weighted by classification confidence
- Change size (added plus removed lines)

The per-file scores are averaged into a diff-level score and mapped to
a low/medium/high band.
"""

import logging
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from diffagent.config import Settings
from diffagent.analysis.classifier import ClassifiedFile
from diffagent.analysis.schemas import (
    Classification,
    FileRisk,
    RiskAssessment,
    RiskDetails,
    RiskFactors,
    RiskLevel,
)
from diffagent.observability.errors import capture_exception

logger = logging.getLogger(__name__)


DEFAULT_CHANGE_TYPE_RISKS: Mapping[str, float] = MappingProxyType({
    'bug_fix': 0.3,
    'feature': 0.7,
    'refactor': 0.6,
    'security': 0.9,
    'security_fix': 0.9,
    'performance': 0.8,
    'performance_optimization': 0.8,
    'dependency': 0.7,
    'documentation': 0.1,
    'test': 0.2,
    'other': 0.4,
    'unknown': 0.5,
})


@dataclass(frozen=True)
class RiskConfig:
    """Immutable risk tables and thresholds for RiskAssessor."""

    high_risk_extensions: Tuple[str, ...] = ('js', 'ts', 'jsx', 'tsx', 'py', 'java', 'go', 'rs')
    medium_risk_extensions: Tuple[str, ...] = ('json', 'yml', 'yaml', 'xml', 'html', 'css')
    low_risk_extensions: Tuple[str, ...] = ('md', 'txt', 'gitignore', 'dockerfile')

    high_file_risk: float = 0.8
    medium_file_risk: float = 0.5
    low_file_risk: float = 0.2
    default_file_risk: float = 0.3
    missing_path_risk: float = 0.1

    change_type_risks: Mapping[str, float] = field(default_factory=lambda: DEFAULT_CHANGE_TYPE_RISKS)
    default_change_type_risk: float = 0.5

    # (inclusive upper bound on changed lines, risk); larger changes get max_size_risk
    size_steps: Tuple[Tuple[int, float], ...] = ((0, 0.1), (10, 0.3), (50, 0.6), (100, 0.8))
    max_size_risk: float = 0.9

    high_threshold: float = 0.7
    medium_threshold: float = 0.4

    @classmethod
    def from_settings(cls, settings: Settings) -> "RiskConfig":
        return cls(
            high_threshold=settings.RISK_HIGH_THRESHOLD,
            medium_threshold=settings.RISK_MEDIUM_THRESHOLD,
        )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class RiskAssessor:
    """
    Aggregates per-file risk into a diff-level assessment.

    Stateless apart from its configuration. A failure while scoring one
    file is captured and that file contributes zero risk.
    """

    def __init__(self, config: Optional[RiskConfig] = None):
        self.config = config or RiskConfig()

    def assess(self, files: Optional[Sequence[ClassifiedFile]]) -> RiskAssessment:
        """
        Assess risk for a set of classified files.

        Args:
            files: Classified files in diff order

        Returns:
            RiskAssessment: Diff-level score, level and per-file breakdown
        """
        if not files:
            return RiskAssessment(risk_score=0.0, risk_level=RiskLevel.LOW)

        file_risks = [self.assess_file(f) for f in files]
        average_risk = _clamp(sum(r.risk_score for r in file_risks) / len(file_risks))
        risk_level = self.get_risk_level(average_risk)

        logger.info(
            "Risk assessment completed",
            extra={
                "risk_score": round(average_risk, 4),
                "risk_level": risk_level.value,
                "total_files": len(file_risks),
            },
        )

        return RiskAssessment(
            risk_score=average_risk,
            risk_level=risk_level,
            details=RiskDetails(file_risks=file_risks, total_files=len(file_risks)),
        )

    def assess_file(self, classified: ClassifiedFile) -> FileRisk:
        """
        Compute one file's risk as the mean of its three factors.

        Never raises; failures yield a zero-risk entry without factors.
        """
        file_path = "unknown"
        try:
            file_path = classified.file.path or "unknown"
            classification = classified.classification or Classification.unknown()

            factors = RiskFactors(
                file_type=self.assess_file_type_risk(file_path),
                change_type=self.assess_change_type_risk(classification),
                size=self.assess_size_risk(classified.file.additions, classified.file.deletions),
            )
            risk_score = _clamp((factors.file_type + factors.change_type + factors.size) / 3)

            return FileRisk(file_path=file_path, risk_score=risk_score, risk_factors=factors)

        except Exception as e:
            logger.warning(
                "Risk assessment failed for file, scoring as zero",
                extra={"file_path": file_path, "error": str(e)},
            )
            capture_exception(e, context={"stage": "assess", "file_path": file_path})
            return FileRisk(file_path=file_path, risk_score=0.0)

    def assess_file_type_risk(self, file_path: Optional[str]) -> float:
        """
        Risk from the file's extension.

        The extension is the text after the last dot of the file name, or
        the whole lowercased name when there is no dot (Dockerfile).
        """
        config = self.config
        if not file_path or file_path == "unknown":
            return config.missing_path_risk

        extension = PurePosixPath(file_path).name.lower().rsplit('.', 1)[-1]

        if extension in config.high_risk_extensions:
            return config.high_file_risk
        if extension in config.medium_risk_extensions:
            return config.medium_file_risk
        if extension in config.low_risk_extensions:
            return config.low_file_risk
        return config.default_file_risk

    def assess_change_type_risk(self, classification: Classification) -> float:
        """
        Risk from the change type, pulled toward the midpoint when the
        classification confidence is low.
        """
        base_risk = self.config.change_type_risks.get(
            classification.change_type.value,
            self.config.default_change_type_risk,
        )
        adjusted = base_risk * (0.5 + classification.confidence * 0.5)
        return _clamp(adjusted)

    def assess_size_risk(self, additions: int, deletions: int) -> float:
        """Step function of the number of changed lines."""
        total_changes = (additions or 0) + (deletions or 0)
        for upper_bound, risk in self.config.size_steps:
            if total_changes <= upper_bound:
                return risk
        return self.config.max_size_risk

    def get_risk_level(self, risk_score: float) -> RiskLevel:
        """Map a score to its band; boundary values take the higher band."""
        if risk_score >= self.config.high_threshold:
            return RiskLevel.HIGH
        if risk_score >= self.config.medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def explain(self, assessment: RiskAssessment) -> str:
        """
        Generate human-readable explanation of an assessment.

        Returns:
            Explanation text
        """
        parts = [
            f"Overall Risk: {assessment.risk_level.value.upper()} ({assessment.risk_score:.2f})",
            "",
            "Per-file breakdown:",
        ]
        for file_risk in assessment.details.file_risks:
            factors = file_risk.risk_factors
            if factors is None:
                parts.append(f"- {file_risk.file_path}: {file_risk.risk_score:.2f} (not assessed)")
                continue
            parts.append(
                f"- {file_risk.file_path}: {file_risk.risk_score:.2f} "
                f"(file type {factors.file_type:.2f}, change type {factors.change_type:.2f}, "
                f"size {factors.size:.2f})"
            )
        return "\n".join(parts)
