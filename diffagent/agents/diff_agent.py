"""
Main diff analysis orchestrator.

Coordinates the analysis pipeline: parsing the diff, classifying every
file, assessing risk, and building the summary and recommendations.
"""

import hashlib
import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from diffagent.config import Settings, settings as default_settings
from diffagent.exceptions import DiffTooLargeError
from diffagent.analysis.classifier import ChangeClassifier, ClassifiedFile, ClassifierConfig
from diffagent.analysis.diff_parser import DiffParser
from diffagent.analysis.risk_assessor import RiskAssessor, RiskConfig
from diffagent.analysis.schemas import RiskAssessment
from diffagent.observability.errors import ErrorTracker, error_tracking
from diffagent.observability.logging import LogContext
from diffagent.observability.metrics import MetricNames, MetricsCollector
from diffagent.report.recommendations import Recommendation, RecommendationGenerator
from diffagent.report.summary import AnalysisSummary, build_summary, count_change_types

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Complete result of one analysis run."""

    success: bool
    error: Optional[str] = None
    diff_digest: str = ""
    summary: Optional[AnalysisSummary] = None
    files: List[ClassifiedFile] = field(default_factory=list)
    risk: Optional[RiskAssessment] = None
    change_types: Dict[str, int] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)
    # Files that were classified or scored in degraded mode
    errors: List[Dict[str, Any]] = field(default_factory=list)
    # Metric summary of this run; timings vary so it stays out of to_dict()
    metrics: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: str, diff_digest: str = "") -> "AnalysisReport":
        return cls(success=False, error=error, diff_digest=diff_digest)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "success": self.success,
            "error": self.error,
            "diff_digest": self.diff_digest,
            "summary": self.summary.to_dict() if self.summary else None,
            "files": [f.to_dict() for f in self.files],
            "risk": self.risk.model_dump(mode="json") if self.risk else None,
            "change_types": dict(self.change_types),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "errors": list(self.errors),
        }


def diff_digest(diff_text: str) -> str:
    """Short stable identifier for a diff, used in logs and reports."""
    return hashlib.sha256(diff_text.encode("utf-8", errors="replace")).hexdigest()[:12]


class DiffAgent:
    """
    Main diff analysis agent.

    Runs parse, classify and assess in order. Per-file failures degrade
    that file only; any other failure becomes an unsuccessful report, so
    analyze() never raises. Each run gets its own error tracker and metrics
    collector; the agent keeps no state between runs.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        parser: Optional[DiffParser] = None,
        classifier: Optional[ChangeClassifier] = None,
        assessor: Optional[RiskAssessor] = None,
        recommender: Optional[RecommendationGenerator] = None,
    ):
        """
        Initialize the agent.

        Args:
            settings: Application settings (module settings when omitted)
            parser: Diff parser
            classifier: Change classifier
            assessor: Risk assessor
            recommender: Recommendation generator
        """
        self.settings = settings or default_settings
        self.parser = parser or DiffParser()
        self.classifier = classifier or ChangeClassifier(ClassifierConfig.from_settings(self.settings))
        self.assessor = assessor or RiskAssessor(RiskConfig.from_settings(self.settings))
        self.recommender = recommender or RecommendationGenerator.from_settings(self.settings)

    def analyze(self, diff_text: Optional[str]) -> AnalysisReport:
        """
        Analyze a unified diff.

        Args:
            diff_text: Concatenated unified-diff blocks

        Returns:
            AnalysisReport: success=False with an error message when the
            input is refused or the pipeline fails
        """
        diff_text = diff_text or ""
        digest = diff_digest(diff_text)
        metrics = MetricsCollector(enabled=self.settings.ENABLE_METRICS)

        with LogContext(diff_digest=digest), \
                error_tracking(enabled=self.settings.ERROR_TRACKING_ENABLED) as tracker:
            metrics.record_counter(MetricNames.ANALYSIS_STARTED)
            logger.info("Starting analysis", extra={"diff_bytes": len(diff_text)})

            try:
                with metrics.timer_context(MetricNames.ANALYSIS_DURATION_MS):
                    report = self._run(diff_text, digest, tracker, metrics)

            except DiffTooLargeError as e:
                logger.warning(f"Diff refused: {e}")
                metrics.record_counter(MetricNames.ANALYSIS_REJECTED)
                report = AnalysisReport.failure(str(e), diff_digest=digest)

            except Exception as e:
                logger.error(f"Analysis failed: {e}", exc_info=True)
                report = AnalysisReport.failure(f"Analysis failed: {e}", diff_digest=digest)

            else:
                metrics.record_counter(MetricNames.ANALYSIS_COMPLETED)
                logger.info(
                    "Analysis complete",
                    extra={
                        "total_files": report.summary.total_files,
                        "risk_level": report.risk.risk_level.value,
                        "degraded_files": len(report.errors),
                    },
                )

        report.metrics = metrics.get_metric_summary()
        return report

    def _run(
        self,
        diff_text: str,
        digest: str,
        tracker: ErrorTracker,
        metrics: MetricsCollector,
    ) -> AnalysisReport:
        self._check_size(diff_text)

        with metrics.timer_context(MetricNames.PARSE_DURATION_MS):
            parsed = self.parser.parse(diff_text)
        metrics.record_gauge(MetricNames.FILES_PARSED, len(parsed.files))

        with metrics.timer_context(MetricNames.CLASSIFY_DURATION_MS):
            files = self.classifier.classify_files(parsed)
        metrics.record_gauge(MetricNames.FILES_CLASSIFIED, len(files))

        with metrics.timer_context(MetricNames.ASSESS_DURATION_MS):
            risk = self.assessor.assess(files)
        metrics.record_gauge(MetricNames.RISK_SCORE, risk.risk_score)

        errors = [
            {
                "stage": record.stage,
                "file_path": record.file_path,
                "error": f"{record.exception_type}: {record.exception_message}",
            }
            for record in tracker.get_errors()
        ]
        metrics.record_gauge(MetricNames.DEGRADED_FILES, len(errors))

        return AnalysisReport(
            success=True,
            diff_digest=digest,
            summary=build_summary(files, risk),
            files=files,
            risk=risk,
            change_types=count_change_types(files),
            recommendations=self.recommender.generate(files, risk),
            errors=errors,
        )

    def _check_size(self, diff_text: str) -> None:
        size_bytes = len(diff_text.encode("utf-8", errors="replace"))
        if size_bytes > self.settings.MAX_DIFF_SIZE_BYTES:
            raise DiffTooLargeError(size_bytes, self.settings.MAX_DIFF_SIZE_BYTES)
