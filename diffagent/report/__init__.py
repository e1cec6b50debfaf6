from diffagent.report.summary import AnalysisSummary, build_summary
from diffagent.report.recommendations import Priority, Recommendation, RecommendationGenerator
from diffagent.report.formatter import format_report_markdown

__all__ = [
    "AnalysisSummary",
    "build_summary",
    "Priority",
    "Recommendation",
    "RecommendationGenerator",
    "format_report_markdown",
]
