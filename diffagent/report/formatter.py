"""
Formatters for analysis output.

Converts an AnalysisReport into GitHub-compatible markdown for CI
comments and job summaries.
"""

import logging
from typing import TYPE_CHECKING, List

from diffagent.analysis.schemas import RiskLevel
from diffagent.report.recommendations import Priority

if TYPE_CHECKING:
    from diffagent.agents.diff_agent import AnalysisReport

logger = logging.getLogger(__name__)


RISK_EMOJI = {
    RiskLevel.LOW: "🟢",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.HIGH: "🔴",
}

PRIORITY_EMOJI = {
    Priority.HIGH: "🚨",
    Priority.MEDIUM: "⚠️",
    Priority.LOW: "ℹ️",
}

STATUS_EMOJI = {
    "added": "➕",
    "deleted": "➖",
    "modified": "✏️",
    "renamed": "🔀",
}


def format_report_markdown(report: "AnalysisReport") -> str:
    """
    Format an analysis report as markdown.

    Args:
        report: Result of DiffAgent.analyze()

    Returns:
        Markdown-formatted report
    """
    parts: List[str] = []

    parts.append("# Diff Analysis")
    parts.append("")

    if not report.success:
        parts.append(f"❌ **Analysis failed:** {report.error}")
        return "\n".join(parts)

    summary = report.summary
    risk = report.risk

    # Summary
    parts.append("## Summary")
    parts.append(
        f"**{summary.total_files}** files changed, "
        f"**+{summary.total_additions}** / **-{summary.total_deletions}** lines"
    )
    parts.append(f"**Primary change type:** {summary.primary_change_type}")
    parts.append(
        f"**Risk Assessment:** {RISK_EMOJI.get(risk.risk_level, '⚪')} "
        f"{risk.risk_level.value.upper()} ({risk.risk_score:.0%})"
    )
    parts.append("")

    # Files
    if report.files:
        parts.append("## Files")
        parts.append("")
        parts.append("| File | Status | Change | Confidence | Risk |")
        parts.append("|------|--------|--------|------------|------|")
        file_risks = {r.file_path: r.risk_score for r in risk.details.file_risks}
        for classified in report.files:
            status = classified.file.status.value
            classification = classified.classification
            parts.append(
                f"| `{classified.path}` "
                f"| {STATUS_EMOJI.get(status, '')} {status} "
                f"| {classification.change_type.value} "
                f"| {classification.confidence:.0%} "
                f"| {file_risks.get(classified.path, 0.0):.2f} |"
            )
        parts.append("")

    # Change type breakdown
    if report.change_types:
        parts.append("**By Change Type:**")
        for change_type, count in sorted(report.change_types.items(), key=lambda x: x[1], reverse=True):
            parts.append(f"- {change_type}: {count}")
        parts.append("")

    # Recommendations
    if report.recommendations:
        parts.append("## Recommendations")
        for rec in report.recommendations:
            line = f"- {PRIORITY_EMOJI.get(rec.priority, '')} **{rec.priority.value.upper()}** {rec.message}"
            if rec.files:
                shown = ", ".join(f"`{f}`" for f in rec.files[:3])
                more = f" and {len(rec.files) - 3} more" if len(rec.files) > 3 else ""
                line += f" ({shown}{more})"
            parts.append(line)
        parts.append("")

    # Degraded files
    if report.errors:
        parts.append("## ⚠️ Partially Analyzed")
        for error in report.errors:
            parts.append(f"- `{error['file_path']}` ({error['stage']}): {error['error']}")
        parts.append("")

    parts.append("---")
    parts.append("*Generated by heuristic diff analysis. Verify before acting on it.*")

    return "\n".join(parts)
