"""DiffAgent - heuristic classification and risk scoring of unified diffs."""

__version__ = "1.0.0"

from diffagent.agents.diff_agent import AnalysisReport, DiffAgent  # noqa: E402

__all__ = ["AnalysisReport", "DiffAgent", "__version__"]
