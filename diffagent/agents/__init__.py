from diffagent.agents.diff_agent import AnalysisReport, DiffAgent

__all__ = ["AnalysisReport", "DiffAgent"]
