"""
Analysis package for DiffAgent.

This package contains the diff triage pipeline:
- Diff parsing (files, hunks, added/removed line counts)
- Change classification (keyword rules plus language strategies)
- Risk assessment (per-file factors aggregated into a diff score)
"""

from diffagent.analysis.diff_parser import DiffParser, ParsedDiff, FileChange, DiffHunk
from diffagent.analysis.classifier import ChangeClassifier, ClassifierConfig, ClassifiedFile
from diffagent.analysis.risk_assessor import RiskAssessor, RiskConfig

__all__ = [
    "DiffParser",
    "ParsedDiff",
    "FileChange",
    "DiffHunk",
    "ChangeClassifier",
    "ClassifierConfig",
    "ClassifiedFile",
    "RiskAssessor",
    "RiskConfig",
]
