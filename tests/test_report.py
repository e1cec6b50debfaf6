"""Tests for summaries, recommendations and markdown output."""

import pytest

from diffagent.agents.diff_agent import AnalysisReport, DiffAgent
from diffagent.analysis.classifier import ClassifiedFile
from diffagent.analysis.schemas import ChangeType, Classification, RiskAssessment, RiskLevel
from diffagent.report.formatter import format_report_markdown
from diffagent.report.recommendations import (
    Priority,
    RecommendationGenerator,
    is_source_path,
    is_test_path,
)
from diffagent.report.summary import build_summary


@pytest.fixture
def classified(make_file):
    def _make(path: str, change_type: ChangeType, added=("x",)) -> ClassifiedFile:
        return ClassifiedFile(
            file=make_file(path, added=added),
            classification=Classification(change_type=change_type, confidence=0.5),
        )
    return _make


class TestSummary:
    def test_totals(self, classified):
        files = [
            classified("a.py", ChangeType.FEATURE, added=("a", "b")),
            classified("b.py", ChangeType.FEATURE),
            classified("c.md", ChangeType.DOCUMENTATION),
        ]
        summary = build_summary(files, RiskAssessment(risk_score=0.5, risk_level=RiskLevel.MEDIUM))
        assert summary.total_files == 3
        assert summary.total_additions == 4
        assert summary.total_deletions == 0
        assert summary.primary_change_type == "feature"
        assert summary.change_types == {"feature": 2, "documentation": 1}
        assert summary.risk_level == "medium"

    def test_first_seen_wins_ties(self, classified):
        files = [classified("a.md", ChangeType.DOCUMENTATION), classified("b.py", ChangeType.BUG_FIX)]
        assert build_summary(files).primary_change_type == "documentation"

    def test_empty(self):
        summary = build_summary([])
        assert summary.total_files == 0
        assert summary.primary_change_type == "other"
        assert summary.risk_level == "unknown"


class TestPaths:
    @pytest.mark.parametrize("path", ["tests/test_app.py", "src/app.spec.ts", "web/__tests__/x.js"])
    def test_test_paths(self, path):
        assert is_test_path(path)
        assert not is_source_path(path)

    def test_source_paths(self):
        assert is_source_path("src/app.py")
        assert not is_source_path("README.md")


class TestRecommendations:
    def test_bug_fix_with_tests(self, classified):
        files = [
            classified("src/app.py", ChangeType.BUG_FIX),
            classified("tests/test_app.py", ChangeType.TEST),
        ]
        recs = RecommendationGenerator().generate(files)
        assert recs[0].priority == Priority.HIGH
        assert recs[0].category == "testing"
        assert recs[0].files == ["src/app.py"]
        assert not any("adding tests" in r.message for r in recs)

    def test_source_without_tests(self, classified):
        recs = RecommendationGenerator().generate([classified("src/app.py", ChangeType.FEATURE)])
        messages = [r.message for r in recs]
        assert any("documentation" in m for m in messages)
        assert any("adding tests" in m for m in messages)

    def test_security_fix(self, classified):
        recs = RecommendationGenerator().generate([classified("api.ts", ChangeType.SECURITY_FIX)])
        assert recs[0].category == "security"
        assert recs[0].priority == Priority.HIGH

    def test_risk_bands(self, classified):
        files = [classified("README.md", ChangeType.DOCUMENTATION)]
        high = RiskAssessment(risk_score=0.8, risk_level=RiskLevel.HIGH)
        medium = RiskAssessment(risk_score=0.5, risk_level=RiskLevel.MEDIUM)
        low = RiskAssessment(risk_score=0.1, risk_level=RiskLevel.LOW)

        generator = RecommendationGenerator()
        assert [r.type for r in generator.generate(files, high)] == ["warning"]
        assert [r.priority for r in generator.generate(files, medium)] == [Priority.MEDIUM]
        assert generator.generate(files, low) == []

    def test_large_diff(self, classified):
        files = [classified(f"docs/page{i}.md", ChangeType.DOCUMENTATION) for i in range(6)]
        recs = RecommendationGenerator().generate(files)
        assert len(recs) == 1
        assert recs[0].category == "process"
        assert recs[0].priority == Priority.LOW

    def test_large_diff_threshold_is_configurable(self, classified):
        files = [classified(f"docs/page{i}.md", ChangeType.DOCUMENTATION) for i in range(3)]
        assert RecommendationGenerator(large_diff_file_count=2).generate(files)

    def test_sorted_by_priority(self, classified):
        files = [classified(f"src/m{i}.py", ChangeType.REFACTOR) for i in range(6)]
        files.append(classified("src/fix.py", ChangeType.BUG_FIX))
        recs = RecommendationGenerator().generate(
            files, RiskAssessment(risk_score=0.9, risk_level=RiskLevel.HIGH)
        )
        order = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}
        ranks = [order[r.priority] for r in recs]
        assert ranks == sorted(ranks)
        assert recs[-1].category == "process"

    def test_no_files(self):
        assert RecommendationGenerator().generate([]) == []

    def test_to_dict(self, classified):
        rec = RecommendationGenerator().generate([classified("a.py", ChangeType.BUG_FIX)])[0]
        assert rec.to_dict()["priority"] == "high"


class TestMarkdown:
    def test_successful_report(self, simple_diff: str):
        report = DiffAgent().analyze(simple_diff)
        text = format_report_markdown(report)
        assert text.startswith("# Diff Analysis")
        assert "`test.js`" in text
        assert "MEDIUM" in text
        assert "## Recommendations" in text

    def test_failed_report(self):
        text = format_report_markdown(AnalysisReport.failure("Diff is too big"))
        assert "Analysis failed" in text
        assert "Diff is too big" in text
        assert "## Summary" not in text
