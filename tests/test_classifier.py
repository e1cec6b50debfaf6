"""Tests for the change classifier."""

import pytest

from diffagent.analysis.classifier import (
    ChangeClassifier,
    ClassifiedFile,
    ClassifierConfig,
)
from diffagent.analysis.diff_parser import DiffParser, FileChange, FileStatus
from diffagent.analysis.schemas import ChangeType
from diffagent.observability.errors import error_tracking


class ExplodingClassifier(ChangeClassifier):
    def classify_generic(self, file_change):
        raise ValueError("boom")


@pytest.fixture
def classifier() -> ChangeClassifier:
    return ChangeClassifier()


class TestClassifyGeneric:
    def test_context_only_is_no_change(self, classifier: ChangeClassifier, context_only_diff: str):
        f = DiffParser().parse(context_only_diff).files[0]
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.NO_CHANGE
        assert result.confidence == 1.0

    def test_fix_and_null_check_is_bug_fix(self, classifier: ChangeClassifier, bug_fix_diff: str):
        f = DiffParser().parse(bug_fix_diff).files[0]
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.BUG_FIX
        assert 0 < result.confidence <= 0.9

    def test_tie_goes_to_earlier_category(self, classifier: ChangeClassifier, simple_diff: str):
        # "New comment" scores one feature and one documentation match
        f = DiffParser().parse(simple_diff).files[0]
        result = classifier.classify_file(f)
        assert result.details.category_scores["feature"] == 1
        assert result.details.category_scores["documentation"] == 1
        assert result.change_type == ChangeType.FEATURE
        assert result.confidence == pytest.approx(0.5)

    def test_confidence_is_capped(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.txt", added=["fix bug error boundary edge case defensive validate"])
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.BUG_FIX
        assert result.confidence == pytest.approx(0.9)

    def test_fallback_more_additions_is_bug_fix(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.txt", added=["x = 1", "y = 2"], removed=["z = 3"])
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.BUG_FIX
        assert result.confidence == pytest.approx(0.4)

    def test_fallback_validation_idiom_is_bug_fix(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.py", added=["if value is None: return"], removed=["return value"])
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.BUG_FIX
        assert result.confidence == pytest.approx(0.4)

    def test_fallback_declaration_idiom_is_feature(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.txt", added=["const x = 1"], removed=["x = 1"])
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.FEATURE
        assert result.confidence == pytest.approx(0.4)

    def test_fallback_other(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.txt", added=["x = 2"], removed=["x = 1"])
        result = classifier.classify_file(f)
        assert result.change_type == ChangeType.OTHER
        assert result.confidence == pytest.approx(0.3)

    def test_runner_name_counts_once_as_test(self, classifier: ChangeClassifier, make_file):
        # "pytest" only matches through the generic "test" rule
        f = make_file("x.txt", added=["pytest.main()"], removed=["run()"])
        result = classifier.classify_file(f)
        assert result.details.category_scores["test"] == 1
        assert result.change_type == ChangeType.TEST

    def test_details(self, classifier: ChangeClassifier, make_file):
        f = make_file("x.txt", added=["a", "b"], removed=["c"], context=["ctx"])
        details = classifier.classify_file(f).details
        assert details.added_lines == 2
        assert details.removed_lines == 1
        assert details.total_changes == 3
        assert details.content == "c\na\nb"


class TestDegradedResults:
    def test_none_file(self, classifier: ChangeClassifier):
        result = classifier.classify_file(None)
        assert result.change_type == ChangeType.UNKNOWN
        assert result.confidence == 0.0

    def test_missing_hunk_list(self, classifier: ChangeClassifier):
        f = FileChange(old_path="a.js", new_path="a.js", status=FileStatus.MODIFIED, hunks=None)
        assert classifier.classify_file(f).change_type == ChangeType.UNKNOWN

    def test_internal_failure_is_isolated(self, make_file):
        with error_tracking() as tracker:
            result = ExplodingClassifier().classify_file(make_file("a.js", added=["x"]))
        assert result.change_type == ChangeType.UNKNOWN
        assert result.confidence == 0.0
        assert len(tracker.errors) == 1
        assert tracker.errors[0].stage == "classify"
        assert tracker.errors[0].file_path == "a.js"

    def test_failure_without_tracker_does_not_raise(self, make_file):
        result = ExplodingClassifier().classify_file(make_file("a.js", added=["x"]))
        assert result.change_type == ChangeType.UNKNOWN


class TestClassifyDiff:
    def test_classify_all_files(self, classifier: ChangeClassifier, multi_file_diff: str):
        results = classifier.classify(DiffParser().parse(multi_file_diff))
        assert [r.change_type for r in results] == [
            ChangeType.FEATURE,
            ChangeType.BUG_FIX,
            ChangeType.NO_CHANGE,
        ]

    def test_classify_none(self, classifier: ChangeClassifier):
        assert classifier.classify(None) == []
        assert classifier.classify_files(None) == []

    def test_classify_files_pairs(self, classifier: ChangeClassifier, simple_diff: str):
        classified = classifier.classify_files(DiffParser().parse(simple_diff))
        assert len(classified) == 1
        assert isinstance(classified[0], ClassifiedFile)
        assert classified[0].path == "test.js"
        data = classified[0].to_dict()
        assert data["classification"]["change_type"] == "feature"
        assert data["additions"] == 2

    def test_deterministic(self, classifier: ChangeClassifier, multi_file_diff: str):
        parsed = DiffParser().parse(multi_file_diff)
        assert classifier.classify(parsed) == classifier.classify(parsed)

    def test_strategies_can_be_disabled(self, make_file):
        config = ClassifierConfig(enable_language_strategies=False)
        result = ChangeClassifier(config).classify_file(make_file("a.ts", added=["fix it"]))
        assert result.language is None
        assert result.confidence == pytest.approx(0.5)

    def test_custom_patterns(self, make_file):
        config = ClassifierConfig(category_patterns=((ChangeType.TEST, (r"\bspec\b",)),))
        result = ChangeClassifier(config).classify_file(make_file("x.txt", added=["new spec"]))
        assert result.change_type == ChangeType.TEST
        assert list(result.details.category_scores) == ["test"]
