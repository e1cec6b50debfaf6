"""
Change classifier module.

Assigns a semantic change type to each file of a parsed diff using
ordered keyword patterns over the changed lines:
- bug fixes, features, refactors, documentation, tests
- fallback heuristics when no keyword matches
- per-language refinements (see languages.py)
"""

import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from diffagent.config import Settings
from diffagent.analysis.diff_parser import FileChange, ParsedDiff
from diffagent.analysis.languages import detect_language, get_strategy
from diffagent.analysis.schemas import ChangeType, Classification, ClassificationDetails
from diffagent.observability.errors import capture_exception

logger = logging.getLogger(__name__)


# Category rules in priority order; earlier categories win ties
DEFAULT_CATEGORY_PATTERNS: Tuple[Tuple[ChangeType, Tuple[str, ...]], ...] = (
    (ChangeType.BUG_FIX, (
        r'fix',
        r'bug',
        r'error',
        r'handle.*null',
        r'boundary',
        r'edge.*case',
        r'defensive',
        r'validate',
    )),
    (ChangeType.FEATURE, (
        r'add',
        r'new',
        r'implement',
        r'create',
        r'feature',
        r'support',
        r'introduce',
    )),
    (ChangeType.REFACTOR, (
        r'refactor',
        r'rename',
        r'restructure',
        r'cleanup',
        r'improve',
        r'optimize',
        r'performance',
    )),
    (ChangeType.DOCUMENTATION, (
        r'doc',
        r'comment',
        r'readme',
        r'documentation',
        r'typo',
    )),
    (ChangeType.TEST, (
        r'test',
        r'spec',
        r'assert',
        r'jest',
        r'mocha',
        r'chai',
    )),
)

# Substrings suggesting a null check or input validation
DEFAULT_VALIDATION_IDIOMS: Tuple[str, ...] = (
    '||',
    'validate',
    'check',
    'is None',
    'is not None',
)

# Substrings suggesting new declarations
DEFAULT_DECLARATION_IDIOMS: Tuple[str, ...] = (
    'function ',
    'const ',
    'let ',
    'var ',
    'def ',
    'class ',
)


@dataclass(frozen=True)
class ClassifierConfig:
    """Immutable pattern tables and scoring constants for ChangeClassifier."""

    category_patterns: Tuple[Tuple[ChangeType, Tuple[str, ...]], ...] = DEFAULT_CATEGORY_PATTERNS
    validation_idioms: Tuple[str, ...] = DEFAULT_VALIDATION_IDIOMS
    declaration_idioms: Tuple[str, ...] = DEFAULT_DECLARATION_IDIOMS

    max_pattern_confidence: float = 0.9
    fallback_confidence: float = 0.4
    other_confidence: float = 0.3

    enable_language_strategies: bool = True
    language_confidence_boost: float = 0.2
    language_confidence_cap: float = 0.95

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassifierConfig":
        return cls(enable_language_strategies=settings.ENABLE_LANGUAGE_STRATEGIES)


@dataclass
class ClassifiedFile:
    """A parsed file together with its classification."""
    file: FileChange
    classification: Classification

    @property
    def path(self) -> str:
        return self.file.path

    def to_dict(self) -> Dict[str, Any]:
        data = self.file.to_dict()
        data["classification"] = self.classification.model_dump(mode="json")
        return data


class ChangeClassifier:
    """
    Classifies file changes by pattern heuristics.

    Holds only compiled, immutable configuration; one instance can be
    shared between threads.
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()
        self._rules: Tuple[Tuple[ChangeType, Tuple[re.Pattern, ...]], ...] = tuple(
            (change_type, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
            for change_type, patterns in self.config.category_patterns
        )

    def classify_file(self, file_change: Optional[FileChange]) -> Classification:
        """
        Classify a single file's changes.

        Never raises: a missing file, a file without a hunk list or an
        internal failure yields an UNKNOWN classification with confidence 0.

        Args:
            file_change: Parsed file

        Returns:
            Classification: Change type, confidence and details
        """
        if file_change is None or file_change.hunks is None:
            return Classification.unknown()

        try:
            if self.config.enable_language_strategies:
                strategy = get_strategy(detect_language(file_change.path))
                return strategy(self, file_change)
            return self.classify_generic(file_change)
        except Exception as e:
            logger.warning(
                "Classification failed, marking file as unknown",
                extra={"file_path": getattr(file_change, "path", None), "error": str(e)},
            )
            capture_exception(
                e,
                context={"stage": "classify", "file_path": getattr(file_change, "path", None)},
            )
            return Classification.unknown()

    def classify_generic(self, file_change: FileChange) -> Classification:
        """
        Language-independent classification.

        Args:
            file_change: Parsed file

        Returns:
            Classification from the category rules and fallbacks
        """
        added_lines, removed_lines, content = self.extract_changes(file_change)
        total_changes = added_lines + removed_lines

        if total_changes == 0:
            return Classification(
                change_type=ChangeType.NO_CHANGE,
                confidence=1.0,
                details=ClassificationDetails(),
            )

        category_scores = self.score_categories(content)

        best_type = ChangeType.OTHER
        best_score = 0
        for change_type, score in category_scores.items():
            if score > best_score:
                best_type, best_score = ChangeType(change_type), score

        if best_score > 0:
            confidence = min(self.config.max_pattern_confidence, best_score / 2)
        elif (
            any(idiom in content for idiom in self.config.validation_idioms)
            or added_lines > removed_lines
        ):
            best_type, confidence = ChangeType.BUG_FIX, self.config.fallback_confidence
        elif any(idiom in content for idiom in self.config.declaration_idioms):
            best_type, confidence = ChangeType.FEATURE, self.config.fallback_confidence
        else:
            confidence = self.config.other_confidence

        return Classification(
            change_type=best_type,
            confidence=confidence,
            details=ClassificationDetails(
                added_lines=added_lines,
                removed_lines=removed_lines,
                total_changes=total_changes,
                content=content,
                category_scores=category_scores,
            ),
        )

    def score_categories(self, content: str) -> Dict[str, int]:
        """Number of matching patterns per category, in rule order."""
        return {
            change_type.value: sum(1 for pattern in patterns if pattern.search(content))
            for change_type, patterns in self._rules
        }

    @staticmethod
    def extract_changes(file_change: FileChange) -> Tuple[int, int, str]:
        """
        Count changed lines and join their bodies.

        Returns:
            (added line count, removed line count, newline-joined bodies)
        """
        added_lines = 0
        removed_lines = 0
        bodies: List[str] = []

        for hunk in file_change.hunks:
            for line in hunk.lines:
                if line.startswith('+') and not line.startswith('+++'):
                    added_lines += 1
                    bodies.append(line[1:])
                elif line.startswith('-') and not line.startswith('---'):
                    removed_lines += 1
                    bodies.append(line[1:])

        return added_lines, removed_lines, '\n'.join(bodies)

    def classify(self, parsed: Optional[ParsedDiff]) -> List[Classification]:
        """
        Classify all files in a diff.

        Returns:
            One Classification per file, in file order
        """
        if parsed is None:
            return []
        return [self.classify_file(f) for f in parsed.files]

    def classify_files(self, parsed: Optional[ParsedDiff]) -> List[ClassifiedFile]:
        """Pair every parsed file with its classification."""
        if parsed is None:
            return []

        classified = [
            ClassifiedFile(file=f, classification=self.classify_file(f))
            for f in parsed.files
        ]
        logger.info(
            "Classified files",
            extra={"files_classified": len(classified)},
        )
        return classified
