"""
Language detection and language-specific classification strategies.

detect_language() maps a file path to a LanguageTag. STRATEGIES maps
every tag to a function with the same (classifier, file) -> Classification
shape. Specialized strategies run the generic rules first and then refine
the result with their own patterns.
"""

import re
import logging
from enum import Enum
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping, NamedTuple, Optional, Tuple

from diffagent.analysis.diff_parser import FileChange
from diffagent.analysis.schemas import ChangeType, Classification

if TYPE_CHECKING:
    from diffagent.analysis.classifier import ChangeClassifier

logger = logging.getLogger(__name__)


class LanguageTag(str, Enum):
    """Languages recognized by file extension."""
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    JAVA = "java"
    KOTLIN = "kotlin"
    GO = "go"
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    UNKNOWN = "unknown"


EXTENSION_MAP: Mapping[str, LanguageTag] = MappingProxyType({
    'js': LanguageTag.JAVASCRIPT,
    'jsx': LanguageTag.JAVASCRIPT,
    'mjs': LanguageTag.JAVASCRIPT,
    'cjs': LanguageTag.JAVASCRIPT,
    'ts': LanguageTag.TYPESCRIPT,
    'tsx': LanguageTag.TYPESCRIPT,
    'py': LanguageTag.PYTHON,
    'java': LanguageTag.JAVA,
    'kt': LanguageTag.KOTLIN,
    'kts': LanguageTag.KOTLIN,
    'go': LanguageTag.GO,
    'json': LanguageTag.JSON,
    'yml': LanguageTag.YAML,
    'yaml': LanguageTag.YAML,
    'toml': LanguageTag.TOML,
})

Strategy = Callable[["ChangeClassifier", FileChange], Classification]

# Results a strategy passes through untouched
_TERMINAL_TYPES = (ChangeType.NO_CHANGE, ChangeType.UNKNOWN)


def detect_language(file_path: Optional[str]) -> LanguageTag:
    """
    Detect language from a file path.

    Args:
        file_path: File name or path

    Returns:
        LanguageTag: Detected language, UNKNOWN when unrecognized
    """
    if not file_path or not isinstance(file_path, str):
        return LanguageTag.UNKNOWN

    name = PurePosixPath(file_path).name
    if '.' not in name:
        return LanguageTag.UNKNOWN

    extension = name.rsplit('.', 1)[-1].lower()
    return EXTENSION_MAP.get(extension, LanguageTag.UNKNOWN)


def _boost(classifier: "ChangeClassifier", confidence: float) -> float:
    config = classifier.config
    return min(confidence + config.language_confidence_boost, config.language_confidence_cap)


def classify_generic(classifier: "ChangeClassifier", file_change: FileChange) -> Classification:
    """Strategy for languages without their own rules."""
    return classifier.classify_generic(file_change)


# TypeScript

TYPESCRIPT_SIGNALS: Mapping[str, re.Pattern] = MappingProxyType({
    'interfaces': re.compile(r'\binterface\s+\w+'),
    'type_aliases': re.compile(r'\btype\s+\w+\s*='),
    'generics': re.compile(r'<\w+>'),
    'union_types': re.compile(r':\s*\w+(?:\[\])?\s*\|\s*\w+'),
    'optional_chaining': re.compile(r'\?\.|\?\?'),
    'react_props': re.compile(r'React\.FC<|interface\s+\w+Props'),
    'unsafe_any': re.compile(r'\bas\s+any\b|<any>|:\s*any\b'),
})


def classify_typescript(classifier: "ChangeClassifier", file_change: FileChange) -> Classification:
    """
    TypeScript strategy.

    Records TypeScript signals and raises confidence by the configured
    boost. Unsafe `any` usage turns an otherwise unexplained change into
    a security fix.
    """
    result = classifier.classify_generic(file_change)
    language = LanguageTag.TYPESCRIPT.value
    if result.change_type in _TERMINAL_TYPES:
        return result.model_copy(update={"language": language})

    content = result.details.content
    signals = {name: bool(p.search(content)) for name, p in TYPESCRIPT_SIGNALS.items()}

    change_type = result.change_type
    if signals['unsafe_any'] and change_type == ChangeType.OTHER:
        change_type = ChangeType.SECURITY_FIX

    return result.model_copy(update={
        "change_type": change_type,
        "confidence": _boost(classifier, result.confidence),
        "language": language,
        "language_signals": signals,
    })


# Go

class GoRule(NamedTuple):
    name: str
    pattern: re.Pattern
    change_type: ChangeType
    confidence: float
    # Extra pattern that must also match for the rule to apply
    requires: Optional[re.Pattern] = None


GO_RULES: Tuple[GoRule, ...] = (
    GoRule('goroutines', re.compile(r'\bgo\s+\w+(?:\.\w+)*\s*\('),
           ChangeType.PERFORMANCE_OPTIMIZATION, 0.7),
    GoRule('interfaces', re.compile(r'\btype\s+\w+\s+interface\s*\{'),
           ChangeType.FEATURE, 0.8),
    GoRule('http_handlers',
           re.compile(r'func\s+\w+\s*\(\w+\s+http\.ResponseWriter,\s*\w+\s+\*http\.Request\)'),
           ChangeType.FEATURE, 0.8),
    GoRule('methods', re.compile(r'func\s+\(\w+\s+\*?\w+\)\s+\w+\s*\('),
           ChangeType.FEATURE, 0.7),
    GoRule('structs', re.compile(r'\btype\s+\w+\s+struct\s*\{'),
           ChangeType.FEATURE, 0.7),
    GoRule('tls_upgrade', re.compile(r'http\.(?:Get|Post)\('),
           ChangeType.SECURITY_FIX, 0.9,
           requires=re.compile(r'https|tls', re.IGNORECASE)),
    GoRule('buffer_pooling', re.compile(r'sync\.Pool|bytes\.NewBuffer\('),
           ChangeType.PERFORMANCE_OPTIMIZATION, 0.8),
    GoRule('context_usage', re.compile(r'context\.Context'),
           ChangeType.FEATURE, 0.6),
)


def _go_rule_matches(rule: GoRule, content: str) -> bool:
    if not rule.pattern.search(content):
        return False
    return rule.requires is None or bool(rule.requires.search(content))


def classify_go(classifier: "ChangeClassifier", file_change: FileChange) -> Classification:
    """
    Go strategy.

    The first matching Go rule is combined with the generic result: when
    both agree the confidence is boosted, otherwise the more confident
    label wins and ties keep the generic label.
    """
    result = classifier.classify_generic(file_change)
    language = LanguageTag.GO.value
    if result.change_type in _TERMINAL_TYPES:
        return result.model_copy(update={"language": language})

    content = result.details.content
    matched = [rule for rule in GO_RULES if _go_rule_matches(rule, content)]
    signals = {rule.name: any(m.name == rule.name for m in matched) for rule in GO_RULES}
    update = {"language": language, "language_signals": signals}

    if not matched:
        return result.model_copy(update=update)

    rule = matched[0]
    if rule.change_type == result.change_type:
        update["confidence"] = _boost(classifier, max(result.confidence, rule.confidence))
    elif rule.confidence > result.confidence:
        update["change_type"] = rule.change_type
        update["confidence"] = rule.confidence

    logger.debug(
        "Go rule applied",
        extra={"file_path": file_change.path, "rule": rule.name},
    )
    return result.model_copy(update=update)


# Every tag has an entry so the supported set is explicit
STRATEGIES: Mapping[LanguageTag, Strategy] = MappingProxyType({
    LanguageTag.JAVASCRIPT: classify_generic,
    LanguageTag.TYPESCRIPT: classify_typescript,
    LanguageTag.PYTHON: classify_generic,
    LanguageTag.JAVA: classify_generic,
    LanguageTag.KOTLIN: classify_generic,
    LanguageTag.GO: classify_go,
    LanguageTag.JSON: classify_generic,
    LanguageTag.YAML: classify_generic,
    LanguageTag.TOML: classify_generic,
    LanguageTag.UNKNOWN: classify_generic,
})


def get_strategy(tag: LanguageTag) -> Strategy:
    """Classification strategy for a language tag."""
    return STRATEGIES.get(tag, classify_generic)
