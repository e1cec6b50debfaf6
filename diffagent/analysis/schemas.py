"""
Structured schemas for classification and risk results.

These Pydantic models bound every score to [0, 1] and serialize to
plain JSON-compatible data with model_dump(mode="json").
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    """Semantic category of a file's edit."""
    BUG_FIX = "bug_fix"
    FEATURE = "feature"
    REFACTOR = "refactor"
    DOCUMENTATION = "documentation"
    TEST = "test"
    SECURITY_FIX = "security_fix"
    PERFORMANCE_OPTIMIZATION = "performance_optimization"
    OTHER = "other"
    NO_CHANGE = "no-change"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    """Discrete risk band derived from a risk score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClassificationDetails(BaseModel):
    """Counts and text the classification was computed from."""

    added_lines: int = Field(default=0, ge=0)
    removed_lines: int = Field(default=0, ge=0)
    total_changes: int = Field(default=0, ge=0)
    content: str = Field(
        default="",
        description="Changed-line bodies, marker stripped, newline joined"
    )
    category_scores: Dict[str, int] = Field(
        default_factory=dict,
        description="Pattern match count per category"
    )


class Classification(BaseModel):
    """Change-type label assigned to one file."""

    change_type: ChangeType
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Strength of the pattern evidence (0.0-1.0)"
    )
    details: ClassificationDetails = Field(default_factory=ClassificationDetails)
    language: Optional[str] = Field(
        None,
        description="Language tag when a language strategy classified the file"
    )
    language_signals: Dict[str, Any] = Field(
        default_factory=dict,
        description="Language-specific observations"
    )

    @classmethod
    def unknown(cls) -> "Classification":
        """Result used when a file cannot be classified."""
        return cls(change_type=ChangeType.UNKNOWN, confidence=0.0)


class RiskFactors(BaseModel):
    """The three independent per-file risk factors."""

    file_type: float = Field(..., ge=0.0, le=1.0)
    change_type: float = Field(..., ge=0.0, le=1.0)
    size: float = Field(..., ge=0.0, le=1.0)


class FileRisk(BaseModel):
    """Risk computed for a single file."""

    file_path: str
    risk_score: float = Field(..., ge=0.0, le=1.0)
    risk_factors: Optional[RiskFactors] = Field(
        None,
        description="Missing when the file's risk could not be computed"
    )


class RiskDetails(BaseModel):
    """Per-file breakdown behind a diff-level risk score."""

    file_risks: List[FileRisk] = Field(default_factory=list)
    total_files: int = Field(default=0, ge=0)


class RiskAssessment(BaseModel):
    """Diff-level risk score and band."""

    risk_score: float = Field(..., ge=0.0, le=1.0)
    risk_level: RiskLevel
    details: RiskDetails = Field(default_factory=RiskDetails)

    def get_high_risk_files(self, threshold: float) -> List[FileRisk]:
        """Files whose own score is at or above threshold."""
        return [f for f in self.details.file_risks if f.risk_score >= threshold]
