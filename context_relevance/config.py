from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ThresholdOrderError
from .pipeline_types import (
    ApprovalStatus,
    RelatedCandidate,
    RelationshipBuckets,
    RelationshipType,
    ScoredCandidate,
    TranslationEntry,
)


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]


# ---------------------------
# Relevance scoring
# ---------------------------

# Relationship weights for AI context selection. Read-only at runtime.
RELATIONSHIP_PRIORITY: Mapping[RelationshipType, float] = MappingProxyType(
    {
        RelationshipType.NEARBY: 1.0,
        RelationshipType.KEY_PATTERN: 0.9,
        RelationshipType.SAME_COMPONENT: 0.8,
        RelationshipType.SAME_FILE: 0.7,
        RelationshipType.SEMANTIC: 0.6,
    }
)
UNKNOWN_RELATIONSHIP_WEIGHT = 0.5

# Multiplier for candidates already approved in the target language
APPROVED_BOOST = 1.2

# Bucket order doubles as the tie-break between equal scores
BUCKET_ORDER = (
    ("nearby", RelationshipType.NEARBY),
    ("key_pattern", RelationshipType.KEY_PATTERN),
    ("same_component", RelationshipType.SAME_COMPONENT),
    ("same_file", RelationshipType.SAME_FILE),
    ("semantic", RelationshipType.SEMANTIC),
)

# Prompt-side cutoff; rank_candidates never truncates
DEFAULT_CONTEXT_TOP_N = 5
CONTEXT_TOP_N = int(os.getenv("CONTEXT_TOP_N", str(DEFAULT_CONTEXT_TOP_N)))


# ---------------------------
# Content fingerprint
# ---------------------------

FINGERPRINT_LENGTH = 16  # hex chars, i.e. 64 bits of SHA-256
FINGERPRINT_DELIMITER = "|"


# ---------------------------
# Quality bands (branch summary)
# ---------------------------

EXCELLENT_MIN_SCORE = 80
GOOD_MIN_SCORE = 60


# ---------------------------
# Logging / observability
# ---------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "logs")))
LOG_FILE_NAME = "context_relevance.log"
LOG_ROTATION = "10 MB"
LOG_RETENTION = 5


# ---------------------------
# Per-project quality configuration
# ---------------------------

class QualityConfig(BaseModel):
    """
    Quality scoring settings for one project.

    Accepts both snake_case names and the camelCase keys used by the
    project configuration store. ``flag_threshold <= auto_approve_threshold``
    is expected but only enforced by :func:`merge_quality_config`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    score_after_ai_translation: bool = True
    score_before_merge: bool = False
    auto_approve_threshold: int = Field(default=80, ge=0, le=100)
    flag_threshold: int = Field(default=60, ge=0, le=100)
    ai_evaluation_enabled: bool = True
    ai_evaluation_provider: Optional[str] = None
    ai_evaluation_model: Optional[str] = None

    @property
    def ai_evaluation_available(self) -> bool:
        return bool(
            self.ai_evaluation_enabled
            and self.ai_evaluation_provider
            and self.ai_evaluation_model
        )


class QualityConfigUpdate(BaseModel):
    """Partial update; unset fields keep their stored value."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score_after_ai_translation: Optional[bool] = None
    score_before_merge: Optional[bool] = None
    auto_approve_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    flag_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    ai_evaluation_enabled: Optional[bool] = None
    ai_evaluation_provider: Optional[str] = None
    ai_evaluation_model: Optional[str] = None


DEFAULT_QUALITY_CONFIG = QualityConfig()

# null in an update clears these; for the rest null means "unchanged"
_NULLABLE_FIELDS = frozenset({"ai_evaluation_provider", "ai_evaluation_model"})


def resolve_quality_config(stored: Optional[Mapping[str, Any]]) -> QualityConfig:
    """Stored config for a project, or the defaults when it has none."""
    if stored is None:
        return DEFAULT_QUALITY_CONFIG
    if isinstance(stored, QualityConfig):
        return stored
    return QualityConfig.model_validate(stored)


def check_threshold_order(config: QualityConfig) -> QualityConfig:
    if config.flag_threshold > config.auto_approve_threshold:
        raise ThresholdOrderError(config.flag_threshold, config.auto_approve_threshold)
    return config


def merge_quality_config(
    stored: Optional[Mapping[str, Any]],
    update: QualityConfigUpdate,
) -> QualityConfig:
    """
    Apply ``update`` on top of the stored (or default) config.

    This is the save-time check the configuration store runs: an update that
    would leave ``flag_threshold`` above ``auto_approve_threshold`` raises
    :class:`ThresholdOrderError` and nothing should be persisted.
    """
    base = resolve_quality_config(stored)
    changes = {
        k: v
        for k, v in update.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    merged = QualityConfig.model_validate({**base.model_dump(), **changes})
    return check_threshold_order(merged)


# ---------------------------
# Pydantic models shared around the app (HTTP + CLI wire shapes)
# ---------------------------

class TranslationIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    language: str
    value: str = ""
    approval_status: ApprovalStatus = ApprovalStatus.PENDING

    def to_entry(self) -> TranslationEntry:
        return TranslationEntry(self.language, self.value, self.approval_status)


class CandidateIn(BaseModel):
    """
    Wire form of a related candidate. Confidence is not range-checked here:
    out-of-range values reach ``drop_invalid_candidates`` and are reported.
    """

    id: str
    confidence: float
    name: Optional[str] = None
    translations: List[TranslationIn] = Field(default_factory=list)

    def to_candidate(self) -> RelatedCandidate:
        return RelatedCandidate(
            id=self.id,
            confidence=self.confidence,
            translations=tuple(t.to_entry() for t in self.translations),
            name=self.name,
        )


class BucketsIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    nearby: List[CandidateIn] = Field(default_factory=list)
    key_pattern: List[CandidateIn] = Field(default_factory=list)
    same_component: List[CandidateIn] = Field(default_factory=list)
    same_file: List[CandidateIn] = Field(default_factory=list)
    semantic: List[CandidateIn] = Field(default_factory=list)

    def to_buckets(self) -> RelationshipBuckets:
        return RelationshipBuckets(
            **{
                name: [c.to_candidate() for c in getattr(self, name)]
                for name, _ in BUCKET_ORDER
            }
        )


class ScoredCandidateOut(BaseModel):
    id: str
    name: Optional[str] = None
    relationship_type: RelationshipType
    confidence: float
    score: float

    @classmethod
    def from_scored(cls, scored: ScoredCandidate) -> "ScoredCandidateOut":
        return cls(
            id=scored.id,
            name=scored.candidate.name,
            relationship_type=scored.relationship_type,
            confidence=scored.confidence,
            score=scored.score,
        )


class HealthResponse(BaseModel):
    status: str
