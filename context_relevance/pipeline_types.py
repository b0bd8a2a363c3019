"""Typed containers shared across the ranking and quality modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple


class RelationshipType(str, Enum):
    """Why two translation keys are considered related."""

    NEARBY = "NEARBY"
    KEY_PATTERN = "KEY_PATTERN"
    SAME_COMPONENT = "SAME_COMPONENT"
    SAME_FILE = "SAME_FILE"
    SEMANTIC = "SEMANTIC"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class TranslationEntry:
    language: str
    value: str
    approval_status: ApprovalStatus = ApprovalStatus.PENDING


@dataclass(frozen=True)
class RelatedCandidate:
    """
    A key the relationship analyzer considers related to the one being
    translated. ``confidence`` is expected in [0, 1]; ``name`` is the key name
    and only matters when rendering a prompt block.
    """

    id: str
    confidence: float
    translations: Tuple[TranslationEntry, ...] = ()
    name: Optional[str] = None

    def translation_for(self, language: str) -> Optional[TranslationEntry]:
        for entry in self.translations:
            if entry.language == language:
                return entry
        return None


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate tagged with its bucket's relationship type and its score."""

    candidate: RelatedCandidate
    relationship_type: RelationshipType
    score: float

    @property
    def id(self) -> str:
        return self.candidate.id

    @property
    def confidence(self) -> float:
        return self.candidate.confidence


@dataclass(frozen=True)
class RelationshipBuckets:
    """The analyzer's five candidate lists, each already deduplicated."""

    nearby: Tuple[RelatedCandidate, ...] = ()
    key_pattern: Tuple[RelatedCandidate, ...] = ()
    same_component: Tuple[RelatedCandidate, ...] = ()
    same_file: Tuple[RelatedCandidate, ...] = ()
    semantic: Tuple[RelatedCandidate, ...] = ()

    def __post_init__(self) -> None:
        # accept lists from callers but keep the instance immutable
        for name in ("nearby", "key_pattern", "same_component", "same_file", "semantic"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def __iter__(self) -> Iterator[RelatedCandidate]:
        yield from self.nearby
        yield from self.key_pattern
        yield from self.same_component
        yield from self.same_file
        yield from self.semantic

    def __len__(self) -> int:
        return (
            len(self.nearby)
            + len(self.key_pattern)
            + len(self.same_component)
            + len(self.same_file)
            + len(self.semantic)
        )


@dataclass
class ScoreRow:
    """One translation row fed into the branch quality summary."""

    language: str
    score: Optional[int] = None
    translation_id: Optional[str] = field(default=None)
