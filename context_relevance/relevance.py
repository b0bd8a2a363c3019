from __future__ import annotations

"""
Relevance scoring for related translation keys.

A candidate's score is its relationship weight times the analyzer's
confidence, boosted when the candidate already has an approved translation
in the language being translated into:

    score = priority_weight(type) * confidence * (APPROVED_BOOST or 1.0)

The weight table and boost are injected as arguments with the module
constants as defaults, so callers can experiment without touching globals.
"""

from typing import Mapping, Optional, Union

from .config import APPROVED_BOOST, RELATIONSHIP_PRIORITY, UNKNOWN_RELATIONSHIP_WEIGHT
from .pipeline_types import ApprovalStatus, RelatedCandidate, RelationshipType


def priority_weight(
    relationship_type: Union[RelationshipType, str, None],
    table: Mapping[RelationshipType, float] = RELATIONSHIP_PRIORITY,
) -> float:
    """Weight for a relationship type; 0.5 for anything outside the enum."""
    try:
        rtype = RelationshipType(relationship_type)
    except ValueError:
        return UNKNOWN_RELATIONSHIP_WEIGHT
    return table.get(rtype, UNKNOWN_RELATIONSHIP_WEIGHT)


def has_approved_translation(candidate: RelatedCandidate, target_language: Optional[str]) -> bool:
    if not target_language:
        return False
    return any(
        t.language == target_language and t.approval_status == ApprovalStatus.APPROVED
        for t in candidate.translations
    )


def score_candidate(
    candidate: RelatedCandidate,
    relationship_type: Union[RelationshipType, str, None],
    target_language: Optional[str] = None,
    table: Mapping[RelationshipType, float] = RELATIONSHIP_PRIORITY,
    approved_boost: float = APPROVED_BOOST,
) -> float:
    """
    Relevance of one candidate. Pure and total: confidence is used as given
    (range checks are the caller's job, see ``drop_invalid_candidates``).
    """
    boost = approved_boost if has_approved_translation(candidate, target_language) else 1.0
    return priority_weight(relationship_type, table) * float(candidate.confidence) * boost
