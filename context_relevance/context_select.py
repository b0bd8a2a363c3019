from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from . import config
from .errors import InvalidCandidateError
from .pipeline_types import RelatedCandidate, RelationshipBuckets, RelationshipType, ScoredCandidate
from .relevance import score_candidate


# ---------------------------------------------------------------------------
# Precondition checks (caller side)
# ---------------------------------------------------------------------------

def validate_candidate(candidate: RelatedCandidate) -> RelatedCandidate:
    try:
        confidence = float(candidate.confidence)
    except (TypeError, ValueError):
        raise InvalidCandidateError(candidate.id, f"confidence {candidate.confidence!r} is not a number")
    if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
        raise InvalidCandidateError(candidate.id, f"confidence {confidence} outside [0, 1]")
    return candidate


def drop_invalid_candidates(
    buckets: RelationshipBuckets,
) -> Tuple[RelationshipBuckets, List[InvalidCandidateError]]:
    """
    Remove candidates whose confidence is out of range.

    The analyzer is expected to hand over confidences in [0, 1]. Anything
    else is logged and dropped here instead of being clamped, so the ranking
    continues with the remaining candidates and the analyzer bug stays
    visible.
    """
    errors: List[InvalidCandidateError] = []
    kept = {}
    for bucket_name, rtype in config.BUCKET_ORDER:
        good: List[RelatedCandidate] = []
        for cand in getattr(buckets, bucket_name):
            try:
                good.append(validate_candidate(cand))
            except InvalidCandidateError as e:
                logger.warning("Dropping {} candidate {}: {}", rtype.value, cand.id, e.reason)
                errors.append(e)
        kept[bucket_name] = good
    return RelationshipBuckets(**kept), errors


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def tag_candidates(buckets: RelationshipBuckets) -> List[Tuple[RelatedCandidate, RelationshipType]]:
    """Flatten the buckets in fixed order, keeping within-bucket order."""
    tagged = []
    for bucket_name, rtype in config.BUCKET_ORDER:
        for cand in getattr(buckets, bucket_name):
            tagged.append((cand, rtype))
    return tagged


def rank_candidates(
    buckets: RelationshipBuckets,
    target_language: Optional[str] = None,
) -> List[ScoredCandidate]:
    """
    Score every candidate and sort by score, highest first.

    The sort is stable, so equal scores keep bucket order
    (NEARBY, KEY_PATTERN, SAME_COMPONENT, SAME_FILE, SEMANTIC) and then
    analyzer order. Nothing is truncated; apply a top-N cutoff downstream.
    """
    tagged = tag_candidates(buckets)
    if not tagged:
        return []

    scored = [
        ScoredCandidate(
            candidate=cand,
            relationship_type=rtype,
            score=score_candidate(cand, rtype, target_language),
        )
        for cand, rtype in tagged
    ]
    scores = np.array([s.score for s in scored], dtype="float64")
    order = np.argsort(-scores, kind="stable")
    return [scored[int(i)] for i in order]


def select_context_candidates(
    buckets: RelationshipBuckets,
    target_language: str,
    top_n: Optional[int] = None,
) -> List[ScoredCandidate]:
    """
    Pick the related keys to show an AI translation call.

    Invalid candidates are dropped, then only keys that already have a
    translation in ``target_language`` are ranked; the best ``top_n``
    (``CONTEXT_TOP_N`` by default) are returned.
    """
    if top_n is None:
        top_n = config.CONTEXT_TOP_N
    clean, errors = drop_invalid_candidates(buckets)
    if errors:
        logger.info("Ranking context with {} invalid candidates removed", len(errors))

    def _with_target(cands: Sequence[RelatedCandidate]) -> List[RelatedCandidate]:
        return [c for c in cands if c.translation_for(target_language) is not None]

    filtered = RelationshipBuckets(
        nearby=_with_target(clean.nearby),
        key_pattern=_with_target(clean.key_pattern),
        same_component=_with_target(clean.same_component),
        same_file=_with_target(clean.same_file),
        semantic=_with_target(clean.semantic),
    )
    ranked = rank_candidates(filtered, target_language)
    logger.debug(
        "Context selection for {}: {} candidates, {} with target, keeping {}",
        target_language,
        len(buckets),
        len(ranked),
        min(len(ranked), max(0, top_n)),
    )
    return ranked[: max(0, top_n)]
