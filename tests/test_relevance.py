import pytest

from context_relevance.config import RELATIONSHIP_PRIORITY
from context_relevance.pipeline_types import (
    ApprovalStatus,
    RelatedCandidate,
    RelationshipType,
    TranslationEntry,
)
from context_relevance.relevance import has_approved_translation, priority_weight, score_candidate


def _cand(confidence, status=None, language="de"):
    translations = ()
    if status is not None:
        translations = (TranslationEntry(language, "Hallo", status),)
    return RelatedCandidate(id="k1", confidence=confidence, translations=translations)


def test_priority_weights_match_table():
    expected = {
        RelationshipType.NEARBY: 1.0,
        RelationshipType.KEY_PATTERN: 0.9,
        RelationshipType.SAME_COMPONENT: 0.8,
        RelationshipType.SAME_FILE: 0.7,
        RelationshipType.SEMANTIC: 0.6,
    }
    for rtype, weight in expected.items():
        assert priority_weight(rtype) == weight
        # plain strings from JSON resolve to the same weight
        assert priority_weight(rtype.value) == weight


def test_unknown_relationship_type_falls_back():
    assert priority_weight("SIBLING") == 0.5
    assert priority_weight(None) == 0.5
    assert score_candidate(_cand(1.0), "SIBLING") == 0.5


def test_priority_table_is_read_only():
    with pytest.raises(TypeError):
        RELATIONSHIP_PRIORITY[RelationshipType.NEARBY] = 2.0  # type: ignore[index]


def test_score_strictly_increases_with_confidence():
    scores = [score_candidate(_cand(c), RelationshipType.SAME_FILE, "de") for c in (0.0, 0.1, 0.4, 0.7, 1.0)]
    assert all(a < b for a, b in zip(scores, scores[1:]))


def test_approved_target_translation_boosts_by_1_2():
    approved = score_candidate(_cand(0.8, ApprovalStatus.APPROVED), RelationshipType.KEY_PATTERN, "de")
    pending = score_candidate(_cand(0.8, ApprovalStatus.PENDING), RelationshipType.KEY_PATTERN, "de")
    assert approved / pending == pytest.approx(1.2, rel=1e-12)


def test_boost_requires_target_language_match():
    cand = _cand(0.8, ApprovalStatus.APPROVED, language="fr")
    assert not has_approved_translation(cand, "de")
    assert not has_approved_translation(cand, None)
    assert score_candidate(cand, RelationshipType.NEARBY, "de") == pytest.approx(0.8)
    assert score_candidate(cand, RelationshipType.NEARBY) == pytest.approx(0.8)
    assert score_candidate(cand, RelationshipType.NEARBY, "fr") == pytest.approx(0.96)


def test_custom_table_and_boost_are_injectable():
    table = {RelationshipType.SEMANTIC: 0.25}
    cand = _cand(1.0, ApprovalStatus.APPROVED)
    assert score_candidate(cand, RelationshipType.SEMANTIC, "de", table=table, approved_boost=2.0) == 0.5
    assert score_candidate(cand, RelationshipType.NEARBY, None, table=table) == 0.5


def test_confidence_is_not_clamped():
    assert score_candidate(_cand(1.5), RelationshipType.NEARBY) == pytest.approx(1.5)
