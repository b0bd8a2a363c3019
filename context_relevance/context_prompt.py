from __future__ import annotations
"""
Render ranked related keys as the structured block an AI translation prompt
embeds:

    <related_keys>
      <related_key name="..." type="NEARBY" confidence="0.95" approved="true">
        <source lang="en">...</source>
        <target lang="de">...</target>
      </related_key>
    </related_keys>
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from xml.sax.saxutils import escape

from .pipeline_types import RelationshipType, ScoredCandidate
from .relevance import has_approved_translation

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass
class ContextTranslation:
    key_name: str
    relationship_type: RelationshipType
    confidence: float
    is_approved: bool = False
    translations: Dict[str, str] = field(default_factory=dict)


def _escape_xml(text: str) -> str:
    return escape(text, _XML_ENTITIES)


def to_context_translation(scored: ScoredCandidate, target_language: str) -> ContextTranslation:
    cand = scored.candidate
    return ContextTranslation(
        key_name=cand.name or cand.id,
        relationship_type=scored.relationship_type,
        confidence=float(cand.confidence),
        is_approved=has_approved_translation(cand, target_language),
        translations={t.language: t.value for t in cand.translations},
    )


def build_structured_context(
    related: Sequence[ContextTranslation],
    source_language: str,
    target_language: str,
) -> str:
    """Empty string when no entry has both a source and a target translation."""
    with_both = [
        r for r in related
        if r.translations.get(source_language) and r.translations.get(target_language)
    ]
    if not with_both:
        return ""

    lines: List[str] = ["<related_keys>"]
    for r in with_both:
        approved = ' approved="true"' if r.is_approved else ""
        lines.append(
            f'  <related_key name="{_escape_xml(r.key_name)}" '
            f'type="{RelationshipType(r.relationship_type).value}" '
            f'confidence="{r.confidence:.2f}"{approved}>'
        )
        lines.append(
            f'    <source lang="{source_language}">'
            f"{_escape_xml(r.translations[source_language])}</source>"
        )
        lines.append(
            f'    <target lang="{target_language}">'
            f"{_escape_xml(r.translations[target_language])}</target>"
        )
        lines.append("  </related_key>")
    lines.append("</related_keys>")
    return "\n".join(lines)
