from __future__ import annotations

"""
Content fingerprints for the quality-score cache.

A stored score is tagged with ``fingerprint(source, target)`` at the time it
was computed and stays valid for exactly as long as both texts are
unchanged. There is no TTL.

The fingerprint keeps the first 16 hex characters (64 bits) of SHA-256 for
compatibility with existing cache rows. Collisions are unlikely at that size
but not impossible, and because the two texts are joined with ``"|"`` before
hashing, ``("a|b", "c")`` and ``("a", "b|c")`` share a fingerprint.
"""

import hashlib
import re
from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from .config import FINGERPRINT_DELIMITER, FINGERPRINT_LENGTH

_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{%d}$" % FINGERPRINT_LENGTH)


def fingerprint(source_text: Optional[str], target_text: Optional[str]) -> str:
    """16-char lowercase hex digest of the pair; ``None`` counts as ``""``."""
    payload = f"{source_text or ''}{FINGERPRINT_DELIMITER}{target_text or ''}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def is_cache_valid(
    cached_fingerprint: Optional[str],
    source_text: Optional[str],
    target_text: Optional[str],
) -> bool:
    if not cached_fingerprint:
        return False
    return cached_fingerprint == fingerprint(source_text, target_text)


class CachedScore(BaseModel):
    """Shape of a quality-score cache row as the external store keeps it."""

    fingerprint: str = Field(pattern=_FINGERPRINT_RE.pattern)
    score: int = Field(ge=0, le=100)
    computed_at: datetime


def make_cached_score(
    score: int,
    source_text: Optional[str],
    target_text: Optional[str],
    computed_at: Optional[datetime] = None,
) -> CachedScore:
    return CachedScore(
        fingerprint=fingerprint(source_text, target_text),
        score=score,
        computed_at=computed_at or datetime.now(timezone.utc),
    )


def lookup_cached_score(
    record: Optional[CachedScore],
    source_text: Optional[str],
    target_text: Optional[str],
    label: str = "",
) -> Optional[CachedScore]:
    """
    Return ``record`` if it still matches the texts, else ``None``.

    ``None`` tells the caller to request a fresh score from the evaluator.
    ``label`` only decorates the log line (e.g. ``"checkout.title/de"``).
    """
    if record is None:
        logger.info("Quality cache empty for {} (first evaluation)", label or "translation")
        return None
    if is_cache_valid(record.fingerprint, source_text, target_text):
        logger.info("Quality cache hit for {}: score={}", label or "translation", record.score)
        return record
    logger.info("Quality cache miss for {} (content changed)", label or "translation")
    return None
