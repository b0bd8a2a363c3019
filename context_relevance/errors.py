"""Exceptions raised by the ranking and quality-score helpers."""

from __future__ import annotations

from typing import Optional


class ContextRelevanceError(Exception):
    """Base class for every error this package raises on purpose."""


class InvalidCandidateError(ContextRelevanceError, ValueError):
    """A related candidate violates the ranking preconditions."""

    def __init__(self, candidate_id: Optional[str], reason: str):
        self.candidate_id = candidate_id
        self.reason = reason
        super().__init__(f"invalid candidate {candidate_id!r}: {reason}")


class ThresholdOrderError(ContextRelevanceError, ValueError):
    """flag_threshold is above auto_approve_threshold."""

    def __init__(self, flag_threshold: int, auto_approve_threshold: int):
        self.flag_threshold = flag_threshold
        self.auto_approve_threshold = auto_approve_threshold
        super().__init__(
            f"flag_threshold ({flag_threshold}) must be <= "
            f"auto_approve_threshold ({auto_approve_threshold})"
        )
