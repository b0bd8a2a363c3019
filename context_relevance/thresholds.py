from __future__ import annotations

import math
from enum import Enum
from typing import Dict, Iterable, Optional

import pandas as pd
from loguru import logger
from pydantic import BaseModel

from .config import DEFAULT_QUALITY_CONFIG, EXCELLENT_MIN_SCORE, GOOD_MIN_SCORE, QualityConfig
from .pipeline_types import ScoreRow


# ---------------------------------------------------------------------------
# Workflow decision for a single score
# ---------------------------------------------------------------------------

class QualityDecision(str, Enum):
    AUTO_APPROVE = "AutoApprove"  # mark the translation approved
    DEFAULT = "Default"           # leave approval state as-is
    FLAG = "Flag"                 # surface for manual review


def classify(score: int, config: Optional[QualityConfig] = None) -> QualityDecision:
    """
    Map a 0-100 quality score onto a workflow decision.

    ``score >= auto_approve_threshold`` wins over ``score < flag_threshold``;
    a score equal to ``flag_threshold`` is DEFAULT. Threshold order is not
    checked here, that happens when the config is saved
    (``merge_quality_config``).
    """
    cfg = config or DEFAULT_QUALITY_CONFIG
    if score >= cfg.auto_approve_threshold:
        return QualityDecision.AUTO_APPROVE
    if score < cfg.flag_threshold:
        return QualityDecision.FLAG
    return QualityDecision.DEFAULT


# ---------------------------------------------------------------------------
# Branch-level summary
# ---------------------------------------------------------------------------

class QualityBand(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_REVIEW = "needsReview"


def band_for_score(score: float) -> QualityBand:
    if score >= EXCELLENT_MIN_SCORE:
        return QualityBand.EXCELLENT
    if score >= GOOD_MIN_SCORE:
        return QualityBand.GOOD
    return QualityBand.NEEDS_REVIEW


class LanguageQuality(BaseModel):
    average: int
    count: int


class QualitySummary(BaseModel):
    average_score: int
    distribution: Dict[str, int]
    by_language: Dict[str, LanguageQuality]
    total_scored: int
    total_translations: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def summarize_scores(rows: Iterable[ScoreRow]) -> QualitySummary:
    """
    Average, band distribution and per-language averages over a branch.

    Rows without a score count towards ``total_translations`` only.
    """
    df = pd.DataFrame(
        [{"language": r.language, "score": r.score} for r in rows],
        columns=["language", "score"],
    )
    total = len(df)
    scored = df.dropna(subset=["score"]).copy()
    scored["score"] = scored["score"].astype(float)

    distribution = {band.value: 0 for band in QualityBand}
    if not scored.empty:
        counts = scored["score"].map(lambda s: band_for_score(s).value).value_counts()
        for band, n in counts.items():
            distribution[band] = int(n)

    by_language: Dict[str, LanguageQuality] = {}
    if not scored.empty:
        grouped = scored.groupby("language")["score"].agg(["sum", "count"])
        for lang, row in grouped.iterrows():
            by_language[str(lang)] = LanguageQuality(
                average=_round_half_up(row["sum"] / row["count"]),
                count=int(row["count"]),
            )

    average = _round_half_up(scored["score"].mean()) if not scored.empty else 0
    logger.debug("Summarised {} scored of {} translations (avg={})", len(scored), total, average)
    return QualitySummary(
        average_score=average,
        distribution=distribution,
        by_language=by_language,
        total_scored=len(scored),
        total_translations=total,
    )
