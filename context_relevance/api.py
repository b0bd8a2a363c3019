from __future__ import annotations

"""
FastAPI application exposing context ranking and quality-score helpers.

Every endpoint is a thin wrapper around a pure function; nothing here
persists state. Stored configs and cache rows travel in the request body.
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from .config import (
    BucketsIn,
    HealthResponse,
    QualityConfig,
    QualityConfigUpdate,
    ScoredCandidateOut,
    merge_quality_config,
)
from .content_hash import CachedScore, fingerprint, is_cache_valid, lookup_cached_score
from .context_prompt import build_structured_context, to_context_translation
from .context_select import drop_invalid_candidates, rank_candidates, select_context_candidates
from .errors import ThresholdOrderError
from .logging_setup import configure_logging
from .pipeline_types import ScoreRow
from .thresholds import QualityDecision, QualitySummary, classify, summarize_scores


# -----------------------
# Request / response bodies
# -----------------------

class RankRequest(BaseModel):
    buckets: BucketsIn = Field(default_factory=BucketsIn)
    target_language: Optional[str] = None
    drop_invalid: bool = True


class RankResponse(BaseModel):
    ranked: List[ScoredCandidateOut]
    rejected: List[str] = Field(default_factory=list)


class PromptRequest(BaseModel):
    buckets: BucketsIn = Field(default_factory=BucketsIn)
    source_language: str = Field(..., min_length=1)
    target_language: str = Field(..., min_length=1)
    top_n: Optional[int] = Field(default=None, ge=0)


class PromptResponse(BaseModel):
    selected: List[ScoredCandidateOut]
    context_prompt: str


class TextPair(BaseModel):
    source_text: Optional[str] = None
    target_text: Optional[str] = None


class FingerprintResponse(BaseModel):
    fingerprint: str


class CacheValidateRequest(TextPair):
    cached_fingerprint: Optional[str] = None
    cached: Optional[CachedScore] = None


class CacheValidateResponse(BaseModel):
    valid: bool
    fingerprint: str
    score: Optional[int] = None


class ClassifyRequest(BaseModel):
    score: int = Field(..., ge=0, le=100)
    config: Optional[QualityConfig] = None


class ClassifyResponse(BaseModel):
    score: int
    decision: QualityDecision


class MergeConfigRequest(BaseModel):
    stored: Optional[QualityConfig] = None
    update: QualityConfigUpdate = Field(default_factory=QualityConfigUpdate)


class SummaryRow(BaseModel):
    language: str
    score: Optional[int] = Field(default=None, ge=0, le=100)


class SummaryRequest(BaseModel):
    rows: List[SummaryRow] = Field(default_factory=list)


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI(title="context-relevance")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    configure_logging()
    logger.info("context-relevance API ready")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/context/rank", response_model=RankResponse)
def rank(req: RankRequest) -> RankResponse:
    buckets = req.buckets.to_buckets()
    rejected: List[str] = []
    if req.drop_invalid:
        buckets, errors = drop_invalid_candidates(buckets)
        rejected = [str(e.candidate_id) for e in errors]
    ranked = rank_candidates(buckets, req.target_language)
    return RankResponse(ranked=[ScoredCandidateOut.from_scored(s) for s in ranked], rejected=rejected)


@app.post("/context/prompt", response_model=PromptResponse)
def context_prompt(req: PromptRequest) -> PromptResponse:
    selected = select_context_candidates(req.buckets.to_buckets(), req.target_language, req.top_n)
    prompt = build_structured_context(
        [to_context_translation(s, req.target_language) for s in selected],
        req.source_language,
        req.target_language,
    )
    return PromptResponse(
        selected=[ScoredCandidateOut.from_scored(s) for s in selected],
        context_prompt=prompt,
    )


@app.post("/quality/fingerprint", response_model=FingerprintResponse)
def quality_fingerprint(req: TextPair) -> FingerprintResponse:
    return FingerprintResponse(fingerprint=fingerprint(req.source_text, req.target_text))


@app.post("/quality/cache/validate", response_model=CacheValidateResponse)
def quality_cache_validate(req: CacheValidateRequest) -> CacheValidateResponse:
    current = fingerprint(req.source_text, req.target_text)
    if req.cached is not None:
        hit = lookup_cached_score(req.cached, req.source_text, req.target_text)
        return CacheValidateResponse(
            valid=hit is not None,
            fingerprint=current,
            score=hit.score if hit is not None else None,
        )
    valid = is_cache_valid(req.cached_fingerprint, req.source_text, req.target_text)
    return CacheValidateResponse(valid=valid, fingerprint=current)


@app.post("/quality/classify", response_model=ClassifyResponse)
def quality_classify(req: ClassifyRequest) -> ClassifyResponse:
    return ClassifyResponse(score=req.score, decision=classify(req.score, req.config))


@app.post("/quality/config/merge", response_model=QualityConfig)
def quality_config_merge(req: MergeConfigRequest) -> QualityConfig:
    try:
        return merge_quality_config(req.stored, req.update)
    except ThresholdOrderError as e:
        logger.warning("Rejected quality config update: {}", e)
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/quality/summary", response_model=QualitySummary)
def quality_summary(req: SummaryRequest) -> QualitySummary:
    rows = [ScoreRow(language=r.language, score=r.score) for r in req.rows]
    return summarize_scores(rows)

