# context_relevance/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config import BucketsIn, QualityConfig, ScoredCandidateOut
from .content_hash import fingerprint
from .context_select import drop_invalid_candidates, rank_candidates
from .logging_setup import configure_logging
from .thresholds import classify


def _read_buckets(path: Path) -> BucketsIn:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return BucketsIn.model_validate(raw)


def cmd_rank(args: argparse.Namespace) -> int:
    buckets, errors = drop_invalid_candidates(_read_buckets(Path(args.file)).to_buckets())
    ranked = rank_candidates(buckets, args.target_language)
    if args.top is not None:
        ranked = ranked[: max(0, args.top)]
    out = {
        "ranked": [ScoredCandidateOut.from_scored(s).model_dump(mode="json") for s in ranked],
        "rejected": [e.candidate_id for e in errors],
    }
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


def cmd_fingerprint(args: argparse.Namespace) -> int:
    print(fingerprint(args.source, args.target))
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    overrides = {}
    if args.auto_approve is not None:
        overrides["auto_approve_threshold"] = args.auto_approve
    if args.flag is not None:
        overrides["flag_threshold"] = args.flag
    cfg = QualityConfig(**overrides)
    if cfg.flag_threshold > cfg.auto_approve_threshold:
        logger.warning(
            "flag threshold {} is above auto-approve threshold {}; classifying anyway",
            cfg.flag_threshold,
            cfg.auto_approve_threshold,
        )
    print(classify(args.score, cfg).value)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="context-relevance")
    ap.add_argument("--log-level", default=None, help="loguru level for stderr (default: LOG_LEVEL env)")
    ap.add_argument("--log-dir", default=None, help="directory for the rotating log file")
    sub = ap.add_subparsers(dest="command", required=True)

    p_rank = sub.add_parser("rank", help="rank related candidates from a JSON buckets file")
    p_rank.add_argument("file", help="JSON object with nearby/keyPattern/sameComponent/sameFile/semantic lists")
    p_rank.add_argument("--target-language", default=None)
    p_rank.add_argument("--top", type=int, default=None, help="keep only the first N results")
    p_rank.set_defaults(func=cmd_rank)

    p_fp = sub.add_parser("fingerprint", help="content fingerprint of a source/target pair")
    p_fp.add_argument("source")
    p_fp.add_argument("target")
    p_fp.set_defaults(func=cmd_fingerprint)

    p_cls = sub.add_parser("classify", help="map a 0-100 quality score to a workflow decision")
    p_cls.add_argument("score", type=int, choices=range(0, 101), metavar="SCORE")
    p_cls.add_argument("--auto-approve", type=int, default=None)
    p_cls.add_argument("--flag", type=int, default=None)
    p_cls.set_defaults(func=cmd_classify)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, log_dir=args.log_dir)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
