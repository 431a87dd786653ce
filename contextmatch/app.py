"""contextmatch command-line entry point."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from contextmatch.config import LOG_LEVEL_ENV_VAR, load_pool, load_settings
from contextmatch.matching.matcher import CandidateMatcher


def configure_logging(level: str = "WARNING") -> None:
    """Configure application logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    has_stream_handler = any(
        type(handler) is logging.StreamHandler
        for handler in root_logger.handlers
    )
    if not has_stream_handler:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contextmatch",
        description="Rank community members for one user from a YAML pool",
    )
    parser.add_argument("pool", type=Path, help="Pool YAML with contexts and communities")
    parser.add_argument("--user", required=True, help="User id to generate matches for")
    parser.add_argument("--limit", type=int, default=None, help="Maximum matches to return")
    parser.add_argument("--settings", type=Path, default=None, help="Settings YAML")
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="User id to leave out (repeatable)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING"))

    settings = load_settings(args.settings)
    contexts, communities = load_pool(args.pool)

    user = next((c for c in contexts if c.user_id == args.user), None)
    if user is None:
        print(f"User {args.user} not found in {args.pool}", file=sys.stderr)
        return 2

    limit = args.limit if args.limit is not None else settings.default_limit
    matcher = CandidateMatcher(settings)
    try:
        suggestions = matcher.generate(
            user,
            contexts,
            communities=communities,
            exclude_user_ids=args.exclude or (),
            limit=limit,
            skip_mismatched=True,
        )
    except ValueError as e:
        print(f"Cannot match {args.user}: {e}", file=sys.stderr)
        return 2

    print(json.dumps([s.to_dict() for s in suggestions], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
