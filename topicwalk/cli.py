"""
topicwalk CLI - check the scoring backend and score candidate topics.

usage:
    python -m topicwalk.cli check [--model M] [--base-url URL]
    python -m topicwalk.cli score GOAL CANDIDATE [CANDIDATE ...]

examples:
    python -m topicwalk.cli check --model qwen3-coder:latest
    python -m topicwalk.cli score "add retry to http client" "exponential backoff" "logging setup"
    python -m topicwalk.cli score "fix import error" "module resolution" --error "ModuleNotFoundError" --strategy structured --json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .core.config import ScorerConfig, ScorerStrategy
from .core.errors import ScorerInitError
from .core.models import ScoredTopic
from .core.resilience import setup_logging as configure_logging
from .export.formats import topic_to_dict
from .scoring.base import build_scorer
from .scoring.structured import StructuredScorer


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None):
    """configure logging."""
    level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
    configure_logging(level, log_file)


def scorer_config_from_args(args) -> ScorerConfig:
    """env-derived scorer config with command line overrides."""
    strategy = getattr(args, "strategy", None)
    return ScorerConfig.from_env(
        strategy=ScorerStrategy(strategy) if strategy else None,
        model=args.model,
        base_url=args.base_url
    )


def format_scores(topics: List[ScoredTopic]) -> str:
    """ranked score table."""
    lines = []
    lines.append(f"{'score':>6}  {'task':>5} {'err':>5} {'impl':>5} {'nov':>5}  topic")
    lines.append("-" * 60)
    for t in topics:
        d = t.dimensions
        lines.append(
            f"{t.score:6.1f}  {d.task_relevance:5.1f} {d.error_relevance:5.1f} "
            f"{d.implementation_value:5.1f} {d.novelty:5.1f}  {t.text}"
        )
        if t.reasoning:
            lines.append(f"{'':8}{t.reasoning}")
    return "\n".join(lines)


async def _check(config: ScorerConfig) -> Optional[str]:
    """returns an error message, or None when the backend is ready."""
    scorer = StructuredScorer(config)
    try:
        await scorer.initialize()
        return None
    except ScorerInitError as e:
        return str(e)
    finally:
        await scorer.dispose()


async def _score(
    config: ScorerConfig,
    goal: str,
    candidates: List[str],
    error: Optional[str],
    previous: List[str]
) -> List[ScoredTopic]:
    scorer = build_scorer(config)
    try:
        await scorer.initialize()
        topics = [await scorer.score(c, goal, error, previous) for c in candidates]
    finally:
        await scorer.dispose()

    # stable: equal scores keep command line order
    return sorted(topics, key=lambda t: -t.score)


def cmd_check(args):
    """verify the structured scoring backend is usable."""
    setup_logging(args.verbose, args.quiet, args.log_file)
    config = scorer_config_from_args(args)

    problem = asyncio.run(_check(config))
    if problem:
        print(f"not ready: {problem}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"ready: {config.model} at {config.base_url}")
    return 0


def cmd_score(args):
    """score candidate topics against a goal."""
    setup_logging(args.verbose, args.quiet, args.log_file)
    config = scorer_config_from_args(args)

    try:
        topics = asyncio.run(_score(
            config, args.goal, args.candidates, args.error, args.previous or []
        ))
    except ScorerInitError as e:
        print(f"scorer unavailable: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([topic_to_dict(t) for t in topics], indent=2))
    else:
        print(format_scores(topics))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="topicwalk",
        description="Topic relevance scoring for research expansion.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s check --model qwen3-coder:latest
  %(prog)s score "add retry to http client" "exponential backoff" "logging setup"
  %(prog)s score "fix import error" "module resolution" --error "ModuleNotFoundError" --json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="command")

    # check subcommand
    check_parser = subparsers.add_parser("check", help="check ollama and model availability")
    check_parser.set_defaults(func=cmd_check)

    # score subcommand
    score_parser = subparsers.add_parser("score", help="score candidate topics")
    score_parser.add_argument(
        "goal",
        help="task goal"
    )
    score_parser.add_argument(
        "candidates",
        nargs='+',
        help="candidate topics"
    )
    score_parser.add_argument(
        "--error", "-e",
        type=str,
        help="current error text"
    )
    score_parser.add_argument(
        "--previous", "-p",
        type=str,
        nargs='+',
        help="topics already explored"
    )
    score_parser.add_argument(
        "--strategy", "-s",
        type=str,
        choices=[s.value for s in ScorerStrategy],
        help="scorer strategy (default: heuristic, or TOPICWALK_SCORER)"
    )
    score_parser.add_argument(
        "--json",
        action="store_true",
        help="output JSON"
    )
    score_parser.set_defaults(func=cmd_score)

    # common arguments (add to both)
    for subparser in [check_parser, score_parser]:
        subparser.add_argument(
            "--model", "-m",
            type=str,
            help="ollama model (default: TOPICWALK_MODEL or qwen3-coder:latest)"
        )
        subparser.add_argument(
            "--base-url",
            type=str,
            help="ollama base url (default: TOPICWALK_OLLAMA_URL or http://localhost:11434)"
        )
        subparser.add_argument(
            "--log-file",
            type=str,
            help="also write logs to this file"
        )
        subparser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="verbose output"
        )
        subparser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="minimal output"
        )

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
