"""
Argument parsing helpers shared by editor_finder commands.
"""

import argparse

from editor_finder.constants import DEFAULT_RESULT_CAP, EXPERIENCE_RANGE_MAX, EXPERIENCE_RANGE_MIN
from editor_finder.domain.models import Availability, ExperienceRange, SearchFilter, UnionStatus


def add_execute_argument(parser: argparse.ArgumentParser) -> None:
    """Add the standard --execute flag (commands default to a dry run)."""
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Actually execute the operation (default is dry-run)",
    )


def add_filter_arguments(
    parser: argparse.ArgumentParser, default_limit: int = DEFAULT_RESULT_CAP
) -> None:
    """Add the search filter options; --limit defaults to ``default_limit``."""
    parser.add_argument("query", nargs="?", default="", help="Free-text query")
    parser.add_argument("--tag", action="append", default=[], help="Specialty / genre (repeatable)")
    parser.add_argument("--network", action="append", default=[], help="Affiliation (repeatable)")
    parser.add_argument(
        "--union",
        action="append",
        default=[],
        choices=[s.value for s in UnionStatus],
        help="Union status (repeatable)",
    )
    parser.add_argument(
        "--availability",
        action="append",
        default=[],
        choices=[a.value for a in Availability],
        help="Availability (repeatable)",
    )
    parser.add_argument("--min-years", type=int, default=EXPERIENCE_RANGE_MIN)
    parser.add_argument("--max-years", type=int, default=EXPERIENCE_RANGE_MAX)
    parser.add_argument("--city", action="append", default=[])
    parser.add_argument("--state", action="append", default=[])
    parser.add_argument("--remote-only", action="store_true")
    parser.add_argument("--award-winners", action="store_true")
    parser.add_argument("--limit", type=int, default=default_limit)


def filter_from_args(args: argparse.Namespace) -> SearchFilter:
    return SearchFilter(
        query=args.query or "",
        tags=list(args.tag),
        affiliations=list(args.network),
        union_statuses=[UnionStatus(v) for v in args.union],
        availabilities=[Availability(v) for v in args.availability],
        experience=ExperienceRange(args.min_years, args.max_years),
        cities=list(args.city),
        states=list(args.state),
        remote_only=args.remote_only,
        award_winners_only=args.award_winners,
        limit=args.limit,
    )
