import asyncio
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.models import Problem
from utils.constants import TRENDING_LIMIT, FeedView
from utils.geo_utils import normalize_problem
from utils.vote_utils import NetTotals, UserVotes, merge_votes


def assemble(
    raw_rows: Optional[Iterable[Mapping[str, Any]]],
    net_totals: Optional[NetTotals],
    user_votes: Optional[UserVotes],
) -> List[Problem]:
    """Normalize and vote-merge every row, keeping input order."""
    return [
        merge_votes(normalize_problem(raw), net_totals, user_votes)
        for raw in raw_rows or []
    ]


def trending(problems: Sequence[Problem], limit: int = TRENDING_LIMIT) -> List[Problem]:
    # sorted() is stable, ties keep feed order
    return sorted(problems, key=lambda p: p.votes_count or 0, reverse=True)[:limit]


def assemble_view(
    view: FeedView,
    raw_rows: Optional[Iterable[Mapping[str, Any]]],
    net_totals: Optional[NetTotals],
    user_votes: Optional[UserVotes],
    limit: int = TRENDING_LIMIT,
) -> List[Problem]:
    problems = assemble(raw_rows, net_totals, user_votes)
    if view is FeedView.TRENDING:
        return trending(problems, limit)
    return problems


def active_problems_summary(
    has_position: bool,
    nearby: Optional[Sequence[Any]],
    nearby_loading: bool,
    location_error: bool,
    total_count: Optional[int],
    problems: Optional[Sequence[Any]],
) -> Tuple[Optional[int], str]:
    """Value and caption for the "Active Problems" card."""
    if has_position:
        if nearby_loading and not location_error:
            return None, "In your area"
        return len(nearby or []), "In your area"
    if total_count is not None:
        return total_count, "Across VoiceUp"
    return len(problems or []), "Across VoiceUp"


def feed_result_status(result: Any) -> Tuple[List[Any], bool, bool]:
    """Split a gathered feed result into (rows, loading, error).

    A cancelled fetch has not delivered yet and counts as loading.
    """
    if isinstance(result, asyncio.CancelledError):
        return [], True, False
    if isinstance(result, BaseException):
        return [], False, True
    return list(result or []), False, False
