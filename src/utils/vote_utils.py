from typing import Any, Dict, Iterable, Mapping, Optional

from models.models import Problem, VoteType
from utils.geo_utils import to_float

NetTotals = Mapping[str, int]
UserVotes = Mapping[str, VoteType]


def merge_votes(
    problem: Problem,
    net_totals: Optional[NetTotals],
    user_votes: Optional[UserVotes],
) -> Problem:
    """Overlay the aggregated net total and the viewer's vote on a problem.

    The aggregated total supersedes the count embedded on the row. A missing
    `user_votes` map (anonymous viewer) always yields `user_vote=None`.
    """
    net_totals = net_totals or {}
    user_votes = user_votes or {}
    votes_count = net_totals.get(problem.id)
    if votes_count is None:
        votes_count = problem.votes_count or 0
    return problem.model_copy(
        update={"votes_count": votes_count, "user_vote": user_votes.get(problem.id)}
    )


def build_vote_totals(rows: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for row in rows or []:
        if not isinstance(row, Mapping):
            continue
        problem_id = row.get("problem_id")
        if not problem_id:
            continue
        raw_total = row.get("net_votes")
        if raw_total is None:
            totals[str(problem_id)] = 0
            continue
        # non-integral totals fall back to the row count
        number = to_float(raw_total)
        if number is None or not number.is_integer():
            continue
        totals[str(problem_id)] = int(number)
    return totals


def build_user_votes(rows: Iterable[Mapping[str, Any]]) -> Dict[str, VoteType]:
    votes: Dict[str, VoteType] = {}
    for row in rows or []:
        if not isinstance(row, Mapping):
            continue
        votable_id = row.get("votable_id")
        try:
            vote_type = VoteType(row.get("vote_type"))
        except ValueError:
            continue
        if votable_id:
            votes[str(votable_id)] = vote_type
    return votes
