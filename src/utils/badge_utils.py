from typing import Callable, Iterable, List, NamedTuple, Optional

from models.models import ContributionMetrics, ImpactStats, Profile
from utils.constants import COMMENT_POINTS, REPORT_POINTS, VOTE_POINTS


class BadgeRule(NamedTuple):
    id: str
    label: str
    predicate: Callable[[ImpactStats], bool]


BADGE_RULES = (
    BadgeRule(
        "first-action",
        "First Contribution",
        lambda s: s.reports_count + s.comments_count + s.votes_count >= 1,
    ),
    BadgeRule("reporter", "Active Reporter", lambda s: s.reports_count >= 3),
    BadgeRule("voter", "Community Voter", lambda s: s.votes_count >= 10),
    BadgeRule("conversation", "Conversation Starter", lambda s: s.comments_count >= 5),
    BadgeRule("change-maker", "Change Maker", lambda s: s.points >= 50),
)


def compute_points(metrics: ContributionMetrics) -> int:
    return (
        metrics.reports_count * REPORT_POINTS
        + metrics.comments_count * COMMENT_POINTS
        + metrics.votes_count * VOTE_POINTS
    )


def derive_badges(stats: ImpactStats, existing_badges: Optional[Iterable[str]] = None) -> List[str]:
    """Union of existing badges and every rule the stats satisfy.

    Existing badges keep their order; new labels follow in rule order.
    """
    earned = [rule.label for rule in BADGE_RULES if rule.predicate(stats)]
    return list(dict.fromkeys([*(existing_badges or []), *earned]))


def compute_impact(
    metrics: ContributionMetrics, previous_badges: Optional[Iterable[str]] = None
) -> ImpactStats:
    stats = ImpactStats(
        reports_count=metrics.reports_count,
        comments_count=metrics.comments_count,
        votes_count=metrics.votes_count,
        points=compute_points(metrics),
    )
    return stats.model_copy(update={"badges": derive_badges(stats, previous_badges)})


def fallback_impact(
    previous: Optional[ImpactStats], profile: Optional[Profile]
) -> ImpactStats:
    if previous is not None:
        return previous
    return ImpactStats(
        points=profile.points if profile else 0,
        badges=list(profile.badges) if profile else [],
    )


def display_points(impact: Optional[ImpactStats], profile: Optional[Profile]) -> int:
    if impact is not None:
        return impact.points
    return profile.points if profile else 0


def display_badges(
    impact: Optional[ImpactStats], profile: Optional[Profile]
) -> List[str]:
    if impact is not None and impact.badges:
        return impact.badges
    return profile.badges if profile else []
