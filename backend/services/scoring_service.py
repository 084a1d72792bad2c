from dataclasses import dataclass

from models.destination import Destination, ScoredDestination
from models.user import UserSurvey


@dataclass(frozen=True)
class ScoringProfile:
    name: str
    base: float = 100.0
    category_bonus: float = 0.0
    rating_weight: float = 0.0
    popularity_weight: float = 0.0


# Nearby/notification ranking: distance plus survey-driven bonuses
NEARBY_PROFILE = ScoringProfile(
    name="nearby",
    category_bonus=30.0,
    rating_weight=5.0,
    popularity_weight=0.1,
)

# Search ranking: distance only
SEARCH_PROFILE = ScoringProfile(name="search")


def score_destination(
    destination: Destination,
    distance: float,
    survey: UserSurvey | None,
    profile: ScoringProfile = NEARBY_PROFILE,
) -> float:
    score = profile.base - distance

    if survey is None:
        return score

    if destination.category in survey.preferred_categories:
        score += profile.category_bonus
    if destination.rating:
        score += destination.rating * profile.rating_weight
    score += destination.popularity_score * profile.popularity_weight
    return score


def rank_destinations(
    candidates: list[ScoredDestination],
    survey: UserSurvey | None,
    profile: ScoringProfile = NEARBY_PROFILE,
    limit: int | None = 10,
) -> list[ScoredDestination]:
    """Score candidates and return them best first; equal scores keep input order."""
    scored = [
        c.model_copy(update={
            "score": score_destination(c.destination, c.distance or 0.0, survey, profile),
        })
        for c in candidates
    ]
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored if limit is None else scored[:limit]
