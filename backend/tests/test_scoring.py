import pytest

from models.destination import Destination, ScoredDestination
from models.user import UserSurvey
from services.scoring_service import (
    NEARBY_PROFILE,
    SEARCH_PROFILE,
    rank_destinations,
    score_destination,
)


def _dest(place_id, category="other", rating=None, popularity=0.0) -> Destination:
    return Destination(
        place_id=place_id, name=place_id, category=category, rating=rating,
        popularity_score=popularity, latitude=0, longitude=0,
    )


def _survey(*categories) -> UserSurvey:
    return UserSurvey(user_id="u1", preferred_categories=list(categories))


def test_without_survey_only_distance_counts():
    destination = _dest("a", category="temples", rating=5.0, popularity=100)
    assert score_destination(destination, 12.0, None) == pytest.approx(88.0)


def test_full_formula_with_survey():
    destination = _dest("a", category="temples", rating=4.0, popularity=50)
    score = score_destination(destination, 10.0, _survey("temples"))
    assert score == pytest.approx(100 - 10 + 30 + 20 + 5)


def test_missing_rating_is_not_a_penalty():
    rated_zero = score_destination(_dest("a"), 10.0, _survey())
    unrated = score_destination(_dest("b", rating=None), 10.0, _survey())
    assert unrated == rated_zero == pytest.approx(90.0)


def test_category_bonus_is_flat():
    one = _survey("temples")
    several = _survey("temples", "parks", "museums")
    destination = _dest("a", category="temples", rating=3.0)
    assert score_destination(destination, 5.0, one) == score_destination(destination, 5.0, several)


def test_category_match_is_case_sensitive():
    destination = _dest("a", category="temples")
    assert score_destination(destination, 0, _survey("Temples")) == pytest.approx(100.0)


@pytest.mark.parametrize("survey", [None, _survey("parks")])
def test_score_decreases_with_distance(survey):
    destination = _dest("a", category="parks", rating=4.5, popularity=10)
    assert score_destination(destination, 3.0, survey) > score_destination(destination, 7.0, survey)


def test_search_profile_ignores_bonuses():
    destination = _dest("a", category="temples", rating=5.0, popularity=100)
    assert score_destination(destination, 10.0, _survey("temples"), SEARCH_PROFILE) == pytest.approx(90.0)


def test_category_bonus_outweighs_distance_and_rating():
    temple = ScoredDestination(destination=_dest("temple", "temples", rating=4.0, popularity=7), distance=10.0)
    cafe = ScoredDestination(destination=_dest("cafe", "cafes", rating=5.0, popularity=7), distance=2.0)

    ranked = rank_destinations([cafe, temple], _survey("temples"), NEARBY_PROFILE)

    assert [r.destination.place_id for r in ranked] == ["temple", "cafe"]
    assert ranked[0].score == pytest.approx(140 + 0.7)
    assert ranked[1].score == pytest.approx(123 + 0.7)


def test_ranking_is_stable_and_bounded():
    candidates = [
        ScoredDestination(destination=_dest(f"d{i}"), distance=10.0)
        for i in range(15)
    ]
    ranked = rank_destinations(candidates, None, limit=10)
    assert [r.destination.place_id for r in ranked] == [f"d{i}" for i in range(10)]


def test_ranking_does_not_mutate_input():
    candidate = ScoredDestination(destination=_dest("a"), distance=1.0)
    rank_destinations([candidate], None)
    assert candidate.score == 0.0
