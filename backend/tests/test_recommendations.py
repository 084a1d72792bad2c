import json

import httpx
import pytest

from conftest import FakeLLM, run
from models.destination import Coordinate
from services.recommendation_service import (
    Candidate,
    parse_recommendation_names,
    recommend_destinations,
    smart_fallback_recommendations,
)

ORIGIN = Coordinate(latitude=28.6139, longitude=77.2090)

CANDIDATES = [
    Candidate(name="Lotus Temple", category="temples", distance=12.0),
    Candidate(name="Lodhi Garden", category="parks", distance=6.0),
    Candidate(name="National Museum", category="museums", distance=4.0),
    Candidate(name="Indian Coffee House", category="cafes", distance=2.0),
    Candidate(name="Akshardham", category="temples", distance=20.0),
    Candidate(name="Sanjay Van", category="nature", distance=15.0),
]


class TestFallback:
    def test_interest_matches_beat_distance(self):
        names = smart_fallback_recommendations(["temples"], CANDIDATES)
        assert names[:2] == ["Lotus Temple", "Akshardham"]
        assert len(names) == 5

    def test_substring_match_both_directions(self):
        candidates = [
            Candidate(name="A", category="parks", distance=1.0),
            Candidate(name="B", category="museums", distance=1.0),
        ]
        # "park" is contained in "parks"; "art museums" contains "museums"
        assert smart_fallback_recommendations(["PARK"], candidates)[0] == "A"
        assert smart_fallback_recommendations(["art museums"], candidates)[0] == "B"

    def test_each_matching_interest_adds_points(self):
        candidates = [
            Candidate(name="Near cafe", category="cafes", distance=1.0),
            Candidate(name="Far temple", category="temples", distance=150.0),
        ]
        # two matching interests: 20 - 15 = 5 beats -0.1
        names = smart_fallback_recommendations(["temple", "temples"], candidates)
        assert names == ["Far temple", "Near cafe"]

    def test_deterministic(self):
        interests = ["museums", "nature"]
        first = smart_fallback_recommendations(interests, CANDIDATES)
        assert all(smart_fallback_recommendations(interests, CANDIDATES) == first for _ in range(5))

    def test_ties_keep_candidate_order(self):
        candidates = [Candidate(name=n, category="other", distance=5.0) for n in "ABCDEFG"]
        assert smart_fallback_recommendations([], candidates) == list("ABCDE")


class TestParse:
    def test_keeps_known_names_only(self):
        raw = 'Sure! ```json\n["Lotus Temple", "Taj Mahal", "Lodhi Garden", "Lotus Temple"]\n```'
        known = {c.name for c in CANDIDATES}
        assert parse_recommendation_names(raw, known) == ["Lotus Temple", "Lodhi Garden"]

    def test_unparseable_reply(self):
        assert parse_recommendation_names("I recommend the temple.", {"Lotus Temple"}) == []
        assert parse_recommendation_names("[not json", {"Lotus Temple"}) == []


class TestRecommend:
    def test_ai_result_used_when_enough_valid_names(self):
        reply = json.dumps(["Sanjay Van", "Lodhi Garden", "Akshardham", "National Museum",
                            "Lotus Temple", "Indian Coffee House"])
        llm = FakeLLM(reply=reply)

        result = run(recommend_destinations(llm, ["nature"], "low", ORIGIN, CANDIDATES))

        assert result.source == "ai"
        assert result.names == ["Sanjay Van", "Lodhi Garden", "Akshardham", "National Museum", "Lotus Temple"]
        assert len(llm.calls) == 1
        assert llm.calls[0]["retry"] is False

    def test_insufficient_ai_result_falls_back(self):
        llm = FakeLLM(reply=json.dumps(["Lotus Temple", "Eiffel Tower", "Big Ben"]))

        result = run(recommend_destinations(llm, ["temples"], "medium", ORIGIN, CANDIDATES))

        assert result.source == "fallback"
        assert result.names == smart_fallback_recommendations(["temples"], CANDIDATES)

    def test_ai_failure_falls_back(self):
        llm = FakeLLM(error=httpx.ConnectError("boom"))

        result = run(recommend_destinations(llm, ["parks"], "high", ORIGIN, CANDIDATES))

        assert result.source == "fallback"
        assert result.names[0] == "Lodhi Garden"
        assert len(llm.calls) == 1

    def test_prompt_lists_candidates(self):
        llm = FakeLLM(reply="[]")
        run(recommend_destinations(llm, ["parks"], "low", ORIGIN, CANDIDATES))
        prompt = llm.calls[0]["messages"][-1]["content"]
        assert "Lodhi Garden (parks, 6.0km away)" in prompt
        assert "Budget: low" in prompt

    @pytest.mark.parametrize("interests, candidates", [([], CANDIDATES), (["parks"], [])])
    def test_invalid_input_raises(self, interests, candidates):
        with pytest.raises(ValueError):
            run(recommend_destinations(FakeLLM(), interests, "low", ORIGIN, candidates))
