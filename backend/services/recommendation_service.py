"""Personalised top-N destination picks.

One attempt is made with the AI recommender. If it raises, returns nothing
parseable, or names fewer than MIN_AI_RESULTS known candidates, the
deterministic interest/distance scorer is used instead.
"""

import logging
from dataclasses import dataclass

from models.destination import Coordinate
from utils.json_helpers import extract_json_array
from utils.llm_client import LLMClient

logger = logging.getLogger(__name__)

MIN_AI_RESULTS = 3
INTEREST_MATCH_POINTS = 10.0
DISTANCE_PENALTY_PER_KM = 0.1


@dataclass(frozen=True)
class Candidate:
    name: str
    category: str
    distance: float


@dataclass(frozen=True)
class RecommendationResult:
    names: list[str]
    source: str  # "ai" or "fallback"


def smart_fallback_recommendations(
    interests: list[str],
    candidates: list[Candidate],
    limit: int = 5,
) -> list[str]:
    scored = []
    for c in candidates:
        category = c.category.lower()
        matches = sum(
            1 for interest in interests
            if interest.lower() in category or category in interest.lower()
        )
        score = INTEREST_MATCH_POINTS * matches - DISTANCE_PENALTY_PER_KM * c.distance
        scored.append((score, c.name))

    scored.sort(key=lambda s: s[0], reverse=True)
    return [name for _, name in scored[:limit]]


def parse_recommendation_names(raw: str, known_names: set[str]) -> list[str]:
    """Names from the AI reply that match a known candidate, first occurrence only."""
    items = extract_json_array(raw)
    if not items:
        return []
    valid = []
    for item in items:
        if isinstance(item, str) and item in known_names and item not in valid:
            valid.append(item)
    return valid


def build_recommendation_prompt(
    interests: list[str],
    budget: str,
    origin: Coordinate,
    candidates: list[Candidate],
    limit: int,
) -> str:
    listing = "\n".join(
        f"{i}. {c.name} ({c.category}, {c.distance:.1f}km away)"
        for i, c in enumerate(candidates, start=1)
    )
    return (
        f"Based on the user's preferences, recommend the top {limit} destinations "
        f"from the provided list.\n\n"
        f"USER PREFERENCES:\n"
        f"- Interests: {', '.join(interests)}\n"
        f"- Budget: {budget}\n"
        f"- Current Location: {origin.latitude}, {origin.longitude}\n\n"
        f"AVAILABLE DESTINATIONS:\n{listing}\n\n"
        f"Match interests with destination categories, respect the budget, and "
        f"balance proximity with relevance.\n"
        f"Return ONLY a JSON array with exactly {limit} destination names in priority order."
    )


RECOMMENDATION_SYSTEM = (
    "You are WanderAI, a personalized travel recommendation engine. "
    "Return ONLY valid JSON, no markdown, no explanation."
)


async def recommend_destinations(
    llm: LLMClient,
    interests: list[str],
    budget: str,
    origin: Coordinate,
    candidates: list[Candidate],
    limit: int = 5,
) -> RecommendationResult:
    if not interests:
        raise ValueError("User interests are required for recommendations")
    if not candidates:
        raise ValueError("No destinations available for recommendations")

    try:
        raw = await llm.chat_completion(
            prompt=build_recommendation_prompt(interests, budget, origin, candidates, limit),
            system=RECOMMENDATION_SYSTEM,
            temperature=0.4,
            max_tokens=200,
            retry=False,
        )
    except Exception:
        logger.warning("AI recommender failed, using fallback ranking", exc_info=True)
    else:
        names = parse_recommendation_names(raw, {c.name for c in candidates})
        if len(names) >= MIN_AI_RESULTS:
            return RecommendationResult(names=names[:limit], source="ai")
        logger.warning("AI recommender returned %d usable names, using fallback ranking", len(names))

    return RecommendationResult(
        names=smart_fallback_recommendations(interests, candidates, limit),
        source="fallback",
    )
