"""
Weighted multi-criteria scoring for potential locations.

Each criterion yields a 0-10 sub-score. Missing inputs give the neutral
score of 5 so a location is never penalised for data we could not fetch.
The overall score is the weighted mean of the four sub-scores.
"""

import math

from app.comparison.models import (
    CachedData,
    ComparisonScore,
    ComparisonWeights,
    LocationRequirement,
    PotentialLocation,
)

NEUTRAL_SCORE = 5.0
DEFAULT_MAX_BUDGET = 2000.0  # per day
NO_DATA_DISTANCE = 10.0  # miles, assumed when nothing was found nearby


def _round1(value: float) -> float:
    """Round half up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


def score_budget(
    location: PotentialLocation,
    requirement: LocationRequirement | None,
    default_max_budget: float = DEFAULT_MAX_BUDGET,
) -> float:
    """Cheaper is better: 10 at $0, 5 at the budget ceiling, falling to 0 above it."""
    if not location.budget or not location.budget.daily_rate:
        return NEUTRAL_SCORE

    rate = location.budget.daily_rate
    max_budget = (requirement.budget.max if requirement else None) or default_max_budget

    if rate <= max_budget:
        return max(5.0, 10 - (rate / max_budget) * 5)

    over_budget_ratio = rate / max_budget
    return max(0.0, 5 - over_budget_ratio * 2)


def score_similarity(location: PotentialLocation, requirement: LocationRequirement | None) -> float:
    """Share of the prompt's significant words found in the title or description."""
    if not requirement or not requirement.prompt:
        return NEUTRAL_SCORE

    description = (location.description or "").lower()
    title = (location.title or "").lower()
    words = [w for w in requirement.prompt.lower().split() if len(w) > 3]

    matches = sum(1 for w in words if w in description or w in title)
    return min(10.0, (matches / max(len(words), 1)) * 10)


def _average_distance(distances: list[float]) -> float:
    if not distances:
        return NO_DATA_DISTANCE
    return sum(distances) / len(distances)


def score_crew_access(cached: CachedData | None) -> float:
    """Closer hotels and restaurants are better for crew logistics."""
    if cached is None:
        return NEUTRAL_SCORE

    avg_hotel = _average_distance([h.distance for h in cached.nearby_hotels])
    avg_restaurant = _average_distance([r.distance for r in cached.nearby_restaurants])

    hotel_score = max(0.0, 10 - avg_hotel * 2)
    restaurant_score = max(0.0, 10 - avg_restaurant * 3)
    return (hotel_score + restaurant_score) / 2


def score_transportation(cached: CachedData | None) -> float:
    """Metro (up to 4), bus (up to 3) and parking (up to 3) access."""
    if cached is None or cached.transportation is None:
        return NEUTRAL_SCORE

    transport = cached.transportation
    score = 0.0

    if transport.nearest_metro:
        score += max(0.0, 4 - transport.nearest_metro.distance * 2)

    if transport.nearest_bus_stop:
        score += max(0.0, 3 - transport.nearest_bus_stop.distance * 3)

    score += min(3, len(transport.parking_facilities))

    return min(10.0, score)


def calculate_scores(
    location: PotentialLocation,
    requirement: LocationRequirement | None,
    weights: ComparisonWeights,
    default_max_budget: float = DEFAULT_MAX_BUDGET,
) -> ComparisonScore:
    """Compute all sub-scores and the weighted overall score for a location."""
    budget = score_budget(location, requirement, default_max_budget)
    similarity = score_similarity(location, requirement)
    crew_access = score_crew_access(location.cached_data)
    transportation = score_transportation(location.cached_data)

    overall = (
        budget * weights.budget
        + similarity * weights.similarity
        + crew_access * weights.crew_access
        + transportation * weights.transportation
    ) / weights.total

    return ComparisonScore(
        overall=_round1(overall),
        budget=_round1(budget),
        similarity=_round1(similarity),
        crew_access=_round1(crew_access),
        transportation=_round1(transportation),
    )


def rank_locations(locations: list[PotentialLocation]) -> list[PotentialLocation]:
    """Sort by overall score, highest first. Ties keep their input order."""
    return sorted(
        locations,
        key=lambda loc: loc.comparison_score.overall if loc.comparison_score else 0.0,
        reverse=True,
    )
