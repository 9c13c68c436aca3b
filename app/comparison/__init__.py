"""
Location comparison and scoring.

Ranks potential filming locations for a requirement using a weighted
score over budget, description similarity, crew access and
transportation, backed by cached Places and weather data.
"""

from app.comparison.engine import ComparisonEngine
from app.comparison.models import (
    ComparisonResult,
    ComparisonScore,
    ComparisonWeights,
    LocationRequirement,
    PotentialLocation,
)
from app.comparison.scoring import calculate_scores, rank_locations

__all__ = [
    "ComparisonEngine",
    "ComparisonResult",
    "ComparisonScore",
    "ComparisonWeights",
    "LocationRequirement",
    "PotentialLocation",
    "calculate_scores",
    "rank_locations",
]
