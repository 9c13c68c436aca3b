"""
Location comparison engine.

Compares every potential location attached to a requirement:
enrich (cache-aware), measure distance to the project's finalized
locations, score, persist, rank, and ask the AI service for a short
recommendation over the top of the ranking.
"""

import structlog

from app.comparison.access import ensure_project_member
from app.comparison.enrichment import LocationEnricher
from app.comparison.exceptions import NotFoundError
from app.comparison.geo import distances_to_finalized
from app.comparison.models import (
    ComparisonResult,
    ComparisonWeights,
    FinalizedLocation,
    LocationRequirement,
    PotentialLocation,
)
from app.comparison.scoring import calculate_scores, rank_locations
from app.config import get_settings
from app.db.repository import Repositories
from app.services.ai_service import AIService

logger = structlog.get_logger()


class ComparisonEngine:
    """Scores and ranks potential locations for a requirement."""

    def __init__(
        self,
        repos: Repositories,
        enricher: LocationEnricher | None = None,
        ai: AIService | None = None,
    ):
        self.repos = repos
        self.ai = ai or AIService()
        self.enricher = enricher or LocationEnricher(ai=self.ai)
        self.default_max_budget = get_settings().default_max_budget

    def load_requirement(self, requirement_id: str) -> LocationRequirement:
        row = self.repos.requirements.get(requirement_id)
        if not row:
            raise NotFoundError("Location requirement not found")
        return LocationRequirement.model_validate(row)

    async def score_location(
        self,
        location: PotentialLocation,
        requirement: LocationRequirement,
        weights: ComparisonWeights,
        finalized: list[FinalizedLocation],
    ) -> PotentialLocation:
        """Enrich, attach finalized distances, score and persist one location."""
        await self.enricher.enrich(location)

        if finalized and location.cached_data is not None:
            location.cached_data.distance_to_finalized_locations = distances_to_finalized(location, finalized)

        location.comparison_score = calculate_scores(
            location, requirement, weights, default_max_budget=self.default_max_budget
        )
        self.repos.potentials.save_comparison(location)
        return location

    async def compare_locations(
        self,
        requirement_id: str,
        user_id: str,
        weights: ComparisonWeights | None = None,
    ) -> ComparisonResult:
        """Compare all potential locations for a requirement the user can access."""
        weights = weights or ComparisonWeights()
        requirement = self.load_requirement(requirement_id)
        ensure_project_member(self.repos.members, requirement.project_id, user_id)

        logger.info("Comparing locations", requirement_id=requirement.id, prompt=requirement.prompt)

        potentials = [
            PotentialLocation.model_validate(row)
            for row in self.repos.potentials.list_by_requirement(requirement.project_id, requirement.id)
        ]

        if not potentials:
            return ComparisonResult(
                message="No potential locations found for this requirement",
                requirement=requirement,
            )

        finalized = [
            FinalizedLocation.model_validate(row)
            for row in self.repos.finalized.list_by_project(requirement.project_id)
        ]

        scored = []
        for location in potentials:
            scored.append(await self.score_location(location, requirement, weights, finalized))

        ranked = rank_locations(scored)
        recommendation = await self.ai.generate_recommendation(ranked, requirement)

        logger.info(
            "Comparison complete",
            requirement_id=requirement.id,
            count=len(ranked),
            top=ranked[0].title,
            top_score=ranked[0].comparison_score.overall,
        )

        return ComparisonResult(
            message=f"Compared {len(ranked)} locations",
            locations=ranked,
            recommendation=recommendation,
            requirement=requirement,
            weights=weights,
        )

    async def refresh_location_cache(self, location_id: str, user_id: str) -> PotentialLocation:
        """Force a refetch of a location's cached data."""
        row = self.repos.potentials.get(location_id)
        if not row:
            raise NotFoundError("Location not found")

        location = PotentialLocation.model_validate(row)
        ensure_project_member(self.repos.members, location.project_id, user_id)

        self.repos.potentials.clear_cache(location.id)
        await self.enricher.refresh(location)
        self.repos.potentials.save_comparison(location)

        logger.info("Refreshed location cache", location_id=location.id)
        return location
