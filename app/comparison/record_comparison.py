"""
AI-judged comparison of potential locations against a location record.

The model scores each potential against the record's free-text description.
If its answer cannot be parsed, locations are ranked by rating plus a bonus
for team engagement instead.
"""

import structlog
from pydantic import ValidationError

from app.comparison.access import ensure_project_member
from app.comparison.exceptions import AccessDeniedError, NotFoundError
from app.comparison.models import (
    LocationRecord,
    PotentialLocation,
    RankedRecordLocation,
    RecordComparisonResult,
    RecordComparisonScore,
)
from app.db.repository import Repositories
from app.services.ai_service import AIService, extract_json

logger = structlog.get_logger()

TEAM_NOTE_BONUS = 0.5
EMPTY_RECORD_SUMMARY = (
    "No potential locations have been added for this location record yet. "
    "Search and add some locations first."
)
FALLBACK_REASONING = "Score based on location rating and team engagement. AI analysis unavailable."
FALLBACK_SUMMARY = (
    "AI comparison is temporarily unavailable. Locations are ranked by rating and team notes count."
)


def fallback_comparison(potentials: list[PotentialLocation]) -> dict:
    """Rating (5 when unrated) plus half a point per team note, capped at 10."""
    locations = []
    for loc in potentials:
        score = min(10.0, (loc.rating or 5) + len(loc.team_notes) * TEAM_NOTE_BONUS)
        locations.append(
            {
                "id": loc.id,
                "name": loc.display_name,
                "overall": score,
                "match_score": score,
                "reasoning": FALLBACK_REASONING,
            }
        )

    return {
        "locations": locations,
        "best_match_id": potentials[0].id,
        "summary": FALLBACK_SUMMARY,
    }


def parse_comparison(text: str, potentials: list[PotentialLocation]) -> dict:
    """Parse the model's JSON answer, falling back to rating-based scores."""
    try:
        data = extract_json(text)
        if not isinstance(data, dict) or not isinstance(data.get("locations"), list):
            raise ValueError("Missing locations array")
        logger.info("Parsed comparison data", count=len(data["locations"]))
        return data
    except ValueError as e:
        logger.warning("Failed to parse AI response, using fallback scores", error=str(e), raw=text[:500])
        return fallback_comparison(potentials)


def rank_record_locations(
    potentials: list[PotentialLocation],
    comparison: dict,
) -> RecordComparisonResult:
    """Map scores back onto the potentials by id and rank them."""
    scores_by_id = {str(s.get("id")): s for s in comparison.get("locations", []) if isinstance(s, dict)}

    ranked = []
    for loc in potentials:
        data = scores_by_id.get(loc.id)
        score = RecordComparisonScore()
        if data:
            try:
                score = RecordComparisonScore(
                    overall=data.get("overall") or 5,
                    match_score=data.get("match_score") or data.get("matchScore") or 5,
                    reasoning=str(data.get("reasoning") or "No reasoning provided"),
                )
            except ValidationError as e:
                logger.warning("Ignoring malformed score", location_id=loc.id, error=str(e))
        ranked.append(RankedRecordLocation(location=loc, comparison_score=score))

    ranked.sort(key=lambda r: r.comparison_score.overall, reverse=True)

    best_id = comparison.get("best_match_id") or comparison.get("bestMatchId")
    best_match = next((r for r in ranked if r.location.id == best_id), ranked[0] if ranked else None)

    return RecordComparisonResult(
        locations=ranked,
        best_match=best_match,
        summary=str(comparison.get("summary") or "Comparison completed successfully"),
    )


async def compare_locations_for_record(
    repos: Repositories,
    ai: AIService,
    record_id: str,
    user_id: str,
    project_id: str | None = None,
) -> RecordComparisonResult:
    """Compare a record's potential locations. Raises AIServiceUnavailable if the model cannot be reached."""
    row = repos.records.get(record_id)
    if not row:
        raise NotFoundError("Location record not found")

    record = LocationRecord.model_validate(row)
    if project_id and project_id != record.project_id:
        logger.warning("Record requested under another project", record_id=record.id, project_id=project_id)
        raise AccessDeniedError("You don't have access to this project")
    ensure_project_member(repos.members, record.project_id, user_id)

    potentials = [PotentialLocation.model_validate(r) for r in repos.potentials.list_by_record(record.id)]
    if not potentials:
        return RecordComparisonResult(
            message="No potential locations found for this record",
            summary=EMPTY_RECORD_SUMMARY,
        )

    logger.info("Comparing record locations", record_id=record.id, count=len(potentials))

    text = await ai.compare_for_record(record, potentials)
    result = rank_record_locations(potentials, parse_comparison(text, potentials))

    if result.best_match:
        logger.info(
            "Best match",
            record_id=record.id,
            name=result.best_match.location.display_name,
            score=result.best_match.comparison_score.overall,
        )
    result.message = f"Compared {len(result.locations)} locations"
    return result
