"""
Gemini-backed helpers for location comparison.

The AI service is treated as an opaque text generator: amenity extraction,
daily-rate estimation, a short recommendation over ranked locations, and a
free-form comparison for location records. Amenity and budget estimation
fall back to keyword heuristics when Gemini is not configured or fails.
"""

import asyncio
import json
import re
from typing import Any

import structlog
from google import genai
from google.genai.types import GenerateContentConfig

from app.comparison.exceptions import AIServiceUnavailable
from app.comparison.models import (
    Amenities,
    LocationBudget,
    LocationRecord,
    LocationRequirement,
    PotentialLocation,
    utc_now,
)
from app.config import get_settings

logger = structlog.get_logger()

NO_RECOMMENDATION = "No recommendations available."
RECOMMENDATION_FAILED = "Unable to generate AI recommendation at this time."

AMENITY_KEYWORDS: dict[str, list[str]] = {
    "parking": ["parking", "garage", "car park"],
    "wifi": ["wifi", "wi-fi", "internet"],
    "power": ["power", "electric", "outlet", "generator", "three-phase"],
    "kitchen": ["kitchen"],
    "green_room": ["green room", "dressing room", "lounge"],
    "bathroom": ["bathroom", "restroom", "toilet", "washroom"],
    "loading_dock": ["loading dock", "loading bay", "freight elevator"],
    "catering_space": ["catering", "dining", "banquet", "cafeteria"],
}

# Typical daily location fees (USD) by Google place type
DAILY_RATE_BY_TYPE: dict[str, float] = {
    "lodging": 2500,
    "restaurant": 1500,
    "bar": 1200,
    "cafe": 1000,
    "museum": 3000,
    "church": 800,
    "park": 500,
    "store": 1200,
    "school": 1000,
    "library": 900,
    "stadium": 5000,
    "night_club": 2000,
    "warehouse": 1500,
}
DEFAULT_DAILY_RATE = 1000.0


AMENITIES_PROMPT = """You are a film production location manager. From the location listing below, determine which amenities the location offers.

Address: {address}
Description: {description}

Respond with valid JSON only, using booleans:
{{
  "parking": false, "wifi": false, "power": false, "kitchen": false,
  "green_room": false, "bathroom": false, "loading_dock": false, "catering_space": false
}}"""


EXPENSE_PROMPT = """You are a film production location manager. Estimate the daily location fee in USD for filming at this location.

Place type: {place_type}
Address: {address}
Description: {description}

Respond with valid JSON only:
{{
  "daily_rate": <number>,
  "estimated_min": <number>,
  "estimated_max": <number>,
  "confidence": "<low, medium, or high>",
  "reasoning": "<one sentence>"
}}"""


RECOMMENDATION_PROMPT = """You are an expert location manager providing recommendations for filming locations.

Requirement: {prompt}
Budget Limit: ${budget}/day
Priority: {priority}

Top Locations (ranked by overall score):
{locations}

Based on this data, provide a 3-4 sentence recommendation explaining:
1. Which location is the best overall choice and why
2. Which location offers the best value for budget
3. Any important trade-offs to consider

Keep it concise and actionable. Focus on practical production considerations."""


RECORD_COMPARISON_PROMPT = """You are a professional location scout comparing potential filming locations.

LOCATION RECORD TO MATCH:
Name: {name}
Description: {description}
{user_notes}

POTENTIAL LOCATIONS TO COMPARE ({count} total):
{locations}

TASK:
1. Compare each potential location against the location record's description
2. Score each location from 0-10 based on how well it matches the requirements
3. Provide reasoning for each score (2-3 sentences explaining the match quality)
4. Identify the best overall match
5. Provide an overall summary comparing all locations

Return your analysis in this EXACT JSON format:
{{
  "locations": [
    {{
      "id": "potential_location_id_here",
      "name": "location name",
      "overall": 8.5,
      "match_score": 8.5,
      "reasoning": "Why this location scored as it did."
    }}
  ],
  "best_match_id": "id_of_best_location",
  "summary": "2-3 paragraph summary comparing all locations and explaining which is best and why."
}}"""


def extract_json(text: str) -> Any:
    """Extract a JSON value from model output, tolerating markdown code fences."""
    if not text:
        raise ValueError("Empty response")

    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if fenced:
        text = fenced.group(1)

    return json.loads(text.strip())


def heuristic_amenities(description: str, address: str = "") -> Amenities:
    text = f"{description} {address}".lower()
    found = {name: any(k in text for k in keywords) for name, keywords in AMENITY_KEYWORDS.items()}
    return Amenities(**found, extracted_at=utc_now())


def heuristic_budget(place_type: str = "") -> LocationBudget:
    rate = DAILY_RATE_BY_TYPE.get(place_type, DEFAULT_DAILY_RATE)
    return LocationBudget(
        daily_rate=rate,
        estimated_min=round(rate * 0.7),
        estimated_max=round(rate * 1.3),
        confidence="low",
        reasoning=f"Typical fee for {place_type or 'general'} locations",
        last_updated=utc_now(),
    )


class AIService:
    """Gemini client wrapper. `client=None` with no API key disables AI calls."""

    def __init__(self, client: Any | None = None, model: str | None = None):
        settings = get_settings()
        self.model = model or settings.gemini_model
        if client is None and settings.gemini_api_key:
            client = genai.Client(api_key=settings.gemini_api_key)
        self.client = client

    @property
    def available(self) -> bool:
        return self.client is not None

    async def _generate(self, prompt: str, json_output: bool = False) -> str:
        config = GenerateContentConfig(response_mime_type="application/json") if json_output else None

        def _call_gemini():
            return self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

        response = await asyncio.to_thread(_call_gemini)
        return response.text or ""

    async def extract_amenities(self, description: str, address: str = "") -> Amenities:
        if not self.available:
            return heuristic_amenities(description, address)

        try:
            text = await self._generate(
                AMENITIES_PROMPT.format(description=description, address=address or "Unknown"),
                json_output=True,
            )
            data = extract_json(text)
            return Amenities(
                **{name: bool(data.get(name, False)) for name in AMENITY_KEYWORDS},
                extracted_at=utc_now(),
            )
        except Exception as e:
            logger.warning("Amenity extraction failed, using keywords", error=str(e))
            return heuristic_amenities(description, address)

    async def estimate_location_expense(
        self, description: str, address: str = "", place_type: str = ""
    ) -> LocationBudget:
        if not self.available:
            return heuristic_budget(place_type)

        try:
            text = await self._generate(
                EXPENSE_PROMPT.format(
                    description=description,
                    address=address or "Unknown",
                    place_type=place_type or "Unknown",
                ),
                json_output=True,
            )
            data = extract_json(text)
            confidence = str(data.get("confidence", "low")).lower()
            return LocationBudget(
                daily_rate=float(data["daily_rate"]),
                estimated_min=float(data.get("estimated_min") or data["daily_rate"]),
                estimated_max=float(data.get("estimated_max") or data["daily_rate"]),
                confidence=confidence if confidence in ("low", "medium", "high") else "low",
                reasoning=data.get("reasoning"),
                last_updated=utc_now(),
            )
        except Exception as e:
            logger.warning("Expense estimation failed, using type table", error=str(e))
            return heuristic_budget(place_type)

    async def generate_recommendation(
        self,
        ranked: list[PotentialLocation],
        requirement: LocationRequirement | None,
    ) -> str:
        """Short recommendation over the top five ranked locations."""
        if not self.available or not ranked:
            return NO_RECOMMENDATION

        summary = [
            {
                "rank": index + 1,
                "name": loc.title,
                "score": loc.comparison_score.overall if loc.comparison_score else None,
                "budget": loc.budget.daily_rate if loc.budget and loc.budget.daily_rate else "Unknown",
                "similarity": loc.comparison_score.similarity if loc.comparison_score else None,
                "crew_access": loc.comparison_score.crew_access if loc.comparison_score else None,
                "transportation": loc.comparison_score.transportation if loc.comparison_score else None,
                "nearby_hotels": len(loc.cached_data.nearby_hotels) if loc.cached_data else 0,
                "nearby_restaurants": len(loc.cached_data.nearby_restaurants) if loc.cached_data else 0,
            }
            for index, loc in enumerate(ranked[:5])
        ]

        prompt = RECOMMENDATION_PROMPT.format(
            prompt=requirement.prompt if requirement else "General location search",
            budget=(requirement.budget.max if requirement else None) or "Not specified",
            priority=requirement.priority.value if requirement else "Medium",
            locations=json.dumps(summary, indent=2),
        )

        try:
            return await self._generate(prompt)
        except Exception as e:
            logger.error("Error generating AI recommendation", error=str(e))
            return RECOMMENDATION_FAILED

    async def compare_for_record(
        self,
        record: LocationRecord,
        potentials: list[PotentialLocation],
    ) -> str:
        """Raw model output comparing potentials against a record. Parsing is left to the caller."""
        if not self.available:
            raise AIServiceUnavailable("Gemini API key not configured")

        lines = []
        for idx, loc in enumerate(potentials, 1):
            notes = ", ".join(f'"{n.note}"' for n in loc.team_notes)
            lines.append(
                f"{idx}. {loc.display_name} (id: {loc.id})\n"
                f"   Address: {loc.address or 'Not specified'}\n"
                f"   Description: {loc.description or 'No description'}\n"
                f"   Rating: {f'{loc.rating}/5 stars' if loc.rating else 'No rating'}\n"
                f"   Price Level: {'$' * loc.price_level if loc.price_level else 'Unknown'}\n"
                f"   Photos: {len(loc.photos)} available"
                + (f"\n   Team Notes: {notes}" if notes else "")
            )

        prompt = RECORD_COMPARISON_PROMPT.format(
            name=record.name,
            description=record.description,
            user_notes=f"User Notes: {record.user_notes}" if record.user_notes else "",
            count=len(potentials),
            locations="\n".join(lines),
        )

        try:
            text = await self._generate(prompt, json_output=True)
        except Exception as e:
            logger.error("AI comparison failed", record_id=record.id, error=str(e))
            raise AIServiceUnavailable(str(e)) from e

        logger.info("AI comparison response received", record_id=record.id, length=len(text))
        return text
