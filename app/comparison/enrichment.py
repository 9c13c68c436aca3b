"""
Cache-aware enrichment of potential locations.

Third-party data (nearby hotels, restaurants, transit, weather) is cached on
the location with an expiry. Amenities and a budget estimate are filled in
once and kept across cache refreshes.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import structlog

from app.comparison.models import CachedData, PotentialLocation, utc_now
from app.config import get_settings
from app.services.ai_service import AIService
from app.services.places_service import PlacesService
from app.services.weather_service import WeatherService

logger = structlog.get_logger()


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def needs_enrichment(location: PotentialLocation, now: datetime | None = None) -> bool:
    """True when the cache is missing, has no expiry, or has expired."""
    cached = location.cached_data
    if cached is None or cached.cache_expiry is None:
        return True
    return _as_aware(cached.cache_expiry) < (now or utc_now())


class LocationEnricher:
    """Fills `cached_data`, `amenities` and `budget` on potential locations."""

    def __init__(
        self,
        places: PlacesService | None = None,
        weather: WeatherService | None = None,
        ai: AIService | None = None,
        cache_ttl_hours: int | None = None,
    ):
        self.places = places or PlacesService()
        self.weather = weather or WeatherService()
        self.ai = ai or AIService()
        self.cache_ttl = timedelta(
            hours=cache_ttl_hours if cache_ttl_hours is not None else get_settings().cache_ttl_hours
        )

    async def enrich(self, location: PotentialLocation) -> bool:
        """
        Enrich a location in place if its cache is stale.

        Returns True when new data was fetched (the caller should persist it).
        """
        if not needs_enrichment(location):
            return False

        logger.info("Enriching location data", location_id=location.id, title=location.title)
        lat, lng = location.coordinates.lat, location.coordinates.lng

        (hotels, restaurants, transportation), weather = await asyncio.gather(
            self.places.fetch_enrichment_data(lat, lng),
            self.weather.fetch_weather_data(lat, lng),
        )

        if location.amenities is None or location.amenities.extracted_at is None:
            location.amenities = await self.ai.extract_amenities(location.description, location.address or "")

        if location.budget is None or not location.budget.daily_rate:
            location.budget = await self.ai.estimate_location_expense(
                location.description,
                location.address or "",
                location.google_types[0] if location.google_types else "",
            )

        now = utc_now()
        location.cached_data = CachedData(
            nearby_hotels=hotels,
            nearby_restaurants=restaurants,
            transportation=transportation,
            weather=weather,
            last_fetched=now,
            cache_expiry=now + self.cache_ttl,
        )

        logger.info(
            "Enrichment complete",
            location_id=location.id,
            hotels=len(hotels),
            restaurants=len(restaurants),
        )
        return True

    async def refresh(self, location: PotentialLocation) -> PotentialLocation:
        """Drop the cache and enrich again."""
        location.cached_data = None
        await self.enrich(location)
        return location
