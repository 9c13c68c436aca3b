"""
Google Places Nearby Search client.

Fetches hotels, restaurants, transit and parking around a location for crew
logistics. Failures are logged and degrade to empty results so a comparison
never fails because a provider is down.
"""

import asyncio
from typing import Callable, TypeVar

import httpx
import structlog

from app.comparison.geo import calculate_distance
from app.comparison.models import (
    NearbyHotel,
    NearbyRestaurant,
    ParkingFacility,
    TransitStop,
    Transportation,
)
from app.config import get_settings

logger = structlog.get_logger()

METERS_PER_MILE = 1609.34

T = TypeVar("T")


def _has_location(place) -> bool:
    """True for a result dict carrying numeric geometry.location lat/lng."""
    if not isinstance(place, dict) or not isinstance(place.get("geometry"), dict):
        return False
    loc = place["geometry"].get("location")
    return (
        isinstance(loc, dict)
        and isinstance(loc.get("lat"), (int, float))
        and isinstance(loc.get("lng"), (int, float))
    )


class PlacesService:
    """Thin async wrapper around the Places Nearby Search endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.api_key = settings.google_places_api_key if api_key is None else api_key
        self.base_url = base_url or settings.places_api_base
        self.timeout = settings.http_timeout_seconds
        self._client = client

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        place_type: str,
        radius_miles: float = 3,
        limit: int = 5,
    ) -> list[dict]:
        """Raw nearby-search results for a place type, at most `limit`."""
        if not self.api_key:
            logger.warning("Google Places API key not configured")
            return []

        params = {
            "location": f"{lat},{lng}",
            "radius": round(radius_miles * METERS_PER_MILE),
            "type": place_type,
            "key": self.api_key,
        }

        try:
            if self._client is not None:
                response = await self._client.get(f"{self.base_url}/nearbysearch/json", params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(f"{self.base_url}/nearbysearch/json", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching nearby places", place_type=place_type, error=str(e))
            return []

        if not isinstance(data, dict):
            logger.error("Unexpected Google Places response", place_type=place_type, body=str(data)[:200])
            return []

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.error("Google Places API error", status=status, place_type=place_type)
            return []

        results = data.get("results")
        if not isinstance(results, list):
            return []
        return [r for r in results if _has_location(r)][:limit]

    @staticmethod
    def _distance_to(lat: float, lng: float, place: dict) -> float:
        loc = place["geometry"]["location"]
        return calculate_distance(lat, lng, loc["lat"], loc["lng"])

    @staticmethod
    def _parse(places: list[dict], build: Callable[[dict], T]) -> list[T]:
        """Build a model per place, skipping entries with unusable fields."""
        parsed = []
        for place in places:
            try:
                parsed.append(build(place))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed place", name=place.get("name"), error=str(e))
        return parsed

    async def get_nearby_hotels(self, lat: float, lng: float) -> list[NearbyHotel]:
        places = await self.search_nearby(lat, lng, "lodging", 3, 5)

        def build(place: dict) -> NearbyHotel:
            price_level = place.get("price_level")
            return NearbyHotel(
                name=place.get("name", ""),
                address=place.get("vicinity") or place.get("formatted_address") or "",
                distance=self._distance_to(lat, lng, place),
                price_range="$" * (price_level + 1) if price_level is not None else "Unknown",
                rating=place.get("rating") or 0,
                place_id=place.get("place_id"),
            )

        return self._parse(places, build)

    async def get_nearby_restaurants(self, lat: float, lng: float) -> list[NearbyRestaurant]:
        places = await self.search_nearby(lat, lng, "restaurant", 3, 5)

        def build(place: dict) -> NearbyRestaurant:
            return NearbyRestaurant(
                name=place.get("name", ""),
                address=place.get("vicinity") or place.get("formatted_address") or "",
                distance=self._distance_to(lat, lng, place),
                rating=place.get("rating") or 0,
                price_level=place.get("price_level") or 0,
                place_id=place.get("place_id"),
            )

        return self._parse(places, build)

    async def get_nearby_transportation(self, lat: float, lng: float) -> Transportation:
        """Nearest metro and bus stop plus parking within two miles."""
        transit_stations, bus_stations, parking_lots = await asyncio.gather(
            self.search_nearby(lat, lng, "transit_station", 3, 3),
            self.search_nearby(lat, lng, "bus_station", 3, 3),
            self.search_nearby(lat, lng, "parking", 2, 5),
        )

        def stop(place: dict) -> TransitStop:
            return TransitStop(name=place.get("name", ""), distance=self._distance_to(lat, lng, place))

        def parking(place: dict) -> ParkingFacility:
            return ParkingFacility(
                name=place.get("name", ""),
                distance=self._distance_to(lat, lng, place),
                type="parking_lot" if "parking" in (place.get("types") or []) else "street_parking",
            )

        # Results come back in prominence order; take the first as "nearest"
        metros = self._parse(transit_stations, stop)
        buses = self._parse(bus_stations, stop)

        return Transportation(
            nearest_metro=metros[0] if metros else None,
            nearest_bus_stop=buses[0] if buses else None,
            parking_facilities=self._parse(parking_lots, parking),
        )

    async def fetch_enrichment_data(
        self, lat: float, lng: float
    ) -> tuple[list[NearbyHotel], list[NearbyRestaurant], Transportation]:
        """Hotels, restaurants and transportation fetched concurrently."""
        logger.info("Fetching enrichment data", lat=lat, lng=lng)

        hotels, restaurants, transportation = await asyncio.gather(
            self.get_nearby_hotels(lat, lng),
            self.get_nearby_restaurants(lat, lng),
            self.get_nearby_transportation(lat, lng),
        )
        return hotels, restaurants, transportation
