"""
OpenWeather client for filming-condition data.

Current conditions and a daily forecast (aggregated from the 3-hour
forecast feed), plus a latitude heuristic for the best filming months.
"""

import asyncio
from datetime import datetime, timezone

import httpx
import structlog

from app.comparison.models import CurrentWeather, DailyForecast, WeatherData
from app.config import get_settings

logger = structlog.get_logger()

MAX_FORECAST_DAYS = 7


def best_filming_months(lat: float) -> list[str]:
    """Best months to film by climate zone, from absolute latitude."""
    abs_lat = abs(lat)

    if abs_lat < 23.5:
        # Tropics: dry season
        return ["December", "January", "February", "March"]
    if abs_lat < 35:
        return ["March", "April", "May", "September", "October"]
    if abs_lat < 50:
        return ["May", "June", "July", "August", "September"]
    return ["June", "July", "August"]


def aggregate_forecast(entries: list[dict]) -> list[DailyForecast]:
    """Group 3-hour forecast entries by UTC date into daily summaries."""
    days: dict[str, dict] = {}

    for item in entries:
        try:
            date = datetime.fromtimestamp(item["dt"], tz=timezone.utc)
            temp = float(item["main"]["temp"])
            weather = item.get("weather") or [{}]
            condition = str(weather[0].get("main", ""))
            pop = float(item.get("pop") or 0)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError, OverflowError, OSError):
            logger.warning("Skipping malformed forecast entry", entry=str(item)[:200])
            continue

        key = date.date().isoformat()
        day = days.setdefault(key, {"date": date, "temps": [], "conditions": [], "precipitation": 0.0})
        day["temps"].append(temp)
        day["conditions"].append(condition)
        day["precipitation"] += pop

    forecast = [
        DailyForecast(
            date=day["date"],
            temp_min=round(min(day["temps"])),
            temp_max=round(max(day["temps"])),
            condition=day["conditions"][0] or "Unknown",
            precipitation=round(day["precipitation"] / len(day["conditions"]) * 100),
        )
        for day in days.values()
    ]
    return forecast[:MAX_FORECAST_DAYS]


class WeatherService:
    """Fetches current weather and forecasts in imperial units."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.api_key = settings.openweather_api_key if api_key is None else api_key
        self.base_url = base_url or settings.weather_api_base
        self.timeout = settings.http_timeout_seconds
        self._client = client

    async def _get(self, path: str, params: dict) -> dict:
        params = {**params, "appid": self.api_key, "units": "imperial"}
        if self._client is not None:
            response = await self._client.get(f"{self.base_url}/{path}", params=params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/{path}", params=params)
        response.raise_for_status()
        return response.json()

    async def get_current_weather(self, lat: float, lng: float) -> CurrentWeather:
        if not self.api_key:
            logger.warning("OpenWeather API key not configured")
            return CurrentWeather()

        try:
            data = await self._get("weather", {"lat": lat, "lon": lng})
            weather = data.get("weather") or [{}]
            return CurrentWeather(
                temp=round(data["main"]["temp"]),
                condition=weather[0].get("main", "Unknown"),
                humidity=data["main"]["humidity"],
                wind_speed=round(data["wind"]["speed"]),
            )
        except (httpx.HTTPError, KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
            logger.error("Error fetching current weather", error=str(e))
            return CurrentWeather()

    async def get_forecast(self, lat: float, lng: float) -> list[DailyForecast]:
        if not self.api_key:
            logger.warning("OpenWeather API key not configured")
            return []

        try:
            # 5 days of 3-hour intervals
            data = await self._get("forecast", {"lat": lat, "lon": lng, "cnt": 40})
            entries = data.get("list") if isinstance(data, dict) else None
            if not isinstance(entries, list):
                logger.warning("Forecast response has no entries", body=str(data)[:200])
                return []
            return aggregate_forecast(entries)
        except (httpx.HTTPError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error("Error fetching weather forecast", error=str(e))
            return []

    async def fetch_weather_data(self, lat: float, lng: float) -> WeatherData:
        logger.info("Fetching weather data", lat=lat, lng=lng)

        current, forecast = await asyncio.gather(
            self.get_current_weather(lat, lng),
            self.get_forecast(lat, lng),
        )
        return WeatherData(current=current, forecast=forecast, best_months=best_filming_months(lat))
