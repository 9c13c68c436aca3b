"""
Tests for the Places and OpenWeather clients using httpx.MockTransport.
"""

from datetime import datetime, timezone

import httpx

from app.services.places_service import PlacesService
from app.services.weather_service import (
    WeatherService,
    aggregate_forecast,
    best_filming_months,
)

LAT, LNG = 34.0469, -118.2353


def place(name, lat=LAT + 0.01, lng=LNG, **extra):
    return {"name": name, "geometry": {"location": {"lat": lat, "lng": lng}}, "place_id": f"pid_{name}", **extra}


def places_client(responses: dict[str, dict], seen: list | None = None) -> httpx.AsyncClient:
    """Mock Places API answering by the `type` query parameter."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(dict(request.url.params))
        place_type = request.url.params["type"]
        return httpx.Response(200, json=responses.get(place_type, {"status": "ZERO_RESULTS", "results": []}))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPlacesService:

    async def test_missing_api_key_returns_empty(self):
        service = PlacesService(api_key="", client=places_client({}))
        assert await service.search_nearby(LAT, LNG, "lodging") == []

    async def test_search_params(self):
        seen = []
        service = PlacesService(api_key="k", base_url="https://places.test", client=places_client({}, seen))

        await service.search_nearby(LAT, LNG, "lodging", radius_miles=3, limit=5)

        assert seen[0]["radius"] == "4828"
        assert seen[0]["location"] == f"{LAT},{LNG}"
        assert seen[0]["key"] == "k"

    async def test_api_error_status_returns_empty(self):
        client = places_client({"lodging": {"status": "REQUEST_DENIED", "results": [place("X")]}})
        service = PlacesService(api_key="k", client=client)
        assert await service.search_nearby(LAT, LNG, "lodging") == []

    async def test_http_error_returns_empty(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        service = PlacesService(api_key="k", client=client)
        assert await service.search_nearby(LAT, LNG, "lodging") == []

    async def test_hotels_limit_and_price_range(self):
        results = [place(f"H{i}", price_level=i % 4) for i in range(7)]
        results[0].pop("price_level")
        client = places_client({"lodging": {"status": "OK", "results": results}})
        service = PlacesService(api_key="k", client=client)

        hotels = await service.get_nearby_hotels(LAT, LNG)

        assert len(hotels) == 5
        assert hotels[0].price_range == "Unknown"
        assert hotels[1].price_range == "$$"
        assert hotels[3].price_range == "$$$$"
        assert 0.6 < hotels[0].distance < 0.75  # 0.01 degree of latitude

    async def test_transportation(self):
        client = places_client(
            {
                "transit_station": {"status": "OK", "results": [place("7th St/Metro"), place("Pershing Sq")]},
                "bus_station": {"status": "ZERO_RESULTS", "results": []},
                "parking": {
                    "status": "OK",
                    "results": [
                        place("Lot A", types=["parking", "establishment"]),
                        place("Curbside", types=["point_of_interest"]),
                    ],
                },
            }
        )
        service = PlacesService(api_key="k", client=client)

        transport = await service.get_nearby_transportation(LAT, LNG)

        assert transport.nearest_metro.name == "7th St/Metro"
        assert transport.nearest_bus_stop is None
        assert [p.type for p in transport.parking_facilities] == ["parking_lot", "street_parking"]

    async def test_results_without_geometry_skipped(self):
        client = places_client({"restaurant": {"status": "OK", "results": [{"name": "Ghost"}, place("Real")]}})
        service = PlacesService(api_key="k", client=client)

        restaurants = await service.get_nearby_restaurants(LAT, LNG)

        assert [r.name for r in restaurants] == ["Real"]

    async def test_non_object_body_returns_empty(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=["unexpected"])))
        service = PlacesService(api_key="k", client=client)

        assert await service.search_nearby(LAT, LNG, "lodging") == []
        assert await service.get_nearby_hotels(LAT, LNG) == []

    async def test_results_not_a_list_returns_empty(self):
        client = places_client({"lodging": {"status": "OK", "results": None}})
        service = PlacesService(api_key="k", client=client)
        assert await service.search_nearby(LAT, LNG, "lodging") == []

    async def test_malformed_geometry_skipped(self):
        results = [
            {"name": "Flat", "geometry": "34,-118"},
            {"name": "NoCoords", "geometry": {"location": None}},
            {"name": "Text", "geometry": {"location": {"lat": "34.05", "lng": "-118.23"}}},
            "not a place",
            place("Real"),
        ]
        client = places_client({"restaurant": {"status": "OK", "results": results}})
        service = PlacesService(api_key="k", client=client)

        restaurants = await service.get_nearby_restaurants(LAT, LNG)

        assert [r.name for r in restaurants] == ["Real"]

    async def test_unusable_fields_skip_only_that_place(self):
        results = [place("Odd", price_level="cheap"), place("Bad Rating", rating="great"), place("Good", price_level=1)]
        client = places_client({"lodging": {"status": "OK", "results": results}})
        service = PlacesService(api_key="k", client=client)

        hotels = await service.get_nearby_hotels(LAT, LNG)

        assert [h.name for h in hotels] == ["Good"]
        assert hotels[0].price_range == "$$"


def forecast_entry(ts: datetime, temp: float, condition: str, pop: float) -> dict:
    return {"dt": int(ts.timestamp()), "main": {"temp": temp}, "weather": [{"main": condition}], "pop": pop}


class TestWeather:

    def test_best_months_by_latitude(self):
        assert best_filming_months(10) == ["December", "January", "February", "March"]
        assert best_filming_months(-30) == ["March", "April", "May", "September", "October"]
        assert best_filming_months(40.7) == ["May", "June", "July", "August", "September"]
        assert best_filming_months(60) == ["June", "July", "August"]

    def test_best_months_boundaries(self):
        assert best_filming_months(23.5)[0] == "March"
        assert best_filming_months(35)[0] == "May"
        assert best_filming_months(50)[0] == "June"

    def test_aggregate_forecast(self):
        day1 = datetime(2026, 5, 1, 0, tzinfo=timezone.utc)
        day2 = datetime(2026, 5, 2, 0, tzinfo=timezone.utc)
        entries = [
            forecast_entry(day1.replace(hour=0), 60.4, "Clouds", 0.0),
            forecast_entry(day1.replace(hour=12), 75.6, "Rain", 0.5),
            forecast_entry(day2.replace(hour=3), 58, "Clear", 0.2),
        ]

        forecast = aggregate_forecast(entries)

        assert len(forecast) == 2
        assert (forecast[0].temp_min, forecast[0].temp_max) == (60, 76)
        assert forecast[0].condition == "Clouds"
        assert forecast[0].precipitation == 25
        assert forecast[1].precipitation == 20

    def test_aggregate_forecast_caps_at_seven_days(self):
        start = datetime(2026, 5, 1, tzinfo=timezone.utc).timestamp()
        entries = [
            {"dt": int(start + day * 86400), "main": {"temp": 70}, "weather": [{"main": "Clear"}]}
            for day in range(9)
        ]
        assert len(aggregate_forecast(entries)) == 7

    async def test_current_weather(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["units"] == "imperial"
            return httpx.Response(
                200,
                json={"main": {"temp": 71.6, "humidity": 40}, "wind": {"speed": 4.4}, "weather": [{"main": "Clear"}]},
            )

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        service = WeatherService(api_key="k", client=client)

        current = await service.get_current_weather(LAT, LNG)

        assert (current.temp, current.condition, current.humidity, current.wind_speed) == (72, "Clear", 40, 4)

    async def test_missing_key_gives_defaults(self):
        service = WeatherService(api_key="")

        data = await service.fetch_weather_data(LAT, LNG)

        assert data.current.condition == "Unknown"
        assert data.forecast == []
        assert data.best_months == ["March", "April", "May", "September", "October"]

    async def test_provider_error_gives_defaults(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(401)))
        service = WeatherService(api_key="bad", client=client)

        assert (await service.get_current_weather(LAT, LNG)).temp == 0
        assert await service.get_forecast(LAT, LNG) == []

    def test_aggregate_forecast_skips_malformed_entries(self):
        day = datetime(2026, 5, 1, 6, tzinfo=timezone.utc)
        entries = [
            {"dt": int(day.timestamp()), "weather": [{"main": "Clear"}]},
            {"dt": int(day.timestamp()), "main": None},
            {"dt": "soon", "main": {"temp": 70}},
            None,
            forecast_entry(day, 68, "Clear", 0.1),
        ]

        forecast = aggregate_forecast(entries)

        assert len(forecast) == 1
        assert (forecast[0].temp_min, forecast[0].temp_max, forecast[0].precipitation) == (68, 68, 10)

    async def test_forecast_without_entries_is_empty(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"list": None})))
        service = WeatherService(api_key="k", client=client)
        assert await service.get_forecast(LAT, LNG) == []

    async def test_non_object_bodies_give_defaults(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=["unexpected"])))
        service = WeatherService(api_key="k", client=client)

        assert (await service.get_current_weather(LAT, LNG)).condition == "Unknown"
        assert await service.get_forecast(LAT, LNG) == []

    async def test_current_weather_without_main_gives_defaults(self):
        body = {"main": None, "wind": {"speed": 3}, "weather": [{"main": "Clear"}]}
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body)))
        service = WeatherService(api_key="k", client=client)

        current = await service.get_current_weather(LAT, LNG)

        assert (current.temp, current.condition) == (0, "Unknown")
