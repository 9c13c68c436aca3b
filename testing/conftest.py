"""
Pytest configuration and fixtures for location comparison tests.

Provides in-memory stand-ins for the Supabase repositories and the
external providers so the comparison flow runs without network access.
"""

import copy
from types import SimpleNamespace

import pytest

from app.comparison.models import (
    CurrentWeather,
    NearbyHotel,
    NearbyRestaurant,
    ParkingFacility,
    TransitStop,
    Transportation,
    WeatherData,
)
from app.config import get_settings
from testing.sample_inputs import (
    SAMPLE_ADMIN_ID,
    SAMPLE_PROJECT_ID,
    SAMPLE_USER_ID,
    TEST_JWT_SECRET,
    get_sample_finalized_rows,
    get_sample_potential_rows,
    get_sample_record_row,
    get_sample_requirement_row,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test with provider keys unset and a fresh settings cache."""
    for name in ("GEMINI_API_KEY", "GOOGLE_PLACES_API_KEY", "OPENWEATHER_API_KEY"):
        monkeypatch.setenv(name, "")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ─── Fake repositories ────────────────────────────────────


class FakeTable:
    """Rows keyed by id."""

    def __init__(self, rows: list[dict] | None = None):
        self.rows = {r["id"]: copy.deepcopy(r) for r in rows or []}

    def get(self, row_id):
        row = self.rows.get(str(row_id))
        return copy.deepcopy(row) if row else None


class FakeMembers:
    def __init__(self, members: list[tuple[str, str]], admins: list[tuple[str, str]] | None = None):
        self.members = set(members)
        self.admins = set(admins or [])

    def get_active(self, project_id, user_id):
        key = (str(project_id), str(user_id))
        if key in self.admins:
            return {"project_id": project_id, "user_id": user_id, "roles": ["owner"], "status": "active"}
        if key in self.members:
            return {"project_id": project_id, "user_id": user_id, "roles": ["scout"], "status": "active"}
        return None


class FakeRequirements(FakeTable):
    def create(self, requirement):
        data = requirement.model_dump(mode="json")
        self.rows[data["id"]] = data
        return copy.deepcopy(data)

    def list_by_project(self, project_id):
        rows = [r for r in self.rows.values() if r["project_id"] == str(project_id)]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def update(self, requirement_id, **kwargs):
        if requirement_id not in self.rows:
            return None
        self.rows[requirement_id].update(kwargs)
        return copy.deepcopy(self.rows[requirement_id])

    def delete(self, requirement_id):
        self.rows.pop(requirement_id, None)


class FakePotentials(FakeTable):
    def __init__(self, rows=None):
        super().__init__(rows)
        self.saved: list[str] = []
        self.cleared: list[str] = []

    def create(self, location):
        data = location.model_dump(mode="json")
        self.rows[data["id"]] = data
        return copy.deepcopy(data)

    def list_by_project(self, project_id, requirement_id=None, record_id=None):
        rows = [
            copy.deepcopy(r)
            for r in self.rows.values()
            if r["project_id"] == str(project_id)
            and (not requirement_id or r.get("requirement_id") == str(requirement_id))
            and (not record_id or r.get("location_record_id") == str(record_id))
        ]
        return sorted(rows, key=lambda r: r.get("created_at", ""), reverse=True)

    def delete(self, location_id):
        self.rows.pop(str(location_id), None)

    def set_team_notes(self, location_id, notes):
        self.rows[str(location_id)]["team_notes"] = notes
        return copy.deepcopy(self.rows[str(location_id)])

    def count_by_record(self, record_id):
        return len(self.list_by_record(record_id))

    def list_by_requirement(self, project_id, requirement_id):
        return [
            copy.deepcopy(r)
            for r in self.rows.values()
            if r["project_id"] == str(project_id) and r.get("requirement_id") == str(requirement_id)
        ]

    def list_by_record(self, record_id):
        return [copy.deepcopy(r) for r in self.rows.values() if r.get("location_record_id") == str(record_id)]

    def count_by_requirement(self, project_id, requirement_id):
        return len(self.list_by_requirement(project_id, requirement_id))

    def save_comparison(self, location):
        data = location.model_dump(mode="json", include={"budget", "amenities", "cached_data", "comparison_score"})
        self.rows[location.id].update(data)
        self.saved.append(location.id)
        return copy.deepcopy(self.rows[location.id])

    def clear_cache(self, location_id):
        self.rows[location_id]["cached_data"] = None
        self.cleared.append(location_id)


class FakeFinalized(FakeTable):
    def create(self, location):
        data = location.model_dump(mode="json")
        self.rows[data["id"]] = data
        return copy.deepcopy(data)

    def list_by_project(self, project_id):
        return [copy.deepcopy(r) for r in self.rows.values() if r["project_id"] == str(project_id)]

    def list_by_record(self, record_id):
        return [copy.deepcopy(r) for r in self.rows.values() if r.get("location_record_id") == str(record_id)]

    def count_by_record(self, record_id):
        return len(self.list_by_record(record_id))


class FakeRecords(FakeTable):
    def create(self, record):
        data = record.model_dump(mode="json")
        self.rows[data["id"]] = data
        return copy.deepcopy(data)

    def list_by_project(self, project_id):
        rows = [copy.deepcopy(r) for r in self.rows.values() if r["project_id"] == str(project_id)]
        return sorted(rows, key=lambda r: r.get("created_at", ""), reverse=True)

    def update(self, record_id, **kwargs):
        if record_id not in self.rows:
            return None
        self.rows[record_id].update(kwargs)
        return copy.deepcopy(self.rows[record_id])

    def delete(self, record_id):
        self.rows.pop(record_id, None)


class FakeRepositories:
    def __init__(self, requirements=None, potentials=None, finalized=None, records=None, members=None):
        self.requirements = FakeRequirements(requirements)
        self.potentials = FakePotentials(potentials)
        self.finalized = FakeFinalized(finalized)
        self.records = FakeRecords(records)
        self.members = FakeMembers(
            members if members is not None else [(SAMPLE_PROJECT_ID, SAMPLE_USER_ID)],
            admins=[(SAMPLE_PROJECT_ID, SAMPLE_ADMIN_ID)],
        )


@pytest.fixture
def repos() -> FakeRepositories:
    return FakeRepositories(
        requirements=[get_sample_requirement_row()],
        potentials=get_sample_potential_rows(),
        finalized=get_sample_finalized_rows(),
        records=[get_sample_record_row()],
    )


# ─── Fake providers ───────────────────────────────────────


class FakePlaces:
    """Returns the same nearby data for any coordinates."""

    def __init__(self):
        self.calls = 0

    async def fetch_enrichment_data(self, lat, lng):
        self.calls += 1
        hotels = [
            NearbyHotel(name="Hotel A", distance=0.5, price_range="$$"),
            NearbyHotel(name="Hotel B", distance=1.5, price_range="$$$"),
        ]
        restaurants = [NearbyRestaurant(name="Diner", distance=0.2, rating=4.5)]
        transportation = Transportation(
            nearest_metro=TransitStop(name="Union Station", distance=0.5),
            nearest_bus_stop=TransitStop(name="Main & 1st", distance=0.1),
            parking_facilities=[ParkingFacility(name="Lot 1", distance=0.3)],
        )
        return hotels, restaurants, transportation


class FakeWeather:
    def __init__(self):
        self.calls = 0

    async def fetch_weather_data(self, lat, lng):
        self.calls += 1
        return WeatherData(
            current=CurrentWeather(temp=72, condition="Clear", humidity=40, wind_speed=5),
            best_months=["March", "April"],
        )


class FakeGenAI:
    """Mimics `genai.Client().models.generate_content`."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.prompts: list[str] = []
        self.models = self

    def generate_content(self, model, contents, config=None):
        self.prompts.append(contents)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def fake_places() -> FakePlaces:
    return FakePlaces()


@pytest.fixture
def fake_weather() -> FakeWeather:
    return FakeWeather()
