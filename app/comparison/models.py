"""
Data models for location comparison.

Defines requirements, potential/finalized locations, the cached enrichment
payload attached to each potential location, and the scores produced by
the comparison engine. Distances are in miles, scores on a 0-10 scale.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequirementPriority(str, Enum):
    """Priority of a location requirement."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RequirementStatus(str, Enum):
    """Lifecycle status of a location requirement."""

    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class RecordStatus(str, Enum):
    """Lifecycle status of a location record."""

    PENDING = "pending"
    SEARCHING = "searching"
    FINALIZED = "finalized"


class Coordinates(BaseModel):
    lat: float
    lng: float


# ─── Requirement ──────────────────────────────────────────


class ShootDates(BaseModel):
    start_date: datetime | None = None
    end_date: datetime | None = None


class RequirementBudget(BaseModel):
    """Budget ceiling for a requirement (per shooting day)."""

    max: float | None = Field(default=None, ge=0)
    currency: str = "USD"
    notes: str | None = None


class RequirementConstraints(BaseModel):
    max_distance: float | None = Field(default=None, ge=0)  # miles from finalized locations
    required_amenities: list[str] = Field(default_factory=list)
    shoot_dates: list[ShootDates] = Field(default_factory=list)
    crew_size: int | None = Field(default=None, ge=0)


class LocationRequirement(BaseModel):
    """
    A location need for a project, described by a free-text prompt.

    Potential locations are attached to a requirement and compared against it.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    prompt: str = Field(min_length=1, max_length=500)
    notes: str = Field(default="", max_length=2000)
    priority: RequirementPriority = RequirementPriority.MEDIUM
    budget: RequirementBudget = Field(default_factory=RequirementBudget)
    constraints: RequirementConstraints = Field(default_factory=RequirementConstraints)
    created_by: str | None = None
    status: RequirementStatus = RequirementStatus.ACTIVE
    potential_locations_count: int = 0
    finalized_location_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ─── Location enrichment payload ──────────────────────────


class LocationBudget(BaseModel):
    """Daily-rate estimate for a location (AI estimated or entered manually)."""

    daily_rate: float | None = Field(default=None, ge=0)
    estimated_min: float | None = Field(default=None, ge=0)
    estimated_max: float | None = Field(default=None, ge=0)
    confidence: Literal["low", "medium", "high"] | None = None
    reasoning: str | None = None
    currency: str = "USD"
    deposit: float | None = Field(default=None, ge=0)
    negotiable: bool = False
    notes: str | None = None
    last_updated: datetime | None = None


class Amenities(BaseModel):
    """Amenities extracted from a location description."""

    parking: bool = False
    wifi: bool = False
    power: bool = False
    kitchen: bool = False
    green_room: bool = False
    bathroom: bool = False
    loading_dock: bool = False
    catering_space: bool = False
    extracted_at: datetime | None = None


class NearbyHotel(BaseModel):
    name: str
    address: str = ""
    distance: float
    price_range: str = "Unknown"  # "$" .. "$$$$"
    rating: float = 0
    place_id: str | None = None


class NearbyRestaurant(BaseModel):
    name: str
    address: str = ""
    distance: float
    rating: float = 0
    price_level: int = 0
    place_id: str | None = None


class TransitStop(BaseModel):
    name: str
    distance: float


class ParkingFacility(BaseModel):
    name: str
    distance: float
    type: Literal["parking_lot", "street_parking"] = "parking_lot"


class Transportation(BaseModel):
    nearest_metro: TransitStop | None = None
    nearest_bus_stop: TransitStop | None = None
    parking_facilities: list[ParkingFacility] = Field(default_factory=list)


class CurrentWeather(BaseModel):
    temp: int = 0
    condition: str = "Unknown"
    humidity: int = 0
    wind_speed: int = 0


class DailyForecast(BaseModel):
    date: datetime
    temp_min: int
    temp_max: int
    condition: str = "Unknown"
    precipitation: int = 0  # percent


class WeatherData(BaseModel):
    current: CurrentWeather = Field(default_factory=CurrentWeather)
    forecast: list[DailyForecast] = Field(default_factory=list)
    best_months: list[str] = Field(default_factory=list)


class FinalizedDistance(BaseModel):
    location_id: str
    location_name: str
    distance: float


class CachedData(BaseModel):
    """Third-party data cached on a potential location until `cache_expiry`."""

    nearby_hotels: list[NearbyHotel] = Field(default_factory=list)
    nearby_restaurants: list[NearbyRestaurant] = Field(default_factory=list)
    transportation: Transportation | None = None
    weather: WeatherData | None = None
    distance_to_finalized_locations: list[FinalizedDistance] = Field(default_factory=list)
    last_fetched: datetime | None = None
    cache_expiry: datetime | None = None


class ComparisonScore(BaseModel):
    overall: float
    budget: float
    similarity: float
    crew_access: float
    transportation: float
    last_calculated: datetime = Field(default_factory=utc_now)


class ComparisonWeights(BaseModel):
    """Relative weight of each criterion. Only the ratio between weights matters."""

    budget: float = Field(default=30, ge=0)
    similarity: float = Field(default=35, ge=0)
    crew_access: float = Field(default=20, ge=0)
    transportation: float = Field(default=15, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "ComparisonWeights":
        if self.total <= 0:
            raise ValueError("At least one weight must be positive")
        return self

    @property
    def total(self) -> float:
        return self.budget + self.similarity + self.crew_access + self.transportation


# ─── Locations ────────────────────────────────────────────


class TeamNote(BaseModel):
    user_id: str
    user_name: str = ""
    user_role: str = ""
    note: str = Field(max_length=2000)
    timestamp: datetime = Field(default_factory=utc_now)


class PotentialLocation(BaseModel):
    """A candidate filming location under consideration for a requirement or record."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    requirement_id: str | None = None
    location_record_id: str | None = None

    title: str
    name: str | None = None
    description: str = ""
    address: str | None = None
    coordinates: Coordinates
    rating: float | None = Field(default=None, ge=0, le=10)
    price_level: int | None = None
    place_id: str | None = None
    google_types: list[str] = Field(default_factory=list)
    photos: list[dict[str, Any]] = Field(default_factory=list)
    team_notes: list[TeamNote] = Field(default_factory=list)

    budget: LocationBudget | None = None
    amenities: Amenities | None = None
    cached_data: CachedData | None = None
    comparison_score: ComparisonScore | None = None

    added_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def display_name(self) -> str:
        return self.name or self.title


class FinalizedLocation(BaseModel):
    """A location already locked in for the project."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    requirement_id: str | None = None
    location_record_id: str | None = None
    potential_location_id: str | None = None
    title: str
    name: str | None = None
    description: str = ""
    address: str | None = None
    coordinates: Coordinates
    rating: float | None = Field(default=None, ge=0, le=10)
    place_id: str | None = None
    google_types: list[str] = Field(default_factory=list)
    photos: list[dict[str, Any]] = Field(default_factory=list)
    team_notes: list[TeamNote] = Field(default_factory=list)

    budget: LocationBudget | None = None
    amenities: Amenities | None = None
    cached_data: CachedData | None = None

    added_by: str | None = None
    finalized_by: str | None = None
    finalized_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_potential(cls, location: PotentialLocation, finalized_by: str) -> "FinalizedLocation":
        """Carry a potential location's data, team notes included, into a finalized one."""
        data = location.model_dump(exclude={"id", "comparison_score", "created_at"})
        return cls(**data, potential_location_id=location.id, finalized_by=finalized_by)


class LocationRecord(BaseModel):
    """A master-list location need from the script (e.g. "Victorian Mansion")."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    user_notes: str = Field(default="", max_length=5000)
    status: RecordStatus = RecordStatus.PENDING
    created_by: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProjectMember(BaseModel):
    project_id: str
    user_id: str
    roles: list[Literal["owner", "producer", "director", "manager", "scout", "crew"]] = Field(
        min_length=1
    )
    status: Literal["active", "inactive"] = "active"

    def has_any_role(self, roles: list[str]) -> bool:
        return any(role in self.roles for role in roles)

    def is_admin(self) -> bool:
        return self.has_any_role(["owner", "producer", "director"])


# ─── Results ──────────────────────────────────────────────


class ComparisonResult(BaseModel):
    """Result of comparing every potential location for a requirement."""

    message: str
    locations: list[PotentialLocation] = Field(default_factory=list)
    recommendation: str = ""
    requirement: LocationRequirement
    weights: ComparisonWeights | None = None


class RecordComparisonScore(BaseModel):
    overall: float = 5
    match_score: float = 5
    reasoning: str = "No comparison data available"


class RankedRecordLocation(BaseModel):
    location: PotentialLocation
    comparison_score: RecordComparisonScore


class RecordComparisonResult(BaseModel):
    """Result of the AI-judged comparison for a location record."""

    message: str = ""
    locations: list[RankedRecordLocation] = Field(default_factory=list)
    best_match: RankedRecordLocation | None = None
    summary: str = ""
