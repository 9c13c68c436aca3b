"""
Repository layer for database operations.

Provides the reads and writes the location comparison workflow needs.
Rows are returned as plain dicts; callers validate them into models.
"""

from typing import Any
from uuid import UUID

import structlog
from supabase import Client

from app.comparison.models import (
    FinalizedLocation,
    LocationRecord,
    LocationRequirement,
    PotentialLocation,
    utc_now,
)
from app.db.client import get_supabase_client

logger = structlog.get_logger()

# Columns rewritten by enrichment and scoring
COMPARISON_FIELDS = {"budget", "amenities", "cached_data", "comparison_score"}


class BaseRepository:
    """Base repository with common operations."""

    table_name: str = ""

    def __init__(self, client: Client | None = None):
        self.client = client or get_supabase_client()

    def _table(self):
        return self.client.table(self.table_name)

    def get(self, row_id: str | UUID) -> dict | None:
        """Get a row by ID."""
        result = self._table().select("*").eq("id", str(row_id)).execute()
        return result.data[0] if result.data else None


class ProjectMemberRepository(BaseRepository):
    """Repository for project_members table."""

    table_name = "project_members"

    def get_active(self, project_id: str | UUID, user_id: str | UUID) -> dict | None:
        """Get the active membership of a user in a project."""
        result = (
            self._table()
            .select("*")
            .eq("project_id", str(project_id))
            .eq("user_id", str(user_id))
            .eq("status", "active")
            .execute()
        )
        return result.data[0] if result.data else None


class LocationRequirementRepository(BaseRepository):
    """Repository for location_requirements table."""

    table_name = "location_requirements"

    def create(self, requirement: LocationRequirement) -> dict:
        """Create a location requirement."""
        data = requirement.model_dump(mode="json")
        result = self._table().insert(data).execute()
        logger.info("Created requirement", requirement_id=result.data[0]["id"], prompt=requirement.prompt)
        return result.data[0]

    def list_by_project(self, project_id: str | UUID) -> list[dict]:
        """List requirements for a project, newest first."""
        result = (
            self._table()
            .select("*")
            .eq("project_id", str(project_id))
            .order("created_at", desc=True)
            .execute()
        )
        return result.data

    def update(self, requirement_id: str | UUID, **kwargs) -> dict | None:
        """Update a requirement."""
        kwargs["updated_at"] = utc_now().isoformat()
        result = self._table().update(kwargs).eq("id", str(requirement_id)).execute()
        return result.data[0] if result.data else None

    def delete(self, requirement_id: str | UUID) -> None:
        """Delete a requirement."""
        self._table().delete().eq("id", str(requirement_id)).execute()
        logger.info("Deleted requirement", requirement_id=str(requirement_id))


class PotentialLocationRepository(BaseRepository):
    """Repository for potential_locations table."""

    table_name = "potential_locations"

    def create(self, location: PotentialLocation) -> dict:
        """Add a potential location."""
        data = location.model_dump(mode="json")
        result = self._table().insert(data).execute()
        logger.info("Added potential location", location_id=result.data[0]["id"], title=location.title)
        return result.data[0]

    def list_by_project(
        self,
        project_id: str | UUID,
        requirement_id: str | UUID | None = None,
        record_id: str | UUID | None = None,
    ) -> list[dict]:
        """List a project's potential locations, newest first, optionally narrowed."""
        query = self._table().select("*").eq("project_id", str(project_id))
        if requirement_id:
            query = query.eq("requirement_id", str(requirement_id))
        if record_id:
            query = query.eq("location_record_id", str(record_id))
        result = query.order("created_at", desc=True).execute()
        return result.data

    def delete(self, location_id: str | UUID) -> None:
        """Delete a potential location."""
        self._table().delete().eq("id", str(location_id)).execute()

    def set_team_notes(self, location_id: str | UUID, notes: list[dict]) -> dict | None:
        """Replace the team notes of a location."""
        result = self._table().update({"team_notes": notes}).eq("id", str(location_id)).execute()
        return result.data[0] if result.data else None

    def count_by_record(self, record_id: str | UUID) -> int:
        """Count potential locations attached to a location record."""
        result = self._table().select("id", count="exact").eq("location_record_id", str(record_id)).execute()
        return result.count or 0

    def list_by_requirement(self, project_id: str | UUID, requirement_id: str | UUID) -> list[dict]:
        """List potential locations attached to a requirement."""
        result = (
            self._table()
            .select("*")
            .eq("project_id", str(project_id))
            .eq("requirement_id", str(requirement_id))
            .execute()
        )
        return result.data

    def list_by_record(self, record_id: str | UUID) -> list[dict]:
        """List potential locations attached to a location record."""
        result = self._table().select("*").eq("location_record_id", str(record_id)).execute()
        return result.data

    def count_by_requirement(self, project_id: str | UUID, requirement_id: str | UUID) -> int:
        """Count potential locations attached to a requirement."""
        result = (
            self._table()
            .select("id", count="exact")
            .eq("project_id", str(project_id))
            .eq("requirement_id", str(requirement_id))
            .execute()
        )
        return result.count or 0

    def save_comparison(self, location: PotentialLocation) -> dict | None:
        """Persist enrichment and score fields of a location."""
        data = location.model_dump(mode="json", include=COMPARISON_FIELDS)
        result = self._table().update(data).eq("id", location.id).execute()
        return result.data[0] if result.data else None

    def clear_cache(self, location_id: str | UUID) -> None:
        """Drop cached enrichment data so the next comparison refetches it."""
        self._table().update({"cached_data": None}).eq("id", str(location_id)).execute()


class FinalizedLocationRepository(BaseRepository):
    """Repository for finalized_locations table."""

    table_name = "finalized_locations"

    def create(self, location: FinalizedLocation) -> dict:
        """Store a finalized location."""
        data = location.model_dump(mode="json")
        result = self._table().insert(data).execute()
        logger.info("Finalized location", location_id=result.data[0]["id"], title=location.title)
        return result.data[0]

    def list_by_project(self, project_id: str | UUID) -> list[dict]:
        """List finalized locations for a project, most recently finalized first."""
        result = (
            self._table()
            .select("*")
            .eq("project_id", str(project_id))
            .order("finalized_at", desc=True)
            .execute()
        )
        return result.data

    def list_by_record(self, record_id: str | UUID) -> list[dict]:
        """List finalized locations attached to a location record."""
        result = (
            self._table()
            .select("*")
            .eq("location_record_id", str(record_id))
            .order("finalized_at", desc=True)
            .execute()
        )
        return result.data

    def count_by_record(self, record_id: str | UUID) -> int:
        """Count finalized locations attached to a location record."""
        result = self._table().select("id", count="exact").eq("location_record_id", str(record_id)).execute()
        return result.count or 0


class LocationRecordRepository(BaseRepository):
    """Repository for location_records table."""

    table_name = "location_records"

    def create(self, record: LocationRecord) -> dict:
        """Create a location record."""
        data = record.model_dump(mode="json")
        result = self._table().insert(data).execute()
        logger.info("Created location record", record_id=result.data[0]["id"], name=record.name)
        return result.data[0]

    def list_by_project(self, project_id: str | UUID) -> list[dict]:
        """List a project's location records, newest first."""
        result = (
            self._table()
            .select("*")
            .eq("project_id", str(project_id))
            .order("created_at", desc=True)
            .execute()
        )
        return result.data

    def update(self, record_id: str | UUID, **kwargs) -> dict | None:
        """Update a location record."""
        kwargs["updated_at"] = utc_now().isoformat()
        result = self._table().update(kwargs).eq("id", str(record_id)).execute()
        return result.data[0] if result.data else None

    def delete(self, record_id: str | UUID) -> None:
        """Delete a location record. Its potential locations are kept."""
        self._table().delete().eq("id", str(record_id)).execute()
        logger.info("Deleted location record", record_id=str(record_id))


class Repositories:
    """Bundle of repositories sharing one client."""

    def __init__(self, client: Client | None = None):
        client = client or get_supabase_client()
        self.members = ProjectMemberRepository(client)
        self.requirements = LocationRequirementRepository(client)
        self.potentials = PotentialLocationRepository(client)
        self.finalized = FinalizedLocationRepository(client)
        self.records = LocationRecordRepository(client)


def requirement_with_count(repos: Repositories, row: dict[str, Any]) -> dict[str, Any]:
    """Attach the live count of potential locations to a requirement row."""
    row["potential_locations_count"] = repos.potentials.count_by_requirement(row["project_id"], row["id"])
    return row


def record_with_stats(repos: Repositories, row: dict[str, Any]) -> dict[str, Any]:
    """Attach potential and finalized location counts to a location record row."""
    row["stats"] = {
        "potentials_count": repos.potentials.count_by_record(row["id"]),
        "finalized_count": repos.finalized.count_by_record(row["id"]),
    }
    return row
