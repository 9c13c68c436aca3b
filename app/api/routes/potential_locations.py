"""
API routes for potential and finalized locations.

Scouts add candidate locations (usually from the AI suggestion service) to a
project, optionally attached to a requirement or a location record. Team
members leave notes on them, and one is finalized once the team agrees.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from app.api.deps import get_repositories, require_project_member, to_http_error
from app.api.middleware.auth import get_current_user
from app.comparison.exceptions import NotFoundError
from app.comparison.models import (
    Coordinates,
    FinalizedLocation,
    LocationBudget,
    PotentialLocation,
    ProjectMember,
    TeamNote,
)
from app.db.repository import Repositories

logger = structlog.get_logger()

router = APIRouter()


# ══════════════════════════════════════════════════════════
# Request/Response Models
# ══════════════════════════════════════════════════════════


class AddPotentialRequest(BaseModel):
    """A candidate location, either picked from AI suggestions or entered by hand."""

    project_id: str
    requirement_id: str | None = None
    location_record_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    name: str | None = None
    description: str = Field(default="", max_length=5000)
    address: str | None = None
    coordinates: Coordinates
    rating: float | None = Field(default=None, ge=0, le=10)
    price_level: int | None = Field(default=None, ge=0, le=4)
    place_id: str | None = None
    google_types: list[str] = Field(default_factory=list)
    photos: list[dict[str, Any]] = Field(default_factory=list)
    budget: LocationBudget | None = None


class AddNoteRequest(BaseModel):
    note: str = Field(max_length=2000)


# ══════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════


def _load_potential(repos: Repositories, location_id: str, user_id: str) -> tuple[PotentialLocation, ProjectMember]:
    row = repos.potentials.get(location_id)
    if not row:
        raise to_http_error(NotFoundError("Potential location not found"))
    location = PotentialLocation.model_validate(row)
    member = require_project_member(repos, location.project_id, user_id)
    return location, member


def _check_parent(repos: Repositories, request: AddPotentialRequest) -> None:
    """A linked requirement or record must exist in the same project."""
    if request.requirement_id:
        row = repos.requirements.get(request.requirement_id)
        if not row or row["project_id"] != request.project_id:
            raise to_http_error(NotFoundError("Location requirement not found"))
    if request.location_record_id:
        row = repos.records.get(request.location_record_id)
        if not row or row["project_id"] != request.project_id:
            raise to_http_error(NotFoundError("Location record not found"))


# ══════════════════════════════════════════════════════════
# Endpoints
# ══════════════════════════════════════════════════════════


@router.post("/potential", status_code=status.HTTP_201_CREATED)
async def add_potential_location(
    request: AddPotentialRequest,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Add a candidate location to a project."""
    require_project_member(repos, request.project_id, user_id)
    _check_parent(repos, request)

    location = PotentialLocation(**request.model_dump(), added_by=user_id)
    row = repos.potentials.create(location)

    return {"success": True, "data": row}


@router.get("/potential")
async def list_potential_locations(
    project_id: str = Query(..., description="Project to list potential locations for"),
    requirement_id: str | None = Query(default=None),
    location_record_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """List a project's potential locations, newest first."""
    require_project_member(repos, project_id, user_id)

    rows = repos.potentials.list_by_project(project_id, requirement_id, location_record_id)
    return {"success": True, "data": {"locations": rows, "count": len(rows), "project_id": project_id}}


@router.get("/potential/{location_id}")
async def get_potential_location(
    location_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    location, _ = _load_potential(repos, location_id, user_id)
    return {"success": True, "data": location.model_dump(mode="json")}


@router.post("/potential/{location_id}/finalize")
async def finalize_location(
    location_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """
    Move a potential location to the project's finalized locations.

    Team notes and cached data carry over. The potential entry is removed and
    a linked requirement points at the new finalized location.
    """
    location, _ = _load_potential(repos, location_id, user_id)

    finalized = FinalizedLocation.from_potential(location, finalized_by=user_id)
    row = repos.finalized.create(finalized)
    repos.potentials.delete(location.id)

    if location.requirement_id:
        repos.requirements.update(location.requirement_id, finalized_location_id=finalized.id)

    logger.info(
        "Location finalized",
        location_id=location.id,
        finalized_id=finalized.id,
        team_notes=len(finalized.team_notes),
    )

    return {
        "success": True,
        "message": f"Location finalized with {len(finalized.team_notes)} team notes preserved",
        "data": row,
    }


@router.post("/potential/{location_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_team_note(
    location_id: str,
    request: AddNoteRequest,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Append a team note to a potential location."""
    text = request.note.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Note text is required")

    location, member = _load_potential(repos, location_id, user_id)

    note = TeamNote(user_id=user_id, user_role=member.roles[0], note=text)
    notes = [n.model_dump(mode="json") for n in location.team_notes] + [note.model_dump(mode="json")]
    repos.potentials.set_team_notes(location.id, notes)

    return {"success": True, "message": "Team note added successfully", "data": note.model_dump(mode="json")}


@router.get("/finalized")
async def list_finalized_locations(
    project_id: str = Query(..., description="Project to list finalized locations for"),
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """List a project's finalized locations, most recently finalized first."""
    require_project_member(repos, project_id, user_id)

    rows = repos.finalized.list_by_project(project_id)
    return {"success": True, "data": {"locations": rows, "count": len(rows), "project_id": project_id}}
