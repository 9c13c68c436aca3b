"""
API routes for location requirements and comparison.

Compares the potential locations attached to a requirement and manages the
requirements themselves. All endpoints require authentication and active
membership in the requirement's project.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from app.api.deps import (
    get_engine,
    get_repositories,
    merge_updates,
    require_project_member,
    to_http_error,
)
from app.api.middleware.auth import get_current_user
from app.comparison.engine import ComparisonEngine
from app.comparison.exceptions import ComparisonError, NotFoundError
from app.comparison.models import (
    ComparisonWeights,
    LocationRequirement,
    RequirementBudget,
    RequirementConstraints,
    RequirementPriority,
)
from app.db.repository import Repositories, requirement_with_count

logger = structlog.get_logger()

router = APIRouter()

UPDATABLE_FIELDS = {"prompt", "notes", "priority", "budget", "constraints", "status", "finalized_location_id"}


# ══════════════════════════════════════════════════════════
# Request/Response Models
# ══════════════════════════════════════════════════════════


class CompareRequest(BaseModel):
    """Optional custom weights for a comparison."""

    weights: ComparisonWeights = Field(default_factory=ComparisonWeights)


class CreateRequirementRequest(BaseModel):
    """Request to create a location requirement."""

    project_id: str
    prompt: str = Field(min_length=1, max_length=500)
    notes: str = Field(default="", max_length=2000)
    priority: RequirementPriority = RequirementPriority.MEDIUM
    budget: RequirementBudget = Field(default_factory=RequirementBudget)
    constraints: RequirementConstraints = Field(default_factory=RequirementConstraints)


# ══════════════════════════════════════════════════════════
# Endpoints
# ══════════════════════════════════════════════════════════


@router.post("/compare/{requirement_id}")
async def compare_locations(
    requirement_id: str,
    request: CompareRequest | None = Body(default=None),
    user_id: str = Depends(get_current_user),
    engine: ComparisonEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Score and rank every potential location attached to a requirement."""
    weights = request.weights if request else ComparisonWeights()

    try:
        result = await engine.compare_locations(requirement_id, user_id, weights)
    except ComparisonError as e:
        raise to_http_error(e)

    data = result.model_dump(mode="json", exclude={"message"})
    data["weights"] = weights.model_dump()
    return {"success": True, "message": result.message, "data": data}


@router.get("/requirements/{project_id}")
async def list_requirements(
    project_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """List a project's requirements, newest first, with potential-location counts."""
    require_project_member(repos, project_id, user_id)

    rows = [requirement_with_count(repos, row) for row in repos.requirements.list_by_project(project_id)]
    return {"success": True, "data": rows}


@router.post("/requirements", status_code=status.HTTP_201_CREATED)
async def create_requirement(
    request: CreateRequirementRequest,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Create a location requirement in a project."""
    require_project_member(repos, request.project_id, user_id)

    requirement = LocationRequirement(
        project_id=request.project_id,
        prompt=request.prompt.strip(),
        notes=request.notes.strip(),
        priority=request.priority,
        budget=request.budget,
        constraints=request.constraints,
        created_by=user_id,
    )
    row = repos.requirements.create(requirement)

    return {"success": True, "message": "Location requirement created successfully", "data": row}


@router.patch("/requirements/{requirement_id}")
async def update_requirement(
    requirement_id: str,
    updates: dict[str, Any],
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Update the editable fields of a requirement."""
    existing = repos.requirements.get(requirement_id)
    if not existing:
        raise to_http_error(NotFoundError("Location requirement not found"))

    require_project_member(repos, existing["project_id"], user_id)

    merged_row, touched = merge_updates(existing, updates, UPDATABLE_FIELDS)
    if not touched:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    try:
        merged = LocationRequirement.model_validate(merged_row)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    payload = merged.model_dump(mode="json", include=touched)
    row = repos.requirements.update(requirement_id, **payload)

    logger.info("Updated requirement", requirement_id=requirement_id, fields=list(payload))

    return {"success": True, "message": "Location requirement updated successfully", "data": row}


@router.delete("/requirements/{requirement_id}")
async def delete_requirement(
    requirement_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Delete a requirement."""
    existing = repos.requirements.get(requirement_id)
    if not existing:
        raise to_http_error(NotFoundError("Location requirement not found"))

    require_project_member(repos, existing["project_id"], user_id)

    repos.requirements.delete(requirement_id)

    return {"success": True, "message": "Location requirement deleted successfully"}


@router.post("/{location_id}/refresh-cache")
async def refresh_location_cache(
    location_id: str,
    user_id: str = Depends(get_current_user),
    engine: ComparisonEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Refetch Places and weather data for a location, ignoring the cache expiry."""
    try:
        location = await engine.refresh_location_cache(location_id, user_id)
    except ComparisonError as e:
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Location cache refreshed successfully",
        "data": location.model_dump(mode="json"),
    }
