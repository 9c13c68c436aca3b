"""
API routes for location records.

A location record is a master-list entry for a place the script needs.
Scouts attach potential locations to it, the AI service compares them,
and the chosen ones end up finalized under the record.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from app.api.deps import (
    get_ai_service,
    get_repositories,
    merge_updates,
    require_project_member,
    to_http_error,
)
from app.api.middleware.auth import get_current_user
from app.comparison.exceptions import (
    AccessDeniedError,
    ComparisonError,
    InvalidOperationError,
    NotFoundError,
)
from app.comparison.models import LocationRecord
from app.comparison.record_comparison import compare_locations_for_record
from app.db.repository import Repositories, record_with_stats
from app.services.ai_service import AIService

logger = structlog.get_logger()

router = APIRouter()

UPDATABLE_FIELDS = {"name", "description", "user_notes", "tags", "status"}


# ══════════════════════════════════════════════════════════
# Request/Response Models
# ══════════════════════════════════════════════════════════


class CreateRecordRequest(BaseModel):
    project_id: str
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    user_notes: str = Field(default="", max_length=5000)
    tags: list[str] = Field(default_factory=list)


class CompareRecordRequest(BaseModel):
    project_id: str | None = None


def _load_record(repos: Repositories, record_id: str) -> dict[str, Any]:
    row = repos.records.get(record_id)
    if not row:
        raise to_http_error(NotFoundError("Location record not found"))
    return row


# ══════════════════════════════════════════════════════════
# Endpoints
# ══════════════════════════════════════════════════════════


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_location_record(
    request: CreateRecordRequest,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Create a location record in a project."""
    require_project_member(repos, request.project_id, user_id)

    record = LocationRecord(
        project_id=request.project_id,
        name=request.name.strip(),
        description=request.description.strip(),
        user_notes=request.user_notes.strip(),
        tags=request.tags,
        created_by=user_id,
    )
    row = repos.records.create(record)

    return {"success": True, "message": "Location record created successfully", "data": row}


@router.get("/single/{record_id}")
async def get_location_record(
    record_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    row = _load_record(repos, record_id)
    require_project_member(repos, row["project_id"], user_id)

    return {"success": True, "data": record_with_stats(repos, row)}


@router.get("/{project_id}")
async def list_location_records(
    project_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """List a project's location records, newest first, with location counts."""
    require_project_member(repos, project_id, user_id)

    rows = [record_with_stats(repos, row) for row in repos.records.list_by_project(project_id)]
    return {"success": True, "data": rows}


@router.patch("/{record_id}")
async def update_location_record(
    record_id: str,
    updates: dict[str, Any],
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Update the editable fields of a location record."""
    existing = _load_record(repos, record_id)
    require_project_member(repos, existing["project_id"], user_id)

    merged_row, touched = merge_updates(existing, updates, UPDATABLE_FIELDS)
    if not touched:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    try:
        merged = LocationRecord.model_validate(merged_row)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    payload = merged.model_dump(mode="json", include=touched)
    row = repos.records.update(record_id, **payload)

    logger.info("Updated location record", record_id=record_id, fields=list(payload))

    return {"success": True, "message": "Location record updated successfully", "data": row}


@router.delete("/{record_id}")
async def delete_location_record(
    record_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """Delete a location record. Admins only, and only while nothing under it is finalized."""
    existing = _load_record(repos, record_id)
    member = require_project_member(repos, existing["project_id"], user_id)

    if not member.is_admin():
        raise to_http_error(AccessDeniedError("Only project admins can delete location records"))

    if repos.finalized.count_by_record(record_id) > 0:
        raise to_http_error(
            InvalidOperationError(
                "Cannot delete location record with finalized locations. Un-finalize locations first."
            )
        )

    repos.records.delete(record_id)

    return {"success": True, "message": "Location record deleted successfully"}


@router.get("/{record_id}/potentials")
async def list_record_potentials(
    record_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    row = _load_record(repos, record_id)
    require_project_member(repos, row["project_id"], user_id)

    locations = repos.potentials.list_by_record(record_id)
    return {"success": True, "data": {"locations": locations, "count": len(locations)}}


@router.get("/{record_id}/finalized")
async def list_record_finalized(
    record_id: str,
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    row = _load_record(repos, record_id)
    require_project_member(repos, row["project_id"], user_id)

    locations = repos.finalized.list_by_record(record_id)
    return {"success": True, "data": {"locations": locations, "count": len(locations)}}


@router.post("/{record_id}/compare")
async def compare_record_locations(
    record_id: str,
    request: CompareRecordRequest | None = Body(default=None),
    user_id: str = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
    ai: AIService = Depends(get_ai_service),
) -> dict[str, Any]:
    """Have the AI service score a record's potential locations and pick the best match."""
    try:
        result = await compare_locations_for_record(
            repos,
            ai,
            record_id,
            user_id,
            project_id=request.project_id if request else None,
        )
    except ComparisonError as e:
        logger.warning("Record comparison failed", record_id=record_id, error=str(e))
        raise to_http_error(e)

    return {
        "success": True,
        "message": result.message,
        "data": result.model_dump(mode="json", exclude={"message"}),
    }
