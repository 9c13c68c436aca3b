"""FastAPI dependency providers for the comparison routes."""

from fastapi import Depends, HTTPException, status

from app.comparison.access import ensure_project_member
from app.comparison.engine import ComparisonEngine
from app.comparison.exceptions import (
    AccessDeniedError,
    AIServiceUnavailable,
    ComparisonError,
    InvalidOperationError,
    NotFoundError,
)
from app.comparison.models import ProjectMember
from app.db.repository import Repositories
from app.services.ai_service import AIService


def get_repositories() -> Repositories:
    return Repositories()


def get_ai_service() -> AIService:
    return AIService()


def get_engine(
    repos: Repositories = Depends(get_repositories),
    ai: AIService = Depends(get_ai_service),
) -> ComparisonEngine:
    return ComparisonEngine(repos, ai=ai)


def to_http_error(error: ComparisonError) -> HTTPException:
    """Map a comparison error to the HTTP status the frontend expects."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, AccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    if isinstance(error, InvalidOperationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, AIServiceUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI comparison service unavailable. Please try again later.",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def require_project_member(repos: Repositories, project_id: str, user_id: str) -> ProjectMember:
    """Membership check for handlers; raises 403 instead of AccessDeniedError."""
    try:
        return ensure_project_member(repos.members, project_id, user_id)
    except ComparisonError as e:
        raise to_http_error(e)


def merge_updates(existing: dict, updates: dict, allowed: set[str]) -> tuple[dict, set[str]]:
    """
    Apply the allowed keys of a PATCH body to a stored row.

    A key sent as null is dropped from the row so the model default applies.
    Returns the merged row and the set of fields the client touched.
    """
    touched = {k for k in updates if k in allowed}
    merged = dict(existing)
    for key in touched:
        if updates[key] is None:
            merged.pop(key, None)
        else:
            merged[key] = updates[key]
    return merged, touched
