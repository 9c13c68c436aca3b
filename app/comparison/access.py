"""Project membership checks shared by the comparison endpoints."""

from app.comparison.exceptions import AccessDeniedError
from app.comparison.models import ProjectMember
from app.db.repository import ProjectMemberRepository


def ensure_project_member(
    members: ProjectMemberRepository,
    project_id: str,
    user_id: str,
) -> ProjectMember:
    """Return the user's active membership or raise AccessDeniedError."""
    row = members.get_active(project_id, user_id)
    if not row:
        raise AccessDeniedError("You don't have access to this project")
    return ProjectMember.model_validate(row)
