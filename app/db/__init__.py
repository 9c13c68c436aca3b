"""
Database layer for location comparison.

Uses Supabase (PostgreSQL via PostgREST) for requirements, potential and
finalized locations, location records and project membership.
"""

from app.db.client import get_supabase_client, supabase
from app.db.repository import (
    FinalizedLocationRepository,
    LocationRecordRepository,
    LocationRequirementRepository,
    PotentialLocationRepository,
    ProjectMemberRepository,
    Repositories,
)

__all__ = [
    "get_supabase_client",
    "supabase",
    "FinalizedLocationRepository",
    "LocationRecordRepository",
    "LocationRequirementRepository",
    "PotentialLocationRepository",
    "ProjectMemberRepository",
    "Repositories",
]
