"""
Audit trail endpoints (Boss only).
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.guards import require_boss
from backend.app.schemas.audit import AuditLogResponse, AuditTrailResponse
from backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=AuditTrailResponse)
async def get_audit_logs(
    entity_type: Optional[str] = Query(None, description="Filter by entity type, e.g. jv or customer"),
    entity_id: Optional[int] = Query(None, description="Filter by entity ID"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    """
    Recent business events, newest first.
    """
    logs = await get_audit_trail(
        db=db,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
