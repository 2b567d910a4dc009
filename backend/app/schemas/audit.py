"""
Audit trail schemas.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    actor_id: Optional[int] = None
    actor_username: Optional[str] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    meta_data: Optional[dict] = None
    timestamp: datetime


class AuditTrailResponse(BaseModel):
    logs: List[AuditLogResponse]
    total: int
