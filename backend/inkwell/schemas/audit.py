"""
Inkwell Backend — Audit Trail Schemas
======================================
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    action: str
    entity_type: str
    entity_id: str
    actor_id: Optional[uuid.UUID] = None
    actor_role: Optional[str] = None
    details: Dict[str, Any]
    success: bool
    error_message: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    entries: List[AuditLogResponse]
    count: int
