"""
Pydantic schemas for the permission matrix and audit logs.
"""
from datetime import datetime
from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.core.vocabulary import Action, Resource


# position -> resource -> permission -> granted
PermissionMatrix = Dict[str, Dict[str, Dict[str, bool]]]

# resource -> permission -> granted
PositionPermissions = Dict[str, Dict[str, bool]]


# ============================================================================
# Permission Check Schemas
# ============================================================================

class PermissionCheckRequest(BaseModel):
    """Schema for checking whether the caller may perform an action."""
    resource: Resource = Field(..., description="Resource (e.g., 'transactions', 'contracts')")
    action: Action = Field(..., description="Action (view, add, edit, delete)")


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    position: str
    resource: str
    action: str
    has_permission: bool
    reason: Optional[str] = None


# ============================================================================
# Audit Log Schemas
# ============================================================================

class AuditLogResponse(BaseModel):
    """Schema for audit log response."""
    id: int
    actor_id: Optional[int]
    action: str
    resource_type: str
    resource_id: Optional[str]
    details: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Schema for a page of audit logs."""
    items: List[AuditLogResponse]
    total: int
    page: int
    page_size: int
    pages: int
