"""
Permission matrix API routes.

Provides endpoints for reading and bulk-updating the role permission matrix,
checking the caller's own permissions, and reading the Config audit trail.
"""
from typing import Annotated, Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.responses import ApiResponse
from app.features.permissions.models import AuditLog
from app.features.permissions.schemas import (
    PermissionMatrix,
    PositionPermissions,
    PermissionCheckRequest,
    PermissionCheckResponse,
    AuditLogResponse,
    AuditLogListResponse,
)
from app.features.permissions.dependencies import get_permission_service, new_audit_log
from app.features.permissions.service import PermissionService
from app.features.staff.dependencies import get_config_manager, get_current_staff
from app.features.staff.schemas import Actor
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Permission Matrix Routes
# ============================================================================

@router.get("/permissions", response_model=ApiResponse[PermissionMatrix])
async def get_all_permissions(
    service: Annotated[PermissionService, Depends(get_permission_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Get all role permissions organized as a matrix."""
    matrix = await service.get_all_permissions()
    return ApiResponse(message="Permissions retrieved successfully", data=matrix)


@router.put("/permissions", response_model=ApiResponse[PermissionMatrix])
async def update_permissions(
    request: Request,
    matrix: Annotated[Dict[str, Any], Body(..., description="position -> resource -> permission -> bool")],
    service: Annotated[PermissionService, Depends(get_permission_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Bulk update role permissions (manager/admin only)."""
    audit = new_audit_log(
        actor_id=actor.staff_id,
        action="update",
        resource_type="permission_matrix",
        request=request,
    )
    updated = await service.update_permissions(matrix, actor.staff_id, audit=audit)

    return ApiResponse(message="Permissions updated successfully", data=updated)


@router.post("/permissions/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    actor: Annotated[Actor, Depends(get_current_staff)],
):
    """Check whether the calling staff member's position has a permission."""
    has_perm = await service.is_granted(actor.position, check_request.resource, check_request.action)

    return PermissionCheckResponse(
        position=actor.position.value,
        resource=check_request.resource.value,
        action=check_request.action.value,
        has_permission=has_perm,
        reason=None if has_perm else "Permission denied",
    )


@router.get("/permissions/{position}", response_model=ApiResponse[PositionPermissions])
async def get_permissions_by_position(
    position: str,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Get permissions for a specific position."""
    permissions = await service.get_permissions_by_position(position)
    return ApiResponse(message="Permissions retrieved successfully", data=permissions)


# ============================================================================
# Audit Log Routes
# ============================================================================

@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_config_manager)],
    skip: int = 0,
    limit: int = 50,
    actor_id: Optional[int] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
):
    """List Config audit logs with optional filtering."""
    stmt = select(AuditLog)

    if actor_id is not None:
        stmt = stmt.where(AuditLog.actor_id == actor_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    logs = result.scalars().all()

    pages = (total + limit - 1) // limit if limit > 0 else 0
    page = (skip // limit) + 1 if limit > 0 else 1

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=limit,
        pages=pages,
    )
