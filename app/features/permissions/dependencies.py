"""
Permission checking dependencies and audit logging helpers.

Implements:
- FastAPI dependencies for route protection backed by the permission matrix
- Audit logging of Config mutations
"""
from typing import Annotated, Any, Dict, Optional
from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.vocabulary import plain
from app.features.permissions.models import AuditLog
from app.features.permissions.service import PermissionService
from app.features.staff.dependencies import get_current_staff
from app.features.staff.schemas import Actor
from app.utils import get_logger


log = get_logger(__name__)


def get_permission_service(db: Annotated[AsyncSession, Depends(get_db)]) -> PermissionService:
    return PermissionService(db)


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def require_permission(resource: str, action: str):
    """
    FastAPI dependency to require a granted permission in the matrix.

    Usage:
        @router.post("/transactions")
        async def create_transaction(
            actor: Actor = Depends(require_permission("transactions", "add"))
        ):
            # Caller's position has "add" on "transactions"
            pass

    Returns:
        Dependency function that returns the current staff member if granted

    Raises:
        HTTPException: 403 if the caller's position lacks the permission
    """
    async def permission_dependency(
        actor: Annotated[Actor, Depends(get_current_staff)],
        service: Annotated[PermissionService, Depends(get_permission_service)],
    ) -> Actor:
        if not await service.is_granted(actor.position, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {plain(action)} on {plain(resource)}"
            )
        return actor

    return permission_dependency


# ============================================================================
# Audit Logging
# ============================================================================

def new_audit_log(
    actor_id: Optional[int],
    action: str,
    resource_type: str,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """
    Build an audit log entry for a mutation that has not run yet.

    The entry is handed to the service call, whose repository adds it to the
    same transaction as the change itself, so a change is never stored
    without its audit row (or the other way round).

    Args:
        actor_id: Staff member performing the action
        action: Action performed (e.g., "create", "update", "delete", "reorder")
        resource_type: Type of resource (e.g., "catalog", "permission_matrix")
        resource_id: ID of the resource, when already known
        details: Additional details; services fill these in when left empty
        request: Incoming request, for client IP and user agent

    Returns:
        Unsaved AuditLog object
    """
    log.debug(f"Audit: staff={actor_id} action={action} resource={resource_type}:{resource_id}")
    return AuditLog(
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details=details,
        ip_address=request.client.host if request is not None and request.client else None,
        user_agent=request.headers.get("user-agent") if request is not None else None,
    )
