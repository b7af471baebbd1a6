"""
Role permission and audit log models.

The permission matrix is stored as one row per (position, resource, permission)
triple. A missing triple means "not granted"; rows are written only through the
bulk upsert performed by a matrix update and are never deleted.
"""
from typing import Any, Dict
from sqlalchemy import String, Boolean, Integer, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin


class RolePermission(Base, TimestampMixin):
    """
    Flat storage unit of the permission matrix.

    Examples:
    - position="agent", resource="transactions", permission="view", is_granted=True
    - position="accountant", resource="payments", permission="delete", is_granted=False
    """
    __tablename__ = "role_permission"
    __table_args__ = (
        UniqueConstraint("position", "resource", "permission", name="uq_role_permission_triple"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    position: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    resource: Mapped[str] = mapped_column(String(30), nullable=False)
    permission: Mapped[str] = mapped_column(String(20), nullable=False)
    is_granted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Staff id of the last writer
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<RolePermission(position={self.position}, resource={self.resource}, "
            f"permission={self.permission}, granted={self.is_granted})>"
        )


class AuditLog(Base, TimestampMixin):
    """
    Audit log for Config mutations.

    Tracks who changed the permission matrix or a catalog, when, and from where.
    """
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Actor (staff id)
    actor_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Action details
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    resource_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    # Context
    details: Mapped[Dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, actor_id={self.actor_id}, action={self.action}, resource={self.resource_type})>"
