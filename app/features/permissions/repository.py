"""
Database access for role permissions.
"""
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.models import AuditLog, RolePermission
from app.features.permissions.matrix import PermissionRow
from app.utils import get_logger


log = get_logger(__name__)

# INSERT constructs that support ON CONFLICT, by dialect name
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PermissionRepository:
    """Reads and writes the flat role_permission table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self) -> List[RolePermission]:
        # Upserts bypass the identity map, so loaded rows are always refreshed
        stmt = (
            select(RolePermission)
            .order_by(RolePermission.position, RolePermission.resource, RolePermission.permission)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_position(self, position: str) -> List[RolePermission]:
        stmt = (
            select(RolePermission)
            .where(RolePermission.position == position)
            .order_by(RolePermission.resource, RolePermission.permission)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, position: str, resource: str, permission: str) -> Optional[RolePermission]:
        stmt = (
            select(RolePermission)
            .where(
                RolePermission.position == position,
                RolePermission.resource == resource,
                RolePermission.permission == permission,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def bulk_upsert(
        self,
        rows: Iterable[PermissionRow],
        actor_id: Optional[int],
        audit: Optional[AuditLog] = None,
    ) -> int:
        """
        Insert or overwrite every row with one INSERT ... ON CONFLICT DO UPDATE.

        Either all rows are written or, on any error, none are. Overlapping
        concurrent calls serialize on the unique triple; the last one wins.

        Returns:
            Number of rows written
        """
        # Last value wins when the same triple appears twice
        unique: Dict[Tuple[str, str, str], PermissionRow] = {
            (row.position, row.resource, row.permission): row for row in rows
        }
        if not unique:
            return 0

        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Permission upsert is not supported on {dialect}")

        stmt = insert(RolePermission).values([
            dict(
                position=row.position,
                resource=row.resource,
                permission=row.permission,
                is_granted=row.is_granted,
                updated_by=actor_id,
            )
            for row in unique.values()
        ])
        stmt = stmt.on_conflict_do_update(
            index_elements=[RolePermission.position, RolePermission.resource, RolePermission.permission],
            set_={
                "is_granted": stmt.excluded.is_granted,
                "updated_by": stmt.excluded.updated_by,
                "updated_at": func.now(),
            },
        )

        try:
            await self.db.execute(stmt)
            if audit is not None:
                self.db.add(audit)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        log.debug(f"Upserted {len(unique)} permission rows for {sorted({key[0] for key in unique})}")
        return len(unique)
