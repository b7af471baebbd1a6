"""
Permission Matrix Engine.

Converts persisted permission rows into the nested matrix for reads and a
submitted matrix back into rows for writes. Every key is checked against the
closed vocabularies before anything is written.
"""
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidPermission, InvalidPosition, InvalidResource
from app.core.vocabulary import Position, is_action, is_position, is_resource, plain
from app.features.permissions.matrix import (
    Matrix,
    ResourceMatrix,
    flatten,
    to_matrix,
    to_resource_matrix,
    validate_matrix,
)
from app.features.permissions.models import AuditLog
from app.features.permissions.repository import PermissionRepository
from app.utils import get_logger


log = get_logger(__name__)


class PermissionService:
    """
    Stateless, request-scoped access to the permission matrix.

    Usage:
        service = PermissionService(db)
        matrix = await service.update_permissions({"agent": {...}}, actor_id=1)
    """

    def __init__(self, db: AsyncSession, repository: Optional[PermissionRepository] = None):
        self.repository = repository or PermissionRepository(db)

    async def get_all_permissions(self) -> Matrix:
        """Full matrix built from every stored row."""
        rows = await self.repository.find_all()
        return to_matrix(rows)

    async def get_permissions_by_position(self, position: Any) -> ResourceMatrix:
        """
        Sub-matrix (resource -> permission -> bool) of one position.

        A position without rows yields {}; that is a valid, unprivileged state.

        Raises:
            InvalidPosition: position is not one of the known staff positions
        """
        if not is_position(position):
            raise InvalidPosition([str(plain(position))])

        rows = await self.repository.find_by_position(plain(position))
        return to_resource_matrix(rows)

    async def update_permissions(
        self,
        matrix: Any,
        actor_id: Optional[int],
        audit: Optional[AuditLog] = None,
    ) -> Matrix:
        """
        Bulk update role permissions and return the complete current matrix.

        The whole input is validated before the single bulk upsert, so a
        rejected call leaves the stored matrix untouched.

        Raises:
            InvalidMatrixShape, InvalidPosition, InvalidResource, InvalidPermission
        """
        validate_matrix(matrix)
        rows = flatten(matrix)

        if audit is not None:
            audit.details = {"positions": sorted({row.position for row in rows})}
        written = await self.repository.bulk_upsert(rows, actor_id, audit=audit)
        if written:
            log.info(f"Permission matrix updated by staff {actor_id}: {written} entries")

        return await self.get_all_permissions()

    async def is_granted(self, position: Any, resource: Any, action: Any) -> bool:
        """
        Answer a single authorization question from the stored matrix.

        Admins hold every permission; a missing row means "not granted".
        """
        if not is_position(position):
            raise InvalidPosition([str(plain(position))])
        if not is_resource(resource):
            raise InvalidResource([str(plain(resource))])
        if not is_action(action):
            raise InvalidPermission([str(plain(action))])

        if plain(position) == Position.ADMIN.value:
            return True

        row = await self.repository.find_one(plain(position), plain(resource), plain(action))
        granted = bool(row and row.is_granted)
        log.debug(f"{plain(position)} {'granted' if granted else 'denied'} {plain(action)} on {plain(resource)}")
        return granted
