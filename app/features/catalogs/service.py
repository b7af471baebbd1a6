"""
Catalog Engine.

Manages ordered, typed, soft-deletable lookup values with type-scoped
uniqueness among active items and explicit reordering.
"""
from collections import Counter
from typing import Any, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CatalogNotFound,
    DuplicateValue,
    InvalidCatalogType,
    ReorderSetMismatch,
    ValueRequired,
    ValueTooLong,
)
from app.core.vocabulary import CATALOG_VALUE_MAX_LENGTH, CatalogStatus, is_catalog_type, plain
from app.features.catalogs.models import CatalogItem
from app.features.catalogs.repository import CatalogRepository
from app.features.permissions.models import AuditLog
from app.utils import get_logger


log = get_logger(__name__)


def clean_value(raw_value: Any) -> str:
    """
    Trim a submitted value and enforce the length limit.

    Raises:
        ValueRequired: missing or blank after trimming
        ValueTooLong: longer than 100 characters after trimming
    """
    if not isinstance(raw_value, str) or not raw_value.strip():
        raise ValueRequired()

    value = raw_value.strip()
    if len(value) > CATALOG_VALUE_MAX_LENGTH:
        raise ValueTooLong(CATALOG_VALUE_MAX_LENGTH)
    return value


class CatalogService:
    """
    Stateless, request-scoped access to the config catalogs.

    Usage:
        service = CatalogService(db)
        item = await service.create_catalog("area", "  Quận 1 ", actor_id=1)
    """

    def __init__(self, db: AsyncSession, repository: Optional[CatalogRepository] = None):
        self.repository = repository or CatalogRepository(db)

    @staticmethod
    def check_type(catalog_type: Any) -> str:
        """Return the plain type string or raise InvalidCatalogType."""
        if not is_catalog_type(catalog_type):
            raise InvalidCatalogType([str(plain(catalog_type))])
        return plain(catalog_type)

    async def _get_active(self, catalog_id: int, catalog_type: Optional[Any] = None) -> CatalogItem:
        item = await self.repository.find_by_id(catalog_id)
        if item is None or item.status is not CatalogStatus.ACTIVE:
            raise CatalogNotFound(catalog_id)
        if catalog_type is not None and item.type != plain(catalog_type):
            raise CatalogNotFound(catalog_id)
        return item

    async def get_catalogs_by_type(self, catalog_type: Any) -> List[CatalogItem]:
        """Active items of a type ordered by display_order."""
        catalog_type = self.check_type(catalog_type)
        return await self.repository.find_by_type(catalog_type)

    async def create_catalog(
        self,
        catalog_type: Any,
        raw_value: Any,
        actor_id: Optional[int],
        audit: Optional[AuditLog] = None,
    ) -> CatalogItem:
        """
        Create a catalog item at the end of its type.

        Raises:
            InvalidCatalogType, ValueRequired, ValueTooLong, DuplicateValue
        """
        catalog_type = self.check_type(catalog_type)
        value = clean_value(raw_value)

        if await self.repository.exists_by_type_and_value(catalog_type, value):
            log.info(f"Rejected duplicate {catalog_type} value {value!r}")
            raise DuplicateValue(value, catalog_type)

        if audit is not None:
            audit.details = {"type": catalog_type, "value": value}
        item = await self.repository.create(catalog_type, value, actor_id, audit=audit)
        log.info(f"Catalog {catalog_type} item {item.id} created by staff {actor_id}")
        return item

    async def update_catalog(
        self,
        catalog_id: int,
        raw_value: Any,
        actor_id: Optional[int],
        catalog_type: Optional[Any] = None,
        audit: Optional[AuditLog] = None,
    ) -> CatalogItem:
        """
        Rename an active catalog item. Type and display_order never change here.

        Raises:
            CatalogNotFound: missing, inactive, or not of ``catalog_type``
            ValueRequired, ValueTooLong, DuplicateValue
        """
        if catalog_type is not None:
            catalog_type = self.check_type(catalog_type)
        existing = await self._get_active(catalog_id, catalog_type)
        value = clean_value(raw_value)

        if await self.repository.exists_by_type_and_value(existing.type, value, exclude_id=catalog_id):
            log.info(f"Rejected duplicate {existing.type} value {value!r}")
            raise DuplicateValue(value, existing.type)

        if audit is not None:
            audit.details = {"type": existing.type, "value": value}
        item = await self.repository.update(catalog_id, value, actor_id, audit=audit)
        log.info(f"Catalog {item.type} item {item.id} updated by staff {actor_id}")
        return item

    async def delete_catalog(
        self,
        catalog_id: int,
        actor_id: Optional[int],
        catalog_type: Optional[Any] = None,
        audit: Optional[AuditLog] = None,
    ) -> bool:
        """
        Soft delete an active catalog item.

        References held by other records are left as they are.

        Raises:
            CatalogNotFound: missing, already inactive, or not of ``catalog_type``
        """
        if catalog_type is not None:
            catalog_type = self.check_type(catalog_type)
        existing = await self._get_active(catalog_id, catalog_type)

        if audit is not None:
            audit.details = {"type": existing.type, "value": existing.value}
        deleted = await self.repository.delete(catalog_id, actor_id, audit=audit)
        log.info(f"Catalog {existing.type} item {catalog_id} deactivated by staff {actor_id}")
        return deleted

    async def reorder_catalogs(
        self,
        catalog_type: Any,
        ordered_ids: Sequence[int],
        actor_id: Optional[int] = None,
        audit: Optional[AuditLog] = None,
    ) -> List[CatalogItem]:
        """
        Rewrite the display order of every active item of a type.

        Raises:
            InvalidCatalogType
            ReorderSetMismatch: ids are not exactly the active ids of the type
        """
        catalog_type = self.check_type(catalog_type)
        ordered_ids = list(ordered_ids)

        active_ids = {item.id for item in await self.repository.find_by_type(catalog_type)}
        submitted = set(ordered_ids)
        duplicated = [cid for cid, count in Counter(ordered_ids).items() if count > 1]
        missing = active_ids - submitted
        unexpected = submitted - active_ids

        if duplicated or missing or unexpected:
            raise ReorderSetMismatch(catalog_type, missing=missing, unexpected=unexpected, duplicated=duplicated)

        if audit is not None:
            audit.details = {"type": catalog_type, "ids": ordered_ids}
        items = await self.repository.reorder(catalog_type, ordered_ids, actor_id, audit=audit)
        log.info(f"Catalog {catalog_type} reordered by staff {actor_id}")
        return items
