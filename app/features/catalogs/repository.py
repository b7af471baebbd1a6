"""
Database access for config catalogs.
"""
from collections import Counter
from typing import List, Optional, Sequence
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CatalogNotFound, DuplicateValue, ReorderSetMismatch
from app.features.catalogs.models import CatalogItem, catalog_key
from app.features.permissions.models import AuditLog
from app.utils import get_logger


log = get_logger(__name__)

# Attempts at appending when a concurrent create takes the same display_order
CREATE_ATTEMPTS = 5


class CatalogRepository:
    """
    Reads and writes the config_catalog table.

    Mutations commit their own unit of work. An optional AuditLog passed to a
    mutation is committed in the same transaction, with its resource_id filled in.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_type(self, catalog_type: str) -> List[CatalogItem]:
        """Active items of a type, sorted by display_order."""
        stmt = (
            select(CatalogItem)
            .where(CatalogItem.type == catalog_type, CatalogItem.is_active.is_(True))
            .order_by(CatalogItem.display_order.asc(), CatalogItem.id.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, catalog_id: int) -> Optional[CatalogItem]:
        """Item by id, including inactive items."""
        result = await self.db.execute(
            select(CatalogItem).where(CatalogItem.id == catalog_id)
        )
        return result.scalar_one_or_none()

    async def exists_by_type_and_value(
        self,
        catalog_type: str,
        value: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """
        Check whether an active item of the type already has this value.

        The comparison uses the case-folded key, matching the unique index.
        """
        stmt = select(func.count()).select_from(CatalogItem).where(
            CatalogItem.type == catalog_type,
            CatalogItem.is_active.is_(True),
            CatalogItem.value_key == catalog_key(value),
        )
        if exclude_id is not None:
            stmt = stmt.where(CatalogItem.id != exclude_id)

        count = (await self.db.execute(stmt)).scalar() or 0
        return count > 0

    async def next_display_order(self, catalog_type: str) -> int:
        stmt = select(func.max(CatalogItem.display_order)).where(
            CatalogItem.type == catalog_type,
            CatalogItem.is_active.is_(True),
        )
        current = (await self.db.execute(stmt)).scalar()
        return (current or 0) + 1

    async def _commit(self, audit: Optional[AuditLog] = None, resource_id: Optional[int] = None) -> None:
        try:
            if audit is not None:
                if resource_id is not None:
                    audit.resource_id = str(resource_id)
                self.db.add(audit)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def create(
        self,
        catalog_type: str,
        value: str,
        actor_id: Optional[int],
        audit: Optional[AuditLog] = None,
    ) -> CatalogItem:
        """
        Append a new active item to the end of its type.

        A concurrent create that took the same display_order makes the insert
        fail on the order index; the order is then read again and the insert retried.

        Raises:
            DuplicateValue: the unique index rejected the value (concurrent create)
        """
        for attempt in range(1, CREATE_ATTEMPTS + 1):
            item = CatalogItem(
                type=catalog_type,
                value=value,
                display_order=await self.next_display_order(catalog_type),
                is_active=True,
                created_by=actor_id,
                updated_by=actor_id,
            )
            self.db.add(item)
            try:
                await self.db.flush()
            except IntegrityError:
                await self.db.rollback()
                if await self.exists_by_type_and_value(catalog_type, value):
                    raise DuplicateValue(value, catalog_type)
                if attempt == CREATE_ATTEMPTS:
                    raise
                log.debug(f"display_order {item.display_order} of {catalog_type} taken, retrying")
                continue

            await self._commit(audit, item.id)
            await self.db.refresh(item)
            return item

    async def update(
        self,
        catalog_id: int,
        value: str,
        actor_id: Optional[int],
        audit: Optional[AuditLog] = None,
    ) -> CatalogItem:
        """
        Overwrite the value of an active item.

        Raises:
            CatalogNotFound: no active item with this id
            DuplicateValue: the unique index rejected the new value
        """
        item = await self.find_by_id(catalog_id)
        if item is None or not item.is_active:
            raise CatalogNotFound(catalog_id)

        catalog_type = item.type
        item.value = value
        item.updated_by = actor_id
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateValue(value, catalog_type)

        await self._commit(audit, catalog_id)
        await self.db.refresh(item)
        return item

    async def delete(self, catalog_id: int, actor_id: Optional[int], audit: Optional[AuditLog] = None) -> bool:
        """
        Soft delete an active item; siblings keep their display_order.

        Raises:
            CatalogNotFound: no active item with this id
        """
        item = await self.find_by_id(catalog_id)
        if item is None or not item.is_active:
            raise CatalogNotFound(catalog_id)

        item.is_active = False
        item.updated_by = actor_id
        await self._commit(audit, catalog_id)
        return True

    async def reorder(
        self,
        catalog_type: str,
        ordered_ids: Sequence[int],
        actor_id: Optional[int] = None,
        audit: Optional[AuditLog] = None,
    ) -> List[CatalogItem]:
        """
        Rewrite display_order (1-based) of the listed items in one transaction.

        Raises:
            ReorderSetMismatch: the ids are no longer exactly the active ids of the type
        """
        items = {item.id: item for item in await self.find_by_type(catalog_type)}
        submitted = set(ordered_ids)
        duplicated = [cid for cid, count in Counter(ordered_ids).items() if count > 1]
        if submitted != items.keys() or duplicated:
            raise ReorderSetMismatch(
                catalog_type,
                missing=items.keys() - submitted,
                unexpected=submitted - items.keys(),
                duplicated=duplicated,
            )

        try:
            # Park every item on a negative slot first so no intermediate
            # state collides on the order index.
            for position, catalog_id in enumerate(ordered_ids, start=1):
                items[catalog_id].display_order = -position
            await self.db.flush()

            for position, catalog_id in enumerate(ordered_ids, start=1):
                item = items[catalog_id]
                item.display_order = position
                if actor_id is not None:
                    item.updated_by = actor_id
            await self.db.flush()
        except Exception:
            await self.db.rollback()
            raise

        await self._commit(audit)
        log.debug(f"Reordered {len(ordered_ids)} {catalog_type} items")
        return await self.find_by_type(catalog_type)
