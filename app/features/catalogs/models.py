"""
Catalog item model.
"""
from sqlalchemy import String, Boolean, Integer, Index, text
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.core.database.base import Base, TimestampMixin, ActorMixin
from app.core.vocabulary import CatalogStatus, CATALOG_VALUE_MAX_LENGTH


def catalog_key(value: str) -> str:
    """Comparison key of a catalog value; full Unicode case folding."""
    return value.casefold()


class CatalogItem(Base, TimestampMixin, ActorMixin):
    """
    One selectable value of a typed catalog.

    Examples: type="property_type", value="Apartment"; type="area", value="Quận 1".

    Soft-deleted items keep their row (is_active=False) because other records
    may still hold their value; they are hidden from reads and uniqueness checks.
    """
    __tablename__ = "config_catalog"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    value: Mapped[str] = mapped_column(String(CATALOG_VALUE_MAX_LENGTH), nullable=False)
    # Case folding can expand a character to up to three
    value_key: Mapped[str] = mapped_column(String(CATALOG_VALUE_MAX_LENGTH * 3), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("value")
    def _sync_value_key(self, _key: str, value: str) -> str:
        self.value_key = catalog_key(value)
        return value

    @property
    def status(self) -> CatalogStatus:
        return CatalogStatus.ACTIVE if self.is_active else CatalogStatus.INACTIVE

    def __repr__(self) -> str:
        return f"<CatalogItem(id={self.id}, type={self.type}, value={self.value!r}, order={self.display_order})>"


# Both indexes cover active rows only: a deleted value can be created again and
# a deleted item's display_order can be reused.
Index(
    "uq_config_catalog_active_value",
    CatalogItem.type,
    CatalogItem.value_key,
    unique=True,
    sqlite_where=text("is_active = 1"),
    postgresql_where=text("is_active"),
)
Index(
    "uq_config_catalog_active_order",
    CatalogItem.type,
    CatalogItem.display_order,
    unique=True,
    sqlite_where=text("is_active = 1"),
    postgresql_where=text("is_active"),
)
