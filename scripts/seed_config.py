"""
Seed script to populate the default permission matrix and starter catalogs.

Run this script after database initialization to create:
- Default grants for every position that has no permission rows yet
- Starter values for every catalog type

Running it again leaves existing rows untouched.

Usage:
    python -m scripts.seed_config
"""
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db
from app.core.exceptions import DuplicateValue
from app.core.vocabulary import Action, Resource
from app.features.catalogs.service import CatalogService
from app.features.permissions.service import PermissionService
from app.utils import get_logger


log = get_logger(__name__)

ALL = " ".join(a.value for a in Action)

# position -> resource -> granted actions; everything else is seeded as False
DEFAULT_GRANTS: dict[str, dict[str, str]] = {
    "admin": {r.value: ALL for r in Resource},
    "manager": {r.value: ALL for r in Resource},
    "agent": {
        "transactions": "view add edit",
        "contracts": "view",
        "payments": "view",
        "properties": "view add edit",
        "partners": "view add edit",
    },
    "legal_officer": {
        "transactions": "view",
        "contracts": "view add edit",
        "properties": "view edit",
        "partners": "view",
    },
    "accountant": {
        "transactions": "view",
        "contracts": "view",
        "payments": ALL,
        "partners": "view",
    },
}

DEFAULT_CATALOGS: dict[str, list[str]] = {
    "property_type": ["Apartment", "House", "Land", "Villa", "Shophouse"],
    "area": ["Quận 1", "Quận 3", "Quận 7", "Thủ Đức"],
    "lead_source": ["Website", "Referral", "Facebook", "Walk-in"],
    "contract_type": ["Deposit", "Purchase", "Lease"],
}


def build_default_matrix() -> dict[str, dict[str, dict[str, bool]]]:
    """Expand DEFAULT_GRANTS into a full matrix with explicit False entries."""
    matrix = {}
    for position, grants in DEFAULT_GRANTS.items():
        matrix[position] = {
            resource.value: {
                action.value: action.value in grants.get(resource.value, "").split()
                for action in Action
            }
            for resource in Resource
        }
    return matrix


async def seed_permissions(db: AsyncSession) -> int:
    """
    Apply the default matrix to positions without any rows.

    Returns:
        Number of positions seeded
    """
    log.info("Seeding default permission matrix...")
    service = PermissionService(db)
    current = await service.get_all_permissions()

    pending = {
        position: resources
        for position, resources in build_default_matrix().items()
        if position not in current
    }
    for position in DEFAULT_GRANTS:
        if position not in pending:
            log.debug(f"Position '{position}' already has permissions, skipping")

    if pending:
        await service.update_permissions(pending, actor_id=None)
    log.info(f"Seeded permissions for {len(pending)} positions")
    return len(pending)


async def seed_catalogs(db: AsyncSession) -> int:
    """
    Create starter catalog values that are not present yet.

    Returns:
        Number of catalog items created
    """
    log.info("Seeding default catalogs...")
    service = CatalogService(db)
    created = 0

    for catalog_type, values in DEFAULT_CATALOGS.items():
        for value in values:
            try:
                await service.create_catalog(catalog_type, value, actor_id=None)
                created += 1
            except DuplicateValue:
                log.debug(f"Catalog {catalog_type} value '{value}' already exists, skipping")

    log.info(f"Created {created} catalog items")
    return created


async def main():
    """Main function to seed permissions and catalogs."""
    log.info("Starting config seeding...")

    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            await seed_permissions(db)
            await seed_catalogs(db)
            log.info("Config seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding config: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
