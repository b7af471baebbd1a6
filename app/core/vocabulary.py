"""
Closed vocabularies shared by the permission matrix and the catalog store.

Adding a resource, position or catalog type is a one-line change here; every
validator checks membership against these enumerations.
"""
import enum


class Position(str, enum.Enum):
    """Staff roles; row keys of the permission matrix."""
    MANAGER = "manager"
    AGENT = "agent"
    LEGAL_OFFICER = "legal_officer"
    ACCOUNTANT = "accountant"
    ADMIN = "admin"


class Resource(str, enum.Enum):
    """Protected business object categories."""
    TRANSACTIONS = "transactions"
    CONTRACTS = "contracts"
    PAYMENTS = "payments"
    PROPERTIES = "properties"
    PARTNERS = "partners"
    STAFF = "staff"


class Action(str, enum.Enum):
    """Action classes a permission can grant on a resource."""
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


class CatalogType(str, enum.Enum):
    """Lookup lists used for dropdowns and validation elsewhere."""
    PROPERTY_TYPE = "property_type"
    AREA = "area"
    LEAD_SOURCE = "lead_source"
    CONTRACT_TYPE = "contract_type"


class CatalogStatus(str, enum.Enum):
    """Lifecycle of a catalog item. INACTIVE is terminal."""
    ACTIVE = "active"
    INACTIVE = "inactive"


POSITIONS: frozenset[str] = frozenset(p.value for p in Position)
RESOURCES: frozenset[str] = frozenset(r.value for r in Resource)
ACTIONS: frozenset[str] = frozenset(a.value for a in Action)
CATALOG_TYPES: frozenset[str] = frozenset(t.value for t in CatalogType)

# Positions allowed to manage the Config module
CONFIG_MANAGERS: frozenset[str] = frozenset({Position.MANAGER.value, Position.ADMIN.value})

CATALOG_VALUE_MAX_LENGTH = 100


def plain(value: object) -> object:
    """Unwrap enum members to their string value."""
    if isinstance(value, enum.Enum):
        return value.value
    return value


def is_position(value: object) -> bool:
    value = plain(value)
    return isinstance(value, str) and value in POSITIONS


def is_resource(value: object) -> bool:
    value = plain(value)
    return isinstance(value, str) and value in RESOURCES


def is_action(value: object) -> bool:
    value = plain(value)
    return isinstance(value, str) and value in ACTIONS


def is_catalog_type(value: object) -> bool:
    value = plain(value)
    return isinstance(value, str) and value in CATALOG_TYPES
