"""
Typed failures raised by the Config services.

Every failure carries the HTTP status the API layer answers with, so routes
never need to translate them by hand (see the handler in app.main).
"""
from typing import Iterable, Optional

from fastapi import status


class ConfigError(Exception):
    """Base class for business-rule failures of the Config module."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Invalid request"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[str]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationFailure(ConfigError):
    """Malformed input; always fixable by the caller."""
    status_code = status.HTTP_400_BAD_REQUEST


class _InvalidKeys(ValidationFailure):
    label = "key"

    def __init__(self, keys: Iterable[str]):
        self.keys = [str(k) for k in keys]
        noun = self.label if len(self.keys) == 1 else f"{self.label}s"
        super().__init__(
            f"Invalid {noun}: {', '.join(self.keys)}",
            errors=self.keys,
        )


class InvalidPosition(_InvalidKeys):
    label = "position"


class InvalidResource(_InvalidKeys):
    label = "resource"


class InvalidPermission(_InvalidKeys):
    label = "permission"


class InvalidCatalogType(_InvalidKeys):
    label = "catalog type"


class InvalidMatrixShape(ValidationFailure):
    """A matrix level that should be an object is something else."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} must be an object", errors=[path])


class ValueRequired(ValidationFailure):
    default_message = "Value is required"


class ValueTooLong(ValidationFailure):
    def __init__(self, max_length: int):
        self.max_length = max_length
        super().__init__(f"Value must not exceed {max_length} characters")


class ReorderSetMismatch(ValidationFailure):
    """Submitted ids are not exactly the active ids of the catalog type."""

    def __init__(self, catalog_type: str, missing: Iterable[int] = (), unexpected: Iterable[int] = (),
                 duplicated: Iterable[int] = ()):
        self.catalog_type = catalog_type
        self.missing = sorted(missing)
        self.unexpected = sorted(unexpected)
        self.duplicated = sorted(duplicated)
        errors = []
        if self.missing:
            errors.append(f"missing ids: {', '.join(map(str, self.missing))}")
        if self.unexpected:
            errors.append(f"unexpected ids: {', '.join(map(str, self.unexpected))}")
        if self.duplicated:
            errors.append(f"duplicated ids: {', '.join(map(str, self.duplicated))}")
        super().__init__(
            f"Ordered ids must list every active {catalog_type} item exactly once",
            errors=errors,
        )


class DuplicateValue(ConfigError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, value: str, catalog_type: str):
        self.value = value
        self.catalog_type = catalog_type
        super().__init__(f'Value "{value}" already exists for {catalog_type}')


class CatalogNotFound(ConfigError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Catalog item not found"

    def __init__(self, catalog_id: Optional[int] = None):
        self.catalog_id = catalog_id
        super().__init__()
