"""
Pure transforms between flat permission rows and the nested permission matrix.

    matrix = {position: {resource: {permission: bool}}}

Nothing here touches the database, so the round trip
``to_matrix(flatten(m)) == m`` can be checked directly.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from app.core.exceptions import (
    InvalidMatrixShape,
    InvalidPermission,
    InvalidPosition,
    InvalidResource,
)
from app.core.vocabulary import is_action, is_position, is_resource, plain

ResourceMatrix = Dict[str, Dict[str, bool]]
Matrix = Dict[str, ResourceMatrix]


@dataclass(frozen=True)
class PermissionRow:
    """One (position, resource, permission) grant, ready to be upserted."""
    position: str
    resource: str
    permission: str
    is_granted: bool


def to_matrix(rows: Iterable[Any]) -> Matrix:
    """
    Group flat rows by position, then resource, then permission.

    Accepts ORM rows or PermissionRow objects; anything with the four attributes.
    """
    matrix: Matrix = {}
    for row in rows:
        resources = matrix.setdefault(row.position, {})
        resources.setdefault(row.resource, {})[row.permission] = bool(row.is_granted)
    return matrix


def to_resource_matrix(rows: Iterable[Any]) -> ResourceMatrix:
    """Same as to_matrix for rows of a single position, without the position level."""
    resources: ResourceMatrix = {}
    for row in rows:
        resources.setdefault(row.resource, {})[row.permission] = bool(row.is_granted)
    return resources


def _unique(keys: Iterable[Any]) -> List[str]:
    seen: Dict[str, None] = {}
    for key in keys:
        seen.setdefault(str(plain(key)), None)
    return list(seen)


def validate_matrix(matrix: Any) -> None:
    """
    Check every key of a submitted matrix against the closed vocabularies.

    Levels are checked top-down and every invalid key of the failing level is
    reported at once. Leaf values are not checked; they are coerced on flatten.

    Raises:
        InvalidMatrixShape: a level that must be an object is not one
        InvalidPosition / InvalidResource / InvalidPermission: unknown keys
    """
    if not isinstance(matrix, Mapping):
        raise InvalidMatrixShape("permissions")

    bad_positions = [key for key in matrix if not is_position(key)]
    if bad_positions:
        raise InvalidPosition(_unique(bad_positions))

    bad_resources = []
    for position, resources in matrix.items():
        if not isinstance(resources, Mapping):
            raise InvalidMatrixShape(str(plain(position)))
        bad_resources.extend(key for key in resources if not is_resource(key))
    if bad_resources:
        raise InvalidResource(_unique(bad_resources))

    bad_permissions = []
    for position, resources in matrix.items():
        for resource, permissions in resources.items():
            if not isinstance(permissions, Mapping):
                raise InvalidMatrixShape(f"{plain(position)}.{plain(resource)}")
            bad_permissions.extend(key for key in permissions if not is_action(key))
    if bad_permissions:
        raise InvalidPermission(_unique(bad_permissions))


def flatten(matrix: Mapping) -> List[PermissionRow]:
    """
    Turn a nested matrix into flat rows.

    Leaf values go through bool(), so "yes" and also "false" become True.
    Callers are expected to run validate_matrix first.
    """
    rows: List[PermissionRow] = []
    for position, resources in matrix.items():
        for resource, permissions in resources.items():
            for permission, is_granted in permissions.items():
                rows.append(PermissionRow(
                    position=str(plain(position)),
                    resource=str(plain(resource)),
                    permission=str(plain(permission)),
                    is_granted=bool(is_granted),
                ))
    return rows
