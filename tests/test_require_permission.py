# tests/test_require_permission.py

"""
Tests for the matrix-backed route guard other modules use.
"""

from typing import Annotated

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.core.database.engine import get_db
from app.features.permissions.dependencies import require_permission
from app.features.staff.schemas import Actor


@pytest.fixture
def guarded_client(override_get_db) -> TestClient:
    """A small app whose only route needs "edit" on "contracts"."""
    guarded = FastAPI()
    guarded.dependency_overrides[get_db] = override_get_db

    @guarded.put("/contracts/{contract_id}")
    async def edit_contract(
        contract_id: int,
        actor: Annotated[Actor, Depends(require_permission("contracts", "edit"))],
    ):
        return {"contract_id": contract_id, "staff_id": actor.staff_id}

    return TestClient(guarded)


def test_guard_follows_matrix(client: TestClient, guarded_client: TestClient, manager_headers, make_headers):
    """Test that the guard reads the stored matrix for the caller's position."""
    legal = make_headers("legal_officer", staff_id=11)
    accountant = make_headers("accountant", staff_id=12)
    client.put(
        "/config/permissions",
        json={"legal_officer": {"contracts": {"edit": True}}, "accountant": {"contracts": {"edit": False}}},
        headers=manager_headers,
    )

    response = guarded_client.put("/contracts/3", headers=legal)
    assert response.status_code == 200
    assert response.json() == {"contract_id": 3, "staff_id": 11}

    response = guarded_client.put("/contracts/3", headers=accountant)
    assert response.status_code == 403
    assert response.json()["detail"] == "Permission denied: edit on contracts"


def test_guard_denies_position_without_rows(guarded_client: TestClient, agent_headers):
    """Test that a missing entry means denied."""
    response = guarded_client.put("/contracts/3", headers=agent_headers)

    assert response.status_code == 403


def test_guard_lets_admin_through(guarded_client: TestClient, admin_headers):
    """Test that admins pass without any stored rows."""
    response = guarded_client.put("/contracts/3", headers=admin_headers)

    assert response.status_code == 200
