# tests/test_config_routes.py

"""
Tests for the Config HTTP endpoints.
"""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.features.staff.auth import create_access_token


def create_item(client, headers, catalog_type, value):
    response = client.post(f"/config/catalogs/{catalog_type}", json={"value": value}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_health(client: TestClient):
    """Test the unauthenticated health endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_config_requires_token(client: TestClient):
    """Test that Config endpoints reject anonymous callers."""
    response = client.get("/config/permissions")

    assert response.status_code in (401, 403)


def test_invalid_token_rejected(client: TestClient):
    """Test that a token signed with another secret is refused."""
    response = client.get("/config/permissions", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_expired_token_rejected(client: TestClient):
    """Test that an expired token is refused."""
    token = create_access_token(
        staff_id=7,
        position="manager",
        exp=datetime.now(timezone.utc) - timedelta(minutes=5),
    )

    response = client.get("/config/permissions", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_token_with_unknown_position_rejected(client: TestClient, make_headers):
    """Test that tokens must carry a known position."""
    response = client.get("/config/permissions", headers=make_headers("intern"))

    assert response.status_code == 401


def test_agent_cannot_manage_config(client: TestClient, agent_headers):
    """Test that only managers and admins reach management endpoints."""
    assert client.get("/config/permissions", headers=agent_headers).status_code == 403
    assert client.get("/config/catalogs/area", headers=agent_headers).status_code == 403
    response = client.post("/config/catalogs/area", json={"value": "Quận 1"}, headers=agent_headers)
    assert response.status_code == 403


def test_update_and_read_permissions(client: TestClient, manager_headers):
    """Test the permission matrix round trip through the API."""
    response = client.put(
        "/config/permissions",
        json={"agent": {"transactions": {"view": True, "add": "yes", "delete": False}}},
        headers=manager_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Permissions updated successfully"
    assert body["data"] == {"agent": {"transactions": {"view": True, "add": True, "delete": False}}}

    response = client.get("/config/permissions/agent", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {"transactions": {"view": True, "add": True, "delete": False}}

    response = client.get("/config/permissions", headers=manager_headers)
    assert response.json()["data"]["agent"]["transactions"]["add"] is True


def test_update_permissions_invalid_position(client: TestClient, admin_headers):
    """Test that an unknown position is a 400 and nothing is written."""
    response = client.put(
        "/config/permissions",
        json={"agent": {"transactions": {"view": True}}, "intern": {"transactions": {"view": True}}},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Invalid position: intern",
        "errors": ["intern"],
    }
    assert client.get("/config/permissions", headers=admin_headers).json()["data"] == {}


def test_update_permissions_non_object_level(client: TestClient, admin_headers):
    """Test that a non-object level is a 400."""
    response = client.put(
        "/config/permissions",
        json={"agent": {"transactions": True}},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "agent.transactions must be an object"


def test_get_permissions_unknown_position(client: TestClient, manager_headers):
    """Test reading an unknown position."""
    response = client.get("/config/permissions/intern", headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid position: intern"


def test_permission_check(client: TestClient, manager_headers, agent_headers, make_headers):
    """Test that any staff member can check their own permissions."""
    client.put(
        "/config/permissions",
        json={"agent": {"contracts": {"view": True, "edit": False}}},
        headers=manager_headers,
    )

    response = client.post("/config/permissions/check", json={"resource": "contracts", "action": "view"},
                           headers=agent_headers)
    assert response.status_code == 200
    assert response.json() == {
        "position": "agent",
        "resource": "contracts",
        "action": "view",
        "has_permission": True,
        "reason": None,
    }

    response = client.post("/config/permissions/check", json={"resource": "contracts", "action": "edit"},
                           headers=agent_headers)
    assert response.json()["has_permission"] is False
    assert response.json()["reason"] == "Permission denied"

    response = client.post("/config/permissions/check", json={"resource": "staff", "action": "delete"},
                           headers=make_headers("admin"))
    assert response.json()["has_permission"] is True


def test_permission_check_rejects_unknown_action(client: TestClient, agent_headers):
    """Test request validation on the check endpoint."""
    response = client.post("/config/permissions/check", json={"resource": "contracts", "action": "approve"},
                           headers=agent_headers)

    assert response.status_code == 400
    assert "action" in response.json()


def test_catalog_lifecycle(client: TestClient, manager_headers):
    """Test create, list, rename, reorder and delete through the API."""
    apartment = create_item(client, manager_headers, "property_type", "Apartment")
    house = create_item(client, manager_headers, "property_type", "  House ")

    assert apartment["display_order"] == 1
    assert house["value"] == "House"
    assert house["display_order"] == 2
    assert house["status"] == "active"
    assert house["created_by"] == 7

    response = client.put(
        f"/config/catalogs/property_type/{apartment['id']}",
        json={"value": "Condo"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["value"] == "Condo"

    response = client.put(
        "/config/catalogs/property_type/order",
        json={"ids": [house["id"], apartment["id"]]},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert [item["value"] for item in response.json()["data"]] == ["House", "Condo"]

    response = client.delete(f"/config/catalogs/property_type/{house['id']}", headers=manager_headers)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Catalog deleted successfully",
        "data": {"id": house["id"]},
    }

    response = client.get("/config/catalogs/property_type", headers=manager_headers)
    assert [item["value"] for item in response.json()["data"]] == ["Condo"]


def test_catalog_duplicate_is_conflict(client: TestClient, manager_headers):
    """Test that a duplicate value returns 409."""
    create_item(client, manager_headers, "area", "Quận 1")

    response = client.post("/config/catalogs/area", json={"value": " Quận 1 "}, headers=manager_headers)

    assert response.status_code == 409
    assert response.json()["success"] is False
    assert response.json()["message"] == 'Value "Quận 1" already exists for area'


def test_catalog_blank_value(client: TestClient, manager_headers):
    """Test that a blank value is a 400."""
    response = client.post("/config/catalogs/area", json={"value": "   "}, headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Value is required"


def test_catalog_unknown_type(client: TestClient, manager_headers):
    """Test that an unknown catalog type is a 400."""
    response = client.get("/config/catalogs/furniture", headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["errors"] == ["furniture"]


def test_catalog_not_found(client: TestClient, manager_headers):
    """Test that unknown, deleted and mistyped ids are 404."""
    item = create_item(client, manager_headers, "lead_source", "Website")

    response = client.put("/config/catalogs/lead_source/999", json={"value": "Web"}, headers=manager_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Catalog item not found"

    response = client.delete(f"/config/catalogs/area/{item['id']}", headers=manager_headers)
    assert response.status_code == 404

    client.delete(f"/config/catalogs/lead_source/{item['id']}", headers=manager_headers)
    response = client.delete(f"/config/catalogs/lead_source/{item['id']}", headers=manager_headers)
    assert response.status_code == 404


def test_catalog_reorder_mismatch(client: TestClient, manager_headers):
    """Test that a partial ordering is rejected and leaves the order unchanged."""
    first = create_item(client, manager_headers, "contract_type", "Deposit")
    create_item(client, manager_headers, "contract_type", "Lease")

    response = client.put(
        "/config/catalogs/contract_type/order",
        json={"ids": [first["id"]]},
        headers=manager_headers,
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["errors"][0].startswith("missing ids:")

    response = client.get("/config/catalogs/contract_type", headers=manager_headers)
    assert [item["value"] for item in response.json()["data"]] == ["Deposit", "Lease"]


def test_mutations_are_audited(client: TestClient, manager_headers, admin_headers):
    """Test that Config changes show up in the audit log."""
    item = create_item(client, manager_headers, "area", "Quận 3")
    client.put("/config/permissions", json={"accountant": {"payments": {"view": True}}}, headers=admin_headers)

    response = client.get("/config/audit-logs", headers=manager_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {(entry["action"], entry["resource_type"]) for entry in body["items"]} == {
        ("create", "catalog"),
        ("update", "permission_matrix"),
    }

    response = client.get("/config/audit-logs", params={"resource_type": "catalog"}, headers=manager_headers)
    entries = response.json()["items"]
    assert len(entries) == 1
    assert entries[0]["actor_id"] == 7
    assert entries[0]["resource_id"] == str(item["id"])
    assert entries[0]["details"] == {"type": "area", "value": "Quận 3"}


def test_rejected_mutation_is_not_audited(client: TestClient, manager_headers):
    """Test that failed updates leave no audit entry."""
    client.put("/config/permissions", json={"intern": {}}, headers=manager_headers)

    response = client.get("/config/audit-logs", headers=manager_headers)

    assert response.json()["total"] == 0
