# tests/api/test_shipping_templates_api.py
from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient

from tests.factories import eu_rule


def _create(client: TestClient, name: str = "DHL Standard", **extra) -> dict:
    body = {"name": name, "carrier": "DHL", "from_region": "CN", "rules": [eu_rule()]}
    body.update(extra)
    r = client.post("/shipping/templates", json=body)
    assert r.status_code == 201, r.text
    env = r.json()
    assert env["code"] == 0
    return env["data"]


def test_create_and_get_template(client: TestClient):
    data = _create(client)
    assert data["name"] == "DHL Standard"
    assert data["status"] == "active"
    assert data["rule_count"] == 1
    assert Decimal(str(data["rules"][0]["first_price"])) == Decimal("5.00")
    assert data["rules"][0]["max_weight"] is None

    r = client.get(f"/shipping/templates/{data['id']}")
    assert r.status_code == 200, r.text
    assert r.json()["data"]["id"] == data["id"]


def test_unknown_template_envelope(client: TestClient):
    r = client.get("/shipping/templates/4242")
    assert r.status_code == 404
    env = r.json()
    assert env["code"] == 40402
    assert env["data"]["error"] == "TEMPLATE_NOT_FOUND"
    assert env["data"]["template_id"] == 4242
    assert "4242" in env["message"]


def test_request_validation_envelope(client: TestClient):
    r = client.post("/shipping/templates", json={"carrier": "DHL"})
    assert r.status_code == 422
    env = r.json()
    assert env["code"] == 40000
    assert env["data"]["error"] == "REQUEST_INVALID"
    assert env["data"]["errors"]


def test_list_and_options(client: TestClient):
    _create(client, "A")
    _create(client, "B", status="inactive")

    r = client.get("/shipping/templates", params={"page": 1, "page_size": 10})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["page_size"] == 10
    assert [t["name"] for t in data["list"]] == ["B", "A"]

    r = client.get("/shipping/templates/all")
    assert r.status_code == 200, r.text
    assert [t["name"] for t in r.json()["data"]] == ["A"]


def test_update_template_partially(client: TestClient):
    tpl = _create(client)
    r = client.put(f"/shipping/templates/{tpl['id']}", json={"description": "air freight"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["description"] == "air freight"
    assert data["name"] == "DHL Standard"


def test_rule_crud_and_overlap_conflict(client: TestClient):
    tpl = _create(client, rules=[eu_rule(max_weight="5")])
    base = f"/shipping/templates/{tpl['id']}/rules"

    r = client.post(base, json=eu_rule(min_weight="3", max_weight="10"))
    assert r.status_code == 409
    env = r.json()
    assert env["code"] == 40901
    assert env["data"]["error"] == "CONFLICT"
    assert len(env["data"]["conflicts"]) == 1

    r = client.post(base, json=eu_rule(min_weight="5"))
    assert r.status_code == 201, r.text
    rule_id = r.json()["data"]["id"]

    r = client.put(f"{base}/{rule_id}", json={"additional_price": "2.00"})
    assert r.status_code == 200, r.text
    assert Decimal(str(r.json()["data"]["additional_price"])) == Decimal("2.00")

    r = client.get(base)
    assert [Decimal(str(x["min_weight"])) for x in r.json()["data"]] == [Decimal("0"), Decimal("5")]

    r = client.delete(f"{base}/{rule_id}")
    assert r.status_code == 200, r.text
    assert r.json()["data"] == {"id": rule_id}

    r = client.delete(f"{base}/{rule_id}")
    assert r.status_code == 404
    assert r.json()["code"] == 40403


def test_invalid_rule_is_business_validation_error(client: TestClient):
    tpl = _create(client, rules=[])
    r = client.post(
        f"/shipping/templates/{tpl['id']}/rules",
        json=eu_rule(min_weight="3", max_weight="2"),
    )
    assert r.status_code == 422
    assert r.json()["code"] == 40001


def test_delete_template_with_bindings_needs_force(client: TestClient):
    tpl = _create(client)
    r = client.post(
        "/shipping/product-templates",
        json={"product_id": 1, "shipping_template_id": tpl["id"], "is_default": True},
    )
    assert r.status_code == 201, r.text

    r = client.delete(f"/shipping/templates/{tpl['id']}")
    assert r.status_code == 409
    assert r.json()["data"]["bindings"]["product"] == 1

    r = client.delete(f"/shipping/templates/{tpl['id']}", params={"force": "true"})
    assert r.status_code == 200, r.text
    assert r.json()["data"] == {"id": tpl["id"], "deleted_rules": 1, "deleted_bindings": 1}

    r = client.get("/shipping/products/1/templates")
    assert r.json()["data"] == []


def test_rule_precision_beyond_storage_is_rejected(client: TestClient):
    r = client.post(
        "/shipping/templates",
        json={"name": "fine", "rules": [eu_rule(additional_unit="0.0004")]},
    )
    assert r.status_code == 422
    env = r.json()
    assert env["code"] == 40001
    assert env["data"]["field"] == "additional_unit"
