"""Pricing rule management API tests."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.asyncio


def _rule_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "PR002",
        "name": "Weekend Premium",
        "description": "Premium pricing for Friday and Saturday nights",
        "type": "weekend",
        "priority": 2,
        "conditions": {"days_of_week": [5, 6]},
        "adjustment": {"kind": "percentage", "direction": "increase", "value": "15"},
        "applicable_camps": ["C001", "C002"],
    }
    payload.update(overrides)
    return payload


async def test_rule_crud_flow(app_context: dict[str, object]) -> None:
    client = app_context["client"]

    create = await client.post("/api/v1/camps/C001/pricing-rules", json=_rule_payload())
    assert create.status_code == 201, create.text
    created = create.json()
    assert created["id"] == "PR002"
    assert sorted(created["applicable_camps"]) == ["C001", "C002"]

    listing = await client.get("/api/v1/camps/C002/pricing-rules")
    assert [rule["id"] for rule in listing.json()] == ["PR002"]

    update = await client.put(
        "/api/v1/camps/C001/pricing-rules/PR002",
        json=_rule_payload(priority=7),
    )
    assert update.status_code == 200, update.text
    assert update.json()["priority"] == 7

    toggle = await client.patch(
        "/api/v1/camps/C001/pricing-rules/PR002/status", json={"active": False}
    )
    assert toggle.status_code == 200
    assert toggle.json()["active"] is False

    delete = await client.delete("/api/v1/camps/C001/pricing-rules/PR002")
    assert delete.status_code == 204

    missing = await client.get("/api/v1/camps/C001/pricing-rules/PR002")
    assert missing.status_code == 404


async def test_rule_must_cover_the_path_camp(app_context: dict[str, object]) -> None:
    client = app_context["client"]

    response = await client.post(
        "/api/v1/camps/C003/pricing-rules", json=_rule_payload()
    )

    assert response.status_code == 400


async def test_invalid_rule_is_rejected(app_context: dict[str, object]) -> None:
    client = app_context["client"]

    response = await client.post(
        "/api/v1/camps/C001/pricing-rules",
        json=_rule_payload(conditions={"days_of_week": [9]}),
    )

    assert response.status_code == 400
    assert "Weekdays" in response.json()["detail"]


async def test_duplicate_rule_is_rejected(app_context: dict[str, object]) -> None:
    client = app_context["client"]
    await client.post("/api/v1/camps/C001/pricing-rules", json=_rule_payload())

    response = await client.post(
        "/api/v1/camps/C001/pricing-rules", json=_rule_payload()
    )

    assert response.status_code == 400


async def test_rule_of_another_camp_is_not_visible(app_context: dict[str, object]) -> None:
    client = app_context["client"]
    await client.post("/api/v1/camps/C001/pricing-rules", json=_rule_payload())

    response = await client.get("/api/v1/camps/C003/pricing-rules/PR002")

    assert response.status_code == 404
