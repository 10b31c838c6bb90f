"""
tests.test_api_properties

End-to-end property flows over HTTP.

Responsibilities:
- Submission, moderation and public visibility of property listings.
- 401 vs 403 vs normalised 404 at the route boundary.
- Owner edits, admin overrides and the moderation queue/audit views.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import httpx
import pytest

from listing_gateway.auth.models import Role

from .factories import AuthHeaders, property_payload


async def _create(client: httpx.AsyncClient, headers: dict[str, str], **overrides) -> dict:
    r = await client.post("/v1/properties", json=property_payload(**overrides), headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def _public_ids(client: httpx.AsyncClient, **params) -> set[str]:
    r = await client.get("/v1/properties", params=params)
    assert r.status_code == 200
    return {p["id"] for p in r.json()}


@pytest.mark.asyncio
async def test_submission_approval_and_ownership(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    agent_a = auth("agent-a", Role.agent)
    agent_b = auth("agent-b", Role.agent)

    created = await _create(client, agent_a)
    pid = created["id"]
    assert created["moderation_status"] == "Pending"
    assert created["publication_status"] == "Pending Approval"
    assert created["owner_id"] == "agent-a"
    assert created["features"] == ["Garage", "Garden"]

    # Hidden: absent from listings, and indistinguishable from a missing id.
    assert pid not in await _public_ids(client)
    hidden = await client.get(f"/v1/properties/{pid}")
    missing = await client.get(f"/v1/properties/{uuid.uuid4()}")
    assert hidden.status_code == missing.status_code == 404
    assert hidden.json() == missing.json() == {"detail": "Property not found"}

    # The owner can still see it.
    assert (await client.get(f"/v1/properties/{pid}", headers=agent_a)).status_code == 200

    r = await client.patch(
        f"/v1/properties/{pid}/moderation",
        json={"moderation_status": "Approved"},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["moderation_status"] == "Approved"
    assert r.json()["publication_status"] == "For Sale"

    assert pid in await _public_ids(client)
    assert (await client.get(f"/v1/properties/{pid}")).status_code == 200

    r = await client.put(f"/v1/properties/{pid}", json={"price": 1}, headers=agent_b)
    assert r.status_code == 403

    r = await client.put(f"/v1/properties/{pid}", json={"price": 425000}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["price"] == 425000
    assert r.json()["moderation_status"] == "Approved"

    # An owner edit sends the listing back through review.
    r = await client.put(
        f"/v1/properties/{pid}",
        json={"description": "Renovated kitchen, bright family home by the river."},
        headers=agent_a,
    )
    assert r.status_code == 200
    assert r.json()["moderation_status"] == "Pending"
    assert pid not in await _public_ids(client)


@pytest.mark.asyncio
async def test_unauthenticated_vs_forbidden(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    r = await client.post("/v1/properties", json=property_payload())
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"

    # A rejected credential is anonymous: 401, not 403.
    r = await client.post(
        "/v1/properties",
        json=property_payload(),
        headers={"Authorization": "Bearer not.a.token"},
    )
    assert r.status_code == 401

    expired = auth("agent-a", Role.agent, ttl=timedelta(seconds=-30))
    r = await client.post("/v1/properties", json=property_payload(), headers=expired)
    assert r.status_code == 401

    user = auth("u-1", Role.user)
    r = await client.post("/v1/properties", json=property_payload(), headers=user)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_unlisted_admin_claim_is_a_user(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    agent = auth("agent-a", Role.agent)
    pid = (await _create(client, agent))["id"]
    pretender = auth("mallory", Role.admin, email="mallory@evil.test")

    r = await client.patch(
        f"/v1/properties/{pid}/moderation",
        json={"moderation_status": "Approved"},
        headers=pretender,
    )
    assert r.status_code == 403
    r = await client.post("/v1/properties", json=property_payload(), headers=pretender)
    assert r.status_code == 403
    r = await client.get("/v1/admin/moderation/queue", headers=pretender)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_submission_is_auto_approved(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    created = await _create(client, admin_headers)
    assert created["moderation_status"] == "Approved"
    assert created["publication_status"] == "For Sale"
    assert created["id"] in await _public_ids(client)


@pytest.mark.asyncio
async def test_moderation_errors_and_noop(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    pid = (await _create(client, auth("agent-a", Role.agent)))["id"]
    url = f"/v1/properties/{pid}/moderation"

    r = await client.patch(url, json={"moderation_status": "Published"}, headers=admin_headers)
    assert r.status_code == 400

    r = await client.patch(
        url,
        json={"moderation_status": "Approved", "expected_status": "Rejected"},
        headers=admin_headers,
    )
    assert r.status_code == 409

    r = await client.patch(url, json={"moderation_status": "Pending"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["version"] == 1

    r = await client.patch(url, json={"moderation_status": "rejected"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["moderation_status"] == "Rejected"
    # Rejection leaves the owner's publication status alone.
    assert r.json()["publication_status"] == "Pending Approval"

    r = await client.patch(url, json={"moderation_status": "Approved"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_approved_draft_stays_out_of_listings(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    agent = auth("agent-a", Role.agent)
    draft = await _create(client, agent, publication_status="Draft")
    rent = await _create(client, agent, publication_status="For Rent")
    for item in (draft, rent):
        r = await client.patch(
            f"/v1/properties/{item['id']}/moderation",
            json={"moderation_status": "Approved"},
            headers=admin_headers,
        )
        assert r.status_code == 200

    visible = await _public_ids(client)
    assert draft["id"] not in visible
    assert rent["id"] in visible

    assert await _public_ids(client, status="For Rent") == {rent["id"]}
    assert await _public_ids(client, status="For Sale") == set()
    assert await _public_ids(client, status="Draft") == set()


@pytest.mark.asyncio
async def test_views_only_count_on_visible_listings(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    pending = await _create(client, auth("agent-a", Role.agent))
    live = await _create(client, admin_headers)

    assert (await client.post(f"/v1/properties/{pending['id']}/views")).status_code == 404

    r1 = await client.post(f"/v1/properties/{live['id']}/views")
    r2 = await client.post(f"/v1/properties/{live['id']}/views")
    assert r1.json() == {"views": 1}
    assert r2.json() == {"views": 2}


@pytest.mark.asyncio
async def test_my_listings_and_admin_views(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    agent_a = auth("agent-a", Role.agent)
    agent_b = auth("agent-b", Role.agent)
    house = await _create(client, agent_a)
    flat = await _create(client, agent_a, property_type="Flat")
    other = await _create(client, agent_b)

    r = await client.get("/v1/me/properties", headers=agent_a)
    assert r.status_code == 200
    assert {p["id"] for p in r.json()} == {house["id"], flat["id"]}

    r = await client.get("/v1/me/properties", params={"property_type": "Flat"}, headers=agent_a)
    assert [p["id"] for p in r.json()] == [flat["id"]]

    assert (await client.get("/v1/me/properties")).status_code == 401

    r = await client.get("/v1/properties", params={"owner_id": "agent-b"}, headers=admin_headers)
    assert [p["id"] for p in r.json()] == [other["id"]]

    r = await client.get(
        "/v1/properties", params={"moderation_status": "Approved"}, headers=admin_headers
    )
    assert r.json() == []

    r = await client.get("/v1/admin/moderation/queue", headers=admin_headers)
    assert r.status_code == 200
    queued = {p["id"] for p in r.json()["properties"]}
    assert queued == {house["id"], flat["id"], other["id"]}
    assert r.json()["blog_posts"] == []

    assert (await client.get("/v1/admin/moderation/queue", headers=agent_a)).status_code == 403
    assert (await client.get("/v1/admin/moderation/queue")).status_code == 401


@pytest.mark.asyncio
async def test_delete_and_audit_trail(
    client: httpx.AsyncClient, auth: AuthHeaders, admin_headers: dict[str, str]
) -> None:
    agent_a = auth("agent-a", Role.agent)
    pid = (await _create(client, agent_a))["id"]

    assert (await client.delete(f"/v1/properties/{pid}")).status_code == 401
    r = await client.delete(f"/v1/properties/{pid}", headers=auth("agent-b", Role.agent))
    assert r.status_code == 403

    r = await client.delete(f"/v1/properties/{pid}", headers=agent_a)
    assert r.status_code == 200
    assert r.json() == {"status": "deleted"}
    assert (await client.get(f"/v1/properties/{pid}", headers=agent_a)).status_code == 404
    assert (await client.delete(f"/v1/properties/{pid}", headers=agent_a)).status_code == 404

    r = await client.get(f"/v1/admin/audit/{pid}", headers=admin_headers)
    assert r.status_code == 200
    events = {e["event_type"] for e in r.json()}
    assert events == {"ITEM_CREATED", "ITEM_DELETED"}
    assert (await client.get(f"/v1/admin/audit/{pid}", headers=agent_a)).status_code == 403


@pytest.mark.asyncio
async def test_payload_cannot_assign_ownership(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    agent_a = auth("agent-a", Role.agent)
    created = await _create(client, agent_a)

    r = await client.put(
        f"/v1/properties/{created['id']}",
        json={"owner_id": "agent-b", "moderation_status": "Approved", "price": 1000},
        headers=agent_a,
    )
    assert r.status_code == 200
    assert r.json()["owner_id"] == "agent-a"
    assert r.json()["moderation_status"] == "Pending"

    # Claiming the item in the payload does not make a non-owner its owner.
    r = await client.put(
        f"/v1/properties/{created['id']}",
        json={"owner_id": "agent-b", "price": 1},
        headers=auth("agent-b", Role.agent),
    )
    assert r.status_code == 403
    r = await client.delete(
        f"/v1/properties/{created['id']}",
        params={"owner_id": "agent-b"},
        headers=auth("agent-b", Role.agent),
    )
    assert r.status_code == 403
    r = await client.get(f"/v1/properties/{created['id']}", headers=agent_a)
    assert r.json()["price"] == 1000
    assert r.json()["owner_id"] == "agent-a"

    r = await client.post(
        "/v1/properties", json=property_payload(images=["not a url"]), headers=agent_a
    )
    assert r.status_code == 422
