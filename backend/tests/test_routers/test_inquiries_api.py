import pytest


@pytest.fixture
async def listing(make_user, make_property):
    owner = await make_user("seller", name="Owner Olga")
    buyer = await make_user("user", name="Buyer Ben", phone="9000000001")
    prop = await make_property(owner)
    return owner, buyer, prop


async def _send(client, auth_headers, buyer, prop, **extra):
    body = {"property_id": prop.id, "message": "Is the price negotiable?", **extra}
    return await client.post("/api/inquiries", json=body, headers=auth_headers(buyer))


async def test_create_inquiry(client, listing, auth_headers):
    owner, buyer, prop = listing

    resp = await _send(
        client,
        auth_headers,
        buyer,
        prop,
        inquiry_type="schedule-visit",
        preferred_visit_date="2025-07-01",
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["receiver_id"] == owner.id
    assert data["status"] == "pending"
    assert data["inquiry_type"] == "schedule-visit"
    # contact details fall back to the sender's profile
    assert data["phone"] == "9000000001"
    assert data["email"] == buyer.email
    assert data["is_read"] is False


async def test_cannot_inquire_on_own_listing(client, listing, auth_headers):
    owner, _, prop = listing
    resp = await _send(client, auth_headers, owner, prop)
    assert resp.status_code == 400
    assert resp.json()["message"] == "You cannot inquire about your own property"


async def test_sent_and_received(client, listing, auth_headers):
    owner, buyer, prop = listing
    await _send(client, auth_headers, buyer, prop)

    sent = (await client.get("/api/inquiries/sent", headers=auth_headers(buyer))).json()
    assert sent["count"] == 1

    received = (await client.get("/api/inquiries/received", headers=auth_headers(owner))).json()
    assert received["count"] == 1
    assert received["unread"] == 1

    resp = await client.get("/api/inquiries/received", params={"status": "responded"}, headers=auth_headers(owner))
    assert resp.json()["count"] == 0


async def test_receiver_read_marks_read(client, listing, auth_headers, make_user):
    owner, buyer, prop = listing
    inquiry_id = (await _send(client, auth_headers, buyer, prop)).json()["data"]["id"]

    resp = await client.get(f"/api/inquiries/{inquiry_id}", headers=auth_headers(buyer))
    assert resp.json()["data"]["is_read"] is False

    resp = await client.get(f"/api/inquiries/{inquiry_id}", headers=auth_headers(owner))
    data = resp.json()["data"]
    assert data["is_read"] is True
    assert data["read_at"] is not None

    stranger = await make_user("user")
    resp = await client.get(f"/api/inquiries/{inquiry_id}", headers=auth_headers(stranger))
    assert resp.status_code == 403


async def test_respond_and_status(client, listing, auth_headers):
    owner, buyer, prop = listing
    inquiry_id = (await _send(client, auth_headers, buyer, prop)).json()["data"]["id"]

    # the sender's follow-up does not change the status
    resp = await client.post(
        f"/api/inquiries/{inquiry_id}/respond",
        json={"message": "Any update?"},
        headers=auth_headers(buyer),
    )
    assert resp.json()["data"]["status"] == "pending"

    resp = await client.post(
        f"/api/inquiries/{inquiry_id}/respond",
        json={"message": "Yes, a little."},
        headers=auth_headers(owner),
    )
    data = resp.json()["data"]
    assert data["status"] == "responded"
    assert [r["message"] for r in data["responses"]] == ["Any update?", "Yes, a little."]

    resp = await client.put(
        f"/api/inquiries/{inquiry_id}/status",
        json={"status": "scheduled"},
        headers=auth_headers(buyer),
    )
    assert resp.status_code == 403

    resp = await client.put(
        f"/api/inquiries/{inquiry_id}/status",
        json={"status": "scheduled"},
        headers=auth_headers(owner),
    )
    assert resp.json()["data"]["status"] == "scheduled"

    resp = await client.put("/api/inquiries/777/status", json={"status": "scheduled"}, headers=auth_headers(owner))
    assert resp.status_code == 404
