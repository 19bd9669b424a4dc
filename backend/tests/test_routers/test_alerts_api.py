from urbanstay.core.config import get_settings


async def test_alert_crud_and_matches(client, make_user, make_property, auth_headers):
    seller = await make_user("seller")
    user = await make_user("user")
    await make_property(seller, title="Two bed in Pune", city="Pune", bedrooms=2, price=4_000_000)
    await make_property(seller, title="Three bed in Pune", city="PUNE", bedrooms=3, price=6_000_000)
    await make_property(seller, title="Sold three bed", city="Pune", bedrooms=3, status="sold")
    await make_property(seller, title="Delhi penthouse", city="Delhi", bedrooms=4)

    resp = await client.post(
        "/api/alerts",
        json={"name": "Pune family homes", "cities": ["pune"], "min_bedrooms": 3, "listing_type": "sale"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201
    alert = resp.json()["data"]
    assert alert["frequency"] == "daily"
    assert alert["is_active"] is True

    resp = await client.get(f"/api/alerts/{alert['id']}/matches", headers=auth_headers(user))
    assert [p["title"] for p in resp.json()["data"]] == ["Three bed in Pune"]

    resp = await client.put(
        f"/api/alerts/{alert['id']}",
        json={"min_bedrooms": None, "max_price": 5_000_000},
        headers=auth_headers(user),
    )
    assert resp.json()["data"]["max_price"] == 5_000_000

    resp = await client.get(f"/api/alerts/{alert['id']}/matches", headers=auth_headers(user))
    assert [p["title"] for p in resp.json()["data"]] == ["Two bed in Pune"]

    resp = await client.put(f"/api/alerts/{alert['id']}/toggle", headers=auth_headers(user))
    assert resp.json()["data"]["is_active"] is False

    resp = await client.get("/api/alerts", headers=auth_headers(user))
    assert resp.json()["count"] == 1

    resp = await client.delete(f"/api/alerts/{alert['id']}", headers=auth_headers(user))
    assert resp.status_code == 200
    resp = await client.get(f"/api/alerts/{alert['id']}", headers=auth_headers(user))
    assert resp.status_code == 404


async def test_alerts_are_private(client, make_user, auth_headers):
    owner = await make_user("user")
    other = await make_user("user")
    alert_id = (
        await client.post("/api/alerts", json={"name": "Anything"}, headers=auth_headers(owner))
    ).json()["data"]["id"]

    for call in (
        client.get(f"/api/alerts/{alert_id}", headers=auth_headers(other)),
        client.put(f"/api/alerts/{alert_id}", json={"name": "Mine now"}, headers=auth_headers(other)),
        client.put(f"/api/alerts/{alert_id}/toggle", headers=auth_headers(other)),
        client.delete(f"/api/alerts/{alert_id}", headers=auth_headers(other)),
    ):
        resp = await call
        assert resp.status_code == 404
        assert resp.json()["message"] == "Alert not found"


async def test_active_alert_limit(client, make_user, auth_headers, monkeypatch):
    monkeypatch.setattr(get_settings(), "MAX_ACTIVE_ALERTS", 2)
    user = await make_user("user")
    headers = auth_headers(user)

    first = (await client.post("/api/alerts", json={"name": "One"}, headers=headers)).json()["data"]
    assert (await client.post("/api/alerts", json={"name": "Two"}, headers=headers)).status_code == 201

    resp = await client.post("/api/alerts", json={"name": "Three"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "You can only have 2 active alerts"

    # pausing one frees a slot, reactivating it is then refused
    await client.put(f"/api/alerts/{first['id']}/toggle", headers=headers)
    assert (await client.post("/api/alerts", json={"name": "Three"}, headers=headers)).status_code == 201
    resp = await client.put(f"/api/alerts/{first['id']}/toggle", headers=headers)
    assert resp.status_code == 400


async def test_invalid_price_range(client, make_user, auth_headers):
    user = await make_user("user")
    resp = await client.post(
        "/api/alerts",
        json={"name": "Bad range", "min_price": 10, "max_price": 5},
        headers=auth_headers(user),
    )
    assert resp.status_code == 400
