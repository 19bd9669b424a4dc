from datetime import timedelta

from urbanstay.db.models import Property, utcnow


async def _feature(session_factory, prop, days=10):
    async with session_factory() as session:
        row = await session.get(Property, prop.id)
        row.is_featured = True
        row.featured_until = utcnow() + timedelta(days=days)
        await session.commit()


async def test_list_hides_pending_by_default(client, make_user, make_property):
    seller = await make_user("seller")
    await make_property(seller, title="Available flat in Pune")
    await make_property(seller, title="Already sold bungalow", status="sold")
    await make_property(seller, title="Draft listing pending", status="pending")

    resp = await client.get("/api/properties")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert {p["status"] for p in body["data"]} == {"available", "sold"}

    resp = await client.get("/api/properties", params={"status": "all"})
    assert resp.json()["total"] == 3

    resp = await client.get("/api/properties", params={"status": "pending"})
    assert [p["title"] for p in resp.json()["data"]] == ["Draft listing pending"]


async def test_filters(client, make_user, make_property):
    seller = await make_user("seller")
    await make_property(
        seller,
        title="Garden villa",
        property_type="villa",
        city="Bengaluru",
        price=20_000_000,
        bedrooms=4,
        amenities=["pool", "gym", "parking"],
    )
    await make_property(
        seller,
        title="Studio for rent",
        listing_type="rent",
        city="Mumbai",
        price=25_000,
        bedrooms=1,
        amenities=["gym"],
    )

    async def titles(**params):
        resp = await client.get("/api/properties", params=params)
        assert resp.status_code == 200
        return sorted(p["title"] for p in resp.json()["data"])

    assert await titles(city="bengal") == ["Garden villa"]
    assert await titles(listing_type="rent") == ["Studio for rent"]
    assert await titles(min_price=1_000_000) == ["Garden villa"]
    assert await titles(max_price=30_000) == ["Studio for rent"]
    assert await titles(bedrooms=4) == ["Garden villa"]
    assert await titles(amenities="gym") == ["Garden villa", "Studio for rent"]
    assert await titles(amenities="gym,pool") == ["Garden villa"]
    assert await titles(search="STUDIO") == ["Studio for rent"]
    assert await titles(property_type="plot") == []


async def test_sort_and_pagination(client, make_user, make_property):
    seller = await make_user("seller")
    for price in (300, 100, 200):
        await make_property(seller, title=f"Listing priced {price}", price=price)

    resp = await client.get("/api/properties", params={"sort": "price_low"})
    assert [p["price"] for p in resp.json()["data"]] == [100, 200, 300]

    resp = await client.get("/api/properties", params={"sort": "price_high", "limit": 2, "page": 2})
    body = resp.json()
    assert body["total"] == 3
    assert body["pages"] == 2
    assert [p["price"] for p in body["data"]] == [100]

    resp = await client.get("/api/properties", params={"limit": 500})
    assert resp.status_code == 400


async def test_default_sort_puts_featured_first(client, make_user, make_property, session_factory):
    seller = await make_user("seller")
    old = await make_property(seller, title="Older but featured")
    await make_property(seller, title="Newest plain listing")
    await _feature(session_factory, old)

    resp = await client.get("/api/properties")
    assert resp.json()["data"][0]["title"] == "Older but featured"

    resp = await client.get("/api/properties/featured")
    assert [p["title"] for p in resp.json()["data"]] == ["Older but featured"]

    resp = await client.get("/api/properties", params={"featured": "true"})
    assert resp.json()["total"] == 1


async def test_detail_counts_views(client, make_user, make_property):
    seller = await make_user("seller", name="Meera Owner")
    prop = await make_property(seller)

    first = await client.get(f"/api/properties/{prop.id}")
    assert first.status_code == 200
    assert first.json()["data"]["views"] == 1
    assert first.json()["data"]["owner"]["name"] == "Meera Owner"

    second = await client.get(f"/api/properties/slug/{prop.slug}")
    assert second.json()["data"]["views"] == 2

    # detail is public: a stale or bogus token is ignored, not rejected
    third = await client.get(f"/api/properties/{prop.id}", headers={"Authorization": "Bearer not-a-jwt"})
    assert third.status_code == 200
    assert third.json()["data"]["views"] == 3

    missing = await client.get("/api/properties/99999")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Property not found"


async def test_similar(client, make_user, make_property):
    seller = await make_user("seller")
    base = await make_property(seller, title="Base flat in Pune", city="Pune", price=5_000_000)
    await make_property(seller, title="Same city cheaper", city="Pune", price=1_000_000)
    await make_property(seller, title="Other city close price", city="Nagpur", property_type="house", price=5_500_000)
    await make_property(seller, title="Rental in Pune", city="Pune", listing_type="rent", price=20_000)

    resp = await client.get(f"/api/properties/{base.id}/similar")
    titles = sorted(p["title"] for p in resp.json()["data"])
    assert titles == ["Other city close price", "Same city cheaper"]


async def test_city_stats(client, make_user, make_property):
    seller = await make_user("seller")
    await make_property(seller, city="Pune", price=100)
    await make_property(seller, city="Pune", price=300)
    await make_property(seller, city="Delhi", price=50)

    resp = await client.get("/api/properties/stats/cities")
    assert resp.json()["data"] == [
        {"city": "Pune", "count": 2, "avg_price": 200.0},
        {"city": "Delhi", "count": 1, "avg_price": 50.0},
    ]


async def test_create_requires_seller_role(client, make_user, auth_headers):
    buyer = await make_user("user")
    seller = await make_user("seller")
    payload = {
        "title": "Corner plot near highway",
        "listing_type": "sale",
        "property_type": "plot",
        "price": 1_200_000,
        "city": "Nashik",
        "amenities": ["gated", "gated", "water"],
    }

    resp = await client.post("/api/properties", json=payload, headers=auth_headers(buyer))
    assert resp.status_code == 403

    resp = await client.post("/api/properties", json=payload, headers=auth_headers(seller))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["owner_id"] == seller.id
    assert data["status"] == "available"
    assert data["amenities"] == ["gated", "water"]
    assert data["slug"].startswith("corner-plot-near-highway-")


async def test_update_and_delete_owner_or_admin(client, make_user, make_property, auth_headers):
    seller = await make_user("seller")
    other = await make_user("seller")
    admin = await make_user("admin")
    prop = await make_property(seller, amenities=["gym"])

    resp = await client.put(f"/api/properties/{prop.id}", json={"price": 10}, headers=auth_headers(other))
    assert resp.status_code == 403

    resp = await client.put(
        f"/api/properties/{prop.id}",
        json={"price": 4_500_000, "amenities": ["gym", "lift"], "status": "pending"},
        headers=auth_headers(seller),
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["price"] == 4_500_000
    assert data["amenities"] == ["gym", "lift"]
    assert data["status"] == "pending"

    resp = await client.delete(f"/api/properties/{prop.id}", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert (await client.get(f"/api/properties/{prop.id}")).status_code == 404


async def test_my_properties(client, make_user, make_property, auth_headers):
    seller = await make_user("seller")
    await make_property(seller, title="Mine and available")
    await make_property(seller, title="Mine but pending", status="pending")
    await make_property(await make_user("seller"), title="Somebody else's")

    resp = await client.get("/api/properties/user/my", headers=auth_headers(seller))
    body = resp.json()
    assert body["total"] == 2
    assert {s["status"]: s["count"] for s in body["stats"]} == {"available": 1, "pending": 1}


async def test_admin_verify_feature_and_stats(client, make_user, make_property, auth_headers):
    seller = await make_user("seller")
    admin = await make_user("admin")
    prop = await make_property(seller)

    resp = await client.put(f"/api/properties/{prop.id}/verify", headers=auth_headers(seller))
    assert resp.status_code == 403

    resp = await client.put(f"/api/properties/{prop.id}/verify", headers=auth_headers(admin))
    assert resp.json()["data"]["is_verified"] is True

    resp = await client.put(f"/api/properties/{prop.id}/feature", json={"days": 7}, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["is_featured"] is True

    resp = await client.get("/api/properties/stats/admin", headers=auth_headers(admin))
    stats = resp.json()["data"]
    assert stats["total_properties"] == 1
    assert stats["verified_properties"] == 1
    assert stats["by_property_type"] == [{"value": "apartment", "count": 1}]
