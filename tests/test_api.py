from datetime import date, timedelta

from .conftest import PNG_BYTES


def _signup(client, email, name="Traveller", is_host=False):
    res = client.post("/api/auth/signup", json={"email": email, "password": "password123", "name": name, "is_host": is_host})
    assert res.status_code == 201, res.text
    body = res.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_auth_flow(client):
    user, headers = _signup(client, "sam@example.com", "Sam")
    assert client.get("/api/auth/me", headers=headers).json()["id"] == user["id"]

    assert client.post("/api/auth/login", json={"email": "sam@example.com", "password": "nope-nope"}).status_code == 401
    login = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "password123"})
    assert login.status_code == 200
    assert login.json()["token"]

    updated = client.patch("/api/auth/me", json={"name": "Samira"}, headers=headers)
    assert updated.json()["name"] == "Samira"

    assert client.post("/api/auth/refresh", headers=headers).status_code == 200
    client.post("/api/auth/logout")
    client.cookies.clear()
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.json() == {"detail": "Please sign in to continue"}


def test_duplicate_signup_rejected(client):
    _signup(client, "dup@example.com")
    res = client.post("/api/auth/signup", json={"email": "dup@example.com", "password": "password123", "name": "Again"})
    assert res.status_code == 422


def test_host_publishes_and_guest_books(client):
    _, host = _signup(client, "host@example.com", "Hana", is_host=True)
    guest_user, guest = _signup(client, "guest@example.com", "Gus")

    created = client.post("/api/host/stays", json={
        "title": "Treehouse",
        "price_per_night": 100,
        "bedrooms": 1,
        "max_guests": 2,
        "location_name": "Big Sur",
        "amenities": ["Wi-Fi", "Deck"],
    }, headers=host)
    assert created.status_code == 201, created.text
    stay = created.json()
    assert stay["status"] == "draft"
    assert stay["details"]["amenities"] == ["Wi-Fi", "Deck"]

    # Drafts are hidden from everyone but the host
    assert client.get(f"/api/stays/{stay['id']}", headers=guest).status_code == 404
    assert client.get(f"/api/stays/{stay['id']}", headers=host).status_code == 200

    upload = client.post(
        f"/api/host/stay/{stay['id']}/images",
        files={"image": ("cover.png", PNG_BYTES, "image/png")},
        headers=host,
    )
    assert upload.status_code == 201, upload.text
    assert upload.json()["is_primary"] is True

    start = date.today() + timedelta(days=1)
    res = client.put(f"/api/host/stay/{stay['id']}/availability", json={
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=3)).isoformat(),
        "price_override": 120,
    }, headers=host)
    assert res.json() == {"ok": True, "days": 3}

    assert client.put(f"/api/host/stay/{stay['id']}/status", json={"status": "published"}, headers=host).status_code == 200
    assert client.put(f"/api/host/stay/{stay['id']}/status", json={"status": "published"}, headers=guest).status_code == 403

    found = client.get("/api/stays", params={"search": "big sur", "guests": "1-2", "availability": "week"}).json()
    assert [s["id"] for s in found] == [stay["id"]]
    assert found[0]["image"].endswith("_cover.png")

    quote = client.get(f"/api/stays/{stay['id']}/quote", params={
        "check_in": start.isoformat(),
        "check_out": (start + timedelta(days=2)).isoformat(),
    }).json()
    assert quote["bookable"] is True
    assert quote["total"] == 240

    fav = client.post(f"/api/favorites/stay/{stay['id']}/toggle", headers=guest).json()
    assert fav == {"item_type": "stay", "item_id": stay["id"], "favorited": True}
    assert len(client.get("/api/favorites", headers=guest).json()) == 1

    review = client.post(f"/api/reviews/stay/{stay['id']}", json={"rating": 4, "comment": "Great views"}, headers=guest)
    assert review.status_code == 201
    assert review.json()["author_name"] == "Gus"
    assert client.get(f"/api/stays/{stay['id']}").json()["rating"] == 4.0

    conv = client.post("/api/conversations", json={
        "other_user_id": stay["host_id"],
        "listing_id": stay["id"],
        "listing_type": "stay",
        "title": "Treehouse",
    }, headers=guest)
    assert conv.status_code == 201
    assert conv.json()["is_new"] is True
    conv_id = conv.json()["id"]
    client.post(f"/api/conversations/{conv_id}/messages", json={"content": "Is it dog friendly?"}, headers=guest)
    thread = client.get(f"/api/conversations/{conv_id}/messages", headers=host).json()
    assert [(m["sender_id"], m["is_current_user"]) for m in thread] == [(guest_user["id"], False)]


def test_search_validation_errors(client):
    assert client.get("/api/stays", params={"bedrooms": "9"}).status_code == 422
    assert client.get("/api/stays", params={"check_in": "soon"}).status_code == 422


def test_food_endpoints(client):
    _, host = _signup(client, "chef@example.com", "Chef", is_host=True)
    exp = client.post("/api/host/food", json={
        "title": "Tom yum soup class",
        "price_per_person": 45,
        "cuisine_type": "Thai",
        "city": "Chiang Mai",
        "state": "Chiang Mai",
    }, headers=host).json()

    # Hosts see their own drafts in search; anonymous visitors do not
    assert [e["id"] for e in client.get("/api/food", params={"title": "soup"}, headers=host).json()] == [exp["id"]]
    assert client.get("/api/food", params={"title": "soup"}).json() == []

    client.put(f"/api/host/food_experience/{exp['id']}/status", json={"status": "published"}, headers=host)
    found = client.get("/api/food", params={"cuisine_types": "Italian,Thai", "title": "soup"}).json()
    assert [e["id"] for e in found] == [exp["id"]]
    assert client.get("/api/food/categories").json() == [{"cuisine_type": "Thai", "count": 1}]

    assert client.get(f"/api/food/{exp['id']}/sessions", params={"day": "2026-05-01"}).json() == []
    assert client.get("/api/food/999").status_code == 404


def test_protected_endpoints_require_session(client):
    assert client.get("/api/favorites").status_code == 401
    assert client.post("/api/host/stays", json={"title": "x", "price_per_night": 10}).status_code == 401
    assert client.get("/api/conversations").status_code == 401


def test_clearing_required_listing_field_is_rejected(client):
    _, host = _signup(client, "owner@example.com", "Olu", is_host=True)
    stay = client.post("/api/host/stays", json={"title": "Yurt", "price_per_night": 55}, headers=host).json()
    res = client.patch(f"/api/host/stays/{stay['id']}", json={"title": None}, headers=host)
    assert res.status_code == 422
    assert "title" in res.json()["detail"]
    assert client.get(f"/api/stays/{stay['id']}", headers=host).json()["title"] == "Yurt"
