import pytest

from cityloops.jwt import blocklist


async def _signup(client, email="jane@example.com", name="Jane Doe"):
    resp = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": "Secretpass1"},
    )
    assert resp.json()["success"] is True
    resp = await client.post("/api/auth/login", json={"email": email, "password": "Secretpass1"})
    assert resp.status_code == 200
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def jane(client):
    return await _signup(client)


@pytest.fixture
async def bob(client):
    return await _signup(client, email="bob@example.com", name="Bob Smith")


async def _create(client, headers, payload):
    resp = await client.post("/api/loops", json=payload, headers=headers)
    assert resp.status_code == 201, resp.json()
    return resp.json()


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}


async def test_register_failure_returns_first_message(client):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "Jane", "email": "jane@example.com", "password": "short"},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "success": False,
        "message": None,
        "error": "Password must be at least 8 characters",
    }


async def test_login_with_wrong_password_is_401(client, jane):
    resp = await client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "Wrongpass1"}
    )
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Invalid email or password"}


async def test_me_and_logout(client, jane):
    resp = await client.get("/api/auth/me", headers=jane)
    assert resp.json() == {"message": "Logged in as jane@example.com"}

    await client.post("/api/auth/logout", headers=jane)
    try:
        resp = await client.get("/api/auth/me", headers=jane)
        assert resp.status_code == 401
    finally:
        blocklist.clear()


async def test_create_and_read_loop(client, jane, loop_payload, place):
    body = await _create(
        client, jane, loop_payload(places=[place("Cafe One"), place("Museum Two", "Museum")])
    )
    assert body["success"] is True
    assert body["slug"] == "best-coffee-shops-in-brooklyn"

    resp = await client.get(f"/api/loops/slug/{body['slug']}")
    detail = resp.json()
    assert resp.status_code == 200
    assert [p["name"] for p in detail["places"]] == ["Cafe One", "Museum Two"]
    assert [p["order"] for p in detail["places"]] == [1, 2]
    assert detail["user"]["name"] == "Jane Doe"
    assert detail["metrics"] == {
        "estimated_duration": "2h 10min",
        "recommended_transport": "Walking",
        "difficulty": "Moderate",
    }


async def test_create_without_session_reports_failure(client, loop_payload):
    resp = await client.post("/api/loops", json=loop_payload())
    assert resp.status_code == 200
    assert resp.json()["success"] is False
    assert resp.json()["message"] == "Authentication required"


async def test_create_with_invalid_payload_reports_first_violation(client, jane, loop_payload):
    resp = await client.post("/api/loops", json=loop_payload(title=""), headers=jane)
    assert resp.json() == {
        "success": False,
        "message": "Title is required",
        "loop_id": None,
        "slug": None,
    }


async def test_update_by_other_user_fails_uniformly(client, jane, bob, loop_payload):
    created = await _create(client, jane, loop_payload())

    resp = await client.put(
        f"/api/loops/{created['loop_id']}", json=loop_payload(title="Mine now"), headers=bob
    )

    assert resp.json()["success"] is False
    assert resp.json()["message"] == "Unauthorized"
    detail = (await client.get(f"/api/loops/slug/{created['slug']}")).json()
    assert detail["title"] == "Best Coffee Shops in Brooklyn"


async def test_delete_status_codes(client, jane, bob, loop_payload):
    created = await _create(client, jane, loop_payload())
    url = f"/api/loops/{created['loop_id']}"

    assert (await client.delete(url)).status_code == 401
    assert (await client.delete(url, headers=bob)).status_code == 403
    assert (await client.delete(url, headers=jane)).status_code == 200
    assert (await client.delete(url, headers=jane)).status_code == 404


async def test_reorder_places_endpoint(client, jane, loop_payload, place):
    created = await _create(client, jane, loop_payload(places=[place("A"), place("B")]))
    places = (await client.get(f"/api/loops/{created['loop_id']}/places")).json()
    ids = [p["id"] for p in places]

    resp = await client.put(
        f"/api/loops/{created['loop_id']}/places/order",
        json={"placeIds": list(reversed(ids))},
        headers=jane,
    )
    assert [p["name"] for p in resp.json()] == ["B", "A"]

    resp = await client.put(
        f"/api/loops/{created['loop_id']}/places/order",
        json={"placeIds": ids[:1]},
        headers=jane,
    )
    assert resp.status_code == 400


async def test_unpublished_loop_is_private(client, jane, bob, loop_payload):
    created = await _create(client, jane, loop_payload(title="Draft", published=False))

    assert (await client.get("/api/loops/slug/draft")).status_code == 404
    assert (await client.get("/api/loops/slug/draft", headers=bob)).status_code == 404
    assert (await client.get("/api/loops/slug/draft", headers=jane)).status_code == 200
    assert (await client.get(f"/api/loops/{created['loop_id']}/edit", headers=bob)).status_code == 403

    search = (await client.get("/api/search/loops", params={"query": "draft"})).json()
    assert search["success"] is True
    assert search["loops"] == []

    board = (await client.get("/api/users/me/loops", headers=jane)).json()
    assert [l["title"] for l in board["loops"]] == ["Draft"]
    assert board["published_loops"] == 0


async def test_like_and_comment_flow(client, jane, bob, loop_payload):
    created = await _create(client, jane, loop_payload())
    loop_id = created["loop_id"]

    liked = (await client.post(f"/api/loops/{loop_id}/like", headers=bob)).json()
    assert (liked["success"], liked["liked"]) == (True, True)

    bob_id = 2  # 가입 순서: jane=1, bob=2
    comment = (await client.post(
        "/api/comments",
        json={"content": "Great route!", "loopId": loop_id, "userId": bob_id},
        headers=bob,
    )).json()
    assert comment["success"] is True
    assert comment["comment"]["user"]["name"] == "Bob Smith"
    comment_id = comment["comment"]["id"]

    toggled = (await client.post(f"/api/comments/{comment_id}/like", headers=jane)).json()
    assert (toggled["liked"], toggled["count"]) == (True, 1)

    listing = (await client.get(f"/api/loops/{loop_id}/comments", headers=jane)).json()
    assert [(c["content"], c["like_count"], c["is_liked"]) for c in listing["comments"]] == [
        ("Great route!", 1, True),
    ]

    denied = (await client.delete(f"/api/comments/{comment_id}", headers=jane)).json()
    assert denied == {"success": False, "message": "Unauthorized", "comment": None}

    removed = (await client.delete(f"/api/comments/{comment_id}", headers=bob)).json()
    assert removed["success"] is True


async def test_like_without_session_reports_failure(client, jane, loop_payload):
    created = await _create(client, jane, loop_payload())
    resp = (await client.post(f"/api/loops/{created['loop_id']}/like")).json()
    assert resp == {"success": False, "liked": False, "message": "Authentication required"}


async def test_search_endpoint_pagination_and_filters(client, jane, loop_payload):
    for title, city in [("Lisbon Trams", "Lisbon"), ("Porto Wine", "Porto"), ("Lisbon Food", "Lisbon")]:
        await _create(client, jane, loop_payload(title=title, city=city, tags=[city.lower()]))

    resp = (await client.get(
        "/api/search/loops", params={"city": "lisbon", "sortBy": "oldest", "limit": 1, "page": 2}
    )).json()
    assert [l["title"] for l in resp["loops"]] == ["Lisbon Food"]
    assert resp["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}

    resp = (await client.get("/api/search/loops", params=[("tags", "porto"), ("tags", "nowhere")])).json()
    assert [l["title"] for l in resp["loops"]] == ["Porto Wine"]

    bad = (await client.get("/api/search/loops", params={"sortBy": "random"})).json()
    assert bad["success"] is False
    assert bad["loops"] == []

    filters = (await client.get("/api/search/filters")).json()
    assert filters["cities"] == ["Lisbon", "Porto"]

    stats = (await client.get("/api/search/stats")).json()
    assert stats["total_loops"] == 3
