"""API tests for /api/requests."""


def _login(client, username, password):
    assert client.post("/api/auth/login", data={"username": username, "password": password}).status_code == 200


def _item(client, code):
    return client.post("/api/items", json={"code": code, "name": code}).json()["id"]


def _request(client, **extra):
    body = {"type": "other", "title": "New monitor", **extra}
    res = client.post("/api/requests", json=body)
    assert res.status_code == 201
    return res.json()


def test_assignment_request_end_to_end(client):
    item_id = _item(client, "Q-001")
    _login(client, "viewer", "viewer123")
    req = _request(client, type="assignment", item_id=item_id, priority="urgent")
    assert req["status"] == "pending"
    assert req["user_id"] == 2

    _login(client, "admin", "admin123")
    assert [r["id"] for r in client.get("/api/requests/high-priority").json()] == [req["id"]]
    assert client.post(f"/api/requests/{req['id']}/review").json()["status"] == "under_review"
    res = client.post(f"/api/requests/{req['id']}/approve", json={"review_notes": "OK"})
    assert res.status_code == 200
    assert res.json()["status"] == "completed"

    assignments = client.get(f"/api/assignments?item_id={item_id}").json()["items"]
    assert len(assignments) == 1
    assert assignments[0]["user_id"] == 2
    assert client.get(f"/api/items/{item_id}").json()["status"] == "assigned"


def test_invalid_transition_conflict(client):
    req = _request(client)
    client.post(f"/api/requests/{req['id']}/reject", json={"reason": "No"})
    res = client.post(f"/api/requests/{req['id']}/approve", json={})
    assert res.status_code == 409
    assert "Invalid status transition from 'rejected' to 'approved'" in res.json()["detail"]


def test_reject_and_changes_need_text(client):
    req = _request(client)
    assert client.post(f"/api/requests/{req['id']}/reject", json={"reason": ""}).status_code == 422
    assert client.post(f"/api/requests/{req['id']}/request-changes", json={}).status_code == 422


def test_changes_requested_round_trip(client):
    _login(client, "viewer", "viewer123")
    req = _request(client)
    _login(client, "admin", "admin123")
    client.post(f"/api/requests/{req['id']}/request-changes", json={"notes": "Which size?"})

    _login(client, "viewer", "viewer123")
    res = client.put(f"/api/requests/{req['id']}", json={"description": "27 inch"})
    assert res.status_code == 200
    res = client.post(f"/api/requests/{req['id']}/resubmit")
    assert res.json()["status"] == "pending"


def test_update_rejects_null_title(client):
    req = _request(client)
    assert client.put(f"/api/requests/{req['id']}", json={"title": None}).status_code == 422


def test_users_see_only_their_requests(client):
    _request(client, title="Admin request")
    _login(client, "viewer", "viewer123")
    mine = _request(client, title="Viewer request")

    listing = client.get("/api/requests").json()
    assert [r["id"] for r in listing["items"]] == [mine["id"]]
    assert client.get(f"/api/requests/{mine['id'] - 1}").status_code == 403
    assert client.post(f"/api/requests/{mine['id']}/approve", json={}).status_code == 403


def test_detail_includes_comments_and_next_states(client):
    _login(client, "viewer", "viewer123")
    req = _request(client)
    assert client.post(f"/api/requests/{req['id']}/comments", json={"comment": "Urgent please"}).status_code == 201
    assert client.post(f"/api/requests/{req['id']}/comments",
                       json={"comment": "x", "is_internal": True}).status_code == 403

    _login(client, "admin", "admin123")
    client.post(f"/api/requests/{req['id']}/comments", json={"comment": "Low stock", "is_internal": True})
    detail = client.get(f"/api/requests/{req['id']}").json()
    assert [c["comment"] for c in detail["comments"]] == ["Urgent please", "Low stock"]
    assert "under_review" in detail["next_states"]

    _login(client, "viewer", "viewer123")
    detail = client.get(f"/api/requests/{req['id']}").json()
    assert [c["comment"] for c in detail["comments"]] == ["Urgent please"]


def test_cancel_and_stats(client):
    req = _request(client)
    _request(client, priority="high")
    res = client.post(f"/api/requests/{req['id']}/cancel", json={"reason": "Duplicate"})
    assert res.json()["status"] == "cancelled"
    assert client.post(f"/api/requests/{req['id']}/cancel", json={}).status_code == 409

    stats = client.get("/api/requests/stats").json()
    assert stats["total"] == 2
    assert stats["cancelled"] == 1
    assert stats["high_priority"] == 1


def test_delete_request(client):
    req = _request(client)
    assert client.delete(f"/api/requests/{req['id']}").status_code == 204
    assert client.get(f"/api/requests/{req['id']}").status_code == 404
