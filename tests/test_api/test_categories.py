"""API tests for /api/categories."""


def _category(client, code, name=None):
    res = client.post("/api/categories", json={"code": code, "name": name or code.title()})
    assert res.status_code == 201
    return res.json()


def _item_in(client, code, category_id):
    res = client.post("/api/items", json={"code": code, "name": code, "category_id": category_id})
    assert res.status_code == 201
    return res.json()


def test_create_category(client):
    res = client.post("/api/categories", json={"code": "it ", "name": "IT Equipment"})
    assert res.status_code == 201
    assert res.json()["code"] == "IT"
    assert client.post("/api/categories", json={"code": "IT", "name": "Again"}).status_code == 409


def test_item_shows_category_name(client):
    cat = _category(client, "FUR", "Furniture")
    item = _item_in(client, "CHAIR-1", cat["id"])
    assert item["category_name"] == "Furniture"
    assert client.post("/api/items", json={"code": "X", "name": "X", "category_id": 999}).status_code == 404


def test_delete_refused_with_items(client):
    cat = _category(client, "VEH")
    _item_in(client, "CAR-1", cat["id"])
    res = client.delete(f"/api/categories/{cat['id']}")
    assert res.status_code == 409
    assert "has associated items" in res.json()["detail"]


def test_soft_delete_and_restore(client):
    cat = _category(client, "OLD")
    assert client.delete(f"/api/categories/{cat['id']}").json()["deleted_at"] is not None
    assert client.get(f"/api/categories/{cat['id']}").status_code == 404
    assert client.post(f"/api/categories/{cat['id']}/restore").json()["deleted_at"] is None
    assert client.post(f"/api/categories/{cat['id']}/restore").status_code == 409


def test_deactivate_refused_with_items_in_service(client):
    cat = _category(client, "TOOLS")
    _item_in(client, "DRILL-1", cat["id"])
    assert client.put(f"/api/categories/{cat['id']}", json={"is_active": False}).status_code == 409


def test_update_rejects_null_name(client):
    cat = _category(client, "NUL")
    assert client.put(f"/api/categories/{cat['id']}", json={"name": None}).status_code == 422


def test_reassign_then_purge(client):
    source = _category(client, "SRC")
    target = _category(client, "DST")
    item = _item_in(client, "MOVE-1", source["id"])

    res = client.post(f"/api/categories/{source['id']}/reassign", json={"to_category_id": target["id"]})
    assert res.json()["moved"] == 1
    assert client.get(f"/api/items/{item['id']}").json()["category_id"] == target["id"]
    assert client.delete(f"/api/categories/{source['id']}/permanent").status_code == 204
    assert client.delete(f"/api/categories/{target['id']}/permanent").status_code == 409


def test_search_and_stats(client):
    used = _category(client, "IT", "IT Equipment")
    _category(client, "FUR", "Furniture")
    gone = _category(client, "TMP")
    _item_in(client, "LAPTOP-1", used["id"])
    client.delete(f"/api/categories/{gone['id']}")

    assert [c["code"] for c in client.get("/api/categories?search=equip").json()["items"]] == ["IT"]
    assert [c["code"] for c in client.get("/api/categories/active").json()] == ["FUR", "IT"]
    assert client.get("/api/categories/stats").json() == {
        "total": 2, "active": 2, "inactive": 0, "deleted": 1, "with_items": 1, "empty": 1,
    }
