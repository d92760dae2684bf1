from fastapi.testclient import TestClient


def _create(client, headers, title):
    r = client.post("/manage-todo", json={"title": title}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["data"]


def test_create_list_get_delete(client: TestClient, make_user):
    _, user_id, headers = make_user()

    r = client.post("/manage-todo", json={"title": "Buy milk"}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == 200
    assert body["message"] == "New Todo Created"
    task = body["data"]
    assert task["title"] == "Buy milk"
    assert task["status"] is False
    assert task["attachments"] == []
    assert "user_id" not in task

    _create(client, headers, "Walk dog")

    r = client.get("/manage-todos", headers=headers)
    assert r.status_code == 200
    listing = r.json()
    assert listing["user_id"] == user_id
    assert listing["data"] == 2
    assert {t["title"] for t in listing["todos"]} == {"Buy milk", "Walk dog"}

    r = client.get(f"/manage-todo/todo/{task['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Buy milk"

    r = client.delete(f"/manage-todo/todo/{task['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"status": 200, "message": "Success Delete"}

    assert client.get(f"/manage-todo/todo/{task['id']}", headers=headers).status_code == 404


def test_title_validation(client: TestClient, make_user):
    _, _, headers = make_user()
    assert client.post("/manage-todo", json={}, headers=headers).status_code == 400
    assert client.post("/manage-todo", json={"title": ""}, headers=headers).status_code == 400
    assert client.post("/manage-todo", json={"title": "   "}, headers=headers).status_code == 400
    assert client.post("/manage-todo", json={"title": "x"}, headers=headers).status_code == 400
    assert client.post("/manage-todo", json={"title": "x" * 301}, headers=headers).status_code == 400
    assert client.post("/manage-todo", json={"title": "ok"}, headers=headers).status_code == 200


def test_tenant_isolation(client: TestClient, make_user):
    _, _, alice = make_user("alice")
    _, _, bob = make_user("bob")
    task = _create(client, alice, "Buy milk")

    r = client.get(f"/manage-todo/todo/{task['id']}", headers=bob)
    assert r.status_code == 404
    assert "Buy milk" not in r.text

    r = client.put(f"/manage-todo/todo/{task['id']}", json={"title": "hacked", "status": True}, headers=bob)
    assert r.status_code == 404

    r = client.delete(f"/manage-todo/todo/{task['id']}", headers=bob)
    assert r.status_code == 404

    assert client.get("/manage-todos", headers=bob).json()["todos"] == []

    # alice's task is untouched
    r = client.get(f"/manage-todo/todo/{task['id']}", headers=alice)
    assert r.json()["data"]["title"] == "Buy milk"
    assert r.json()["data"]["status"] is False


def test_update_is_partial_for_title_but_always_writes_status(client: TestClient, make_user):
    _, _, headers = make_user()
    task = _create(client, headers, "Buy milk")
    url = f"/manage-todo/todo/{task['id']}"

    r = client.put(url, json={"title": "Buy oat milk", "status": True}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"] == {**task, "title": "Buy oat milk", "status": True}

    # empty title: title kept, status written
    r = client.put(url, json={"title": "", "status": True}, headers=headers)
    assert r.json()["data"]["title"] == "Buy oat milk"
    assert r.json()["data"]["status"] is True

    # status omitted: written as false
    r = client.put(url, json={"title": "Buy soy milk"}, headers=headers)
    assert r.json()["data"]["title"] == "Buy soy milk"
    assert r.json()["data"]["status"] is False


def test_update_missing_task(client: TestClient, make_user):
    _, _, headers = make_user()
    r = client.put("/manage-todo/todo/9999", json={"title": "nope"}, headers=headers)
    assert r.status_code == 404


def test_delete_twice_is_not_found(client: TestClient, make_user):
    _, _, headers = make_user()
    task = _create(client, headers, "Once")
    assert client.delete(f"/manage-todo/todo/{task['id']}", headers=headers).status_code == 200
    r = client.delete(f"/manage-todo/todo/{task['id']}", headers=headers)
    assert r.status_code == 404
    assert r.json()["status"] == 404


def test_unparsable_id_is_bad_request(client: TestClient, make_user):
    _, _, headers = make_user()
    assert client.get("/manage-todo/todo/abc", headers=headers).status_code == 400
    assert client.put("/manage-todo/todo/abc", json={"title": "x"}, headers=headers).status_code == 400
    assert client.delete("/manage-todo/todo/abc", headers=headers).status_code == 400


def test_search_paginates_and_counts_all_matches(client: TestClient, make_user):
    _, _, headers = make_user()
    _, _, other = make_user()
    for i in range(7):
        _create(client, headers, f"report {i}")
    _create(client, headers, "groceries")
    _create(client, other, "report from someone else")

    r = client.get("/list-Search", params={"search": "report", "page": 1, "per_page": 3}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 7
    assert body["pages"] == 3
    assert [t["title"] for t in body["data"]] == ["report 0", "report 1", "report 2"]

    r = client.get("/list-Search", params={"search": "report", "page": 3, "per_page": 3}, headers=headers)
    assert [t["title"] for t in r.json()["data"]] == ["report 6"]
    assert r.json()["total"] == 7

    r = client.get("/list-Search", params={"search": "report", "page": 9, "per_page": 3}, headers=headers)
    assert r.json()["data"] == []
    assert r.json()["total"] == 7


def test_search_defaults(client: TestClient, make_user):
    _, _, headers = make_user()
    for i in range(12):
        _create(client, headers, f"task {i}")

    r = client.get("/list-Search", headers=headers)
    body = r.json()
    assert body["page"] == 1 and body["per_page"] == 10
    assert len(body["data"]) == 10
    assert body["total"] == 12

    r = client.get("/list-Search", params={"page": 0, "per_page": -1}, headers=headers)
    assert r.json()["page"] == 1 and r.json()["per_page"] == 10


def test_search_requires_token(client: TestClient):
    assert client.get("/list-Search").status_code == 401
