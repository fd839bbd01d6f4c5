from conftest import b64, basic_auth


def test_register_user(client):
    r = client.post("/users", json={"email": "bob@dylan.com", "password": "toto1234!"})
    assert r.status_code == 201
    body = r.json()
    assert body["email"] == "bob@dylan.com"
    assert isinstance(body["id"], int)
    assert "password" not in body


def test_register_errors(client):
    assert client.post("/users", json={"password": "x"}).json() == {"error": "Missing email"}
    assert client.post("/users", json={"email": "a@b.c"}).json() == {"error": "Missing password"}
    client.post("/users", json={"email": "a@b.c", "password": "x"})
    r = client.post("/users", json={"email": "a@b.c", "password": "y"})
    assert r.status_code == 400
    assert r.json() == {"error": "Already exist"}


def test_connect_and_disconnect(client, login):
    user_id, token = login()
    r = client.get("/users/me", headers={"X-Token": token})
    assert r.status_code == 200
    assert r.json() == {"id": user_id, "email": "bob@dylan.com"}

    assert client.get("/disconnect", headers={"X-Token": token}).status_code == 204
    assert client.get("/users/me", headers={"X-Token": token}).status_code == 401
    assert client.get("/disconnect", headers={"X-Token": token}).status_code == 401


def test_connect_rejects_bad_password(client, login):
    login()
    r = client.get("/connect", headers={"Authorization": basic_auth("bob@dylan.com", "nope")})
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}
    assert client.get("/connect").status_code == 401


def test_status_and_stats(client, login):
    assert client.get("/status").json() == {"redis": True, "db": True}
    assert client.get("/stats").json() == {"users": 0, "files": 0}

    _, token = login()
    client.post("/files", json={"name": "a", "type": "file", "data": b64(b"x")}, headers={"X-Token": token})
    assert client.get("/stats").json() == {"users": 1, "files": 1}


def test_unknown_route_uses_error_body(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_register_rejects_overlong_email(client):
    r = client.post("/users", json={"email": "a" * 250 + "@b.com", "password": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid email"}
