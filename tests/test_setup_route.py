from models import AdminUser, db
from security.password import verify_password


def _setup(client, username="admin", password="Secret1!"):
    return client.post("/api/admin/setup", json={"username": username, "password": password})


def test_setup_creates_admin(client):
    r = _setup(client)
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True

    account = db.session.get(AdminUser, body["id"])
    assert account.username == "admin"
    assert account.failed_login_attempts == 0
    assert verify_password("Secret1!", account.password_hash)
    assert not verify_password("Secret2!", account.password_hash)


def test_setup_is_not_idempotent(client):
    assert _setup(client).status_code == 201
    r = _setup(client, password="Another1!")
    assert r.status_code == 409

    account = db.session.query(AdminUser).filter_by(username="admin").one()
    assert verify_password("Secret1!", account.password_hash)
    assert not verify_password("Another1!", account.password_hash)


def test_setup_rejects_weak_password(client):
    r = _setup(client, password="weak")
    assert r.status_code == 400
    body = r.get_json()
    assert body["error"] == "Password validation failed"
    assert len(body["details"]) >= 3
    assert db.session.query(AdminUser).count() == 0


def test_setup_rejects_bad_username(client):
    r = _setup(client, username="no spaces allowed")
    assert r.status_code == 400
    assert "Username" in r.get_json()["error"]


def test_setup_requires_fields(client):
    r = client.post("/api/admin/setup", json={})
    assert r.status_code == 400


def test_setup_without_database(env_client):
    r = _setup(env_client)
    assert r.status_code == 503
    assert "Database not configured" in r.get_json()["error"]


def test_new_admin_can_log_in(client):
    _setup(client)
    r = client.post("/api/admin/auth", json={"username": "admin", "password": "Secret1!"})
    assert r.status_code == 200
