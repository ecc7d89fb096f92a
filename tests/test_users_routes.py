# tests/test_users_routes.py
import uuid

from estate_portal.core.security import verify_password
from estate_portal.models.user import Role, User

from conftest import API, login


def test_admin_creates_user(admin_client, db_session) -> None:
    r = admin_client.post(f"{API}/users", json={"name": "  alice ", "password": "pw"})
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["name"] == "alice"
    assert body["role"] == "User"
    assert "password" not in body

    stored = db_session.get(User, uuid.UUID(body["id"]))
    assert stored.password != "pw"
    assert verify_password("pw", stored.password)


def test_admin_creates_admin(admin_client, client) -> None:
    r = admin_client.post(
        f"{API}/users",
        json={"name": "second", "password": "pw", "role": "Admin"},
    )
    assert r.status_code == 201
    assert r.json()["role"] == "Admin"

    login(client, "second", "pw")
    assert client.post(f"{API}/users", json={"name": "third", "password": "pw"}).status_code == 201


def test_create_user_validation(admin_client) -> None:
    assert admin_client.post(f"{API}/users", json={"name": "boss", "password": "x"}).status_code == 409
    assert admin_client.post(f"{API}/users", json={"name": "   ", "password": "x"}).status_code == 422
    assert admin_client.post(f"{API}/users", json={"name": "n", "password": ""}).status_code == 422
    assert (
        admin_client.post(f"{API}/users", json={"name": "n", "password": "x", "role": "Root"}).status_code
        == 422
    )
    assert (
        admin_client.post(f"{API}/users", json={"name": "n", "password": "x", "extra": 1}).status_code
        == 422
    )


def test_user_role_can_read_but_not_write(client, admin_client, make_user) -> None:
    target = make_user("target", "pw")
    make_user("alice", "pw")
    login(client, "alice", "pw")

    r = client.get(f"{API}/users")
    assert r.status_code == 200
    assert {u["name"] for u in r.json()} == {"boss", "target", "alice"}

    assert client.get(f"{API}/users/count").json() == {"count": 3}
    assert client.get(f"{API}/users/{target.id}").json()["name"] == "target"

    denied = [
        client.post(f"{API}/users", json={"name": "x", "password": "y"}),
        client.patch(f"{API}/users/{target.id}", json={"name": "renamed"}),
        client.patch(f"{API}/users/{target.id}/password", json={"password": "new"}),
        client.patch(f"{API}/users/{target.id}/role", json={"role": "Admin"}),
        client.delete(f"{API}/users/{target.id}"),
    ]
    for r in denied:
        assert r.status_code == 403
        assert r.json() == {"detail": "Admin access required"}

    assert client.get(f"{API}/users/count").json() == {"count": 3}
    assert client.get(f"{API}/users/{target.id}").json()["name"] == "target"


def test_anonymous_is_redirected_to_login(client, make_user) -> None:
    target = make_user("target", "pw")

    requests = [
        client.get(f"{API}/users", follow_redirects=False),
        client.get(f"{API}/users/count", follow_redirects=False),
        client.post(f"{API}/users", json={"name": "x", "password": "y"}, follow_redirects=False),
        client.delete(f"{API}/users/{target.id}", follow_redirects=False),
    ]
    for r in requests:
        assert r.status_code == 303
        assert r.headers["location"] == "/login"


def test_rename_user(admin_client, make_user) -> None:
    alice = make_user("alice", "pw")
    make_user("bob", "pw")

    r = admin_client.patch(f"{API}/users/{alice.id}", json={"name": "alicia"})
    assert r.status_code == 200
    assert r.json()["name"] == "alicia"

    r = admin_client.patch(f"{API}/users/{alice.id}", json={"name": "bob"})
    assert r.status_code == 409

    # Renaming to the current name is not a conflict with itself.
    r = admin_client.patch(f"{API}/users/{alice.id}", json={"name": "alicia"})
    assert r.status_code == 200


def test_change_password(admin_client, client, make_user) -> None:
    alice = make_user("alice", "old")

    r = admin_client.patch(f"{API}/users/{alice.id}/password", json={"password": "new"})
    assert r.status_code == 200

    bad = client.post(f"{API}/auth/login", json={"name": "alice", "password": "old"})
    assert bad.status_code == 401
    login(client, "alice", "new")


def test_admin_cannot_demote_or_delete_self(admin_client) -> None:
    me = admin_client.get(f"{API}/auth/me").json()

    r = admin_client.patch(f"{API}/users/{me['id']}/role", json={"role": "User"})
    assert r.status_code == 400

    r = admin_client.delete(f"{API}/users/{me['id']}")
    assert r.status_code == 400

    assert admin_client.get(f"{API}/auth/me").json()["role"] == "Admin"


def test_delete_user(admin_client, make_user) -> None:
    alice = make_user("alice", "pw")
    assert admin_client.get(f"{API}/users/count").json() == {"count": 2}

    r = admin_client.delete(f"{API}/users/{alice.id}")
    assert r.status_code == 204

    assert admin_client.get(f"{API}/users/count").json() == {"count": 1}
    assert admin_client.get(f"{API}/users/{alice.id}").status_code == 404
    assert admin_client.delete(f"{API}/users/{alice.id}").status_code == 404


def test_list_users_pagination(admin_client, make_user) -> None:
    for i in range(3):
        make_user(f"user{i}", "pw", Role.USER)

    r = admin_client.get(f"{API}/users", params={"skip": 1, "limit": 2})
    assert r.status_code == 200
    assert len(r.json()) == 2

    assert admin_client.get(f"{API}/users", params={"limit": 0}).status_code == 422


def test_unencodable_password_is_rejected(admin_client, make_user) -> None:
    alice = make_user("alice", "pw")
    headers = {"content-type": "application/json"}

    r = admin_client.post(
        f"{API}/users",
        content=b'{"name": "carol", "password": "\\ud800"}',
        headers=headers,
    )
    assert r.status_code == 400

    r = admin_client.patch(
        f"{API}/users/{alice.id}/password",
        content=b'{"password": "\\ud800"}',
        headers=headers,
    )
    assert r.status_code == 400

    assert admin_client.get(f"{API}/users/count").json() == {"count": 2}
