# tests/test_estates_routes.py
import uuid

from fastapi.testclient import TestClient

from estate_portal.core.storage_utils import extract_path_from_public_url
from estate_portal.main import create_app
from estate_portal.models.user import Role
from estate_portal.services.estate_service import MAX_IMAGE_BYTES

from conftest import API, login, make_settings

PNG = b"\x89PNG\r\n\x1a\nfake-image"

ESTATE = {
    "name": "Villa Sole",
    "address": "Via Roma 1, Napoli",
    "description": "Sea view",
    "price_in_cents": 45_000_000,
    "space_in_meters": 180,
}


def create_estate(admin_client, **overrides) -> dict:
    r = admin_client.post(f"{API}/estates", json={**ESTATE, **overrides})
    assert r.status_code == 201, r.text
    return r.json()


def upload(admin_client, estate_id, content=PNG, content_type="image/png"):
    return admin_client.post(
        f"{API}/estates/{estate_id}/image",
        files={"file": ("photo.png", content, content_type)},
    )


def test_public_catalog(admin_client, client) -> None:
    first = create_estate(admin_client, name="First")
    second = create_estate(admin_client, name="Second")

    r = client.get(f"{API}/estates")
    assert r.status_code == 200
    assert {e["id"] for e in r.json()} == {first["id"], second["id"]}

    r = client.get(f"{API}/estates/{first['id']}")
    assert r.status_code == 200
    assert r.json()["price_in_cents"] == 45_000_000

    assert client.get(f"{API}/estates/{uuid.uuid4()}").status_code == 404


def test_count_requires_login(admin_client, client) -> None:
    create_estate(admin_client)

    r = client.get(f"{API}/estates/count", follow_redirects=False)
    assert r.status_code == 303

    assert admin_client.get(f"{API}/estates/count").json() == {"count": 1}


def test_create_validation(admin_client) -> None:
    bad = [
        {**ESTATE, "price_in_cents": -1},
        {**ESTATE, "space_in_meters": 0},
        {**ESTATE, "name": "  "},
        {**ESTATE, "unknown": True},
        {k: v for k, v in ESTATE.items() if k != "address"},
    ]
    for payload in bad:
        assert admin_client.post(f"{API}/estates", json=payload).status_code == 422


def test_partial_update(admin_client) -> None:
    estate = create_estate(admin_client)

    r = admin_client.patch(f"{API}/estates/{estate['id']}", json={"price_in_cents": 1})
    assert r.status_code == 200
    body = r.json()
    assert body["price_in_cents"] == 1
    assert body["name"] == ESTATE["name"]
    assert body["space_in_meters"] == ESTATE["space_in_meters"]

    assert admin_client.patch(f"{API}/estates/{uuid.uuid4()}", json={"name": "x"}).status_code == 404


def test_writes_need_admin(admin_client, client, make_user) -> None:
    estate = create_estate(admin_client)

    r = client.post(f"{API}/estates", json=ESTATE, follow_redirects=False)
    assert r.status_code == 303

    make_user("alice", "pw", Role.USER)
    login(client, "alice", "pw")

    assert client.post(f"{API}/estates", json=ESTATE).status_code == 403
    assert client.patch(f"{API}/estates/{estate['id']}", json={"name": "x"}).status_code == 403
    assert client.delete(f"{API}/estates/{estate['id']}").status_code == 403
    assert upload(client, estate["id"]).status_code == 403

    assert client.get(f"{API}/estates/count").json() == {"count": 1}


def test_upload_and_replace_image(admin_client, fake_supabase) -> None:
    estate = create_estate(admin_client)
    objects = fake_supabase.storage.objects

    r = upload(admin_client, estate["id"])
    assert r.status_code == 200, r.text
    first_url = r.json()["image_url"]
    first_path = extract_path_from_public_url(first_url, "assets")
    assert first_path.startswith(f"estates/{estate['id']}/")
    assert first_path.endswith(".png")
    assert objects[first_path] == PNG

    r = upload(admin_client, estate["id"], content=b"jpeg-bytes", content_type="image/jpeg")
    assert r.status_code == 200
    second_path = extract_path_from_public_url(r.json()["image_url"], "assets")

    assert second_path.endswith(".jpg")
    assert first_path not in objects
    assert objects == {second_path: b"jpeg-bytes"}


def test_upload_rejects_bad_files(admin_client, fake_supabase) -> None:
    estate = create_estate(admin_client)

    r = upload(admin_client, estate["id"], content=b"%PDF", content_type="application/pdf")
    assert r.status_code == 400

    r = upload(admin_client, estate["id"], content=b"")
    assert r.status_code == 400

    r = upload(admin_client, estate["id"], content=b"0" * (MAX_IMAGE_BYTES + 1))
    assert r.status_code == 413

    assert upload(admin_client, uuid.uuid4()).status_code == 404
    assert fake_supabase.storage.objects == {}


def test_delete_estate_removes_image(admin_client, client, fake_supabase) -> None:
    estate = create_estate(admin_client)
    upload(admin_client, estate["id"])
    assert len(fake_supabase.storage.objects) == 1

    assert admin_client.delete(f"{API}/estates/{estate['id']}").status_code == 204

    assert fake_supabase.storage.objects == {}
    assert client.get(f"{API}/estates/{estate['id']}").status_code == 404
    assert admin_client.delete(f"{API}/estates/{estate['id']}").status_code == 404


def test_delete_estate_keeps_external_image(admin_client, fake_supabase) -> None:
    estate = create_estate(admin_client, image_url="https://cdn.example.com/villa.jpg")
    fake_supabase.storage.objects["unrelated.png"] = PNG

    assert admin_client.delete(f"{API}/estates/{estate['id']}").status_code == 204
    assert fake_supabase.storage.objects == {"unrelated.png": PNG}


def test_upload_without_storage_is_503() -> None:
    app = create_app(make_settings(ADMIN_BOOTSTRAP_NAME="root", ADMIN_BOOTSTRAP_PASSWORD="toor"))

    with TestClient(app) as c:
        login(c, "root", "toor")
        estate = create_estate(c)

        r = upload(c, estate["id"])
        assert r.status_code == 503
        assert r.json() == {"detail": "Image storage is not configured"}

        # Deleting still works without storage.
        assert c.delete(f"{API}/estates/{estate['id']}").status_code == 204


def test_extract_path_from_public_url() -> None:
    url = "https://p.supabase.co/storage/v1/object/public/assets/estates/e/x.png?"
    assert extract_path_from_public_url(url, "assets") == "estates/e/x.png"
    assert extract_path_from_public_url(url, "other") is None
    assert extract_path_from_public_url("https://cdn.example.com/x.png", "assets") is None


def test_update_can_clear_optional_fields(admin_client) -> None:
    estate = create_estate(admin_client, image_url="https://cdn.example.com/villa.jpg")

    r = admin_client.patch(
        f"{API}/estates/{estate['id']}",
        json={"description": None, "image_url": None},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["description"] is None
    assert body["image_url"] is None
    assert body["name"] == ESTATE["name"]

    for field in ("name", "address", "price_in_cents", "space_in_meters"):
        r = admin_client.patch(f"{API}/estates/{estate['id']}", json={field: None})
        assert r.status_code == 422, field


def test_clearing_image_url_deletes_stored_image(admin_client, fake_supabase) -> None:
    estate = create_estate(admin_client)
    upload(admin_client, estate["id"])
    assert len(fake_supabase.storage.objects) == 1

    r = admin_client.patch(f"{API}/estates/{estate['id']}", json={"image_url": None})
    assert r.status_code == 200
    assert r.json()["image_url"] is None
    assert fake_supabase.storage.objects == {}
