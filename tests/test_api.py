"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from photo_party.domain.errors import StorageError
from tests.conftest import Services

JPEG_FILE = ("me.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")
PNG_FILE = ("baby.png", b"\x89PNG-bytes", "image/png")


def _register(client: TestClient, name: str, color: str) -> dict[str, object]:
    response = client.post("/api/users/register", json={"name": name, "color": color})
    assert response.status_code == 200
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_full_round(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")
    bea = _register(client, "Bea", "blue")
    assert ana["role"] == "admin"
    assert bea["role"] == "host"
    assert "color" not in bea

    upload = client.post(
        "/api/upload", params={"userId": bea["id"]}, files={"chico": JPEG_FILE}
    )
    assert upload.json() == {"ok": True, "added": 1, "tipos": ["chico"]}
    photo_id = client.get("/api/photos/mine", params={"userId": bea["id"]}).json()[
        "photos"
    ][0]["id"]

    start = client.post("/api/game/start", params={"userId": ana["id"]})
    assert start.json() == {"ok": True, "total": 1}

    image = client.get(f"/api/image/{photo_id}", params={"userId": ana["id"]})
    assert image.status_code == 200
    assert image.content == JPEG_FILE[1]
    assert image.headers["content-type"] == "image/jpeg"

    first = client.get("/api/game/next", params={"userId": ana["id"]})
    assert first.json() == {"done": False, "photoId": photo_id, "remaining": 0}
    second = client.get("/api/game/next", params={"userId": ana["id"]})
    assert second.json() == {"done": True, "message": "Game Over"}

    status = client.get("/api/game/status", params={"userId": ana["id"]})
    assert status.json() == {"status": "finished", "index": 1, "total": 1}


def test_register_duplicate_is_conflict(client: TestClient) -> None:
    _register(client, "Ana", "red")

    response = client.post("/api/users/register", json={"name": "ANA", "color": "x"})

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


def test_register_requires_fields(client: TestClient) -> None:
    response = client.post("/api/users/register", json={"name": "Ana"})

    assert response.status_code == 400
    assert response.json() == {"error": "validation", "message": "color required"}


def test_login_and_lookups(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")

    assert client.post(
        "/api/users/login", json={"name": "ana", "color": "red"}
    ).json() == ana
    assert client.post(
        "/api/users/login", json={"name": "ana", "color": "RED"}
    ).status_code == 400
    assert client.post(
        "/api/users/login", json={"name": "bea", "color": "red"}
    ).status_code == 404
    assert client.get("/api/users/by-name", params={"name": "ANA"}).json() == ana
    assert client.get(f"/api/users/{ana['id']}").json() == ana
    assert client.get("/api/users/42").status_code == 404
    assert client.get("/api/users").json() == {"users": [ana]}


def test_third_upload_exceeds_quota(client: TestClient, services: Services) -> None:
    _register(client, "Ana", "red")
    bea = _register(client, "Bea", "blue")
    client.post(
        "/api/upload",
        params={"userId": bea["id"]},
        files={"chico": JPEG_FILE, "vergonzosa": PNG_FILE},
    )

    response = client.post(
        "/api/upload", params={"userId": bea["id"]}, files={"chico": JPEG_FILE}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "quota_exceeded"
    assert services.photo_repository.count_photos_by_owner(bea["id"]) == 2


def test_upload_rejects_unsupported_media_type(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")

    response = client.post(
        "/api/upload",
        params={"userId": ana["id"]},
        files={"chico": ("a.gif", b"GIF89a", "image/gif")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only jpg/png/webp allowed"


def test_upload_without_files_or_caller(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")

    no_files = client.post("/api/upload", params={"userId": ana["id"]})
    no_caller = client.post("/api/upload", files={"chico": JPEG_FILE})
    bad_caller = client.post(
        "/api/upload", params={"userId": "abc"}, files={"chico": JPEG_FILE}
    )

    assert no_files.status_code == 400
    assert no_files.json()["message"] == "no files"
    assert no_caller.status_code == 400
    assert no_caller.json()["message"] == "userId required"
    assert bad_caller.status_code == 400
    assert bad_caller.json()["error"] == "validation"


def test_game_endpoints_are_admin_only(client: TestClient) -> None:
    _register(client, "Ana", "red")
    bea = _register(client, "Bea", "blue")

    for method, path in [
        ("POST", "/api/game/start"),
        ("GET", "/api/game/next"),
        ("GET", "/api/game/status"),
        ("GET", "/api/photos"),
        ("DELETE", "/api/photos"),
    ]:
        response = client.request(method, path, params={"userId": bea["id"]})
        assert response.status_code == 403, path
        assert response.json()["error"] == "forbidden"
    assert client.get("/api/game/status", params={"userId": 99}).status_code == 404


def test_image_requires_running_game(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")
    client.post("/api/upload", params={"userId": ana["id"]}, files={"chico": JPEG_FILE})

    response = client.get("/api/image/1", params={"userId": ana["id"]})

    assert response.status_code == 403


def test_image_missing_file_is_gone(client: TestClient, services: Services) -> None:
    ana = _register(client, "Ana", "red")
    client.post("/api/upload", params={"userId": ana["id"]}, files={"chico": JPEG_FILE})
    client.post("/api/game/start", params={"userId": ana["id"]})
    services.storage.files.clear()

    gone = client.get("/api/image/1", params={"userId": ana["id"]})
    unknown = client.get("/api/image/2", params={"userId": ana["id"]})

    assert gone.status_code == 410
    assert gone.json()["error"] == "gone"
    assert unknown.status_code == 404


def test_delete_photo_endpoints(client: TestClient) -> None:
    ana = _register(client, "Ana", "red")
    bea = _register(client, "Bea", "blue")
    caro = _register(client, "Caro", "green")
    client.post(
        "/api/upload",
        params={"userId": bea["id"]},
        files={"chico": JPEG_FILE, "vergonzosa": PNG_FILE},
    )

    forbidden = client.delete("/api/photos/1", params={"userId": caro["id"]})
    own = client.delete("/api/photos/1", params={"userId": bea["id"]})
    missing = client.delete("/api/photos/1", params={"userId": bea["id"]})
    listing = client.get("/api/photos", params={"userId": ana["id"]})
    bulk = client.delete("/api/photos", params={"userId": ana["id"]})

    assert forbidden.status_code == 403
    assert own.json() == {"ok": True, "deletedId": 1}
    assert missing.status_code == 404
    assert [photo["id"] for photo in listing.json()["photos"]] == [2]
    assert listing.json()["photos"][0]["tipo"] == "vergonzosa"
    assert bulk.json() == {"ok": True, "deleted": 1}


def test_storage_errors_are_opaque(client: TestClient, services: Services) -> None:
    ana = _register(client, "Ana", "red")

    def broken_save(content: bytes, media_type: str) -> str:
        raise StorageError("disk exploded")

    services.storage.save = broken_save  # type: ignore[method-assign]

    response = client.post(
        "/api/upload", params={"userId": ana["id"]}, files={"chico": JPEG_FILE}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "storage", "message": "internal error"}
