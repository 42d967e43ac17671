from pathlib import Path

from fastapi.testclient import TestClient

from blog_server.infrastructure.storage import PostStore
from blog_server.main import create_app

PNG = ("banner.png", b"\x89PNG\r\n\x1a\nfake", "image/png")


def _create(client, title: str = "Hello", description: str = "World", banner=PNG):
    return client.post(
        "/api/posts",
        data={"title": title, "description": description},
        files={"banner_image": banner},
    )


def test_health(client) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_view_post(client, uploads_dir: Path) -> None:
    response = _create(client)
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["title"] == "Hello"
    assert body["description"] == "World"
    assert (uploads_dir / body["banner"]).exists()
    assert body["banner_url"] == f"/uploads/{body['banner']}"

    fetched = client.get("/api/posts/1")
    assert fetched.status_code == 200
    assert fetched.json()["banner"] == body["banner"]


def test_list_posts(client) -> None:
    _create(client, "First")
    _create(client, "Second")

    response = client.get("/api/posts")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["last_id"] == 2
    assert [post["title"] for post in body["posts"]] == ["First", "Second"]


def test_latest_posts_newest_first(client) -> None:
    for title in ("a", "b", "c", "d", "e"):
        _create(client, title)

    body = client.get("/api/posts/latest").json()
    assert [post["title"] for post in body["posts"]] == ["e", "d", "c", "b"]

    body = client.get("/api/posts/latest", params={"limit": 2}).json()
    assert [post["title"] for post in body["posts"]] == ["e", "d"]


def test_create_rejects_empty_title(client, uploads_dir: Path) -> None:
    response = _create(client, title="  ")
    assert response.status_code == 400
    assert list(uploads_dir.iterdir()) == []


def test_create_rejects_non_image(client, store: PostStore, uploads_dir: Path) -> None:
    response = _create(client, banner=("notes.txt", b"hello", "text/plain"))
    assert response.status_code == 415
    assert store.list_posts() == []
    assert list(uploads_dir.iterdir()) == []


def test_get_unknown_and_malformed_ids(client) -> None:
    assert client.get("/api/posts/99").status_code == 404
    assert client.get("/api/posts/abc").status_code == 400
    assert client.get("/api/posts/0").status_code == 400
    assert client.get("/api/posts/" + "9" * 5000).status_code == 400


def test_update_without_new_banner_keeps_existing(client, store: PostStore) -> None:
    created = _create(client).json()
    created_at = store.get(1).date

    response = client.put("/api/posts/1", data={"title": "Edited", "description": "Changed"})
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["title"] == "Edited"
    assert body["description"] == "Changed"
    assert body["banner"] == created["banner"]
    assert store.get(1).date > created_at


def test_update_with_new_banner(client, uploads_dir: Path) -> None:
    created = _create(client).json()

    response = client.put(
        "/api/posts/1",
        data={"title": "Edited", "description": ""},
        files={"banner_image": ("new.jpg", b"\xff\xd8\xffjpeg", "image/jpeg")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["banner"] != created["banner"]
    assert body["banner"].endswith(".jpg")
    assert (uploads_dir / body["banner"]).exists()


def test_update_unknown_post_discards_upload(client, uploads_dir: Path) -> None:
    response = client.put(
        "/api/posts/5",
        data={"title": "x", "description": "y"},
        files={"banner_image": PNG},
    )
    assert response.status_code == 404
    assert list(uploads_dir.iterdir()) == []


def test_delete_post_removes_banner(client, uploads_dir: Path) -> None:
    created = _create(client).json()

    response = client.delete("/api/posts/1")
    assert response.status_code == 204
    assert not (uploads_dir / created["banner"]).exists()
    assert client.get("/api/posts/1").status_code == 404
    assert client.delete("/api/posts/1").status_code == 404


def test_delete_with_missing_banner_still_succeeds(client, uploads_dir: Path) -> None:
    created = _create(client).json()
    (uploads_dir / created["banner"]).unlink()

    assert client.delete("/api/posts/1").status_code == 204
    assert client.get("/api/posts").json()["total"] == 0


def test_save_failure_is_reported(client, store: PostStore, monkeypatch) -> None:
    _create(client)

    def interrupted_replace(self, target):
        raise OSError("read-only file system")

    monkeypatch.setattr(Path, "replace", interrupted_replace)
    response = client.put("/api/posts/1", data={"title": "Edited", "description": ""})
    monkeypatch.undo()

    assert response.status_code == 500
    assert store.get(1).title == "Hello"


def test_uploads_served_from_configured_directory(client) -> None:
    created = _create(client).json()

    response = client.get(created["banner_url"])
    assert response.status_code == 200
    assert response.content == PNG[1]


def test_startup_prepares_storage_and_clears_unfinished_writes(settings, store: PostStore, posts_file: Path) -> None:
    store.create("kept")
    stale = posts_file.parent / f".{posts_file.name}.crashed.tmp"
    stale.write_text("{", encoding="utf-8")
    store.banners.root.rmdir()

    with TestClient(create_app(settings, store)) as client:
        assert client.get("/api/posts").json()["total"] == 1

    assert not stale.exists()
    assert store.banners.root.is_dir()
