from datetime import timedelta

from app.models import MediaFile
from app.models.media import utcnow


def test_verify_missing_media(client):
    response = client.get("/api/media/12345/verify")
    assert response.status_code == 200
    data = response.json()
    assert data["databaseExists"] is False
    assert data["fileSystemExists"] is False
    assert data["status"] == "missing"
    assert data["statusLabel"] == "Not Found"


def test_verify_folder_missing(client, library_roots, make_media):
    movie = make_media(title="Inception", year=2010)

    data = client.get(f"/api/media/{movie.id}/verify").json()
    assert data["databaseExists"] is True
    assert data["fileSystemExists"] is False
    assert data["status"] == "file-missing"
    assert data["statusLabel"] == "Files Missing"
    assert data["filePath"] == str(library_roots["movie"] / "Inception (2010)")
    assert data["media"]["title"] == "Inception"


def test_verify_folder_present(client, library_roots, make_media):
    (library_roots["tv"] / "Dark (2017)").mkdir()
    show = make_media(title="Dark", media_type="tv", year=2017)

    data = client.get(f"/api/media/{show.id}/verify").json()
    assert data["status"] == "verified"
    assert data["statusLabel"] == "Verified"
    assert data["fileSystemExists"] is True


def test_verify_uses_recorded_path(client, db, tmp_path, library_roots, make_media):
    elsewhere = tmp_path / "archive" / "inception-1080p"
    elsewhere.mkdir(parents=True)
    movie = make_media(title="Inception", year=2010)
    db.add(MediaFile(media_id=movie.id, file_path=str(elsewhere)))
    db.commit()

    data = client.get(f"/api/media/{movie.id}/verify").json()
    assert data["status"] == "verified"
    assert data["filePath"] == str(elsewhere)


def test_verify_shared_root_fallback(client, tmp_path, monkeypatch, make_media):
    from app.config import settings

    shared = tmp_path / "media"
    (shared / "Inception (2010)").mkdir(parents=True)
    monkeypatch.setattr(settings, "media_library_path", shared)
    monkeypatch.setattr(settings, "movies_library_path", None)
    monkeypatch.setattr(settings, "tv_library_path", None)

    movie = make_media(title="Inception", year=2010)
    assert client.get(f"/api/media/{movie.id}/verify").json()["status"] == "verified"


def test_verify_without_library_root(client, no_library_roots, make_media):
    movie = make_media()

    data = client.get(f"/api/media/{movie.id}/verify").json()
    assert data["status"] == "file-missing"
    assert data["filePath"] is None


def test_verify_recent_window(client, library_roots, make_media):
    now = utcnow()
    (library_roots["movie"] / "Inception (2010)").mkdir()
    make_media(title="Inception", year=2010, date_added=now - timedelta(hours=1))
    make_media(title="Tenet", year=2020, date_added=now - timedelta(hours=2))
    make_media(title="Memento", year=2000, date_added=now - timedelta(hours=30))

    data = client.get("/api/media/verify-recent").json()
    assert data["totalChecked"] == 2
    assert data["verified"] == 1
    assert data["issues"] == 1
    assert data["totalChecked"] == data["verified"] + data["issues"]

    by_title = {r["title"]: r for r in data["results"]}
    assert set(by_title) == {"Inception", "Tenet"}
    assert by_title["Inception"]["status"] == "verified"
    assert by_title["Tenet"]["status"] == "file-missing"
    assert by_title["Tenet"]["statusLabel"] == "Files Missing"

    wider = client.get("/api/media/verify-recent", params={"hours": 48}).json()
    assert wider["totalChecked"] == 3
    assert [r["title"] for r in wider["results"]] == ["Inception", "Tenet", "Memento"]


def test_verify_recent_empty(client, library_roots):
    data = client.get("/api/media/verify-recent").json()
    assert data == {"totalChecked": 0, "verified": 0, "issues": 0, "results": []}
