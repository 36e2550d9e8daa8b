from datetime import date

from app.schemas.catalog import CatalogCandidate


def test_scan_guesses_title_and_year(client, library_roots):
    (library_roots["movie"] / "Inception (2010)").mkdir()
    (library_roots["movie"] / "RandomFolder").mkdir()
    (library_roots["movie"] / "notes.txt").write_text("not a folder")
    (library_roots["movie"] / ".hidden").mkdir()

    response = client.get("/api/scan/folders")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalFound"] == 2

    by_name = {f["name"]: f for f in body["folders"]}
    assert by_name["Inception (2010)"]["title"] == "Inception"
    assert by_name["Inception (2010)"]["year"] == 2010
    assert by_name["RandomFolder"]["title"] == "RandomFolder"
    assert by_name["RandomFolder"]["year"] == date.today().year
    assert all(f["type"] == "movie" and f["status"] == "pending" for f in body["folders"])


def test_scan_tags_type_by_root(client, library_roots):
    (library_roots["movie"] / "Heat (1995)").mkdir()
    (library_roots["tv"] / "Dark (2017)").mkdir()

    folders = client.get("/api/scan/folders").json()["folders"]
    assert [(f["title"], f["type"]) for f in folders] == [("Heat", "movie"), ("Dark", "tv")]


def test_scan_skips_missing_root(client, tmp_path, monkeypatch):
    from app.config import settings

    tv = tmp_path / "tv"
    (tv / "Dark (2017)").mkdir(parents=True)
    monkeypatch.setattr(settings, "media_library_path", None)
    monkeypatch.setattr(settings, "movies_library_path", tmp_path / "does-not-exist")
    monkeypatch.setattr(settings, "tv_library_path", tv)

    body = client.get("/api/scan/folders").json()
    assert body["success"] is True
    assert [f["title"] for f in body["folders"]] == ["Dark"]


def test_scan_without_roots_is_empty(client, no_library_roots):
    assert client.get("/api/scan/folders").json() == {"success": True, "folders": [], "totalFound": 0}


def test_scan_flags_folders_in_library(client, library_roots, make_media):
    (library_roots["movie"] / "Inception (2010)").mkdir()
    (library_roots["movie"] / "Tenet (2020)").mkdir()
    make_media(title="Inception", year=2010)

    folders = client.get("/api/scan/folders").json()["folders"]
    flags = {f["title"]: f["in_library"] for f in folders}
    assert flags == {"Inception": True, "Tenet": False}

    unmatched = client.get("/api/scan/folders", params={"unmatched_only": True}).json()
    assert [f["title"] for f in unmatched["folders"]] == ["Tenet"]


def test_scan_ids_follow_path(client, library_roots):
    (library_roots["movie"] / "Heat (1995)").mkdir()

    first = client.get("/api/scan/folders").json()["folders"][0]["id"]
    second = client.get("/api/scan/folders").json()["folders"][0]["id"]
    assert first == second


def test_match_folder(client, catalog):
    catalog.search_results = [
        CatalogCandidate(id=27205, type="movie", title="Inception", year=2010, vote_average=8.4),
    ]

    response = client.post(
        "/api/scan/match",
        json={"title": "Inception", "year": 2010, "type": "movie", "path": "/movies/Inception (2010)"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "verified"
    assert data["detected_metadata"]["id"] == 27205
    assert catalog.search_calls == [("Inception", "movie", 2010)]


def test_match_folder_without_result(client, catalog):
    catalog.search_results = []

    data = client.post("/api/scan/match", json={"title": "RandomFolder", "type": "movie"}).json()
    assert data["status"] == "skipped"
    assert data["detected_metadata"] is None


def test_library_stats(client, library_roots, make_media):
    for name in ("Heat (1995)", "Tenet (2020)"):
        (library_roots["movie"] / name).mkdir()
    (library_roots["tv"] / "Dark (2017)").mkdir()
    make_media()

    assert client.get("/api/stats/library").json() == {
        "success": True,
        "dbFileCount": 1,
        "movieFolderCount": 2,
        "tvFolderCount": 1,
        "totalFolders": 3,
    }
