import pytest


def _assert_envelope(resp, status, error):
    assert resp.status_code == status
    body = resp.json()
    assert set(body) == {"error", "message", "request_id", "details"}
    assert body["error"] == error
    assert body["request_id"] == resp.headers["X-Request-Id"]
    return body


def test_create_edit_delete_flow(client, storage_root):
    r = client.post("/create", json={"filename": "notes.txt", "content": "hello"})
    assert r.status_code == 200
    assert r.json() == {"message": "File created successfully!", "filename": "notes.txt"}
    assert (storage_root / "notes.txt").read_text() == "hello"

    r = client.post("/edit", json={"filename": "notes.txt", "content": "world"})
    assert r.status_code == 200
    assert r.json()["message"] == "File edited successfully!"
    assert (storage_root / "notes.txt").read_text() == "world"

    r = client.post("/delete", json={"filename": "notes.txt"})
    assert r.status_code == 200
    assert r.json()["message"] == "File deleted successfully!"
    assert not (storage_root / "notes.txt").exists()

    r = client.post("/delete", json={"filename": "notes.txt"})
    body = _assert_envelope(r, 404, "not_found")
    assert body["details"]["filename"] == "notes.txt"


@pytest.mark.parametrize("path", ["/create", "/edit"])
def test_write_traversal_is_bad_request(client, storage_root, path):
    r = client.post(path, json={"filename": "../../etc/passwd", "content": "x"})
    _assert_envelope(r, 400, "invalid_path")
    assert list(storage_root.parent.glob("**/passwd")) == []


def test_delete_absolute_path_is_bad_request(client, storage_root):
    victim = storage_root.parent / "victim.txt"
    victim.write_text("keep")
    r = client.post("/delete", json={"filename": str(victim)})
    _assert_envelope(r, 400, "invalid_path")
    assert victim.exists()


def test_storage_failure_is_distinct_from_bad_input(client, storage_root):
    (storage_root / "adir").mkdir()
    bad = client.post("/create", json={"filename": "../x", "content": "x"})
    broken = client.post("/create", json={"filename": "adir", "content": "x"})
    _assert_envelope(bad, 400, "invalid_path")
    _assert_envelope(broken, 500, "io_error")


def test_missing_fields_are_validation_errors(client):
    r = client.post("/create", json={"filename": "a.txt"})
    body = _assert_envelope(r, 422, "validation_error")
    assert any("content" in e["loc"] for e in body["details"]["errors"])

    r = client.post("/delete", json={})
    _assert_envelope(r, 422, "validation_error")


def test_upload_two_files(client, storage_root):
    r = client.post(
        "/upload",
        files=[
            ("files", ("a.txt", b"alpha", "text/plain")),
            ("files", ("b.txt", b"beta", "text/plain")),
        ],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert body["written"] == ["a.txt", "b.txt"]
    assert body["failed"] == []
    assert (storage_root / "a.txt").read_bytes() == b"alpha"
    assert (storage_root / "b.txt").read_bytes() == b"beta"


def test_upload_partial_failure_reports_entries(client, storage_root):
    (storage_root / "adir").mkdir()
    r = client.post(
        "/upload",
        files=[
            ("files", ("adir", b"x", "text/plain")),
            ("files", ("ok.txt", b"fine", "text/plain")),
        ],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 1
    assert body["failed"][0]["filename"] == "adir"
    assert body["failed"][0]["error"] == "io_error"


def test_upload_all_failed_is_server_error(client, storage_root):
    (storage_root / "adir").mkdir()
    r = client.post("/upload", files=[("files", ("adir", b"x", "text/plain"))])
    body = _assert_envelope(r, 500, "io_error")
    assert body["details"]["failed"][0]["filename"] == "adir"


def test_upload_without_files_is_validation_error(client):
    r = client.post("/upload", data={"other": "1"})
    _assert_envelope(r, 422, "validation_error")


def test_request_id_echoed(client):
    r = client.post("/create", json={"filename": "r.txt", "content": "x"}, headers={"X-Request-Id": "ABC123"})
    assert r.headers["X-Request-Id"] == "ABC123"

    r = client.post("/delete", json={"filename": "missing"}, headers={"X-Request-Id": "DEF456"})
    assert r.headers["X-Request-Id"] == "DEF456"
    assert r.json()["request_id"] == "DEF456"


def test_request_id_generated(client):
    r = client.post("/create", json={"filename": "r.txt", "content": "x"})
    rid = r.headers["X-Request-Id"]
    assert len(rid) == 32 and rid == rid.upper()


@pytest.mark.parametrize("path", ["/create", "/edit"])
def test_unencodable_content_is_bad_request(client, storage_root, path):
    # lone surrogate: valid JSON, no UTF-8 form
    r = client.post(
        path,
        content=b'{"filename": "s.txt", "content": "\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    body = _assert_envelope(r, 400, "invalid_content")
    assert body["details"]["filename"] == "s.txt"
    assert not (storage_root / "s.txt").exists()
