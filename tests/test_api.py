from fastapi.testclient import TestClient

from api.main import app

client = TestClient(app)


def test_list_filters():
    resp = client.get("/api/filters")
    assert resp.status_code == 200
    names = {f["name"] for f in resp.json()}
    assert {"stem", "identity"} <= names


def test_process_stems_lines_in_order():
    resp = client.post("/api/process", json={"lines": ["Running", "", "  Beautifully  ", "jumps"], "n_workers": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert body["lines"] == ["run", "beauti", "jump"]
    assert body["lines_read"] == 3
    assert body["lines_written"] == 3
    assert body["transform_errors"] == 0


def test_unknown_filter_is_rejected():
    resp = client.post("/api/process", json={"lines": ["a"], "transform": "rot13"})
    assert resp.status_code == 400


def test_invalid_worker_count_is_rejected():
    resp = client.post("/api/process", json={"lines": ["a"], "n_workers": 0})
    assert resp.status_code == 422


def test_unicode_line_separators_stay_inside_a_line():
    resp = client.post("/api/process", json={"lines": ["a\u2028b", "c\x0cd"], "transform": "identity"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["lines"] == ["a\u2028b", "c\x0cd"]
    assert body["lines_read"] == 2
    assert body["lines_written"] == 2
