import json, os
import importlib

import pytest

from utils.assemble import build_from_sources, write_document

# Import the Flask app instance from app.py
app_mod = importlib.import_module("app")
app = getattr(app_mod, "app")

SOURCES = {
    "history": "seq,description\n1,first\n2,second\n",
    "chambers": {
        "representatives": {
            "members": "name,district,kaiha\nA,Tokyo 1,X\nB,Tokyo 2,X\nC,Osaka 1,Y\n",
            "masters": "name,bloc,order\nY,government,1\n",
        },
        "councillors": {"groups": "name,seats\nP,120\nQ,200\n"},
    },
}

@pytest.fixture
def data_path(tmp_path):
    path = str(tmp_path / "parliament.json")
    write_document(build_from_sources(SOURCES, generated_at="2024-05-01T00:00:00Z"), path)
    app.config["PARLIAMENT_JSON_PATH"] = path
    yield path
    app.config.pop("PARLIAMENT_JSON_PATH", None)

def _get(path, status=200):
    c = app.test_client()
    r = c.get(path)
    assert r.status_code == status, f"HTTP {r.status_code}: {r.data[:200]}"
    return r.get_json()

def test_root_probe():
    r = app.test_client().get("/")
    assert r.status_code == 200 and r.data == b"OK"

def test_parliament_document(data_path):
    js = _get("/api/parliament")
    assert js["updatedAt"] == "2024-05-01T00:00:00Z"
    assert [c["key"] for c in js["chambers"]] == ["representatives", "councillors"]
    assert [g["name"] for g in js["chambers"][0]["groups"]] == ["Y", "X"]
    assert [h["seq"] for h in js["history"]] == [2, 1]

def test_missing_document_is_503(tmp_path):
    app.config["PARLIAMENT_JSON_PATH"] = str(tmp_path / "nothing.json")
    try:
        js = _get("/api/parliament", status=503)
        assert js["ok"] is False
        health = _get("/health")
        assert health["data"]["loaded"] is False
    finally:
        app.config.pop("PARLIAMENT_JSON_PATH", None)

def test_summary_vacancy_and_blocs(data_path):
    js = _get("/api/chambers/councillors/summary")
    assert js["totalSeats"] == 320
    assert js["capacity"] == 248
    assert js["vacancy"] == 0
    js = _get("/api/chambers/representatives/summary")
    assert js["government"] == 1 and js["opposition"] == 2
    assert js["vacancy"] == 465 - 3

def test_summary_unknown_chamber(data_path):
    js = _get("/api/chambers/senate/summary", status=404)
    assert js["ok"] is False

def test_members_filtering(data_path):
    js = _get("/api/members?chamber=representatives&kaiha=X&q=tokyo%202")
    assert js["kaiha"] == ["X", "Y"]
    assert js["total"] == 3 and js["count"] == 1
    assert js["members"][0]["name"] == "B"

def test_members_unknown_chamber_and_kaiha_fall_back(data_path):
    js = _get("/api/members?chamber=nope&kaiha=Nope")
    assert js["chamber"] == "representatives"
    assert js["selectedKaiha"] == "all"
    assert js["count"] == 3

def test_document_reloads_after_rebuild(data_path):
    _get("/api/parliament")
    with open(data_path, encoding="utf-8") as f:
        doc = json.load(f)
    doc["updatedAt"] = "2025-01-01T00:00:00Z"
    write_document(doc, data_path)
    st = os.stat(data_path)
    os.utime(data_path, (st.st_atime, st.st_mtime + 10))
    assert _get("/api/parliament")["updatedAt"] == "2025-01-01T00:00:00Z"

def test_rebuild_with_same_mtime_is_still_picked_up(data_path):
    assert app_mod.load_document(data_path)["updatedAt"] == "2024-05-01T00:00:00Z"
    st = os.stat(data_path)
    with open(data_path, encoding="utf-8") as f:
        doc = json.load(f)
    doc["updatedAt"] = "2099-12-31T23:59:59Z-rebuilt"
    write_document(doc, data_path)
    os.utime(data_path, ns=(st.st_atime_ns, st.st_mtime_ns))
    assert app_mod.load_document(data_path)["updatedAt"] == "2099-12-31T23:59:59Z-rebuilt"
