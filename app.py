import os, json
from typing import Dict, Any, Optional, Tuple
from flask import Flask, jsonify, request
from flask_cors import CORS

from utils.views import bloc_summary, filter_members, kaiha_options

# ---------------- Flask & CORS ----------------
app = Flask(__name__)
app.json.ensure_ascii = False
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").strip()
if ALLOWED_ORIGINS in ("", "*"):
    CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=False)
else:
    origins = [o.strip() for o in ALLOWED_ORIGINS.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=False)

# root route so Render health probe never hangs
@app.route("/")
def index():
    return "OK", 200

# ---------------- Env / Config ----------------
PARLIAMENT_JSON_PATH = os.getenv("PARLIAMENT_JSON_PATH", "data/parliament.json")
RENDER_COMMIT        = os.getenv("RENDER_GIT_COMMIT", "")

# ---------------- Document cache ----------------
# ((mtime_ns, inode, size), doc); os.replace on rebuild always gives a new inode
_doc_cache: Dict[str, Tuple[Tuple[int, int, int], Dict[str, Any]]] = {}

def load_document(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Parsed document or None when missing/invalid. Never caches failures."""
    path = path or app.config.get("PARLIAMENT_JSON_PATH", PARLIAMENT_JSON_PATH)
    try:
        st = os.stat(path)
    except OSError:
        _doc_cache.pop(path, None)
        return None
    stamp = (st.st_mtime_ns, st.st_ino, st.st_size)
    cached = _doc_cache.get(path)
    if cached and cached[0] == stamp:
        return cached[1]
    try:
        with open(path, encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, ValueError):
        _doc_cache.pop(path, None)
        return None
    if not isinstance(doc, dict) or not isinstance(doc.get("chambers"), list):
        return None
    _doc_cache[path] = (stamp, doc)
    return doc

def _unavailable():
    return jsonify({"ok": False, "error": "parliament data not available"}), 503

# ---------------- Routes ----------------
@app.route("/health")
def health():
    path = app.config.get("PARLIAMENT_JSON_PATH", PARLIAMENT_JSON_PATH)
    doc = load_document(path)
    return jsonify({
        "ok": True,
        "env": {
            "parliament_json": path,
            "allowed_origins": ALLOWED_ORIGINS or "*",
        },
        "data": {
            "loaded": doc is not None,
            "updatedAt": doc.get("updatedAt") if doc else None,
            "chambers": [c.get("key") for c in doc["chambers"]] if doc else [],
        },
        "commit": RENDER_COMMIT,
    })

@app.route("/api/parliament")
def api_parliament():
    doc = load_document()
    if doc is None:
        return _unavailable()
    return jsonify(doc)

@app.route("/api/chambers/<key>/summary")
def api_chamber_summary(key: str):
    doc = load_document()
    if doc is None:
        return _unavailable()
    chamber = next((c for c in doc["chambers"] if c.get("key") == key), None)
    if chamber is None:
        return jsonify({"ok": False, "error": f"unknown chamber: {key}"}), 404
    return jsonify({"ok": True, "updatedAt": doc.get("updatedAt"), **bloc_summary(chamber)})

@app.route("/api/members")
def api_members():
    doc = load_document()
    if doc is None:
        return _unavailable()
    chambers = doc["chambers"]
    if not chambers:
        return jsonify({"ok": True, "chamber": None, "members": [], "total": 0, "kaiha": []})
    key = (request.args.get("chamber") or "").strip()
    # unknown chamber -> first one, like the members page does
    chamber = next((c for c in chambers if c.get("key") == key), chambers[0])
    members = chamber.get("members") or []
    options = kaiha_options(members)
    kaiha = (request.args.get("kaiha") or "all").strip()
    if kaiha != "all" and kaiha not in options:
        kaiha = "all"
    shown = filter_members(members, kaiha=kaiha, query=request.args.get("q", ""))
    return jsonify({
        "ok": True,
        "chamber": chamber.get("key"),
        "house": chamber.get("house"),
        "kaiha": options,
        "selectedKaiha": kaiha,
        "total": len(members),
        "count": len(shown),
        "members": shown,
    })

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "10000")))
