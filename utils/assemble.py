# utils/assemble.py
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from utils.aggregate import resolve_groups
from utils.csvtext import parse_csv
from utils.normalize import normalize_group_rows, normalize_history, normalize_masters, normalize_members

# Fixed per chamber; capacity is the legal seat count, not derived from sheets.
CHAMBERS: List[Dict[str, Any]] = [
    {"key": "representatives", "house": "衆議院", "capacity": 465, "env": "SYU"},
    {"key": "councillors",     "house": "参議院", "capacity": 248, "env": "SAN"},
]

def chamber_by_key(key: str) -> Optional[Dict[str, Any]]:
    return next((c for c in CHAMBERS if c["key"] == key), None)

def build_chamber(
    spec: Dict[str, Any],
    members: Optional[List[Dict[str, str]]] = None,
    masters: Optional[List[Dict[str, Any]]] = None,
    group_rows: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    members = members or []
    return {
        "key": spec["key"],
        "house": spec["house"],
        "capacity": spec["capacity"],
        "groups": resolve_groups(group_rows, members, masters or []),
        "members": members,
    }

def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

def build_document(
    chambers: List[Dict[str, Any]],
    history: List[Dict[str, Any]],
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    seen = set()
    for c in chambers:
        if c["key"] in seen:
            raise ValueError(f"duplicate chamber key: {c['key']}")
        seen.add(c["key"])
    return {
        "updatedAt": generated_at or iso_now(),
        "history": history,
        "chambers": chambers,
    }

def build_from_sources(sources: Dict[str, Any], generated_at: Optional[str] = None) -> Dict[str, Any]:
    """
    Whole pipeline over raw CSV text.
    sources = {"history": text|None, "chambers": {key: {"members"|"masters"|"groups": text|None}}}
    Chambers come out in CHAMBERS order; unknown keys are ignored.
    """
    per_chamber = sources.get("chambers") or {}
    chambers: List[Dict[str, Any]] = []
    for spec in CHAMBERS:
        src = per_chamber.get(spec["key"])
        if src is None:
            continue
        groups_text = src.get("groups")
        chambers.append(build_chamber(
            spec,
            members=normalize_members(parse_csv(src.get("members") or "")),
            masters=normalize_masters(parse_csv(src.get("masters") or "")),
            group_rows=normalize_group_rows(parse_csv(groups_text)) if groups_text is not None else None,
        ))
    history = normalize_history(parse_csv(sources.get("history") or ""))
    return build_document(chambers, history, generated_at=generated_at)

def write_document(doc: Dict[str, Any], path: str) -> str:
    """Write to <path>.part then os.replace, so readers never see half a file."""
    out_final = os.path.abspath(path)
    out_part = out_final + ".part"
    os.makedirs(os.path.dirname(out_final), exist_ok=True)
    try:
        with open(out_part, "w", encoding="utf-8") as f:
            json.dump(doc, f, ensure_ascii=False, indent=2)
            f.write("\n")
    except Exception:
        if os.path.exists(out_part):
            os.remove(out_part)
        raise
    os.replace(out_part, out_final)
    return out_final
