# utils/views.py
import math
from typing import Any, Dict, List

# Used when a group row carries no shortLabel of its own.
GROUP_SHORT_LABELS = {
    "自由民主党": "自民",
    "立憲民主党": "立憲",
    "立憲民主・社民": "立憲・社民",
    "日本維新の会": "維新",
    "公明党": "公明",
    "国民民主党": "国民",
    "日本共産党": "共産",
    "れいわ新選組": "れいわ",
    "その他": "他",
}

def short_label(group: Dict[str, Any]) -> str:
    return group.get("shortLabel") or GROUP_SHORT_LABELS.get(group["name"]) or group["name"]

def _pct(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total > 0 else 0.0

def bloc_summary(chamber: Dict[str, Any]) -> Dict[str, Any]:
    groups = chamber.get("groups") or []
    total = sum(g["seats"] for g in groups)
    gov = sum(g["seats"] for g in groups if g.get("bloc") == "government")
    capacity = int(chamber.get("capacity") or 0)
    return {
        "key": chamber["key"],
        "house": chamber.get("house"),
        "capacity": capacity,
        "totalSeats": total,
        "vacancy": max(0, capacity - total),
        "government": gov,
        "opposition": max(0, total - gov),
        "majority": total // 2 + 1,
        "twoThirds": math.ceil(total * 2 / 3),
        "groups": [
            {
                "name": g["name"],
                "label": short_label(g),
                "seats": g["seats"],
                "share": _pct(g["seats"], total),
                "color": g.get("color"),
                "bloc": g.get("bloc"),
            }
            for g in groups
        ],
    }

def kaiha_options(members: List[Dict[str, str]]) -> List[str]:
    """Distinct kaiha, largest first; ties keep roster order."""
    counts: Dict[str, int] = {}
    for m in members:
        counts[m["kaiha"]] = counts.get(m["kaiha"], 0) + 1
    return [name for name, _ in sorted(counts.items(), key=lambda kv: -kv[1])]

def member_matches(member: Dict[str, str], query: str) -> bool:
    if not query:
        return True
    target = " ".join(member.get(k, "") for k in ("name", "reading", "district", "kaiha")).lower()
    return query in target

def filter_members(members: List[Dict[str, str]], kaiha: str = "all", query: str = "") -> List[Dict[str, str]]:
    q = (query or "").strip().lower()
    return [
        m for m in members
        if (kaiha in ("", "all") or m["kaiha"] == kaiha) and member_matches(m, q)
    ]
