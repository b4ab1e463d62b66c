# utils/aggregate.py
import re
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence, Tuple

PALETTE = [
    "#135ae1", "#d43f3a", "#25a56b", "#f2992e", "#8f56ce",
    "#17a2b8", "#8a6f3c", "#6e7d8e", "#d84ea5", "#5c4bd8",
]

_WS_RE = re.compile(r"\s+")

def master_key(name: str) -> str:
    """Join key: no whitespace anywhere, case-folded. Full/half width is left alone."""
    return _WS_RE.sub("", name or "").casefold()

def build_master_map(masters: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for m in masters:
        out.setdefault(master_key(m["name"]), m)
    return out

def count_members(members: List[Dict[str, str]]) -> List[Tuple[str, int]]:
    counts: Dict[str, int] = {}
    for m in members:
        counts[m["kaiha"]] = counts.get(m["kaiha"], 0) + 1
    return list(counts.items())

def derive_groups(members: List[Dict[str, str]], masters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One group per kaiha, seats = head count, metadata from the master sheet if any."""
    by_key = build_master_map(masters)
    out: List[Dict[str, Any]] = []
    for name, seats in count_members(members):
        m = by_key.get(master_key(name)) or {}
        out.append({
            "name": name,
            "seats": seats,
            "bloc": m.get("bloc", "opposition"),
            "color": m.get("color"),
            "order": m.get("order"),
            "shortLabel": m.get("shortLabel"),
        })
    return out

def _compare(a: Dict[str, Any], b: Dict[str, Any]) -> int:
    ao: Optional[float] = a.get("order")
    bo: Optional[float] = b.get("order")
    if ao is not None or bo is not None:
        ao = float("inf") if ao is None else ao
        bo = float("inf") if bo is None else bo
        if ao != bo:
            return -1 if ao < bo else 1
    ag = 0 if a.get("bloc") == "government" else 1
    bg = 0 if b.get("bloc") == "government" else 1
    if ag != bg:
        return ag - bg
    return b["seats"] - a["seats"]

def sort_groups(groups: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # sorted() is stable, so full ties keep input order
    return sorted(groups, key=cmp_to_key(_compare))

def assign_colors(groups: List[Dict[str, Any]], palette: Sequence[str] = PALETTE) -> List[Dict[str, Any]]:
    return [
        {**g, "color": g.get("color") or palette[i % len(palette)]}
        for i, g in enumerate(groups)
    ]

def merge_duplicates(groups: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Same name twice in a seat sheet: seats add up, the first row keeps its metadata."""
    merged: Dict[str, Dict[str, Any]] = {}
    for g in groups:
        if g["name"] in merged:
            merged[g["name"]]["seats"] += g["seats"]
        else:
            merged[g["name"]] = dict(g)
    return list(merged.values())

def finalize_groups(groups: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    kept = [g for g in merge_duplicates(groups) if g.get("seats", 0) > 0]
    return [
        {
            "name": g["name"],
            "seats": g["seats"],
            "color": g["color"],
            "bloc": g.get("bloc") or "opposition",
            "order": g.get("order"),
            "shortLabel": g.get("shortLabel"),
        }
        for g in assign_colors(sort_groups(kept))
    ]

def enrich_group_rows(group_rows: List[Dict[str, Any]], masters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Seat-sheet rows take blank color/label and unset bloc/order from the master sheet. Seats untouched."""
    by_key = build_master_map(masters)
    out: List[Dict[str, Any]] = []
    for g in group_rows:
        m = by_key.get(master_key(g["name"]))
        if m is None:
            out.append(g)
            continue
        out.append({
            **g,
            "color": g.get("color") or m.get("color"),
            "shortLabel": g.get("shortLabel") or m.get("shortLabel"),
            "bloc": g.get("bloc") if g.get("blocSet", True) else m.get("bloc", "opposition"),
            "order": g.get("order") if g.get("orderSet", True) else m.get("order"),
        })
    return out

def resolve_groups(
    group_rows: Optional[List[Dict[str, Any]]],
    members: List[Dict[str, str]],
    masters: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Explicit seat rows win (enriched from masters); otherwise seats come from the roster."""
    if group_rows is not None:
        return finalize_groups(enrich_group_rows(group_rows, masters))
    return finalize_groups(derive_groups(members, masters))
