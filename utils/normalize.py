# utils/normalize.py
import logging
from typing import Any, Dict, List, Optional

from utils.fields import (
    GOVERNMENT_TOKENS,
    GROUP_BLOC, GROUP_COLOR, GROUP_NAME, GROUP_ORDER, GROUP_SEATS, GROUP_SHORT,
    HISTORY_DATE, HISTORY_DESCRIPTION, HISTORY_HOUSE, HISTORY_MEMBER,
    HISTORY_NEW, HISTORY_PREVIOUS, HISTORY_SEQ,
    MEMBER_DISTRICT, MEMBER_GROUP, MEMBER_NAME, MEMBER_PARTY, MEMBER_READING,
    coerce_number, pick_field,
)

log = logging.getLogger(__name__)

UNCLASSIFIED = "未分類"

def classify_bloc(raw: str) -> str:
    return "government" if (raw or "").strip().lower() in GOVERNMENT_TOKENS else "opposition"

def _as_int_or_float(num: float):
    return int(num) if float(num).is_integer() else num

def normalize_members(rows: List[Dict[str, str]]) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    for row in rows:
        name = pick_field(row, MEMBER_NAME).strip()
        if not name:
            continue
        party = pick_field(row, MEMBER_PARTY).strip()
        kaiha = pick_field(row, MEMBER_GROUP).strip() or party or UNCLASSIFIED
        out.append({
            "name": name,
            "reading": pick_field(row, MEMBER_READING).strip(),
            "party": party,
            "district": pick_field(row, MEMBER_DISTRICT).strip(),
            "kaiha": kaiha,
        })
    if len(out) != len(rows):
        log.debug("members: dropped %d of %d rows", len(rows) - len(out), len(rows))
    return out

def _master_fields(row: Dict[str, str], position: int) -> Dict[str, Any]:
    # blocSet/orderSet: the cell was filled in, not defaulted
    order = coerce_number(pick_field(row, GROUP_ORDER))
    bloc_raw = pick_field(row, GROUP_BLOC)
    return {
        "name": pick_field(row, GROUP_NAME).strip(),
        "bloc": classify_bloc(bloc_raw),
        "blocSet": bool(bloc_raw.strip()),
        "orderSet": order is not None,
        "color": pick_field(row, GROUP_COLOR) or None,
        "shortLabel": pick_field(row, GROUP_SHORT) or None,
        "order": _as_int_or_float(order) if order is not None else position,
    }

def normalize_masters(rows: List[Dict[str, str]]) -> List[Dict[str, Any]]:
    """Group master sheet: bloc/color/label/order per group name."""
    out: List[Dict[str, Any]] = []
    for idx, row in enumerate(rows):
        rec = _master_fields(row, idx + 1)
        if rec["name"]:
            out.append(rec)
    return out

def normalize_group_rows(rows: List[Dict[str, str]]) -> List[Dict[str, Any]]:
    """Explicit seat sheet. Rows with missing, junk or non-positive seats are dropped."""
    out: List[Dict[str, Any]] = []
    for idx, row in enumerate(rows):
        rec = _master_fields(row, idx + 1)
        seats = coerce_number(pick_field(row, GROUP_SEATS), 0)
        if not rec["name"] or seats <= 0:
            continue
        # fractions kept as given
        rec["seats"] = _as_int_or_float(seats)
        out.append(rec)
    if len(out) != len(rows):
        log.debug("groups: dropped %d of %d rows", len(rows) - len(out), len(rows))
    return out

_HISTORY_TEXT = [
    ("date", HISTORY_DATE),
    ("house", HISTORY_HOUSE),
    ("description", HISTORY_DESCRIPTION),
    ("previousGroup", HISTORY_PREVIOUS),
    ("newGroup", HISTORY_NEW),
    ("memberName", HISTORY_MEMBER),
]

def normalize_history(rows: List[Dict[str, str]]) -> List[Dict[str, Any]]:
    """Most recent first (seq desc); equal seq keeps sheet order."""
    out: List[Dict[str, Any]] = []
    for idx, row in enumerate(rows):
        rec: Dict[str, Any] = {k: pick_field(row, keys).strip() for k, keys in _HISTORY_TEXT}
        if not any(rec.values()):
            continue
        seq: Optional[float] = coerce_number(pick_field(row, HISTORY_SEQ))
        rec["seq"] = _as_int_or_float(seq) if seq is not None else idx + 1
        out.append(rec)
    return sorted(out, key=lambda r: r["seq"], reverse=True)
