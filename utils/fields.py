# utils/fields.py
import math
from typing import Dict, Iterable, Optional

# ---- header aliases, checked in order (first non-empty wins) ----
MEMBER_NAME     = ["name", "氏名", "議員名"]
MEMBER_READING  = ["reading", "ふりがな", "よみがな", "読み"]
MEMBER_PARTY    = ["party", "政党", "党派"]
MEMBER_DISTRICT = ["district", "選挙区"]
MEMBER_GROUP    = ["kaiha", "group", "会派"]

GROUP_NAME  = ["name", "会派", "会派名", "党派"]
GROUP_SEATS = ["seats", "議席数", "議席"]
GROUP_BLOC  = ["bloc", "与野党分類", "区分"]
GROUP_COLOR = ["color", "カラー", "colour"]
GROUP_SHORT = ["shortLabel", "abbr", "alias", "略称"]
GROUP_ORDER = ["order", "displayOrder", "sortOrder", "順番", "表示順"]

HISTORY_SEQ         = ["seq", "no", "number", "番号", "通番"]
HISTORY_DATE        = ["date", "日付", "年月日"]
HISTORY_HOUSE       = ["house", "chamber", "院"]
HISTORY_DESCRIPTION = ["description", "summary", "内容", "概要", "備考"]
HISTORY_PREVIOUS    = ["previousGroup", "from", "旧会派", "異動前"]
HISTORY_NEW         = ["newGroup", "to", "新会派", "異動後"]
HISTORY_MEMBER      = ["memberName", "member", "議員名", "氏名"]

GOVERNMENT_TOKENS = {"government", "gov", "ruling", "与党"}

def pick_field(row: Dict[str, str], keys: Iterable[str]) -> str:
    for k in keys:
        v = row.get(k)
        if v is not None and v != "":
            return v
    return ""

def coerce_number(value, fallback: Optional[float] = None) -> Optional[float]:
    """'1,234' -> 1234.0; blank, junk or non-finite -> fallback."""
    text = str(value if value is not None else "").replace(",", "").strip()
    if not text or "_" in text:
        return fallback
    try:
        num = float(text)
    except ValueError:
        return fallback
    return num if math.isfinite(num) else fallback
