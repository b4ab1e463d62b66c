# utils/csvtext.py
from typing import Dict, List

BOM = "\ufeff"

def parse_csv_line(line: str) -> List[str]:
    """One pass over a line; quotes toggle, "" inside quotes is a literal quote."""
    out: List[str] = []
    value: List[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"' and in_quotes and i + 1 < n and line[i + 1] == '"':
            value.append('"')
            i += 2
            continue
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            out.append("".join(value))
            value = []
        else:
            value.append(ch)
        i += 1
    out.append("".join(value))
    return [v.strip() for v in out]

def split_lines(text: str) -> List[str]:
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return [ln for ln in text.split("\n") if ln]

def parse_csv(text: str) -> List[Dict[str, str]]:
    """Header line -> keys. Short rows pad with "", extra values are ignored."""
    lines = split_lines(text)
    if not lines:
        return []
    if lines[0].startswith(BOM):
        lines[0] = lines[0][len(BOM):]
    headers = parse_csv_line(lines[0])
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        values = parse_csv_line(line)
        row: Dict[str, str] = {}
        for idx, h in enumerate(headers):
            row[h] = values[idx] if idx < len(values) else ""
        rows.append(row)
    return rows
