#!/usr/bin/env python3
import sys, os, argparse
from typing import Dict, List

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils import fields
from utils.csvtext import parse_csv_line, split_lines

# ---- fields each kind of sheet must carry (any alias of each is OK) ----
RULES: Dict[str, Dict[str, List[str]]] = {
    "members": {"name": fields.MEMBER_NAME},
    "masters": {"name": fields.GROUP_NAME},
    "groups":  {"name": fields.GROUP_NAME, "seats": fields.GROUP_SEATS},
    "history": {"descriptive": fields.HISTORY_DATE + fields.HISTORY_HOUSE + fields.HISTORY_DESCRIPTION
                            + fields.HISTORY_PREVIOUS + fields.HISTORY_NEW + fields.HISTORY_MEMBER},
}

def missing_fields(kind: str, headers: List[str]) -> List[str]:
    have = set(headers)
    return [f for f, aliases in RULES[kind].items() if not have.intersection(aliases)]

def check_file(kind: str, path: str) -> List[str]:
    with open(path, encoding="utf-8-sig") as f:
        lines = split_lines(f.read())
    if not lines:
        return ["empty file"]
    return [f"no column for '{m}' (expected one of: {', '.join(RULES[kind][m])})"
            for m in missing_fields(kind, parse_csv_line(lines[0]))]

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Check exported sheets have the headers the build needs.")
    ap.add_argument("kind", choices=sorted(RULES))
    ap.add_argument("paths", nargs="+")
    args = ap.parse_args(argv)
    bad = 0
    for p in args.paths:
        problems = check_file(args.kind, p)
        for msg in problems:
            print(f"{p}: {msg}")
        if problems:
            bad += 1
        else:
            print(f"{p}: ok")
    return 1 if bad else 0

if __name__ == "__main__":
    sys.exit(main())
