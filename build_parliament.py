#!/usr/bin/env python3
import os, sys, json, argparse, logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv, find_dotenv

from utils.assemble import CHAMBERS, build_from_sources, write_document
from utils.sheets import SourceError, fetch_all

load_dotenv(find_dotenv(usecwd=True))  # reads .env next to where the build runs

OUT_PATH      = os.getenv("PARLIAMENT_JSON_PATH", "data/parliament.json")
FETCH_WORKERS = int(os.getenv("FETCH_WORKERS", "4"))
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT_SECONDS", "20"))

# per chamber: SHEET_<X>_URL = explicit seat sheet, MEMBERS_<X>_URL = roster, MASTER_<X>_URL = group master
KINDS = (("groups", "SHEET"), ("members", "MEMBERS"), ("masters", "MASTER"))

def die(msg: str, code: int = 1):
    print(msg, file=sys.stderr)
    sys.exit(code)

def source_urls(env=os.environ) -> Dict[str, str]:
    """Flat {"<chamber>.<kind>": url, "history": url} of every configured source."""
    urls: Dict[str, str] = {}
    for spec in CHAMBERS:
        for kind, prefix in KINDS:
            url = (env.get(f"{prefix}_{spec['env']}_URL") or "").strip()
            if url:
                urls[f"{spec['key']}.{kind}"] = url
        if f"{spec['key']}.groups" not in urls and f"{spec['key']}.members" not in urls:
            raise SourceError(
                f"{spec['house']}: set SHEET_{spec['env']}_URL or MEMBERS_{spec['env']}_URL"
            )
    history = (env.get("HISTORY_URL") or "").strip()
    if history:
        urls["history"] = history
    return urls

def group_sources(texts: Dict[str, str]) -> Dict[str, Any]:
    chambers: Dict[str, Dict[str, Optional[str]]] = {}
    for name, text in texts.items():
        if name == "history":
            continue
        key, kind = name.split(".", 1)
        chambers.setdefault(key, {})[kind] = text
    return {"history": texts.get("history"), "chambers": chambers}

def main(argv=None):
    ap = argparse.ArgumentParser(description="Build data/parliament.json from the seat spreadsheets.")
    ap.add_argument("--out", default=OUT_PATH, help=f"Output JSON path (default: {OUT_PATH})")
    ap.add_argument("--workers", type=int, default=FETCH_WORKERS, help="Parallel fetches")
    ap.add_argument("--dry-run", action="store_true", help="Print JSON to stdout, write nothing")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        urls = source_urls()
        print(f"fetching {len(urls)} sources ({args.workers} workers)…", flush=True, file=sys.stderr)
        texts = fetch_all(urls, workers=args.workers, timeout=FETCH_TIMEOUT)
    except SourceError as e:
        die(f"source unavailable: {e}")

    doc = build_from_sources(group_sources(texts))

    for c in doc["chambers"]:
        seats = sum(g["seats"] for g in c["groups"])
        print(f"{c['house']}: {len(c['groups'])} groups, {seats}/{c['capacity']} seats, "
              f"{len(c['members'])} members", flush=True, file=sys.stderr)

    if args.dry_run:
        json.dump(doc, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return

    out_final = write_document(doc, args.out)
    print(f"Updated: {out_final} ({len(doc['history'])} history rows)")

if __name__ == "__main__":
    main()
