# utils/sheets.py
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional
from urllib.parse import parse_qs, urlparse

import requests

log = logging.getLogger(__name__)

USER_AGENT = "kokkai-fetch-bot/1.0"
RETRY_STATUS = (429, 500, 502, 503, 504)

_SHEET_ID_RE = re.compile(r"/spreadsheets/d/([^/]+)")
_GID_RE = re.compile(r"gid=(\d+)")

class SourceError(Exception):
    """A configured source could not be read; the build cannot continue."""
    pass

def resolve_sheet_csv_url(raw_url: str) -> str:
    """Google Sheets edit/view links -> their CSV export link. Anything else passes through."""
    u = urlparse(raw_url)
    if "docs.google.com" not in u.netloc or "/spreadsheets/" not in u.path:
        return raw_url
    qs = parse_qs(u.query)
    if u.path.endswith("/export") and qs.get("format") == ["csv"]:
        return raw_url
    m = _SHEET_ID_RE.search(u.path)
    if not m:
        return raw_url
    frag = _GID_RE.search(u.fragment or "")
    gid = (qs.get("gid") or [None])[0] or (frag.group(1) if frag else "0")
    return f"https://docs.google.com/spreadsheets/d/{m.group(1)}/export?format=csv&gid={gid}"

def _read_local(path: str) -> str:
    real = path[len("file://"):] if path.startswith("file://") else path
    try:
        with open(real, encoding="utf-8-sig") as f:
            return f.read()
    except OSError as e:
        raise SourceError(f"cannot read {real}: {e}")

def _looks_like_html(text: str) -> bool:
    head = text.lstrip()[:15].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")

def fetch_csv_text(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 20,
    retries: int = 4,
) -> str:
    """GET a CSV source with backoff on 429/5xx. Local paths and file:// are read from disk."""
    src = (url or "").strip()
    if not src:
        raise SourceError("empty source URL")
    if not src.startswith(("http://", "https://")):
        return _read_local(src)

    csv_url = resolve_sheet_csv_url(src)
    get = session.get if session is not None else requests.get
    headers = {"User-Agent": USER_AGENT, "Accept": "text/csv,*/*"}
    delay = 1.0
    last_err = ""
    for attempt in range(1, retries + 1):
        try:
            r = get(csv_url, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            last_err = f"transport: {str(e)[:200]}"
        else:
            if r.status_code == 200:
                r.encoding = "utf-8"
                text = r.text
                if _looks_like_html(text):
                    raise SourceError(f"not a CSV endpoint: {csv_url}")
                return text.lstrip("\ufeff")
            if r.status_code not in RETRY_STATUS:
                raise SourceError(f"HTTP {r.status_code} for {csv_url}: {r.text[:200]}")
            last_err = f"HTTP {r.status_code}"
        if attempt < retries:
            log.info("fetch %s failed (%s), retry %d in %.0fs", csv_url, last_err, attempt, delay)
            time.sleep(delay)
            delay = min(delay * 2, 8.0)
    raise SourceError(f"exhausted retries for {csv_url} ({last_err})")

def fetch_all(urls: Dict[str, str], workers: int = 4, timeout: float = 20) -> Dict[str, str]:
    """Fetch every named source in parallel. Any SourceError aborts the lot."""
    if not urls:
        return {}
    names = list(urls)
    # plain requests.get per fetch; no Session shared between threads
    with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
        texts = list(ex.map(lambda n: fetch_csv_text(urls[n], timeout=timeout), names))
    return dict(zip(names, texts))
