from __future__ import annotations

import time
from urllib.parse import urlparse


def strip_www(host: str) -> str:
    if host.startswith("www."):
        return host[4:]
    return host


def domain_of(url: str) -> str:
    """Host of ``url`` without a leading ``www.``.

    Scheme-less input such as ``notion.so/x`` is read as a bare host. Input
    with no recognizable host comes back as-is (lowercased, ``www.`` dropped),
    so it still compares equal to the same domain elsewhere.
    """
    text = (url or "").strip()
    try:
        parsed = urlparse(text)
        host = parsed.hostname
        if not host and not parsed.scheme and not text.startswith("/"):
            host = urlparse("//" + text).hostname
    except ValueError:
        return url
    return strip_www(host or text.lower())


def now_ms() -> int:
    return int(time.time() * 1000)
