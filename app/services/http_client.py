from __future__ import annotations

"""Lightweight HTTP client util with retry.

Uses stdlib urllib; the only caller is the external rate provider, which
needs a single JSON GET with a bounded number of attempts.
"""
import json
import time
import urllib.request
import urllib.error
from typing import Any, Dict, Optional


class HttpError(Exception):
    pass


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    """GET `url` and decode a JSON object.

    `timeout` bounds the whole call including backoff sleeps, so callers can
    pass the time left before their own deadline.
    """
    deadline = time.monotonic() + timeout
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        try:
            with urllib.request.urlopen(url, timeout=remaining) as resp:  # nosec B310
                if resp.status >= 400:
                    raise HttpError(f"HTTP {resp.status} for {url}")
                data = json.loads(resp.read().decode("utf-8"))
                if not isinstance(data, dict):
                    raise HttpError(f"expected JSON object from {url}")
                return data
        except (
            urllib.error.URLError,
            TimeoutError,
            HttpError,
            ValueError,
        ) as e:  # ValueError for JSON decode
            last_err = e
            if attempt == retries:
                break
            pause = backoff * (2**attempt)
            if time.monotonic() + pause >= deadline:
                break
            time.sleep(pause)
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err or 'timed out'}")
