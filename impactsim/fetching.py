"""Small httpx helpers shared by the reference-data clients."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import httpx

from .config import get_settings

LOGGER = logging.getLogger(__name__)


@contextmanager
def open_client(client: Optional[httpx.Client] = None) -> Iterator[httpx.Client]:
    """Yield the caller's client untouched, or a fresh one closed on exit."""
    if client is not None:
        yield client
        return
    settings = get_settings()
    with httpx.Client(timeout=settings.http_timeout_s) as own:
        yield own


def get_with_retries(client: httpx.Client, url: str, params: Optional[Dict[str, Any]] = None,
                     attempts: Optional[int] = None, timeout_note: str = "") -> httpx.Response:
    """GET with a bounded number of retries on timeouts; raises for HTTP error status."""
    if attempts is None:
        attempts = get_settings().http_attempts
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")
    i = 0
    while True:
        i += 1
        try:
            LOGGER.debug("[http.try] attempt=%d url=%s", i, url)
            r = client.get(url, params=params)
            LOGGER.debug("[http.try] status=%d attempt=%d", r.status_code, i)
            r.raise_for_status()
            return r
        except httpx.TimeoutException as e:
            LOGGER.info("[http.timeout] attempt=%d %s error=%s", i, timeout_note, e)
            if i >= attempts:
                raise
            time.sleep(0.8 * i)


def get_json(client: httpx.Client, url: str, params: Optional[Dict[str, Any]] = None,
             timeout_note: str = "") -> Any:
    return get_with_retries(client, url, params, timeout_note=timeout_note).json()
