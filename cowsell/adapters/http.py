"""JSON-over-HTTP helper shared by the REST clients.

Transient failures (connection errors, timeouts, HTTP 429 and 5xx) are retried
with exponential backoff; every other failure surfaces immediately.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Callable

from cowsell.errors import CollaboratorError

log = logging.getLogger("cowsell")

TRANSIENT_STATUS = frozenset({429, 500, 502, 503, 504})
USER_AGENT = "cowsell-cli/0.1"


class JsonClient:
    """Minimal JSON client bound to a base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        error_cls: Callable[..., CollaboratorError],
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.error_cls = error_cls
        self.timeout = timeout
        self.max_retries = max(int(max_retries), 1)
        self.backoff = backoff
        self._sleep = sleep

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, payload: Any) -> Any:
        return self.request("POST", path, payload)

    def request(self, method: str, path: str, payload: Any = None) -> Any:
        """Send *payload* to *path* and return the decoded JSON response."""

        url = f"{self.base_url}{path}"
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            method=method,
        )

        for attempt in range(1, self.max_retries + 1):
            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                    body = resp.read()
            except urllib.error.HTTPError as exc:
                detail = _read_error_body(exc)
                if exc.code in TRANSIENT_STATUS and attempt < self.max_retries:
                    self._backoff(method, url, attempt, f"HTTP {exc.code}")
                    continue
                raise self.error_cls(
                    f"{method} {url} failed with HTTP {exc.code}: {detail or exc.reason}",
                    details={"status": exc.code, "body": detail},
                ) from exc
            except (urllib.error.URLError, TimeoutError, ConnectionError) as exc:
                if attempt < self.max_retries:
                    self._backoff(method, url, attempt, str(exc))
                    continue
                raise self.error_cls(
                    f"{method} {url} failed after {attempt} attempts: {exc}",
                    details={"attempts": attempt},
                ) from exc

            if not body:
                return None
            try:
                return json.loads(body)
            except json.JSONDecodeError as exc:
                raise self.error_cls(
                    f"{method} {url} returned invalid JSON: {exc}",
                    details={"body": body[:500].decode("utf-8", errors="ignore")},
                ) from exc
        # The loop either returns or raises.
        raise AssertionError("unreachable")  # pragma: no cover

    def _backoff(self, method: str, url: str, attempt: int, reason: str) -> None:
        delay = self.backoff * (2 ** (attempt - 1))
        log.warning(
            "%s %s failed (%s), retrying in %.2fs (attempt %d/%d)",
            method,
            url,
            reason,
            delay,
            attempt,
            self.max_retries,
        )
        self._sleep(delay)


def _read_error_body(exc: urllib.error.HTTPError) -> str | None:
    try:
        raw = exc.read()
    except Exception:
        return None
    if not raw:
        return None
    return raw.decode("utf-8", errors="ignore")


__all__ = ["JsonClient", "TRANSIENT_STATUS"]
