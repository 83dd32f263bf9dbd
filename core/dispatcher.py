# =============================================================================
# core/dispatcher.py  -  Rate-Limited Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Performs the actual HTTP GET against openFDA, one call at a time, with a
#   minimum spacing between calls, and turns every failure into one of the
#   typed errors in core/errors.py.
#
# THE THROTTLE (trailing, not a token bucket):
#
#     elapsed = now - last_request_time
#     if elapsed < min_interval: sleep(min_interval - elapsed)
#     last_request_time = now          <- issue time, set before the GET
#     GET ...
#
#   There is no "credit" for idle time and no bursting.  Two calls back to
#   back are always at least min_interval apart at issue time.
#
# WHY A LOCK?
#   FastMCP may run synchronous tools on worker threads.  The lock covers the
#   wait AND the GET, so two callers can't both pass the elapsed check and
#   fire inside the same window.  Calls go out in the order they acquire it.
#
# WHY INSTANCE STATE?
#   last_request_time lives on the Dispatcher, not in a module global, so
#   tests (and anything else) can run independent dispatchers side by side.
#
# NO RETRIES:
#   One failed GET is one failed tool call.  No backoff, no circuit breaker.
# =============================================================================

import http.client
import json
import logging
import threading
import time
import urllib.error
import urllib.request
from typing import Any, Callable, Optional

from core.config import DEFAULT_MIN_INTERVAL_MS, DEFAULT_TIMEOUT_SECONDS, USER_AGENT, Settings
from core.errors import MalformedResponseError, TransportError, UpstreamHttpError
from core.models import FdaRequest
from core.query_builder import build_request_url, redact

logger = logging.getLogger(__name__)

# Upstream error bodies can be whole HTML pages; keep enough to be useful.
MAX_ERROR_BODY_CHARS = 1000


def _read_error_body(error: urllib.error.HTTPError) -> str:
    """Best-effort body of an error response.  Never raises."""
    try:
        raw = error.read()
    except Exception as exc:
        logger.debug("Could not read error body: %s", exc)
        return ""
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace")[:MAX_ERROR_BODY_CHARS]


class Dispatcher:
    """Serializes outbound openFDA calls with a minimum inter-call interval.

    Args:
        min_interval: Seconds between consecutive dispatch issue times.
        timeout: Per-call socket timeout in seconds.
        user_agent: Identifying User-Agent header.
        clock: Monotonic clock returning seconds (injectable for tests).
        sleep: Blocking sleep (injectable for tests).
        opener: urlopen-compatible callable taking (request, timeout=...).
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL_MS / 1000.0,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        opener: Callable[..., Any] = urllib.request.urlopen,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self.timeout = timeout
        self.user_agent = user_agent
        self._clock = clock
        self._sleep = sleep
        self._opener = opener
        self._lock = threading.Lock()
        # None = no call issued yet, so the first call never waits.
        self._last_request_time: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Dispatcher":
        return cls(
            min_interval=settings.min_interval,
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    @property
    def last_request_time(self) -> Optional[float]:
        """Clock reading at which the most recent call was issued."""
        return self._last_request_time

    def dispatch(self, request: FdaRequest, api_key: Optional[str] = None) -> Any:
        """Build the URL for a validated request and fetch it."""
        return self.fetch_json(build_request_url(request, api_key))

    def fetch_json(self, url: str) -> Any:
        """GET a URL and return its parsed JSON body.

        Blocks until the minimum interval since the previous call has passed.

        Raises:
            UpstreamHttpError: non-2xx status.
            MalformedResponseError: 2xx body that isn't valid JSON.
            TransportError: no HTTP response at all (DNS, refused, timeout).
        """
        with self._lock:
            self._wait_turn()
            return self._get(url)

    # -------------------------------------------------------------------------
    # Internals (call only while holding self._lock)
    # -------------------------------------------------------------------------
    def _wait_turn(self) -> None:
        if self._last_request_time is not None:
            elapsed = self._clock() - self._last_request_time
            if elapsed < self.min_interval:
                delay = self.min_interval - elapsed
                logger.debug("Throttling openFDA call for %.3fs", delay)
                self._sleep(delay)
        self._last_request_time = self._clock()

    def _get(self, url: str) -> Any:
        safe_url = redact(url)
        req = urllib.request.Request(
            url,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            method="GET",
        )
        logger.debug("GET %s", safe_url)

        try:
            with self._opener(req, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                reason = getattr(response, "reason", "") or ""
                body = response.read()
        except urllib.error.HTTPError as exc:
            body_text = _read_error_body(exc)
            logger.warning("openFDA returned %s for %s", exc.code, safe_url)
            raise UpstreamHttpError(exc.code, str(exc.reason or ""), body_text) from exc
        except (urllib.error.URLError, OSError, http.client.HTTPException) as exc:
            logger.warning("openFDA request to %s failed: %s", safe_url, exc)
            raise TransportError(safe_url, exc) from exc

        if not 200 <= status < 300:
            text = body.decode("utf-8", errors="replace")[:MAX_ERROR_BODY_CHARS] if body else ""
            logger.warning("openFDA returned %s for %s", status, safe_url)
            raise UpstreamHttpError(status, reason, text)

        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            raise MalformedResponseError(safe_url, exc) from exc
