# =============================================================================
# core/config.py  -  Fixed Constants & Environment Settings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the handful of values the rest of the system needs to talk to
#   openFDA: the base URL, the User-Agent we identify ourselves with, and
#   the per-process settings read from the environment.
#
# WHERE SETTINGS COME FROM:
#   main.py calls load_dotenv() first, so a local .env file works the same
#   as exported variables.  This module only ever reads os.environ.
#
#     OPENFDA_API_KEY          optional; raises the upstream quota
#     OPENFDA_MIN_INTERVAL_MS  spacing between outbound calls (default 250)
#     OPENFDA_TIMEOUT_SECONDS  per-call HTTP timeout (default 30)
#     MCP_FDA_LOG_LEVEL        logging level for the server (default INFO)
#
# openFDA allows ~4 requests/second without a key and 240/minute with one.
# 250ms keeps a single process under both.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

BASE_URL = "https://api.fda.gov"
SERVER_NAME = "mcp-fda"
SERVER_VERSION = "1.0.0"
USER_AGENT = f"{SERVER_NAME}/{SERVER_VERSION} (https://github.com/PetrefiedThunder/mcp-fda)"

DEFAULT_MIN_INTERVAL_MS = 250
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    api_key: Optional[str] = None
    min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def min_interval(self) -> float:
        """Minimum dispatch spacing in seconds."""
        return self.min_interval_ms / 1000.0


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    An empty OPENFDA_API_KEY is treated the same as an unset one.  Malformed
    numbers raise ValueError; the server treats that as a fatal startup error.

    Args:
        environ: Mapping to read from.  Defaults to os.environ (tests pass
                 a plain dict).
    """
    env = os.environ if environ is None else environ

    api_key = env.get("OPENFDA_API_KEY", "").strip() or None

    return Settings(
        api_key=api_key,
        min_interval_ms=_read_int(env, "OPENFDA_MIN_INTERVAL_MS", DEFAULT_MIN_INTERVAL_MS),
        timeout_seconds=_read_float(env, "OPENFDA_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        log_level=env.get("MCP_FDA_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
    )
