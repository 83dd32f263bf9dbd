# =============================================================================
# core/query_builder.py  -  Endpoint + params -> openFDA URL
# =============================================================================
#
# Pure function, no state.  Rules:
#   - URL is BASE_URL + endpoint + ".json"
#   - api_key (if configured) goes first
#   - params with value None are dropped, not sent as "key="
#   - values are form-encoded (space -> "+", ":" -> "%3A", '"' -> "%22")
#   - same input, same output: parameter order is the caller's order
# =============================================================================

from typing import Iterable, Mapping, Optional, Union
from urllib.parse import urlencode

from core.config import BASE_URL
from core.models import ENDPOINT_EXTENSION, Endpoint, FdaRequest
from core.validation import parse_endpoint

Params = Union[Mapping[str, Optional[str]], Iterable[tuple[str, Optional[str]]]]


def build_url(
    endpoint: Union[str, Endpoint],
    params: Params,
    api_key: Optional[str] = None,
) -> str:
    """Build a fully-formed openFDA request URL.

    Args:
        endpoint: One of the seven Endpoint values (or its path string).
        params: Mapping or ordered (name, value) pairs.  None values are
                omitted.  A name given twice keeps its first position and
                its last value.
        api_key: Optional openFDA key from configuration.

    Returns:
        e.g. "https://api.fda.gov/drug/event.json?search=serious%3A1&limit=10"

    Raises:
        ValidationError: if endpoint is not one of the fixed set.
    """
    resolved = parse_endpoint(endpoint)
    pairs = params.items() if isinstance(params, Mapping) else params

    query: dict[str, str] = {}
    if api_key:
        query["api_key"] = api_key
    for name, value in pairs:
        if value is not None:
            query[name] = str(value)

    url = f"{BASE_URL}{resolved.value}{ENDPOINT_EXTENSION}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def build_request_url(request: FdaRequest, api_key: Optional[str] = None) -> str:
    """build_url for an already-validated FdaRequest."""
    return build_url(request.endpoint, request.params, api_key)


def redact(url: str) -> str:
    """Mask the api_key value in a URL so it can be logged."""
    head, sep, query = url.partition("?")
    if not sep:
        return url
    parts = []
    for part in query.split("&"):
        if part.startswith("api_key="):
            part = "api_key=***"
        parts.append(part)
    return f"{head}?{'&'.join(parts)}"
