# =============================================================================
# core/validation.py  -  Tool Input -> FdaRequest
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns raw tool arguments into an FdaRequest that is already bounded.
#   Nothing downstream (query builder, dispatcher) re-checks limits; if a
#   value made it into an FdaRequest, it is in range.
#
# WHY A SEPARATE STAGE?
#   FastMCP also validates arguments against the tool's JSON schema before a
#   handler runs.  Doing it again here, as plain functions, means:
#     - the rules can be unit-tested without an MCP server
#     - the dispatcher never has to trust the host framework
#
# WHAT IS NOT VALIDATED:
#   The *meaning* of a search expression (does that field exist? is the
#   Lucene syntax right?).  That is openFDA's job; it answers with a 4xx.
# =============================================================================

from typing import Optional, Union

from core.errors import ValidationError
from core.models import (
    MAX_COUNT_LIMIT,
    MAX_SEARCH_LIMIT,
    MIN_LIMIT,
    MIN_SKIP,
    Endpoint,
    FdaRequest,
)


def parse_endpoint(value: Union[str, Endpoint]) -> Endpoint:
    """Resolve an endpoint identifier, rejecting anything outside the fixed set."""
    if isinstance(value, Endpoint):
        return value
    try:
        return Endpoint(value)
    except ValueError:
        allowed = ", ".join(e.value for e in Endpoint)
        raise ValidationError(f"Unknown endpoint {value!r}; expected one of: {allowed}") from None


def _check_int(name: str, value: int, minimum: int, maximum: Optional[int] = None) -> int:
    # bool is an int subclass; True must not sneak through as limit=1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ValidationError(f"{name} must be <= {maximum}, got {value}")
    return value


def _check_text(name: str, value: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}")
    return value


def search_request(
    endpoint: Union[str, Endpoint],
    query: str,
    limit: int,
    skip: Optional[int] = None,
    max_limit: int = MAX_SEARCH_LIMIT,
) -> FdaRequest:
    """Validate a record search and build its request.

    Args:
        endpoint: Dataset to search.
        query: openFDA search expression, passed through untouched.
        limit: Records to return, MIN_LIMIT..max_limit.
        skip: Records to skip.  None leaves `skip` out of the URL entirely
              (only search_drug_events exposes it).
        max_limit: Upper bound for `limit`.

    Returns:
        FdaRequest with params in the order search, limit[, skip].
    """
    resolved = parse_endpoint(endpoint)
    _check_text("query", query)
    _check_int("limit", limit, MIN_LIMIT, max_limit)

    params: list[tuple[str, Optional[str]]] = [
        ("search", query),
        ("limit", str(limit)),
    ]
    if skip is not None:
        _check_int("skip", skip, MIN_SKIP)
        params.append(("skip", str(skip)))

    return FdaRequest(endpoint=resolved, params=tuple(params))


def count_request(
    endpoint: Union[str, Endpoint],
    count_field: str,
    query: Optional[str] = None,
    limit: int = 10,
) -> FdaRequest:
    """Validate an aggregation (count) call and build its request.

    An omitted query means "count across the whole dataset": the `search`
    parameter is left out of the URL.
    """
    resolved = parse_endpoint(endpoint)
    _check_text("countField", count_field)
    if query is not None:
        _check_text("query", query)
    _check_int("limit", limit, MIN_LIMIT, MAX_COUNT_LIMIT)

    return FdaRequest(
        endpoint=resolved,
        params=(
            ("search", query),
            ("count", count_field),
            ("limit", str(limit)),
        ),
    )
