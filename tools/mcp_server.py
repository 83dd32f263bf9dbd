# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (ALL openFDA tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the seven MCP tools the host can call.  Each tool is a thin
#   wrapper around core/: it validates input, builds the URL, dispatches it
#   through the shared rate-limited Dispatcher, and returns the upstream JSON
#   unchanged as text.
#
# HOW IT WORKS (the flow):
#   1. The host calls a tool by name (e.g., "search_drug_events")
#   2. FastMCP checks the arguments against the tool's schema (bounds below)
#   3. core/validation.py turns them into a bounded FdaRequest
#   4. core/query_builder.py + core/dispatcher.py fetch the JSON
#   5. The raw JSON is returned, pretty-printed, as the tool's text output
#
# TOOL NAMING CONVENTIONS:
#   - search_* -> record listings from one fixed endpoint
#   - count_*  -> aggregations over any endpoint
#   All tools are read-only GETs.
#
# FAILURES:
#   Any core.errors.FdaError becomes a ToolError.  The host sees one failed
#   tool call with the message (status, status text and body for HTTP
#   errors).  Nothing is retried.
#
# RUNNING THIS SERVER:
#     a) Via the entry point:  python main.py   (or the `mcp-fda` script)
#     b) Directly:             python -m tools.mcp_server
# =============================================================================

import json
import logging
import sys
from typing import Annotated, Any, Literal, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from core.config import SERVER_NAME, SERVER_VERSION, load_settings
from core.dispatcher import Dispatcher
from core.errors import FdaError
from core.models import MAX_COUNT_LIMIT, MAX_SEARCH_LIMIT, MIN_LIMIT, MIN_SKIP, Endpoint, FdaRequest
from core.validation import count_request, search_request

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because stdout carries the MCP JSON-RPC stream.  A stray
# log line on stdout would corrupt the protocol.
#
# ANSI colours make tool traffic easy to scan:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for intermediate status (URL, failures)
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, data: Any) -> str:
    """Log a one-line summary of the upstream JSON in GREEN, return it as text.

    The full body can be hundreds of KB of adverse-event reports, so only the
    size and openFDA's reported total are logged.
    """
    text = json.dumps(data, indent=2)
    total = None
    meta = data.get("meta") if isinstance(data, dict) else None
    if isinstance(meta, dict) and isinstance(meta.get("results"), dict):
        total = meta["results"].get("total")
    summary = f"{len(text)} chars" + (f", total={total}" if total is not None else "")
    logging.info(f"{_GREEN}  ← {tool_name} response: {summary}{_RESET}")
    return text


# =============================================================================
# Shared dispatcher
# =============================================================================
# ONE Dispatcher for the whole server, so every tool shares the same spacing
# budget against openFDA.
# =============================================================================
dispatcher = Dispatcher.from_settings(settings)

mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION)


def _run(tool_name: str, request: FdaRequest) -> str:
    """Dispatch a validated request and return the upstream JSON as text."""
    query = ", ".join(f"{k}={v!r}" for k, v in request.params if v is not None)
    _log_status(f"GET {request.endpoint.value}.json ({query})")
    try:
        data = dispatcher.dispatch(request, settings.api_key)
    except FdaError as exc:
        _log_status(f"{type(exc).__name__}: {exc}")
        raise ToolError(str(exc)) from exc
    return _log_response(tool_name, data)


def _search(tool_name: str, endpoint: Endpoint, query: str, limit: int,
            skip: Optional[int] = None) -> str:
    try:
        request = search_request(endpoint, query, limit, skip)
    except FdaError as exc:
        _log_status(f"Rejected: {exc}")
        raise ToolError(str(exc)) from exc
    return _run(tool_name, request)


# -----------------------------------------------------------------------------
# Parameter types
# -----------------------------------------------------------------------------
# The Field bounds end up in each tool's JSON schema, so FastMCP rejects
# limit=150 before the handler is even called.
# -----------------------------------------------------------------------------
SearchLimit = Annotated[int, Field(ge=MIN_LIMIT, le=MAX_SEARCH_LIMIT, description="Number of records to return (1-100)")]
CountLimit = Annotated[int, Field(ge=MIN_LIMIT, le=MAX_COUNT_LIMIT, description="Number of count buckets to return (1-1000)")]
Skip = Annotated[int, Field(ge=MIN_SKIP, description="Number of records to skip, for paging")]

# Built from the Endpoint enum so the schema lists exactly the seven paths.
EndpointName = Literal[tuple(e.value for e in Endpoint)]


# =============================================================================
# TOOL 1: search_drug_events
# =============================================================================
# The only search tool that exposes `skip`.  FAERS is large enough that
# paging through it is a common need.
# =============================================================================
@mcp.tool()
def search_drug_events(
    query: Annotated[str, Field(description="OpenFDA search query, e.g. 'patient.drug.openfda.brand_name:\"aspirin\"' or 'serious:1'")],
    limit: SearchLimit = 10,
    skip: Skip = 0,
) -> str:
    """Search FDA drug adverse event reports (FAERS). Find reports of side effects and safety issues."""
    _log_request("search_drug_events", query=query, limit=limit, skip=skip)
    return _search("search_drug_events", Endpoint.DRUG_EVENT, query, limit, skip)


# =============================================================================
# TOOLS 2-6: fixed-endpoint searches
# =============================================================================
# Same shape, different dataset.  Labels default to 5 results because each
# label record is very long.
# =============================================================================
@mcp.tool()
def search_drug_labels(
    query: Annotated[str, Field(description="Search query, e.g. 'openfda.brand_name:\"lipitor\"' or 'indications_and_usage:\"diabetes\"'")],
    limit: SearchLimit = 5,
) -> str:
    """Search FDA drug labeling/package inserts. Find dosage, warnings, indications, contraindications."""
    _log_request("search_drug_labels", query=query, limit=limit)
    return _search("search_drug_labels", Endpoint.DRUG_LABEL, query, limit)


@mcp.tool()
def search_drug_recalls(
    query: Annotated[str, Field(description="Search query, e.g. 'reason_for_recall:\"contamination\"' or 'openfda.brand_name:\"metformin\"'")],
    limit: SearchLimit = 10,
) -> str:
    """Search FDA drug recall enforcement reports."""
    _log_request("search_drug_recalls", query=query, limit=limit)
    return _search("search_drug_recalls", Endpoint.DRUG_ENFORCEMENT, query, limit)


@mcp.tool()
def search_device_events(
    query: Annotated[str, Field(description="Search query, e.g. 'device.generic_name:\"pacemaker\"' or 'mdr_text.text:\"malfunction\"'")],
    limit: SearchLimit = 10,
) -> str:
    """Search FDA medical device adverse event reports (MAUDE)."""
    _log_request("search_device_events", query=query, limit=limit)
    return _search("search_device_events", Endpoint.DEVICE_EVENT, query, limit)


@mcp.tool()
def search_food_events(
    query: Annotated[str, Field(description="Search query, e.g. 'products.name_brand:\"monster energy\"' or 'reactions:\"nausea\"'")],
    limit: SearchLimit = 10,
) -> str:
    """Search FDA food adverse event reports (CAERS)."""
    _log_request("search_food_events", query=query, limit=limit)
    return _search("search_food_events", Endpoint.FOOD_EVENT, query, limit)


@mcp.tool()
def search_food_recalls(
    query: Annotated[str, Field(description="Search query, e.g. 'reason_for_recall:\"salmonella\"' or 'city:\"los angeles\"'")],
    limit: SearchLimit = 10,
) -> str:
    """Search FDA food recall enforcement reports."""
    _log_request("search_food_recalls", query=query, limit=limit)
    return _search("search_food_recalls", Endpoint.FOOD_ENFORCEMENT, query, limit)


# =============================================================================
# TOOL 7: count_field
# =============================================================================
# Aggregation over any endpoint.  openFDA returns [{term, count}, ...]
# buckets instead of records.  `countField` keeps its camelCase name because
# it is part of the published tool schema.
# =============================================================================
@mcp.tool()
def count_field(
    endpoint: Annotated[EndpointName, Field(description="The openFDA endpoint to query")],
    countField: Annotated[str, Field(description="Field to count, e.g. 'patient.reaction.reactionmeddrapt.exact' for top reactions")],
    query: Annotated[Optional[str], Field(description="Optional search filter")] = None,
    limit: CountLimit = 10,
) -> str:
    """Get counts/aggregations for a field in any openFDA endpoint. Useful for top drugs, common side effects, etc."""
    _log_request("count_field", endpoint=endpoint, countField=countField, query=query, limit=limit)
    try:
        request = count_request(endpoint, countField, query, limit)
    except FdaError as exc:
        _log_status(f"Rejected: {exc}")
        raise ToolError(str(exc)) from exc
    return _run("count_field", request)


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    mcp.run()
