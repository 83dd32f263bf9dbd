"""
Tool Server Tests
-----------------
Drives the real FastMCP server through the in-memory client.  The shared
dispatcher is swapped for one with a fake clock and fake network.
"""

import asyncio
import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from conftest import http_error
from core.config import SERVER_NAME, SERVER_VERSION, Settings
from core.models import Endpoint, FdaRequest
from tools import mcp_server

TOOL_NAMES = {
    "search_drug_events",
    "search_drug_labels",
    "search_drug_recalls",
    "search_device_events",
    "search_food_events",
    "search_food_recalls",
    "count_field",
}


@pytest.fixture(autouse=True)
def server(monkeypatch, dispatcher):
    """Point the server at the fake dispatcher, no API key configured."""
    monkeypatch.setattr(mcp_server, "dispatcher", dispatcher)
    monkeypatch.setattr(mcp_server, "settings", Settings())
    return mcp_server.mcp


def call(name, args):
    async def _call():
        async with Client(mcp_server.mcp) as client:
            return await client.call_tool(name, args)

    return asyncio.run(_call())


def list_tools():
    async def _list():
        async with Client(mcp_server.mcp) as client:
            return await client.list_tools()

    return {tool.name: tool for tool in asyncio.run(_list())}


def input_schema(tool):
    """Tool input schema; newer fastmcp renames inputSchema to input_schema."""
    schema = getattr(tool, "input_schema", None)
    return schema if schema is not None else tool.inputSchema


class TestToolSurface:
    """Names, descriptions and input schemas."""

    def test_all_seven_tools_registered(self):
        assert set(list_tools()) == TOOL_NAMES

    def test_descriptions_present(self):
        for tool in list_tools().values():
            assert tool.description

    def test_search_schema_bounds(self):
        props = input_schema(list_tools()["search_drug_events"])["properties"]

        assert props["limit"]["minimum"] == 1
        assert props["limit"]["maximum"] == 100
        assert props["limit"]["default"] == 10
        assert props["skip"]["minimum"] == 0
        assert props["skip"]["default"] == 0

    def test_label_default_limit(self):
        props = input_schema(list_tools()["search_drug_labels"])["properties"]

        assert props["limit"]["default"] == 5
        assert "skip" not in props

    def test_count_schema(self):
        schema = input_schema(list_tools()["count_field"])
        props = schema["properties"]

        assert props["limit"]["maximum"] == 1000
        assert set(schema["required"]) == {"endpoint", "countField"}
        assert set(props["endpoint"]["enum"]) == {e.value for e in Endpoint}

    def test_server_identity(self):
        assert mcp_server.mcp.name == SERVER_NAME
        assert mcp_server.mcp.version == SERVER_VERSION == "1.0.0"


class TestSearchTools:
    """Fixed-endpoint searches."""

    def test_drug_events_scenario(self, opener):
        """URL matches the documented form and JSON comes back unchanged."""
        payload = {"meta": {"results": {"total": 1}}, "results": [{"serious": "1"}]}
        opener.push_json(payload)

        result = call("search_drug_events", {"query": "serious:1", "limit": 10, "skip": 0})

        assert opener.urls == ["https://api.fda.gov/drug/event.json?search=serious%3A1&limit=10&skip=0"]
        assert json.loads(result.content[0].text) == payload

    def test_defaults_applied(self, opener):
        call("search_drug_events", {"query": "serious:1"})
        call("search_drug_labels", {"query": "openfda.brand_name:lipitor"})

        assert opener.urls[0].endswith("&limit=10&skip=0")
        assert opener.urls[1].endswith("&limit=5")

    @pytest.mark.parametrize("tool,path", [
        ("search_drug_labels", "/drug/label.json"),
        ("search_drug_recalls", "/drug/enforcement.json"),
        ("search_device_events", "/device/event.json"),
        ("search_food_events", "/food/event.json"),
        ("search_food_recalls", "/food/enforcement.json"),
    ])
    def test_fixed_endpoints(self, opener, tool, path):
        call(tool, {"query": "x", "limit": 3})

        assert opener.urls == [f"https://api.fda.gov{path}?search=x&limit=3"]

    def test_goes_through_dispatcher_dispatch(self, monkeypatch, dispatcher, opener):
        """Tools hand the validated request and configured key to Dispatcher.dispatch."""
        seen = []
        original = dispatcher.dispatch

        def _spy(request, api_key=None):
            seen.append((request, api_key))
            return original(request, api_key)

        monkeypatch.setattr(dispatcher, "dispatch", _spy)
        monkeypatch.setattr(mcp_server, "settings", Settings(api_key="k9"))

        call("search_device_events", {"query": "x", "limit": 2})

        assert seen == [(FdaRequest(Endpoint.DEVICE_EVENT, (("search", "x"), ("limit", "2"))), "k9")]
        assert opener.urls == ["https://api.fda.gov/device/event.json?api_key=k9&search=x&limit=2"]

    def test_api_key_from_settings(self, monkeypatch, opener):
        monkeypatch.setattr(mcp_server, "settings", Settings(api_key="abc"))

        call("search_food_recalls", {"query": "x"})

        assert opener.urls[0].startswith("https://api.fda.gov/food/enforcement.json?api_key=abc&")

    @pytest.mark.parametrize("args", [
        {"query": "x", "limit": 150},
        {"query": "x", "limit": 0},
        {"query": "x", "skip": -1},
        {"limit": 10},
    ])
    def test_invalid_input_rejected_before_dispatch(self, opener, args):
        with pytest.raises(ToolError):
            call("search_drug_events", args)

        assert opener.requests == []


class TestCountField:
    """Aggregation tool."""

    def test_count_without_query(self, opener):
        opener.push_json({"results": [{"term": "NAUSEA", "count": 10}]})

        result = call("count_field", {
            "endpoint": "/drug/event",
            "countField": "patient.reaction.reactionmeddrapt.exact",
            "limit": 10,
        })

        url = opener.urls[0]
        assert "count=patient.reaction.reactionmeddrapt.exact" in url
        assert "search=" not in url
        assert json.loads(result.content[0].text)["results"][0]["term"] == "NAUSEA"

    def test_count_with_query(self, opener):
        call("count_field", {
            "endpoint": "/device/enforcement",
            "countField": "classification.exact",
            "query": "status:Ongoing",
            "limit": 1000,
        })

        assert opener.urls == [
            "https://api.fda.gov/device/enforcement.json"
            "?search=status%3AOngoing&count=classification.exact&limit=1000"
        ]

    def test_unknown_endpoint_rejected(self, opener):
        with pytest.raises(ToolError):
            call("count_field", {"endpoint": "/drug/ndc", "countField": "x"})

        assert opener.requests == []

    def test_limit_over_1000_rejected(self, opener):
        with pytest.raises(ToolError):
            call("count_field", {"endpoint": "/food/event", "countField": "x", "limit": 1001})

        assert opener.requests == []


class TestFailures:
    """Upstream and transport failures surface as one failed tool call."""

    def test_upstream_404(self, opener):
        opener.push(http_error("u", 404, "Not Found", b'"Not Found"'))

        with pytest.raises(ToolError, match="404"):
            call("search_drug_recalls", {"query": "x"})

        assert len(opener.requests) == 1

    def test_transport_failure(self, opener):
        opener.push(ConnectionRefusedError(111, "Connection refused"))

        with pytest.raises(ToolError, match="request failed"):
            call("search_food_events", {"query": "x"})

    def test_calls_share_one_rate_limit(self, clock, opener):
        """Different tools still go out min_interval apart."""
        call("search_drug_events", {"query": "a"})
        call("count_field", {"endpoint": "/food/event", "countField": "reactions.exact"})

        assert opener.issue_times[1] - opener.issue_times[0] >= 0.25 - 1e-9
