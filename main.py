# =============================================================================
# main.py  -  Entry Point for the openFDA MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py          (or the installed `mcp-fda` script)
#
# WHAT HAPPENS:
#   1. Loads a .env file if present (OPENFDA_API_KEY, etc.)
#   2. Imports the tool server, which reads settings and builds the
#      shared rate-limited dispatcher
#   3. Serves MCP over stdio until the host disconnects
#
# A host (Claude Desktop, an ADK agent, ...) starts this as a subprocess and
# talks JSON-RPC over stdin/stdout.  Anything that goes wrong before or while
# starting the transport is fatal: it is written to stderr and the process
# exits with status 1.
# =============================================================================

import sys

from dotenv import load_dotenv


def main() -> int:
    # Must happen BEFORE importing the server: settings are read at import.
    load_dotenv()

    try:
        from tools.mcp_server import mcp

        mcp.run()
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"Fatal: {exc!r}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
