# =============================================================================
# core/__init__.py
# =============================================================================
# Everything that knows about openFDA lives here: endpoints, validation, URL
# building, the rate-limited dispatcher and the error types.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  The tools/ layer is the only
#   place that knows about MCP; core/ can be used and tested from a bare
#   Python REPL.
# =============================================================================
