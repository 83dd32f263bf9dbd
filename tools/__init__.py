# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP tool wrappers over core/.
#
# ARCHITECTURAL ROLE:
#   tools/ translates between the MCP host and core/.  Each tool:
#     1. Declares its input schema (names, types, bounds, defaults)
#     2. Validates input into an FdaRequest via core/validation.py
#     3. Dispatches it through the shared core.dispatcher.Dispatcher
#     4. Returns the upstream JSON as text, or fails with a ToolError
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT reshape or summarize openFDA results
#   - They do NOT retry failed calls
#
# Tool descriptions (the docstrings) are what the host's model reads to pick
# a tool, so they name the dataset (FAERS, MAUDE, CAERS) explicitly.
# =============================================================================
