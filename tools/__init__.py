# =============================================================================
# tools/__init__.py
# =============================================================================
# This package is the translation layer between MCP and core/:
#
#   arguments.py   - up-front argument validation (Ok / Err)
#   dispatcher.py  - tool name → OpineClient / DealEnrichmentResolver call
#   mcp_server.py  - FastMCP tool declarations (names, typed params, docstrings)
#
# Tools do NOT contain API logic; that lives in core/.
# =============================================================================
