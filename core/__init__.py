# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains everything that talks to Opine or computes something:
# the Salesforce id converter, the REST client, the deal enrichment resolver,
# configuration, and the error taxonomy.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or MCP types.  The tools/
#   package is the only layer that knows about the protocol.
# =============================================================================
