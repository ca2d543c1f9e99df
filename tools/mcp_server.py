# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Declares every MCP tool the assistant can call.  Each tool is a thin
#   wrapper: it collects its parameters into an argument dict (leaving out
#   anything not supplied), hands it to the ToolDispatcher, and returns the
#   dispatcher's single JSON text block.
#
# HOW IT WORKS (the flow):
#   1. The assistant calls a tool by name via MCP (e.g., "get_deal")
#   2. FastMCP routes the call to the decorated function below
#   3. The function calls ToolDispatcher.call(name, arguments)
#   4. The dispatcher validates, talks to Opine, and renders the result
#   5. Errors come back as ToolError("Error executing <tool>: ...")
#
# TOOL NAMING CONVENTIONS:
#   - list_*     → paginated reads (limit/offset passed straight through)
#   - get_*      → single-record reads
#   - describe_* → composite reads (several API calls)
#   - create_* / update_* → writes; these are NOT idempotent
#
# RUNNING THIS SERVER:
#   main.py builds the client and dispatcher, then calls build_server().run()
#   which speaks MCP over stdio.
# =============================================================================

import json
import logging
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from core.errors import ToolExecutionError
from core.models import TicketState, TicketType
from tools.dispatcher import ToolDispatcher

SERVER_NAME = "opine-mcp-server"

# Schema constraints the assistant sees; FastMCP rejects values outside them.
PageLimit = Annotated[int, Field(ge=1, le=1000)]
PageOffset = Annotated[int, Field(ge=0)]
NonEmptyStr = Annotated[str, Field(min_length=1)]

# =============================================================================
# Logging helpers
# =============================================================================
# stdout is the MCP transport, so main.py points logging at STDERR.
#
#   CYAN   - incoming tool calls with parameters
#   GREEN  - responses (compact JSON)
#   YELLOW - intermediate status
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logger = logging.getLogger(__name__)


def _log_request(tool_name: str, arguments: dict) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in arguments.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> None:
    """Log the tool response as compact JSON in GREEN."""
    compact = json.dumps(json.loads(text), separators=(",", ":"))
    logger.info(f"{_GREEN}  ← {tool_name} response: {compact}{_RESET}")


def _present(**arguments: Any) -> dict:
    """Keep only the parameters the caller actually supplied."""
    return {k: v for k, v in arguments.items() if v is not None}


def build_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Create the FastMCP server with every Opine tool bound to ``dispatcher``."""
    mcp = FastMCP(SERVER_NAME)

    async def run(tool_name: str, arguments: dict):
        _log_request(tool_name, arguments)
        try:
            content = await dispatcher.call(tool_name, arguments)
        except ToolExecutionError as e:
            _log_status(str(e))
            raise ToolError(str(e)) from e
        _log_response(tool_name, content[0].text)
        return content

    # =========================================================================
    # Deals
    # =========================================================================
    @mcp.tool()
    async def list_deals(
        limit: Optional[PageLimit] = None,
        offset: Optional[PageOffset] = None,
        includeSummary: Optional[bool] = None,
        includeDeleted: Optional[bool] = None,
    ):
        """List deals from Opine CRM.

        Args:
            limit: Number of results to return (1-1000, default: 100).
            offset: Number of results to skip (default: 0).
            includeSummary: Include the AI-generated deal summary.
            includeDeleted: Include deleted deals.

        Returns:
            A page: {items, limit, offset, totalCount}.
        """
        return await run("list_deals", _present(
            limit=limit, offset=offset,
            includeSummary=includeSummary, includeDeleted=includeDeleted,
        ))

    @mcp.tool()
    async def get_deal(id: NonEmptyStr, includeSummary: Optional[bool] = None):
        """Get a specific deal by ID.

        Args:
            id: Opine deal ID, or an external service ID prefixed with "eid:".
            includeSummary: Include the AI-generated deal summary.
        """
        return await run("get_deal", _present(id=id, includeSummary=includeSummary))

    @mcp.tool()
    async def get_salesforce_deal(id: str, includeSummary: Optional[bool] = None):
        """Get a specific deal by Salesforce ID.

        The ID may be 15 or 18 characters.  It is converted to the 18-character
        case-safe form and prefixed with "eid:" automatically.

        Args:
            id: Salesforce opportunity ID.
            includeSummary: Include the AI-generated deal summary.
        """
        return await run(
            "get_salesforce_deal", _present(id=id, includeSummary=includeSummary),
        )

    @mcp.tool()
    async def describe_deal_sales_process(
        id: NonEmptyStr,
        isSalesforceId: Optional[bool] = None,
        includeSummary: Optional[bool] = None,
    ):
        """Get a deal along with its resolved sales process and stage.

        Returns {deal, salesProcess, salesProcessStage}.  salesProcess or
        salesProcessStage is null when the deal has no reference, or when the
        referenced record is not among the first 1000 returned by Opine.

        Args:
            id: Deal ID.  If this is a Salesforce ID, set isSalesforceId.
            isSalesforceId: Treat id as a 15/18-character Salesforce ID; it is
                normalized and prefixed with "eid:".
            includeSummary: Include the AI-generated deal summary.
        """
        return await run("describe_deal_sales_process", _present(
            id=id, isSalesforceId=isSalesforceId, includeSummary=includeSummary,
        ))

    @mcp.tool()
    async def create_deal_note(
        dealId: NonEmptyStr,
        title: str,
        body: Optional[str | list[dict]] = None,
    ):
        """Create a note on a deal.

        Args:
            dealId: Opine deal ID (or "eid:"-prefixed external ID).
            title: Note title.
            body: Markdown string or Slate node array.
        """
        return await run(
            "create_deal_note", _present(dealId=dealId, title=title, body=body),
        )

    # =========================================================================
    # Evaluations
    # =========================================================================
    @mcp.tool()
    async def list_evaluations(
        limit: Optional[PageLimit] = None,
        offset: Optional[PageOffset] = None,
    ):
        """List evaluations from Opine.

        Args:
            limit: Number of results to return (1-1000, default: 100).
            offset: Number of results to skip (default: 0).
        """
        return await run("list_evaluations", _present(limit=limit, offset=offset))

    # =========================================================================
    # Tickets
    # =========================================================================
    @mcp.tool()
    async def list_tickets(
        limit: Optional[PageLimit] = None,
        offset: Optional[PageOffset] = None,
    ):
        """List tickets/requests from Opine.

        Args:
            limit: Number of results to return (1-1000, default: 100).
            offset: Number of results to skip (default: 0).
        """
        return await run("list_tickets", _present(limit=limit, offset=offset))

    @mcp.tool()
    async def update_ticket(
        id: NonEmptyStr,
        title: Optional[str] = None,
        type: Optional[TicketType] = None,
        state: Optional[TicketState] = None,
        description: Optional[str | list[dict]] = None,
        targetDueDate: Optional[str] = None,
        deals: Optional[list[dict]] = None,
        labels: Optional[list[str]] = None,
        vendorEntityUrl: Optional[str] = None,
    ):
        """Update a ticket.  Only the fields you pass are changed.

        Args:
            id: Ticket ID.
            title: New title.
            type: Ticket type.
            state: Lifecycle state.
            description: Markdown string or Slate node array.
            targetDueDate: ISO date.
            deals: Deal links, each {"id": <deal id>, "priority":
                "BLOCKER" | "IMPORTANT" | "NICE_TO_HAVE"}; add "delete": true to
                remove a link.
            labels: Replaces ALL existing labels.
            vendorEntityUrl: Link to the ticket in an external tracker.
        """
        return await run("update_ticket", _present(
            id=id, title=title, type=type, state=state, description=description,
            targetDueDate=targetDueDate, deals=deals, labels=labels,
            vendorEntityUrl=vendorEntityUrl,
        ))

    @mcp.tool()
    async def create_ticket(
        title: NonEmptyStr,
        type: TicketType,
        state: TicketState,
        description: Optional[str | list[dict]] = None,
        targetDueDate: Optional[str] = None,
        deals: Optional[list[dict]] = None,
        labels: Optional[list[str]] = None,
        vendorEntityUrl: Optional[str] = None,
    ):
        """Create a ticket.

        Args:
            title: Ticket title.
            type: Ticket type.
            state: Initial lifecycle state.
            description: Markdown string or Slate node array.
            targetDueDate: ISO date.
            deals: Deal links, each {"id": <deal id>, "priority":
                "BLOCKER" | "IMPORTANT" | "NICE_TO_HAVE"}.
            labels: Labels to attach.
            vendorEntityUrl: Link to the ticket in an external tracker.
        """
        return await run("create_ticket", _present(
            title=title, type=type, state=state, description=description,
            targetDueDate=targetDueDate, deals=deals, labels=labels,
            vendorEntityUrl=vendorEntityUrl,
        ))

    # =========================================================================
    # Sales process metadata
    # =========================================================================
    @mcp.tool()
    async def list_sales_processes(
        limit: Optional[PageLimit] = None,
        offset: Optional[PageOffset] = None,
    ):
        """List sales processes configured in Opine.

        Args:
            limit: Number of results to return (1-1000, default: 100).
            offset: Number of results to skip (default: 0).
        """
        return await run("list_sales_processes", _present(limit=limit, offset=offset))

    @mcp.tool()
    async def list_sales_process_stages(
        limit: Optional[PageLimit] = None,
        offset: Optional[PageOffset] = None,
        includeDeleted: Optional[bool] = None,
    ):
        """List sales process stages from Opine.

        Args:
            limit: Number of results to return (1-1000, default: 100).
            offset: Number of results to skip (default: 0).
            includeDeleted: Include deleted stages.
        """
        return await run("list_sales_process_stages", _present(
            limit=limit, offset=offset, includeDeleted=includeDeleted,
        ))

    return mcp
