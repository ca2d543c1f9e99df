# =============================================================================
# tools/dispatcher.py  -  Tool Name → Operation Routing
# =============================================================================
#
# HOW IT WORKS (the flow):
#   1. call(name, arguments) looks the tool up         → UnknownToolError
#   2. validate_arguments() checks the argument bag    → Missing/InvalidArgument
#   3. the handler normalizes ids if needed and calls the OpineClient
#      (or the DealEnrichmentResolver for describe_deal_sales_process)
#   4. the result is returned as one pretty-printed JSON text block
#
#   Any OpineError from steps 1-3 is re-raised as ToolExecutionError with
#   the tool name in the message.  Nothing is retried or swallowed.
#
# STATE:
#   The dispatcher holds the client it was constructed with and nothing
#   else.  Each call is independent.
# =============================================================================

import json
from typing import Any, Awaitable, Callable, Mapping

from mcp.types import TextContent

from core.enrichment import DealEnrichmentResolver
from core.errors import OpineError, ToolExecutionError, UnknownToolError
from core.opine_client import OpineClient
from core.salesforce_ids import to_external_deal_id
from tools.arguments import (
    ANY,
    ARRAY,
    BOOLEAN,
    INTEGER,
    NON_EMPTY_STRING,
    STRING,
    ArgumentSpec,
    Err,
    validate_arguments,
)

Handler = Callable[[dict], Awaitable[Any]]

_PAGING = {"limit": INTEGER, "offset": INTEGER}

_TICKET_FIELDS = {
    "description": ANY,
    "targetDueDate": STRING,
    "deals": ARRAY,
    "labels": ARRAY,
    "vendorEntityUrl": STRING,
}


def render_result(result: Any) -> list[TextContent]:
    """Wrap a JSON-serializable result in the MCP response envelope."""
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


class ToolDispatcher:
    """Routes tool calls to the Opine API."""

    def __init__(self, client: OpineClient) -> None:
        self._client = client
        self._resolver = DealEnrichmentResolver(client)
        self._tools: dict[str, tuple[ArgumentSpec, Handler]] = {
            "list_deals": (
                ArgumentSpec(optional={
                    **_PAGING,
                    "includeSummary": BOOLEAN,
                    "includeDeleted": BOOLEAN,
                }),
                self._list_deals,
            ),
            "get_deal": (
                ArgumentSpec(required={"id": NON_EMPTY_STRING}, optional={"includeSummary": BOOLEAN}),
                self._get_deal,
            ),
            "get_salesforce_deal": (
                ArgumentSpec(required={"id": STRING}, optional={"includeSummary": BOOLEAN}),
                self._get_salesforce_deal,
            ),
            "list_evaluations": (ArgumentSpec(optional=_PAGING), self._list_evaluations),
            "list_tickets": (ArgumentSpec(optional=_PAGING), self._list_tickets),
            "list_sales_processes": (
                ArgumentSpec(optional=_PAGING),
                self._list_sales_processes,
            ),
            "list_sales_process_stages": (
                ArgumentSpec(optional={**_PAGING, "includeDeleted": BOOLEAN}),
                self._list_sales_process_stages,
            ),
            "describe_deal_sales_process": (
                ArgumentSpec(
                    required={"id": NON_EMPTY_STRING},
                    optional={"isSalesforceId": BOOLEAN, "includeSummary": BOOLEAN},
                ),
                self._describe_deal_sales_process,
            ),
            "update_ticket": (
                ArgumentSpec(
                    required={"id": NON_EMPTY_STRING},
                    optional={
                        "title": STRING,
                        "type": STRING,
                        "state": STRING,
                        **_TICKET_FIELDS,
                    },
                ),
                self._update_ticket,
            ),
            "create_deal_note": (
                ArgumentSpec(
                    required={"dealId": NON_EMPTY_STRING, "title": STRING},
                    optional={"body": ANY},
                ),
                self._create_deal_note,
            ),
            "create_ticket": (
                ArgumentSpec(
                    required={"title": NON_EMPTY_STRING, "type": STRING, "state": STRING},
                    optional=_TICKET_FIELDS,
                ),
                self._create_ticket,
            ),
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    async def call(self, name: str, arguments: Mapping[str, Any] | None) -> list[TextContent]:
        """Execute one tool call.

        Raises:
            ToolExecutionError: wrapping whatever went wrong, with the
                original exception chained as ``__cause__``.
        """
        try:
            if name not in self._tools:
                raise UnknownToolError(name)
            spec, handler = self._tools[name]
            outcome = validate_arguments(name, arguments, spec)
            if isinstance(outcome, Err):
                raise outcome.error
            result = await handler(outcome.values)
        except OpineError as e:
            raise ToolExecutionError(name, e) from e
        return render_result(result)

    # -------------------------------------------------------------------------
    # Handlers: each receives the validated values dict
    # -------------------------------------------------------------------------
    async def _list_deals(self, args: dict) -> Any:
        return await self._client.list_deals(
            limit=args.get("limit"),
            offset=args.get("offset"),
            include_summary=args.get("includeSummary"),
            include_deleted=args.get("includeDeleted"),
        )

    async def _get_deal(self, args: dict) -> Any:
        return await self._client.get_deal(
            args["id"], include_summary=args.get("includeSummary"),
        )

    async def _get_salesforce_deal(self, args: dict) -> Any:
        return await self._client.get_deal(
            to_external_deal_id(args["id"]),
            include_summary=args.get("includeSummary"),
        )

    async def _list_evaluations(self, args: dict) -> Any:
        return await self._client.list_evaluations(
            limit=args.get("limit"), offset=args.get("offset"),
        )

    async def _list_tickets(self, args: dict) -> Any:
        return await self._client.list_tickets(
            limit=args.get("limit"), offset=args.get("offset"),
        )

    async def _list_sales_processes(self, args: dict) -> Any:
        return await self._client.list_sales_processes(
            limit=args.get("limit"), offset=args.get("offset"),
        )

    async def _list_sales_process_stages(self, args: dict) -> Any:
        return await self._client.list_sales_process_stages(
            limit=args.get("limit"),
            offset=args.get("offset"),
            include_deleted=args.get("includeDeleted"),
        )

    async def _describe_deal_sales_process(self, args: dict) -> Any:
        deal_id = args["id"]
        if args.get("isSalesforceId", False):
            deal_id = to_external_deal_id(deal_id)
        view = await self._resolver.describe(
            deal_id, include_summary=args.get("includeSummary", False),
        )
        return view.to_dict()

    async def _update_ticket(self, args: dict) -> Any:
        return await self._client.update_ticket(
            args["id"],
            title=args.get("title"),
            type=args.get("type"),
            state=args.get("state"),
            description=args.get("description"),
            target_due_date=args.get("targetDueDate"),
            deals=args.get("deals"),
            labels=args.get("labels"),
            vendor_entity_url=args.get("vendorEntityUrl"),
        )

    async def _create_deal_note(self, args: dict) -> Any:
        return await self._client.create_deal_note(
            args["dealId"], args["title"], body=args.get("body"),
        )

    async def _create_ticket(self, args: dict) -> Any:
        return await self._client.create_ticket(
            args["title"],
            args["type"],
            args["state"],
            description=args.get("description"),
            target_due_date=args.get("targetDueDate"),
            deals=args.get("deals"),
            labels=args.get("labels"),
            vendor_entity_url=args.get("vendorEntityUrl"),
        )
