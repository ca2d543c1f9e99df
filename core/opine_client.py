# =============================================================================
# core/opine_client.py  -  Opine REST API Gateway
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One async method per Opine endpoint.  Each method makes exactly one HTTP
#   call and returns the decoded JSON body:
#
#     GET   /deals                     list_deals
#     GET   /deals/{id}                get_deal
#     GET   /evaluations               list_evaluations
#     GET   /tickets                   list_tickets
#     GET   /sales-processes           list_sales_processes
#     GET   /sales-process-stages      list_sales_process_stages
#     PATCH /tickets/{id}              update_ticket
#     POST  /deals/{id}/notes          create_deal_note
#     POST  /tickets                   create_ticket
#
# REQUEST RULES:
#   - Every request carries X-API-Key and Content-Type: application/json.
#   - A parameter whose value is None is left out of the query string or
#     body entirely; the API never sees an empty or null placeholder.
#   - Path ids are percent-encoded, so "eid:006..." goes out as
#     "eid%3A006...".
#
# FAILURES (nothing is retried):
#   - non-2xx status     → RemoteApiError(status_code, reason)
#   - network / timeout  → RemoteConnectionError
#   - 2xx but not JSON, or a body that fails content decoding
#                        → UnexpectedResponseError
#   - any other httpx error → RemoteConnectionError
# =============================================================================

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, OpineConfig
from core.errors import RemoteApiError, RemoteConnectionError, UnexpectedResponseError

logger = logging.getLogger(__name__)

# encodeURIComponent's unreserved set; ':' and '/' get escaped.
_PATH_SAFE = "-_.!~*'()"


def _encode_path_id(value: Any) -> str:
    return quote(str(value), safe=_PATH_SAFE)


def _drop_none(values: dict) -> dict:
    return {key: value for key, value in values.items() if value is not None}


class OpineClient:
    """Async client for the Opine CRM REST API.

    Args:
        api_key: Opine API key.
        base_url: API root; defaults to production.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "X-API-Key": api_key,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_config(cls, config: OpineConfig, **kwargs) -> "OpineClient":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        """Create a short-lived httpx client for a single request."""
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        query = _drop_none(params or {})
        logger.debug("opine %s %s params=%s", method, path, query)

        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    url,
                    params=query or None,
                    json=_drop_none(body) if body is not None else None,
                )
        except httpx.TimeoutException as e:
            raise RemoteConnectionError(
                f"Opine API request timed out after {self._timeout}s: {method} {path}"
            ) from e
        except httpx.DecodingError as e:
            raise UnexpectedResponseError(
                f"Opine API returned an undecodable body for {method} {path}: {e}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteConnectionError(
                f"Opine API request failed: {method} {path}: {e}"
            ) from e

        if not response.is_success:
            logger.warning(
                "opine %s %s failed: %s %s",
                method, path, response.status_code, response.reason_phrase,
            )
            raise RemoteApiError(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Opine API returned a non-JSON body for {method} {path}"
            ) from e

    # -------------------------------------------------------------------------
    # Deals
    # -------------------------------------------------------------------------
    async def list_deals(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        include_summary: Optional[bool] = None,
        include_deleted: Optional[bool] = None,
    ) -> dict:
        return await self._request("GET", "/deals", params={
            "limit": limit,
            "offset": offset,
            "includeSummary": include_summary,
            "includeDeleted": include_deleted,
        })

    async def get_deal(self, deal_id: str, include_summary: Optional[bool] = None) -> dict:
        """Fetch one deal by Opine id or ``eid:``-prefixed external id."""
        return await self._request(
            "GET",
            f"/deals/{_encode_path_id(deal_id)}",
            params={"includeSummary": include_summary},
        )

    async def create_deal_note(self, deal_id: str, title: str, body: Any = None) -> dict:
        """Attach a note to a deal.  ``body`` (Slate nodes or markdown) is passed through."""
        return await self._request(
            "POST",
            f"/deals/{_encode_path_id(deal_id)}/notes",
            body={"title": title, "body": body},
        )

    # -------------------------------------------------------------------------
    # Evaluations
    # -------------------------------------------------------------------------
    async def list_evaluations(
        self, limit: Optional[int] = None, offset: Optional[int] = None,
    ) -> dict:
        return await self._request("GET", "/evaluations", params={
            "limit": limit,
            "offset": offset,
        })

    # -------------------------------------------------------------------------
    # Tickets
    # -------------------------------------------------------------------------
    async def list_tickets(
        self, limit: Optional[int] = None, offset: Optional[int] = None,
    ) -> dict:
        return await self._request("GET", "/tickets", params={
            "limit": limit,
            "offset": offset,
        })

    async def update_ticket(
        self,
        ticket_id: str,
        title: Optional[str] = None,
        type: Optional[str] = None,
        state: Optional[str] = None,
        description: Any = None,
        target_due_date: Optional[str] = None,
        deals: Optional[list] = None,
        labels: Optional[list] = None,
        vendor_entity_url: Optional[str] = None,
    ) -> dict:
        """Patch a ticket.  ``labels`` replaces every existing label."""
        return await self._request(
            "PATCH",
            f"/tickets/{_encode_path_id(ticket_id)}",
            body={
                "title": title,
                "type": type,
                "state": state,
                "description": description,
                "targetDueDate": target_due_date,
                "deals": deals,
                "labels": labels,
                "vendorEntityUrl": vendor_entity_url,
            },
        )

    async def create_ticket(
        self,
        title: str,
        type: str,
        state: str,
        description: Any = None,
        target_due_date: Optional[str] = None,
        deals: Optional[list] = None,
        labels: Optional[list] = None,
        vendor_entity_url: Optional[str] = None,
    ) -> dict:
        return await self._request("POST", "/tickets", body={
            "title": title,
            "type": type,
            "state": state,
            "description": description,
            "targetDueDate": target_due_date,
            "deals": deals,
            "labels": labels,
            "vendorEntityUrl": vendor_entity_url,
        })

    # -------------------------------------------------------------------------
    # Sales process metadata
    # -------------------------------------------------------------------------
    async def list_sales_processes(
        self, limit: Optional[int] = None, offset: Optional[int] = None,
    ) -> dict:
        return await self._request("GET", "/sales-processes", params={
            "limit": limit,
            "offset": offset,
        })

    async def list_sales_process_stages(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        include_deleted: Optional[bool] = None,
    ) -> dict:
        return await self._request("GET", "/sales-process-stages", params={
            "limit": limit,
            "offset": offset,
            "includeDeleted": include_deleted,
        })
