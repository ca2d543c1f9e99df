"""Shared fixtures.

Provides:
- FakeOpineClient: an in-memory stand-in for OpineClient that records every
  call, so tests can assert exactly which API requests were (or were not) made
- mock_transport / opine_client: a real OpineClient wired to httpx.MockTransport
"""

from __future__ import annotations

import json

import httpx
import pytest

from core.opine_client import OpineClient

TEST_BASE_URL = "https://api.test.opine/v1"


class FakeOpineClient:
    """Records calls and answers from canned data."""

    def __init__(self, deal=None, processes=None, stages=None):
        self.deal = deal if deal is not None else {"id": "deal-1", "name": "Acme renewal"}
        self.processes = processes if processes is not None else []
        self.stages = stages if stages is not None else []
        self.calls: list[tuple[str, tuple, dict]] = []

    def _record(self, method, *args, **kwargs):
        self.calls.append((method, args, kwargs))

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def methods_called(self) -> list[str]:
        return [method for method, _, _ in self.calls]

    @staticmethod
    def _page(items, limit=None, offset=None):
        return {
            "items": items,
            "limit": limit if limit is not None else 100,
            "offset": offset or 0,
            "totalCount": len(items),
        }

    async def list_deals(self, **kwargs):
        self._record("list_deals", **kwargs)
        return self._page([self.deal])

    async def get_deal(self, deal_id, **kwargs):
        self._record("get_deal", deal_id, **kwargs)
        return self.deal

    async def list_evaluations(self, **kwargs):
        self._record("list_evaluations", **kwargs)
        return self._page([])

    async def list_tickets(self, **kwargs):
        self._record("list_tickets", **kwargs)
        return self._page([])

    async def list_sales_processes(self, **kwargs):
        self._record("list_sales_processes", **kwargs)
        return self._page(self.processes, kwargs.get("limit"))

    async def list_sales_process_stages(self, **kwargs):
        self._record("list_sales_process_stages", **kwargs)
        return self._page(self.stages, kwargs.get("limit"))

    async def update_ticket(self, ticket_id, **kwargs):
        self._record("update_ticket", ticket_id, **kwargs)
        return {"id": int(ticket_id), **{k: v for k, v in kwargs.items() if v is not None}}

    async def create_deal_note(self, deal_id, title, **kwargs):
        self._record("create_deal_note", deal_id, title, **kwargs)
        return {"id": 1, "title": title, "body": kwargs.get("body")}

    async def create_ticket(self, title, type, state, **kwargs):
        self._record("create_ticket", title, type, state, **kwargs)
        return {"id": 7, "title": title, "type": type, "state": state}


@pytest.fixture
def fake_client():
    return FakeOpineClient()


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays a response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload = {}

    def respond_with(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else {}
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
def recorder():
    return RecordingTransport()


@pytest.fixture
def opine_client(recorder):
    return OpineClient(
        api_key="test-api-key",
        base_url=TEST_BASE_URL,
        timeout=5.0,
        transport=httpx.MockTransport(recorder),
    )
