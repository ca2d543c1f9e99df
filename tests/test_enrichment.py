"""Tests for DealEnrichmentResolver and find_by_id."""

import pytest

from core.enrichment import LOOKUP_PAGE_SIZE, DealEnrichmentResolver, find_by_id
from core.errors import RemoteApiError, UnexpectedResponseError

from conftest import FakeOpineClient

PROCESSES = [
    {"id": 7, "name": "Mid-market", "isDefault": False},
    {"id": 42, "name": "Enterprise", "isDefault": True},
]
STAGES = [
    {"id": 3, "title": "Discovery", "category": "OPEN"},
    {"id": 9, "title": "Negotiation", "category": "OPEN"},
]


def _deal(process_id=None, stage_id=None):
    return {
        "id": "deal-1",
        "name": "Acme renewal",
        "salesProcessId": process_id,
        "salesProcessStageId": stage_id,
    }


class TestFindById:

    def test_first_match_wins(self):
        items = [{"id": 1, "n": "a"}, {"id": 1, "n": "b"}]
        assert find_by_id(items, 1) == {"id": 1, "n": "a"}

    def test_no_match(self):
        assert find_by_id([{"id": 1}], 2) is None
        assert find_by_id([], 2) is None

    def test_string_and_int_ids_do_not_match(self):
        assert find_by_id([{"id": "42"}], 42) is None


class TestDescribe:

    @pytest.mark.asyncio
    async def test_resolves_process_and_stage(self):
        client = FakeOpineClient(deal=_deal(42, 9), processes=PROCESSES, stages=STAGES)
        view = await DealEnrichmentResolver(client).describe("deal-1", include_summary=True)

        assert view.to_dict() == {
            "deal": _deal(42, 9),
            "salesProcess": PROCESSES[1],
            "salesProcessStage": STAGES[1],
        }
        assert client.calls[0] == ("get_deal", ("deal-1",), {"include_summary": True})
        assert client.calls[1] == ("list_sales_processes", (), {"limit": LOOKUP_PAGE_SIZE})
        assert client.calls[2] == ("list_sales_process_stages", (), {"limit": LOOKUP_PAGE_SIZE})

    @pytest.mark.asyncio
    async def test_dangling_process_degrades_to_none(self):
        client = FakeOpineClient(deal=_deal(999, 3), processes=PROCESSES, stages=STAGES)
        view = await DealEnrichmentResolver(client).describe("deal-1")

        assert view.sales_process is None
        # The stage lookup still happens and still resolves.
        assert view.sales_process_stage == STAGES[0]

    @pytest.mark.asyncio
    async def test_dangling_stage_does_not_affect_process(self):
        client = FakeOpineClient(deal=_deal(7, 12345), processes=PROCESSES, stages=STAGES)
        view = await DealEnrichmentResolver(client).describe("deal-1")

        assert view.sales_process == PROCESSES[0]
        assert view.sales_process_stage is None

    @pytest.mark.asyncio
    async def test_null_keys_issue_no_lookups(self):
        client = FakeOpineClient(deal=_deal(None, None), processes=PROCESSES, stages=STAGES)
        view = await DealEnrichmentResolver(client).describe("deal-1")

        assert view.to_dict() == {
            "deal": _deal(),
            "salesProcess": None,
            "salesProcessStage": None,
        }
        assert client.methods_called() == ["get_deal"]

    @pytest.mark.asyncio
    async def test_missing_keys_issue_no_lookups(self):
        client = FakeOpineClient(deal={"id": "deal-1", "name": "No process"})
        await DealEnrichmentResolver(client).describe("deal-1")
        assert client.methods_called() == ["get_deal"]

    @pytest.mark.asyncio
    async def test_only_process_key_skips_stage_lookup(self):
        client = FakeOpineClient(deal=_deal(42, None), processes=PROCESSES)
        view = await DealEnrichmentResolver(client).describe("deal-1")
        assert view.sales_process == PROCESSES[1]
        assert client.methods_called() == ["get_deal", "list_sales_processes"]

    @pytest.mark.asyncio
    async def test_non_integer_foreign_key_rejected(self):
        client = FakeOpineClient(deal={"id": "deal-1", "salesProcessId": "42"})
        with pytest.raises(UnexpectedResponseError, match="salesProcessId"):
            await DealEnrichmentResolver(client).describe("deal-1")

    @pytest.mark.asyncio
    async def test_remote_errors_propagate(self):
        class FailingClient(FakeOpineClient):
            async def list_sales_processes(self, **kwargs):
                raise RemoteApiError(500, "Internal Server Error")

        client = FailingClient(deal=_deal(42, 9), stages=STAGES)
        with pytest.raises(RemoteApiError):
            await DealEnrichmentResolver(client).describe("deal-1")
