# =============================================================================
# core/enrichment.py  -  Deal → Sales Process Resolution
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   A deal only carries numeric salesProcessId / salesProcessStageId foreign
#   keys.  The API has no "expand" option, so describe() fetches the deal,
#   then lists processes and stages and scans for the matching ids.
#
# RULES:
#   - A null foreign key issues no lookup at all.
#   - The two lookups are independent: a missing process does not stop the
#     stage lookup, and vice versa.
#   - A key that matches nothing in the fetched page resolves to None.  It
#     may be stale (deleted) or sit beyond the first LOOKUP_PAGE_SIZE rows.
#     That is a known limitation; we do not page further.
#   - Remote errors propagate unchanged.
# =============================================================================

import logging
from typing import Any, Iterable, Optional

from core.models import DealReference, DealSalesProcessView, page_items
from core.opine_client import OpineClient

logger = logging.getLogger(__name__)

LOOKUP_PAGE_SIZE = 1000


def find_by_id(items: Iterable[Any], target_id: Any) -> Optional[dict]:
    """Return the first dict in ``items`` whose ``id`` equals ``target_id``."""
    for item in items:
        if isinstance(item, dict) and item.get("id") == target_id:
            return item
    return None


class DealEnrichmentResolver:
    """Builds the {deal, salesProcess, salesProcessStage} view of a deal."""

    def __init__(self, client: OpineClient) -> None:
        self._client = client

    async def describe(
        self, deal_id: str, include_summary: bool = False,
    ) -> DealSalesProcessView:
        deal = DealReference.from_payload(
            await self._client.get_deal(deal_id, include_summary=include_summary)
        )
        view = DealSalesProcessView(deal=deal.payload)

        if deal.sales_process_id is not None:
            processes = await self._client.list_sales_processes(limit=LOOKUP_PAGE_SIZE)
            view.sales_process = find_by_id(page_items(processes), deal.sales_process_id)
            if view.sales_process is None:
                logger.info(
                    "deal %s: sales process %s not found in first %d processes",
                    deal.id, deal.sales_process_id, LOOKUP_PAGE_SIZE,
                )

        if deal.sales_process_stage_id is not None:
            stages = await self._client.list_sales_process_stages(limit=LOOKUP_PAGE_SIZE)
            view.sales_process_stage = find_by_id(
                page_items(stages), deal.sales_process_stage_id,
            )
            if view.sales_process_stage is None:
                logger.info(
                    "deal %s: sales process stage %s not found in first %d stages",
                    deal.id, deal.sales_process_stage_id, LOOKUP_PAGE_SIZE,
                )

        return view
