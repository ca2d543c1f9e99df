# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# Opine's remote schemas (Deal, Ticket, Evaluation, SalesProcess, ...) change
# between API versions: ticket states were renamed, fields come and go.  So
# remote records travel through this server as plain decoded JSON dicts and
# are handed back to the assistant untouched.
#
# The only things modelled here are:
#   - the enum vocabularies the tool signatures advertise to the LLM
#   - the few deal fields the enrichment logic actually reads
#   - the composite result of describe_deal_sales_process
#
# DESIGN PRINCIPLE - "Validate only what you inspect":
#   If the core logic doesn't branch on a field, we don't check it.
# =============================================================================

from dataclasses import dataclass
from typing import Any, Literal, Optional

from core.errors import UnexpectedResponseError


# -----------------------------------------------------------------------------
# Vocabularies
# -----------------------------------------------------------------------------
TicketType = Literal[
    "BUG", "FEATURE", "CUSTOM_1", "CUSTOM_2", "CUSTOM_3", "CUSTOM_4", "CUSTOM_5",
]
TicketState = Literal[
    "OPEN", "PRIORITIZING", "ROADMAP", "DEFERRED", "IN_PROGRESS", "CLOSED",
]
# Ticket → deal links are sent as {"id", "priority"} objects, priority one of
# BLOCKER | IMPORTANT | NICE_TO_HAVE; update_ticket also accepts "delete": true
# to drop an existing link.  Links are passed through unchecked.


# -----------------------------------------------------------------------------
# DealReference - the part of a Deal the enrichment resolver reads
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DealReference:
    """A deal payload plus its two sales-process foreign keys."""

    id: Any
    sales_process_id: Optional[int]
    sales_process_stage_id: Optional[int]
    payload: dict

    @classmethod
    def from_payload(cls, payload: Any) -> "DealReference":
        if not isinstance(payload, dict):
            raise UnexpectedResponseError(
                f"Expected a deal object, got {type(payload).__name__}"
            )
        return cls(
            id=payload.get("id"),
            sales_process_id=_foreign_key(payload, "salesProcessId"),
            sales_process_stage_id=_foreign_key(payload, "salesProcessStageId"),
            payload=payload,
        )


def _foreign_key(payload: dict, field: str) -> Optional[int]:
    value = payload.get(field)
    if value is None:
        return None
    # bool is an int subclass; a true/false foreign key is garbage.
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnexpectedResponseError(
            f"Deal field '{field}' must be an integer or null, got {value!r}"
        )
    return value


# -----------------------------------------------------------------------------
# DealSalesProcessView - output of describe_deal_sales_process
# -----------------------------------------------------------------------------
@dataclass
class DealSalesProcessView:
    """A deal with its sales process and stage resolved (or None)."""

    deal: dict
    sales_process: Optional[dict] = None
    sales_process_stage: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "deal": self.deal,
            "salesProcess": self.sales_process,
            "salesProcessStage": self.sales_process_stage,
        }


# -----------------------------------------------------------------------------
# Paginated responses
# -----------------------------------------------------------------------------
# Every list endpoint answers {items, limit, offset, totalCount}.
def page_items(payload: Any) -> list:
    """Return the ``items`` array of a paginated response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise UnexpectedResponseError("Expected a paginated response with an 'items' list")
    return payload["items"]
