"""Predicate filtering and stable sorting over lead collections."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..models import (
    AI_CONVERSATION,
    AI_CONVERSATION_SOURCE,
    LEAD_FORM,
    LEAD_FORM_SOURCE,
    OVERVIEW,
    UnifiedLead,
)

ALL = "all"

_SORT_ORDERS = ("asc", "desc")


@dataclass
class FilterCriteria:
    """Independently optional predicates; ``None`` or ``"all"`` disables one."""

    source: Optional[str] = None
    intent: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


def filter_leads(leads: Iterable[UnifiedLead], criteria: Optional[FilterCriteria] = None) -> List[UnifiedLead]:
    """Return the leads matching every active predicate in ``criteria``."""

    criteria = criteria or FilterCriteria()
    return [lead for lead in leads if _matches(lead, criteria)]


def _matches(lead: UnifiedLead, criteria: FilterCriteria) -> bool:
    if _active(criteria.source) and not _matches_source(lead, criteria.source):
        return False
    if _active(criteria.intent) and lead.lead_intent != criteria.intent:
        return False
    if _active(criteria.status) and lead.lead_status != criteria.status:
        return False
    if criteria.date_from is not None and lead.timestamp < criteria.date_from:
        return False
    if criteria.date_to is not None and lead.timestamp > criteria.date_to:
        return False
    if criteria.search:
        needle = criteria.search.lower()
        haystacks = (lead.name, lead.email, lead.phone)
        if not any(value and needle in value.lower() for value in haystacks):
            return False
    return True


def _active(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def _matches_source(lead: UnifiedLead, source: str) -> bool:
    if source in ("lead-form", LEAD_FORM):
        return lead.lead_source == LEAD_FORM_SOURCE or lead.original_source == LEAD_FORM
    if source in ("ai-conversation", AI_CONVERSATION):
        return lead.lead_source == AI_CONVERSATION_SOURCE or lead.original_source == AI_CONVERSATION
    if source == OVERVIEW:
        return lead.original_source == OVERVIEW
    return True


_FIELD_NAMES = tuple(item.name for item in fields(UnifiedLead))
_CAMEL_TO_FIELD: Dict[str, str] = {
    name.split("_")[0] + "".join(part.capitalize() for part in name.split("_")[1:]): name for name in _FIELD_NAMES
}


def sort_leads(
    leads: Iterable[UnifiedLead],
    key: str = "timestamp",
    order: str = "desc",
) -> List[UnifiedLead]:
    """Return a new list sorted on ``key``.

    The sort is stable and leads whose value is ``None`` always come last, in
    their original order, whichever direction is requested. ``key`` may be the
    attribute name or its camelCase spelling (``"leadScore"``).
    """

    field = _CAMEL_TO_FIELD.get(key, key)
    if field not in _FIELD_NAMES:
        raise ValueError(f"Cannot sort leads by unknown field '{key}'")
    if order not in _SORT_ORDERS:
        raise ValueError(f"Sort order must be one of {_SORT_ORDERS}, got '{order}'")

    leads = list(leads)
    present = [lead for lead in leads if getattr(lead, field) is not None]
    missing = [lead for lead in leads if getattr(lead, field) is None]
    present.sort(key=lambda lead: getattr(lead, field), reverse=order == "desc")
    return present + missing


def get_top_leads(leads: Iterable[UnifiedLead], metric: str = "score", limit: int = 10) -> List[UnifiedLead]:
    """Return the best ``limit`` leads by lead score or by engagement (sentiment score)."""

    if metric == "score":
        ranked = sorted(leads, key=lambda lead: lead.lead_score or 0, reverse=True)
    elif metric == "engagement":
        ranked = sorted(leads, key=lambda lead: lead.sentiment_score or 0, reverse=True)
    else:
        raise ValueError(f"Unknown ranking metric '{metric}'. Use 'score' or 'engagement'")
    return ranked[:limit]


__all__ = ["FilterCriteria", "filter_leads", "sort_leads", "get_top_leads", "ALL"]
