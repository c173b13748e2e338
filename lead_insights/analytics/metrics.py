"""Headline metrics, period-over-period deltas and funnel rates."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models import DEFAULT_STATUS, HIGH_INTENT, UnifiedLead
from .distributions import calculate_source_distribution
from .rounding import percent, round_half_up

ZERO_PERCENT_CHANGE = "+0%"
ZERO_POINTS_CHANGE = "+0pts"


@dataclass
class PeriodComparison:
    """Leads captured this calendar month and during the whole previous month."""

    current_month_leads: List[UnifiedLead] = field(default_factory=list)
    previous_month_leads: List[UnifiedLead] = field(default_factory=list)


def compare_periods(leads: Iterable[UnifiedLead], now: Optional[datetime] = None) -> PeriodComparison:
    """Split leads by calendar month relative to ``now``.

    The current month runs from its first midnight up to and including
    ``now``; the previous month runs from its first midnight up to, but not
    including, the start of the current month.
    """

    now = now or datetime.now()
    current_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    previous_start = (current_start - timedelta(days=1)).replace(day=1)

    comparison = PeriodComparison()
    for lead in leads:
        if current_start <= lead.timestamp <= now:
            comparison.current_month_leads.append(lead)
        elif previous_start <= lead.timestamp < current_start:
            comparison.previous_month_leads.append(lead)
    return comparison


def compute_overview_metrics(
    leads: Sequence[UnifiedLead],
    previous_period_leads: Optional[Sequence[UnifiedLead]] = None,
) -> Dict[str, Any]:
    """Totals for the overview cards plus their change against a previous period.

    Without previous-period leads every change is the zero sentinel (``"+0%"``
    or ``"+0pts"``). Changes carry an explicit ``+`` when non-negative.
    """

    total = len(leads)
    high_intent_percentage = percent(_high_intent_count(leads), total)
    avg_score = _average_score(leads)

    total_change = ZERO_PERCENT_CHANGE
    high_intent_change = ZERO_PERCENT_CHANGE
    avg_score_change = ZERO_POINTS_CHANGE

    if previous_period_leads:
        previous_total = len(previous_period_leads)
        total_change = _signed(round_half_up(percent(total - previous_total, previous_total), 1), "%")
        previous_high_intent = percent(_high_intent_count(previous_period_leads), previous_total)
        high_intent_change = _signed(round_half_up(high_intent_percentage - previous_high_intent, 1), "%")
        avg_score_change = _signed(round_half_up(avg_score - _average_score(previous_period_leads)), "pts")

    return {
        "totalLeads": total,
        "highIntentPercentage": round_half_up(high_intent_percentage),
        "avgLeadScore": round_half_up(avg_score),
        "totalLeadsChange": total_change,
        "highIntentChange": high_intent_change,
        "avgScoreChange": avg_score_change,
    }


def calculate_conversion_funnel(leads: Sequence[UnifiedLead]) -> Dict[str, Any]:
    total = len(leads)
    contacted = _status_count(leads, "Contacted")
    qualified = _status_count(leads, "Qualified")
    converted = _status_count(leads, "Converted")
    return {
        "total": total,
        "contacted": contacted,
        "qualified": qualified,
        "converted": converted,
        "contactedRate": percent(contacted, total),
        "qualifiedRate": percent(qualified, total),
        "convertedRate": percent(converted, total),
    }


def summarize_leads(leads: Sequence[UnifiedLead]) -> Dict[str, Any]:
    """Summary figures shown above each tab's charts."""

    total = len(leads)
    high_intent = _high_intent_count(leads)
    sentiment_total = sum(_number(lead.sentiment_score) for lead in leads)
    return {
        "totalLeads": total,
        "highIntentCount": high_intent,
        "highIntentPercentage": round_half_up(percent(high_intent, total)),
        "avgLeadScore": round_half_up(_average_score(leads)),
        "avgSentimentScore": round_half_up(sentiment_total / total, 1) if total else 0,
    }


def calculate_lead_stats(leads: Sequence[UnifiedLead]) -> Dict[str, Any]:
    """Per-status counts and the overall conversion rate (two decimals)."""

    total = len(leads)
    stats: Dict[str, Any] = {"total": total}
    for status in ("New", "Contacted", "Qualified", "Converted", "Lost"):
        stats[status.lower()] = _status_count(leads, status)
    stats["conversionRate"] = round_half_up(percent(stats["converted"], total), 2)
    return stats


def calculate_dashboard_metrics(leads: Sequence[UnifiedLead], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Lead counts since the start of today, this week (Sunday) and this month."""

    now = now or datetime.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = today_start - timedelta(days=(today_start.weekday() + 1) % 7)
    month_start = today_start.replace(day=1)

    sources = calculate_source_distribution(leads)
    top_source = sources[0]["name"] if leads and sources else "Other"
    return {
        "todayLeads": sum(1 for lead in leads if lead.timestamp >= today_start),
        "weekLeads": sum(1 for lead in leads if lead.timestamp >= week_start),
        "monthLeads": sum(1 for lead in leads if lead.timestamp >= month_start),
        "conversionRate": calculate_lead_stats(leads)["conversionRate"],
        "topSource": top_source,
    }


def convert_to_activity_items(
    leads: Iterable[UnifiedLead],
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Rows for the recent-activity table, newest first.

    The input collection is left in its original order.
    """

    now = now or datetime.now()
    ordered = sorted(leads, key=lambda lead: lead.timestamp, reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    items: List[Dict[str, Any]] = []
    for lead in ordered:
        item = {
            "id": lead.id,
            "name": lead.name,
            "email": lead.email,
            "intent": lead.lead_intent,
            "score": lead.lead_score,
            "source": lead.display_source(),
            "time": format_relative_time(lead.timestamp, now),
        }
        if lead.lead_status:
            item["status"] = lead.lead_status
        items.append(item)
    return items


def format_relative_time(moment: datetime, now: datetime) -> str:
    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return f"{moment:%b} {moment.day}"


# --- Helpers ---

def _signed(value: float, unit: str) -> str:
    if value >= 0:
        return f"+{value}{unit}"
    return f"{value}{unit}"


def _number(value: Any) -> float:
    """Coerce a score to a finite number; anything else counts as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return number


def _average_score(leads: Sequence[UnifiedLead]) -> float:
    if not leads:
        return 0
    return sum(_number(lead.lead_score) for lead in leads) / len(leads)


def _high_intent_count(leads: Iterable[UnifiedLead]) -> int:
    return sum(1 for lead in leads if lead.lead_intent == HIGH_INTENT)


def _status_count(leads: Iterable[UnifiedLead], status: str) -> int:
    return sum(1 for lead in leads if (lead.lead_status or DEFAULT_STATUS) == status)


__all__ = [
    "PeriodComparison",
    "compare_periods",
    "compute_overview_metrics",
    "calculate_conversion_funnel",
    "summarize_leads",
    "calculate_lead_stats",
    "calculate_dashboard_metrics",
    "convert_to_activity_items",
    "format_relative_time",
    "ZERO_PERCENT_CHANGE",
    "ZERO_POINTS_CHANGE",
]
