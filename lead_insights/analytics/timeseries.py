"""Fixed-length daily lead counts for chart x-axes.

Every generator returns exactly ``days`` entries, oldest first, ending with the
day containing ``now``. Days are local calendar days: a lead belongs to the day
whose midnight it is at or after and whose next midnight it is before. Leads
outside the window are ignored.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models import HIGH_INTENT, LOW_INTENT, ORIGINAL_SOURCES, UnifiedLead

DATE_FORMAT = "%Y-%m-%d"


def generate_time_series(
    leads: Iterable[UnifiedLead],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Daily totals with the high and low intent counts of each day."""

    window = _window(days, now)
    totals: Counter = Counter()
    high: Counter = Counter()
    low: Counter = Counter()
    for lead in _in_window(leads, window):
        day = lead.timestamp.date()
        totals[day] += 1
        if lead.lead_intent == HIGH_INTENT:
            high[day] += 1
        elif lead.lead_intent == LOW_INTENT:
            low[day] += 1

    return [
        {"date": _key(day), "leads": totals[day], "highIntent": high[day], "lowIntent": low[day]}
        for day in window
    ]


def generate_overview_timeline(
    leads: Iterable[UnifiedLead],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    window = _window(days, now)
    totals = Counter(lead.timestamp.date() for lead in _in_window(leads, window))
    return [{"date": _key(day), "leads": totals[day]} for day in window]


def generate_intent_time_series(
    leads: Iterable[UnifiedLead],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Daily high/medium/low intent split.

    ``medium`` is the residual ``total - high - low``. Intent data only holds
    High and Low today, so a non-zero medium count points at leads carrying
    some other intent value. It is reported as computed, never clamped.
    """

    return [
        {
            "date": point["date"],
            "high": point["highIntent"],
            "medium": point["leads"] - point["highIntent"] - point["lowIntent"],
            "low": point["lowIntent"],
        }
        for point in generate_time_series(leads, days, now)
    ]


def generate_time_series_by_source(
    leads: Iterable[UnifiedLead],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """One entry per day and original source tab: ``{date, source, count}``."""

    window = _window(days, now)
    counts = Counter((lead.timestamp.date(), lead.original_source) for lead in _in_window(leads, window))
    return [
        {"date": _key(day), "source": source, "count": counts[(day, source)]}
        for day in window
        for source in ORIGINAL_SOURCES
    ]


def _window(days: int, now: Optional[datetime]) -> List[date]:
    today = (now or datetime.now()).date()
    return [today - timedelta(days=offset) for offset in range(max(days, 0) - 1, -1, -1)]


def _in_window(leads: Iterable[UnifiedLead], window: Sequence[date]) -> Iterable[UnifiedLead]:
    if not window:
        return
    first, last = window[0], window[-1]
    for lead in leads:
        if first <= lead.timestamp.date() <= last:
            yield lead


def _key(day: date) -> str:
    return day.strftime(DATE_FORMAT)


__all__ = [
    "generate_time_series",
    "generate_overview_timeline",
    "generate_intent_time_series",
    "generate_time_series_by_source",
]
