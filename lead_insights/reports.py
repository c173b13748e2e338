"""Dashboard payloads assembled from the analytics functions.

Each ``build_*`` function turns an in-memory lead collection into the data
block one dashboard page consumes. :class:`ReportBuilder` loads the configured
tab exports and renders a named view; the envelope helpers wrap the result in
the ``{success, data, timestamp}`` response shape.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from . import analytics
from .analytics import FilterCriteria
from .config import (
    DEFAULT_DAYS,
    DEFAULT_RECENT_ACTIVITY_LIMIT,
    DEFAULT_TOP_LEADS_LIMIT,
    iter_enabled_tab_configs,
)
from .ingestion import load_leads
from .models import AI_CONVERSATION, LEAD_FORM, UnifiedLead

LOGGER = logging.getLogger(__name__)

Payload = Dict[str, Any]


# --- Page payloads ---

def build_overview_report(
    leads: Sequence[UnifiedLead],
    *,
    now: Optional[datetime] = None,
    days: int = DEFAULT_DAYS,
    recent_activity_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
) -> Payload:
    """Overview page: headline metrics over every lead, compared with last month."""

    now = now or datetime.now()
    comparison = analytics.compare_periods(leads, now)
    return {
        "metrics": analytics.compute_overview_metrics(leads, comparison.previous_month_leads),
        "recentActivity": analytics.convert_to_activity_items(leads, now, limit=recent_activity_limit),
        "timelineData": analytics.generate_overview_timeline(leads, days, now),
        "totalLeadsCount": len(leads),
        "currentMonthCount": len(comparison.current_month_leads),
    }


def build_lead_form_report(
    leads: Sequence[UnifiedLead],
    *,
    now: Optional[datetime] = None,
    days: int = DEFAULT_DAYS,
) -> Payload:
    stats = analytics.summarize_leads(leads)
    stats.pop("avgSentimentScore")
    return {
        "leads": [lead.as_row() for lead in leads],
        "stats": stats,
        "charts": {
            "intentDistribution": analytics.calculate_intent_distribution(leads),
            "statusDistribution": analytics.calculate_status_distribution(leads),
            "timeSeriesData": analytics.generate_intent_time_series(leads, days, now),
            "moveInTimingData": analytics.calculate_move_in_timing_distribution(leads),
            "incomeBracketData": analytics.calculate_income_bracket_distribution(leads),
            "apartmentInterestData": analytics.calculate_apartment_preference_distribution(leads),
            "petPreferenceData": analytics.calculate_pet_preference_distribution(leads),
            "leadScoreDistributionData": analytics.calculate_lead_score_distribution(leads),
            "leadSourcePerformanceData": analytics.calculate_lead_source_performance(leads),
            "employmentStatusData": analytics.calculate_employment_status_distribution(leads),
            "outreachTimeData": analytics.calculate_best_time_for_outreach(leads),
            "contactMethodData": analytics.calculate_contact_method_distribution(leads),
            "conversionFunnel": analytics.calculate_conversion_funnel(leads),
        },
    }


def build_ai_conversation_report(
    leads: Sequence[UnifiedLead],
    *,
    now: Optional[datetime] = None,
    days: int = DEFAULT_DAYS,
    top_leads_limit: int = DEFAULT_TOP_LEADS_LIMIT,
) -> Payload:
    return {
        "leads": [lead.as_row() for lead in leads],
        "stats": analytics.summarize_leads(leads),
        "charts": {
            "intentDistribution": analytics.calculate_intent_distribution(leads),
            "engagementDistribution": analytics.calculate_engagement_distribution(leads),
            "timeSeriesData": analytics.generate_time_series(leads, days, now),
            "moveInTimingData": analytics.calculate_move_in_timing_distribution(leads),
            "incomeBracketData": analytics.calculate_income_bracket_distribution(leads),
            "apartmentPreferenceData": analytics.calculate_apartment_preference_distribution(leads),
        },
        "topLeads": [lead.as_row() for lead in analytics.get_top_leads(leads, "engagement", top_leads_limit)],
    }


def build_stats_report(
    leads: Sequence[UnifiedLead],
    *,
    now: Optional[datetime] = None,
    days: int = DEFAULT_DAYS,
) -> Payload:
    return {
        "stats": analytics.calculate_lead_stats(leads),
        "sources": analytics.calculate_source_distribution(leads),
        "metrics": analytics.calculate_dashboard_metrics(leads, now),
        "funnel": analytics.calculate_conversion_funnel(leads),
        "timeSeries": analytics.generate_time_series(leads, days, now),
        "timeSeriesBySource": analytics.generate_time_series_by_source(leads, days, now),
    }


def build_leads_listing(
    leads: Sequence[UnifiedLead],
    *,
    criteria: Optional[FilterCriteria] = None,
    sort_by: str = "timestamp",
    order: str = "desc",
) -> Payload:
    selected = analytics.sort_leads(analytics.filter_leads(leads, criteria), sort_by, order)
    return {"leads": [lead.as_row() for lead in selected], "count": len(selected)}


# --- Envelopes ---

def success_envelope(data: Payload, now: Optional[datetime] = None) -> Payload:
    moment = now or datetime.now(timezone.utc)
    return {"success": True, "data": data, "timestamp": moment.isoformat()}


def error_envelope(error: str, message: Optional[str] = None) -> Payload:
    envelope: Payload = {"success": False, "error": error}
    if message:
        envelope["message"] = message
    return envelope


# --- Builder ---

VIEWS = ("overview", "lead-form", "ai-conversation", "stats", "leads")


class ReportBuilder:
    """Loads the configured tab exports and renders dashboard views from them.

    Leads are loaded afresh for every render; nothing is cached between calls.
    """

    def __init__(
        self,
        tabs: Iterable[Dict[str, Any]],
        *,
        days: int = DEFAULT_DAYS,
        recent_activity_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
        top_leads_limit: int = DEFAULT_TOP_LEADS_LIMIT,
        loader: Callable[..., List[UnifiedLead]] = load_leads,
    ) -> None:
        self._tabs = list(tabs)
        self._days = days
        self._recent_activity_limit = recent_activity_limit
        self._top_leads_limit = top_leads_limit
        self._loader = loader

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ReportBuilder":
        return cls(
            iter_enabled_tab_configs(config),
            days=config.get("days", DEFAULT_DAYS),
            recent_activity_limit=config.get("recent_activity_limit", DEFAULT_RECENT_ACTIVITY_LIMIT),
            top_leads_limit=config.get("top_leads_limit", DEFAULT_TOP_LEADS_LIMIT),
        )

    @property
    def tabs(self) -> List[Dict[str, Any]]:
        return list(self._tabs)

    def load(self) -> List[UnifiedLead]:
        """Load and normalise every configured tab, in configuration order."""

        leads: List[UnifiedLead] = []
        for tab in self._tabs:
            LOGGER.debug("Loading tab %s from %s", tab.get("name", tab["source"]), tab["path"])
            leads.extend(
                self._loader(
                    tab["path"],
                    tab["source"],
                    sheet_name=tab.get("sheet_name", 0),
                    column_mapping=tab.get("column_mapping"),
                )
            )
        return leads

    def render(
        self,
        view: str,
        *,
        now: Optional[datetime] = None,
        criteria: Optional[FilterCriteria] = None,
        sort_by: str = "timestamp",
        order: str = "desc",
    ) -> Payload:
        """Return the data block for ``view``."""

        if view not in VIEWS:
            raise ValueError(f"Unknown view '{view}'. Expected one of {list(VIEWS)}")

        now = now or datetime.now()
        leads = self.load()
        LOGGER.info("Rendering %s view over %s leads", view, len(leads))

        if view == "overview":
            return build_overview_report(
                leads, now=now, days=self._days, recent_activity_limit=self._recent_activity_limit
            )
        if view == "lead-form":
            return build_lead_form_report(_from_source(leads, LEAD_FORM), now=now, days=self._days)
        if view == "ai-conversation":
            return build_ai_conversation_report(
                _from_source(leads, AI_CONVERSATION), now=now, days=self._days, top_leads_limit=self._top_leads_limit
            )
        if view == "stats":
            return build_stats_report(leads, now=now, days=self._days)
        return build_leads_listing(leads, criteria=criteria, sort_by=sort_by, order=order)


def _from_source(leads: Iterable[UnifiedLead], source: str) -> List[UnifiedLead]:
    return [lead for lead in leads if lead.original_source == source]


__all__ = [
    "ReportBuilder",
    "VIEWS",
    "build_overview_report",
    "build_lead_form_report",
    "build_ai_conversation_report",
    "build_stats_report",
    "build_leads_listing",
    "success_envelope",
    "error_envelope",
]
