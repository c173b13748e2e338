"""Pure aggregation functions over collections of :class:`UnifiedLead` records.

Nothing in this package performs I/O or keeps state between calls; functions
that depend on the current time take an explicit ``now``.
"""
from __future__ import annotations

from .distributions import (
    calculate_apartment_preference_distribution,
    calculate_best_time_for_outreach,
    calculate_contact_method_distribution,
    calculate_employment_status_distribution,
    calculate_engagement_distribution,
    calculate_income_bracket_distribution,
    calculate_intent_distribution,
    calculate_lead_score_distribution,
    calculate_lead_source_performance,
    calculate_move_in_timing_distribution,
    calculate_pet_preference_distribution,
    calculate_source_distribution,
    calculate_status_distribution,
)
from .filters import ALL, FilterCriteria, filter_leads, get_top_leads, sort_leads
from .metrics import (
    PeriodComparison,
    calculate_conversion_funnel,
    calculate_dashboard_metrics,
    calculate_lead_stats,
    compare_periods,
    compute_overview_metrics,
    convert_to_activity_items,
    summarize_leads,
)
from .timeseries import (
    generate_intent_time_series,
    generate_overview_timeline,
    generate_time_series,
    generate_time_series_by_source,
)

__all__ = [
    "ALL",
    "FilterCriteria",
    "filter_leads",
    "sort_leads",
    "get_top_leads",
    "calculate_intent_distribution",
    "calculate_source_distribution",
    "calculate_status_distribution",
    "calculate_move_in_timing_distribution",
    "calculate_income_bracket_distribution",
    "calculate_apartment_preference_distribution",
    "calculate_pet_preference_distribution",
    "calculate_engagement_distribution",
    "calculate_employment_status_distribution",
    "calculate_best_time_for_outreach",
    "calculate_contact_method_distribution",
    "calculate_lead_source_performance",
    "calculate_lead_score_distribution",
    "generate_time_series",
    "generate_overview_timeline",
    "generate_intent_time_series",
    "generate_time_series_by_source",
    "PeriodComparison",
    "compare_periods",
    "compute_overview_metrics",
    "calculate_conversion_funnel",
    "summarize_leads",
    "calculate_lead_stats",
    "calculate_dashboard_metrics",
    "convert_to_activity_items",
]
