"""Categorical breakdowns of lead collections for dashboard charts.

Every calculator returns a list of JSON-ready rows shaped like
``{"name", "value", "percentage", "fill"}`` (some charts add alias keys such
as ``count`` or ``range``), ranked by descending ``value``. Ties keep the
order of the known categories. ``percentage`` is the half-up rounded share of
the lead count, rendered as ``"67%"``.

Values no category accepts are counted in an explicit fallback bucket, so the
rows of a single-valued attribute always add up to the number of leads. An
empty collection yields zero rows for every known category instead of an
empty list.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..ingestion.vocabulary import (
    APARTMENT_RULES,
    APARTMENT_TYPES,
    CONTACT_METHOD_RULES,
    CONTACT_METHODS,
    EMPLOYMENT_RULES,
    EMPLOYMENT_STATUSES,
    ENGAGEMENT_LEVELS,
    ENGAGEMENT_RULES,
    ENGAGEMENT_UNKNOWN,
    INCOME_BRACKETS,
    INCOME_RULES,
    MOVE_IN_RULES,
    MOVE_IN_TIMINGS,
    OUTREACH_TIME_RULES,
    OUTREACH_TIMES,
    PET_DEFAULT,
    PET_PREFERENCES,
    PET_RULES,
    classify,
    clean_text,
)
from ..models import (
    AI_CONVERSATION,
    AI_CONVERSATION_SOURCE,
    DEFAULT_STATUS,
    HIGH_INTENT,
    LEAD_FORM,
    LEAD_FORM_SOURCE,
    LEAD_INTENTS,
    LEAD_SOURCES,
    LEAD_STATUSES,
    LOW_INTENT,
    NOT_SPECIFIED,
    OTHER,
    OTHER_SOURCE,
    UnifiedLead,
)
from . import colors
from .rounding import percent, round_half_up

Bucket = Dict[str, Any]
# Alias key -> "name" or "value".
Aliases = Mapping[str, str]

DIRECT = "Direct"


def calculate_intent_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    """High and Low are always reported; other intents fall into ``Other``."""

    return _distribution(
        leads,
        lambda lead: lead.lead_intent if lead.lead_intent in LEAD_INTENTS else OTHER,
        categories=LEAD_INTENTS,
        palette={HIGH_INTENT: colors.GREEN, LOW_INTENT: colors.ORANGE},
        keep_empty=True,
    )


def calculate_source_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        _source_bucket,
        categories=LEAD_SOURCES,
        palette={
            LEAD_FORM_SOURCE: colors.BRAND_PRIMARY,
            AI_CONVERSATION_SOURCE: colors.BLUE,
            OTHER_SOURCE: colors.GRAY,
        },
    )


def _source_bucket(lead: UnifiedLead) -> str:
    if lead.lead_source in (LEAD_FORM_SOURCE, AI_CONVERSATION_SOURCE):
        return lead.lead_source
    if lead.original_source == LEAD_FORM:
        return LEAD_FORM_SOURCE
    if lead.original_source == AI_CONVERSATION:
        return AI_CONVERSATION_SOURCE
    return OTHER_SOURCE


def calculate_status_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    """Leads without a status count as ``New``; the leads themselves are untouched."""

    return _distribution(
        leads,
        lambda lead: lead.lead_status or DEFAULT_STATUS,
        categories=LEAD_STATUSES,
        palette={
            "New": colors.BLUE,
            "Contacted": colors.PURPLE,
            "Qualified": colors.ORANGE,
            "Converted": colors.GREEN,
            "Lost": colors.RED,
        },
    )


def calculate_move_in_timing_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.move_in_timing, MOVE_IN_RULES, OTHER),
        categories=MOVE_IN_TIMINGS,
        palette={
            "Within 30 days": colors.BRAND_PRIMARY,
            "31 to 60 days": colors.BLUE,
            "61 to 90 days": colors.PURPLE,
            "90+ days": colors.ORANGE,
            "1-3 months": colors.BLUE,
            "3-6 months": colors.PURPLE,
            "6+ months": colors.BRAND_TERTIARY,
            NOT_SPECIFIED: colors.GRAY,
        },
        aliases={"timing": "name", "count": "value"},
    )


def calculate_income_bracket_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.income_range, INCOME_RULES, OTHER),
        categories=INCOME_BRACKETS,
        palette={
            "Under R10,000": colors.RED,
            "R10,000 - R15,000": colors.ORANGE,
            "R15,000 - R20,000": colors.BLUE,
            "R20,000 - R30,000": colors.PURPLE,
            "R30,000 - R40,000": colors.BRAND_PRIMARY,
            "R30,000+": colors.GREEN,
            "R40,000+": colors.GREEN,
            NOT_SPECIFIED: colors.GRAY,
        },
        aliases={"bracket": "name", "range": "name", "count": "value"},
    )


def calculate_apartment_preference_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    """Count every comma separated choice of a multi-select answer.

    A lead choosing two apartment types lands in two buckets, so the values
    may add up to more than the number of leads.
    """

    return _distribution(
        leads,
        _apartment_buckets,
        categories=APARTMENT_TYPES,
        palette={
            "Studio Apartment": colors.GRAY,
            "1 Bedroom 1 Bathroom Apartment": colors.BLUE,
            "2 Bedroom 1 Bathroom Apartment": colors.PURPLE,
            "2 Bedroom 2 Bathroom Apartment": colors.BRAND_PRIMARY,
            "1 Bedroom Penthouse": colors.GREEN,
            "2 Bedroom Penthouse": colors.ORANGE,
            "1 Bedroom Apartment": colors.BRAND_SECONDARY,
            NOT_SPECIFIED: colors.GRAY,
        },
        aliases={"type": "name", "count": "value"},
        multi_valued=True,
    )


def _apartment_buckets(lead: UnifiedLead) -> List[str]:
    text = clean_text(lead.apartment_preference)
    if text is None:
        return [NOT_SPECIFIED]
    buckets: List[str] = []
    for part in text.split(","):
        if clean_text(part) is None:
            continue
        buckets.append(classify(part, APARTMENT_RULES, default=OTHER))
    return buckets or [NOT_SPECIFIED]


def calculate_pet_preference_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.pets, PET_RULES, PET_DEFAULT),
        categories=PET_PREFERENCES,
        palette={
            "No": colors.BLUE,
            "Yes (within policy)": colors.GREEN,
            "Yes (outside policy)": colors.ORANGE,
            NOT_SPECIFIED: colors.GRAY,
        },
    )


def calculate_engagement_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: classify(lead.engagement_level, ENGAGEMENT_RULES, default=ENGAGEMENT_UNKNOWN)
        or ENGAGEMENT_UNKNOWN,
        categories=ENGAGEMENT_LEVELS,
        palette={
            "High": colors.GREEN,
            "Medium": colors.BLUE,
            "Low": colors.ORANGE,
            ENGAGEMENT_UNKNOWN: colors.GRAY,
        },
    )


def calculate_employment_status_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.employment_status, EMPLOYMENT_RULES, OTHER),
        categories=EMPLOYMENT_STATUSES,
        palette={
            "Employed full-time": colors.GREEN,
            "Employed part-time": colors.BLUE,
            "Self-employed": colors.PURPLE,
            "Contract or probation": colors.ORANGE,
            "Unemployed": colors.RED,
            NOT_SPECIFIED: colors.GRAY,
        },
        aliases={"status": "name", "count": "value"},
    )


def calculate_best_time_for_outreach(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.best_time_for_outreach, OUTREACH_TIME_RULES, OTHER),
        categories=OUTREACH_TIMES,
        palette={
            "Morning": colors.BLUE,
            "Afternoon": colors.PURPLE,
            "Evening": colors.ORANGE,
            "Anytime": colors.GREEN,
            NOT_SPECIFIED: colors.GRAY,
        },
    )


def calculate_contact_method_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    return _distribution(
        leads,
        lambda lead: _vocabulary_bucket(lead.preferred_contact_method, CONTACT_METHOD_RULES, OTHER),
        categories=CONTACT_METHODS,
        palette={
            "WhatsApp": colors.GREEN,
            "Email": colors.BLUE,
            "Phone Call": colors.PURPLE,
            NOT_SPECIFIED: colors.GRAY,
        },
    )


def calculate_lead_source_performance(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    """Breakdown by UTM source; leads without one are ``Direct`` traffic."""

    return _distribution(
        leads,
        lambda lead: clean_text(lead.utm_source) or DIRECT,
        categories=("Facebook", "Instagram", "Social", "Google", "TikTok", DIRECT),
        palette={
            "Facebook": colors.BLUE,
            "Instagram": colors.PURPLE,
            "Social": colors.ORANGE,
            "Google": colors.GREEN,
            "TikTok": colors.BRAND_PRIMARY,
            DIRECT: colors.GRAY,
        },
    )


# Upper bounds are inclusive; anything above the last bound is "101+".
_SCORE_RANGES: Sequence[Tuple[Optional[float], str, str]] = (
    (40, "0-40", colors.RED),
    (60, "41-60", colors.ORANGE),
    (80, "61-80", colors.BLUE),
    (100, "81-100", colors.PURPLE),
    (None, "101+", colors.GREEN),
)


def calculate_lead_score_distribution(leads: Sequence[UnifiedLead]) -> List[Bucket]:
    """Histogram of lead scores over fixed ranges, in ascending range order."""

    counts = Counter(_score_range(lead.lead_score) for lead in leads)
    total = len(leads)
    return [
        {
            "name": label,
            "value": counts[label],
            "percentage": _percentage(counts[label], total),
            "fill": fill,
            "range": label,
            "count": counts[label],
        }
        for _, label, fill in _SCORE_RANGES
    ]


def _score_range(score: Optional[float]) -> str:
    score = score or 0
    for upper, label, _ in _SCORE_RANGES:
        if upper is None or score <= upper:
            return label
    return _SCORE_RANGES[-1][1]


# --- Shared machinery ---

def _vocabulary_bucket(value: Optional[str], rules: Sequence[Any], default: str) -> str:
    return classify(value, rules, default=default) or NOT_SPECIFIED


def _distribution(
    leads: Sequence[UnifiedLead],
    bucket_of: Callable[[UnifiedLead], Any],
    *,
    categories: Sequence[str],
    palette: Mapping[str, str],
    aliases: Optional[Aliases] = None,
    keep_empty: bool = False,
    multi_valued: bool = False,
) -> List[Bucket]:
    counts: Counter = Counter()
    for lead in leads:
        if multi_valued:
            counts.update(bucket_of(lead))
        else:
            counts[bucket_of(lead)] += 1

    total = len(leads)
    if total == 0:
        names: Iterable[str] = categories
    else:
        extra = [name for name in counts if name not in categories]
        names = [name for name in categories if keep_empty or counts[name]] + extra

    rows = [_bucket(name, counts[name], total, palette.get(name, colors.FALLBACK), aliases) for name in names]
    rows.sort(key=lambda row: row["value"], reverse=True)
    return rows


def _bucket(name: str, value: int, total: int, fill: str, aliases: Optional[Aliases]) -> Bucket:
    row: Bucket = {
        "name": name,
        "value": value,
        "percentage": _percentage(value, total),
        "fill": fill,
    }
    for alias, source in (aliases or {}).items():
        row[alias] = row[source]
    return row


def _percentage(value: int, total: int) -> str:
    return f"{round_half_up(percent(value, total))}%"


__all__ = [
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
]
