from datetime import datetime, timedelta

import pytest

from lead_insights.analytics.metrics import compute_overview_metrics
from lead_insights.analytics.timeseries import (
    generate_intent_time_series,
    generate_overview_timeline,
    generate_time_series,
    generate_time_series_by_source,
)
from lead_insights.models import UnifiedLead

NOW = datetime(2024, 3, 15, 12, 0)


def _lead(lead_id: str, timestamp: datetime, **overrides) -> UnifiedLead:
    values = dict(
        id=lead_id,
        timestamp=timestamp,
        name=f"Lead {lead_id}",
        email=f"{lead_id}@example.com",
        original_source="overview",
    )
    values.update(overrides)
    return UnifiedLead(**values)


@pytest.fixture()
def leads():
    return [
        _lead("today", NOW - timedelta(hours=2), lead_intent="High"),
        _lead("five-days", NOW - timedelta(days=5), original_source="leadForm"),
        _lead("window-start", NOW - timedelta(days=29), original_source="aiConversation"),
        _lead("too-old", NOW - timedelta(days=30), lead_intent="High"),
        _lead("future", NOW + timedelta(days=1)),
    ]


def test_empty_collection_still_yields_every_day():
    series = generate_time_series([], 30, NOW)

    assert len(series) == 30
    assert series[0]["date"] == "2024-02-15"
    assert series[-1]["date"] == "2024-03-15"
    assert all(point["leads"] == 0 for point in series)


def test_only_leads_inside_the_window_are_counted(leads):
    series = generate_time_series(leads, 30, NOW)

    assert len(series) == 30
    assert sum(point["leads"] for point in series) == 3
    assert series[-1] == {"date": "2024-03-15", "leads": 1, "highIntent": 1, "lowIntent": 0}
    assert series[0]["leads"] == 1


def test_out_of_window_leads_still_count_in_overview_metrics(leads):
    assert compute_overview_metrics(leads)["totalLeads"] == 5


def test_leads_are_bucketed_by_calendar_day():
    late = _lead("late", datetime(2024, 3, 14, 23, 59, 59))
    midnight = _lead("midnight", datetime(2024, 3, 15, 0, 0))

    series = generate_overview_timeline([late, midnight], 2, NOW)

    assert series == [{"date": "2024-03-14", "leads": 1}, {"date": "2024-03-15", "leads": 1}]


def test_intent_series_reports_residual_medium_count():
    day = NOW - timedelta(hours=1)
    leads = [
        _lead("h", day, lead_intent="High"),
        _lead("l", day, lead_intent="Low"),
        _lead("m", day, lead_intent="Medium"),
    ]

    series = generate_intent_time_series(leads, 7, NOW)

    assert len(series) == 7
    assert series[-1] == {"date": "2024-03-15", "high": 1, "medium": 1, "low": 1}
    assert all(point["medium"] == 0 for point in series[:-1])


def test_series_by_source_has_a_row_per_day_and_tab(leads):
    series = generate_time_series_by_source(leads, 30, NOW)

    assert len(series) == 90
    counted = {(point["date"], point["source"]): point["count"] for point in series if point["count"]}
    assert counted == {
        ("2024-03-15", "overview"): 1,
        ("2024-03-10", "leadForm"): 1,
        ("2024-02-15", "aiConversation"): 1,
    }


def test_custom_window_length(leads):
    assert len(generate_time_series(leads, 7, NOW)) == 7
    assert generate_time_series(leads, 0, NOW) == []
