from datetime import datetime, timedelta

from lead_insights.analytics.metrics import (
    calculate_conversion_funnel,
    calculate_dashboard_metrics,
    calculate_lead_stats,
    compare_periods,
    compute_overview_metrics,
    convert_to_activity_items,
    summarize_leads,
)
from lead_insights.models import UnifiedLead

NOW = datetime(2024, 3, 15, 12, 0)


def _lead(lead_id: str, **overrides) -> UnifiedLead:
    values = dict(
        id=lead_id,
        timestamp=NOW,
        name=f"Lead {lead_id}",
        email=f"{lead_id}@example.com",
        original_source="overview",
    )
    values.update(overrides)
    return UnifiedLead(**values)


def _three_leads():
    return [
        _lead("a", lead_intent="High", lead_score=80),
        _lead("b", lead_intent="High", lead_score=60),
        _lead("c", lead_intent="Low", lead_score=40),
    ]


def test_overview_metrics_without_leads_use_zero_sentinels():
    assert compute_overview_metrics([], []) == {
        "totalLeads": 0,
        "highIntentPercentage": 0,
        "avgLeadScore": 0,
        "totalLeadsChange": "+0%",
        "highIntentChange": "+0%",
        "avgScoreChange": "+0pts",
    }


def test_overview_metrics_for_three_leads():
    metrics = compute_overview_metrics(_three_leads())

    assert metrics["totalLeads"] == 3
    assert metrics["avgLeadScore"] == 60
    assert metrics["highIntentPercentage"] == 67
    assert metrics["totalLeadsChange"] == "+0%"


def test_overview_metrics_compare_against_previous_period():
    previous = [_lead("p1", lead_intent="High", lead_score=50), _lead("p2", lead_score=50)]

    metrics = compute_overview_metrics(_three_leads(), previous)

    assert metrics["totalLeadsChange"] == "+50.0%"
    assert metrics["highIntentChange"] == "+16.7%"
    assert metrics["avgScoreChange"] == "+10pts"


def test_overview_metrics_report_decreases_with_sign():
    previous = [_lead("p1", lead_intent="High", lead_score=50), _lead("p2", lead_score=50)]

    metrics = compute_overview_metrics([_lead("a", lead_score=20)], previous)

    assert metrics["totalLeadsChange"] == "-50.0%"
    assert metrics["highIntentChange"] == "-50.0%"
    assert metrics["avgScoreChange"] == "-30pts"


def test_compare_periods_splits_by_calendar_month():
    leads = [
        _lead("month-start", timestamp=datetime(2024, 3, 1)),
        _lead("leap-day", timestamp=datetime(2024, 2, 29, 23, 59)),
        _lead("previous-start", timestamp=datetime(2024, 2, 1)),
        _lead("january", timestamp=datetime(2024, 1, 31, 23, 59)),
        _lead("tomorrow", timestamp=NOW + timedelta(days=1)),
    ]

    comparison = compare_periods(leads, NOW)

    assert [lead.id for lead in comparison.current_month_leads] == ["month-start"]
    assert [lead.id for lead in comparison.previous_month_leads] == ["leap-day", "previous-start"]


def test_compare_periods_in_january_looks_at_december():
    leads = [_lead("december", timestamp=datetime(2023, 12, 20))]

    comparison = compare_periods(leads, datetime(2024, 1, 10))

    assert [lead.id for lead in comparison.previous_month_leads] == ["december"]


def test_conversion_funnel_rates():
    leads = [
        _lead("a", lead_status="Contacted"),
        _lead("b", lead_status="Qualified"),
        _lead("c", lead_status="Converted"),
        _lead("d"),
    ]

    funnel = calculate_conversion_funnel(leads)

    assert funnel["total"] == 4
    assert (funnel["contacted"], funnel["qualified"], funnel["converted"]) == (1, 1, 1)
    assert funnel["convertedRate"] == 25.0
    assert calculate_conversion_funnel([])["contactedRate"] == 0


def test_lead_stats_round_conversion_rate_to_two_decimals():
    leads = [_lead("a", lead_status="Converted"), _lead("b", lead_status="Lost"), _lead("c")]

    stats = calculate_lead_stats(leads)

    assert stats == {
        "total": 3,
        "new": 1,
        "contacted": 0,
        "qualified": 0,
        "converted": 1,
        "lost": 1,
        "conversionRate": 33.33,
    }


def test_summarize_leads_averages_sentiment():
    leads = _three_leads()
    leads[0].sentiment_score = 0.9
    leads[1].sentiment_score = 0.4

    summary = summarize_leads(leads)

    assert summary["highIntentCount"] == 2
    assert summary["avgSentimentScore"] == 0.4
    assert summarize_leads([])["avgSentimentScore"] == 0


def test_dashboard_metrics_count_today_week_and_month():
    leads = [
        _lead("today", timestamp=datetime(2024, 3, 15, 8, 0), original_source="leadForm"),
        _lead("sunday", timestamp=datetime(2024, 3, 10, 9, 0), original_source="leadForm"),
        _lead("last-week", timestamp=datetime(2024, 3, 5, 9, 0), original_source="aiConversation"),
        _lead("february", timestamp=datetime(2024, 2, 20, 9, 0), lead_status="Converted"),
    ]

    metrics = calculate_dashboard_metrics(leads, NOW)

    assert metrics["todayLeads"] == 1
    assert metrics["weekLeads"] == 2
    assert metrics["monthLeads"] == 3
    assert metrics["conversionRate"] == 25.0
    assert metrics["topSource"] == "Lead Form"


def test_activity_items_are_newest_first_without_reordering_input():
    leads = [
        _lead("old", timestamp=NOW - timedelta(days=10), lead_status="Qualified"),
        _lead("days", timestamp=NOW - timedelta(days=2), original_source="aiConversation"),
        _lead("hours", timestamp=NOW - timedelta(hours=3), lead_source="Lead Form"),
        _lead("minutes", timestamp=NOW - timedelta(minutes=5)),
        _lead("now", timestamp=NOW - timedelta(seconds=30)),
    ]

    items = convert_to_activity_items(leads, NOW)

    assert [item["id"] for item in items] == ["now", "minutes", "hours", "days", "old"]
    assert [item["time"] for item in items] == ["Just now", "5m ago", "3h ago", "2d ago", "Mar 5"]
    assert [item["source"] for item in items] == ["Other", "Other", "Lead Form", "AI Conversation", "Other"]
    assert items[-1]["status"] == "Qualified"
    assert "status" not in items[0]
    assert [lead.id for lead in leads] == ["old", "days", "hours", "minutes", "now"]
    assert len(convert_to_activity_items(leads, NOW, limit=2)) == 2
