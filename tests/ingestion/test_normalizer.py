from datetime import datetime, timezone

import pytest

from lead_insights.analytics import calculate_lead_stats
from lead_insights.ingestion.normalizer import (
    coerce_score,
    normalize,
    normalize_apartment_preference,
    normalize_intent,
    normalize_row,
    normalize_status,
    parse_timestamp,
)


@pytest.fixture()
def overview_row():
    return {
        "ID": "42",
        "Date and Time Stamp": "2024-03-10 14:30:00",
        "Name": " Sarah Smith ",
        "Email Address": "sarah@example.com",
        "Phone Number": "+27 82 123 4567",
        "Lead Source": "AI Conversation",
        "Lead Intent": "high",
        "Lead Score": "85",
        "Lead Status": "contacted",
        "Move-in Timing": "Within 30 days",
        "Preferred Contact Method": "WhatsApp message",
        "Income Range": "R15,000 - R20,000",
        "Pets": "No",
        "Preferred Apartment": "2 Bedroom 2 Bathroom",
        "Assigned To": "Thabo",
    }


@pytest.fixture()
def lead_form_row():
    return {
        "Date and Time Stamp": "2024-03-11T09:00:00",
        "First Name": "Jane",
        "Last Name": "Not Supplied",
        "Email": "jane@example.com",
        "Best Time for Outreach": "Mornings (8am-12pm)",
        "Employment Status": "Self employed",
        "Pets": "Yes - a small cat",
        "Move-in Timing": "31-60 days",
        "UTM Source": "fb",
        "Apartment Selection": "Studio, 2 Bedroom 2 Bathroom Apartment, studio",
    }


def test_overview_row_is_mapped_onto_unified_fields(overview_row):
    lead = normalize_row(overview_row, "overview")

    assert lead is not None
    assert lead.id == "42"
    assert lead.timestamp == datetime(2024, 3, 10, 14, 30)
    assert lead.name == "Sarah Smith"
    assert lead.phone == "+27821234567"
    assert lead.original_source == "overview"
    assert lead.lead_source == "AI Conversation"
    assert lead.lead_intent == "High"
    assert lead.lead_score == 85
    assert lead.lead_status == "Contacted"
    assert lead.move_in_timing == "Within 30 days"
    assert lead.preferred_contact_method == "WhatsApp"
    assert lead.income_range == "R15,000 - R20,000"
    assert lead.pets == "No"
    assert lead.apartment_preference == "2 Bedroom 2 Bathroom Apartment"
    assert lead.assigned_to == "Thabo"


def test_lead_form_row_builds_name_and_classifies_answers(lead_form_row):
    [lead] = normalize([lead_form_row], "leadForm")

    assert lead.id == "leadForm-1"
    assert lead.name == "Jane"
    assert lead.lead_intent == "Low"
    assert lead.lead_score == 0
    assert lead.lead_source is None
    assert lead.best_time_for_outreach == "Morning"
    assert lead.employment_status == "Self-employed"
    assert lead.pets == "Yes (within policy)"
    assert lead.move_in_timing == "31 to 60 days"
    assert lead.utm_source == "Facebook"
    assert lead.apartment_preference == "Studio Apartment, 2 Bedroom 2 Bathroom Apartment"


def test_two_bed_two_bath_is_never_read_as_two_bed_one_bath():
    assert normalize_apartment_preference("2 Bedroom 2 Bathroom Apartment") == "2 Bedroom 2 Bathroom Apartment"
    assert normalize_apartment_preference("2 bedroom 1 bathroom") == "2 Bedroom 1 Bathroom Apartment"
    assert normalize_apartment_preference("Loft") is None


def test_rows_without_email_or_valid_timestamp_are_skipped(overview_row):
    no_email = dict(overview_row, **{"Email Address": "  "})
    bad_date = dict(overview_row, **{"Date and Time Stamp": "not a date"})
    blank_date = dict(overview_row, **{"Date and Time Stamp": ""})
    relative_dates = [
        dict(overview_row, **{"Date and Time Stamp": word})
        for word in ("now", "Today", " tomorrow ", "YESTERDAY")
    ]

    leads = normalize([no_email, overview_row, bad_date, blank_date, *relative_dates], "overview")

    assert [lead.email for lead in leads] == ["sarah@example.com"]


def test_ai_conversation_row_keeps_conversation_fields():
    row = {
        "Date and Time Stamp": "2024-03-12 18:45",
        "Name": "Lerato",
        "Email": "lerato@example.com",
        "Lead Intent": "Low",
        "Sentiment Score": "0.8",
        "Engagement Level": "moderate",
        "Budget Mentioned": "R12 000",
        "Conversation Summary": "Asked about parking",
    }

    lead = normalize_row(row, "aiConversation", index=7)

    assert lead.id == "aiConversation-7"
    assert lead.sentiment_score == 0.8
    assert lead.engagement_level == "Medium"
    assert lead.budget_mentioned == "R12 000"
    assert lead.conversation_summary == "Asked about parking"


def test_column_mapping_overrides_header_synonyms():
    rows = [{"Submitted": "2024-01-01", "Mail": "a@example.com", "Email": "ignored@example.com"}]

    [lead] = normalize(rows, "overview", column_mapping={"timestamp": "Submitted", "email": ["Mail"]})

    assert lead.email == "a@example.com"
    assert lead.timestamp == datetime(2024, 1, 1)


def test_unknown_source_is_rejected(overview_row):
    with pytest.raises(ValueError):
        normalize([overview_row], "newsletter")


def test_normalisation_is_repeatable(overview_row, lead_form_row):
    first = normalize([overview_row], "overview") + normalize([lead_form_row], "leadForm")
    second = normalize([overview_row], "overview") + normalize([lead_form_row], "leadForm")

    assert first == second


def test_unrecognised_intent_is_kept_for_downstream_reporting():
    assert normalize_intent("medium") == "Medium"
    assert normalize_intent("HIGH intent") == "High"
    assert normalize_intent("") == "Low"
    assert normalize_intent(None) == "Low"
    assert normalize_intent("Not high") == "Not High"
    assert normalize_intent("low-ish") == "Low-Ish"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("New", "New"),
        (" contacted ", "Contacted"),
        ("Closed", "Converted"),
        ("won", "Converted"),
        ("Lost", "Lost"),
        ("Not contacted", None),
        ("Unqualified", None),
        ("Disqualified", None),
        ("Not converted", None),
        ("", None),
    ],
)
def test_normalize_status_matches_whole_values(raw, expected):
    assert normalize_status(raw) == expected


def test_negated_status_counts_as_new_in_the_funnel(overview_row):
    rows = [dict(overview_row, **{"Lead Status": status}) for status in ("Not converted", "Converted")]

    leads = normalize(rows, "overview")

    assert [lead.lead_status for lead in leads] == [None, "Converted"]
    assert calculate_lead_stats(leads)["converted"] == 1
    assert calculate_lead_stats(leads)["new"] == 1


@pytest.mark.parametrize(
    "raw, expected",
    [("85", 85), ("72.5", 72.5), ("-5", 0), ("abc", 0), ("", 0), (None, 0), ("1,200", 1200)],
)
def test_coerce_score(raw, expected):
    assert coerce_score(raw) == expected


def test_parse_timestamp_converts_aware_values_to_local_time():
    expected = datetime(2024, 3, 10, 12, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    assert parse_timestamp("2024-03-10T12:00:00Z") == expected
    assert parse_timestamp(datetime(2024, 3, 10, 8, 15)) == datetime(2024, 3, 10, 8, 15)
    assert parse_timestamp("nan") is None


def test_as_row_uses_camel_case_and_omits_missing_values(overview_row):
    row = normalize_row(overview_row, "overview").as_row()

    assert row["leadScore"] == 85
    assert row["originalSource"] == "overview"
    assert row["timestamp"] == "2024-03-10T14:30:00"
    assert "utmSource" not in row
