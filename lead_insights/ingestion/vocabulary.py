"""Ordered keyword rules that map free-form sheet values onto fixed vocabularies.

Each rule list is evaluated top to bottom and the first matching predicate
wins, so more specific patterns must appear before the patterns they overlap
with (``"2 bedroom 2 bathroom"`` before ``"2 bedroom 1 bathroom"``).
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from ..models import (
    AI_CONVERSATION_SOURCE,
    LEAD_FORM_SOURCE,
    OTHER_SOURCE,
)

Predicate = Callable[[str], bool]
Rule = Tuple[Predicate, str]


def contains(*keywords: str) -> Predicate:
    """Match when any of ``keywords`` occurs in the value."""

    return lambda value: any(keyword in value for keyword in keywords)


def contains_all(*keywords: str) -> Predicate:
    """Match when every keyword occurs in the value."""

    return lambda value: all(keyword in value for keyword in keywords)


def equals(*candidates: str) -> Predicate:
    return lambda value: value in candidates


def classify(value: object, rules: Sequence[Rule], default: Optional[str] = None) -> Optional[str]:
    """Return the result of the first rule matching ``value``.

    The value is trimmed and lower-cased before matching. Empty values yield
    ``None``; non-empty values no rule accepts yield ``default``.
    """

    text = clean_text(value)
    if text is None:
        return None
    lowered = text.lower()
    for predicate, result in rules:
        if predicate(lowered):
            return result
    return default


def clean_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


CONTACT_METHOD_RULES: Sequence[Rule] = (
    (contains("whatsapp"), "WhatsApp"),
    (contains("email"), "Email"),
    (contains("phone", "call"), "Phone Call"),
)
CONTACT_METHODS = ("WhatsApp", "Email", "Phone Call")

OUTREACH_TIME_RULES: Sequence[Rule] = (
    (contains("morning"), "Morning"),
    (contains("afternoon"), "Afternoon"),
    (contains("evening"), "Evening"),
    (contains("anytime", "any time"), "Anytime"),
)
OUTREACH_TIMES = ("Morning", "Afternoon", "Evening", "Anytime")

APARTMENT_RULES: Sequence[Rule] = (
    (contains("studio"), "Studio Apartment"),
    (contains("1 bedroom 1 bathroom", "1 bed 1 bath"), "1 Bedroom 1 Bathroom Apartment"),
    (contains("2 bedroom 2 bathroom", "2 bed 2 bath"), "2 Bedroom 2 Bathroom Apartment"),
    (contains("2 bedroom 1 bathroom", "2 bed 1 bath"), "2 Bedroom 1 Bathroom Apartment"),
    (contains("1 bedroom penthouse", "1-bedroom penthouse"), "1 Bedroom Penthouse"),
    (contains("2 bedroom penthouse", "2-bedroom penthouse"), "2 Bedroom Penthouse"),
    (contains("1 bedroom apartment", "1-bedroom apartment"), "1 Bedroom Apartment"),
)
APARTMENT_TYPES = tuple(result for _, result in APARTMENT_RULES)


def _income(predicate: Predicate) -> Predicate:
    # Amounts arrive as "R15,000 - R20,000", "R15 000 to R20 000" or "15000-20000".
    return lambda value: predicate(value.replace(",", "").replace(" ", ""))


INCOME_RULES: Sequence[Rule] = (
    (_income(contains("under", "lessthan", "below", "<")), "Under R10,000"),
    (_income(contains("40000+", "above40000", "over40000", "morethan40000")), "R40,000+"),
    (_income(contains_all("30000", "40000")), "R30,000 - R40,000"),
    (_income(contains("30000+", "above30000", "over30000")), "R30,000+"),
    (_income(contains_all("20000", "30000")), "R20,000 - R30,000"),
    (_income(contains_all("15000", "20000")), "R15,000 - R20,000"),
    (_income(contains_all("10000", "15000")), "R10,000 - R15,000"),
)
INCOME_BRACKETS = (
    "Under R10,000",
    "R10,000 - R15,000",
    "R15,000 - R20,000",
    "R20,000 - R30,000",
    "R30,000 - R40,000",
    "R30,000+",
    "R40,000+",
)

EMPLOYMENT_RULES: Sequence[Rule] = (
    (contains("unemployed", "not employed"), "Unemployed"),
    (contains("self"), "Self-employed"),
    (contains("part"), "Employed part-time"),
    (contains("contract", "probation"), "Contract or probation"),
    (contains("full"), "Employed full-time"),
)
EMPLOYMENT_STATUSES = (
    "Employed full-time",
    "Employed part-time",
    "Self-employed",
    "Contract or probation",
    "Unemployed",
)

PET_RULES: Sequence[Rule] = (
    (equals("no", "none"), "No"),
    (contains("no pets", "no pet"), "No"),
    (contains_all("outside", "policy"), "Yes (outside policy)"),
    (contains_all("within", "policy"), "Yes (within policy)"),
)
PET_PREFERENCES = ("No", "Yes (within policy)", "Yes (outside policy)")
# Any other non-empty pet answer is a "yes" variation.
PET_DEFAULT = "Yes (within policy)"

MOVE_IN_RULES: Sequence[Rule] = (
    (contains("31 to 60", "31-60", "31 - 60"), "31 to 60 days"),
    (contains("61 to 90", "61-90", "61 - 90"), "61 to 90 days"),
    (contains("90+", "90 +", "more than 90", "over 90"), "90+ days"),
    (contains("within 30", "0-30", "asap", "immediately"), "Within 30 days"),
    (contains("1-3 month", "1 to 3 month", "1 - 3 month"), "1-3 months"),
    (contains("3-6 month", "3 to 6 month", "3 - 6 month"), "3-6 months"),
    (contains("6+ month", "6 + month", "6 months+"), "6+ months"),
)
MOVE_IN_TIMINGS = (
    "Within 30 days",
    "31 to 60 days",
    "61 to 90 days",
    "90+ days",
    "1-3 months",
    "3-6 months",
    "6+ months",
)

ENGAGEMENT_RULES: Sequence[Rule] = (
    (contains("high"), "High"),
    (contains("medium", "med", "moderate"), "Medium"),
    (contains("low"), "Low"),
)
ENGAGEMENT_LEVELS = ("High", "Medium", "Low")
ENGAGEMENT_UNKNOWN = "Unknown"

STATUS_RULES: Sequence[Rule] = (
    (equals("new"), "New"),
    (equals("contacted"), "Contacted"),
    (equals("qualified"), "Qualified"),
    (equals("converted", "closed", "won"), "Converted"),
    (equals("lost"), "Lost"),
)

INTENT_RULES: Sequence[Rule] = (
    (equals("high", "high intent"), "High"),
    (equals("low", "low intent"), "Low"),
)

LEAD_SOURCE_RULES: Sequence[Rule] = (
    (contains("conversation", "chat", "talking"), AI_CONVERSATION_SOURCE),
    (equals("ai"), AI_CONVERSATION_SOURCE),
    (contains("form"), LEAD_FORM_SOURCE),
)
LEAD_SOURCE_DEFAULT = OTHER_SOURCE

UTM_SOURCE_RULES: Sequence[Rule] = (
    (equals("fb", "facebook", "meta"), "Facebook"),
    (equals("ig", "instagram"), "Instagram"),
    (equals("google", "adwords", "gads"), "Google"),
    (equals("tiktok", "tik tok"), "TikTok"),
    (equals("social"), "Social"),
)

LAST_NAME_PLACEHOLDERS = frozenset({"not supplied", "nosurname", "n/a", "na", "-", "none"})


__all__ = [
    "classify",
    "clean_text",
    "contains",
    "contains_all",
    "equals",
]
