"""Convert raw sheet rows from the three lead tabs into :class:`UnifiedLead` records."""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from ..models import (
    AI_CONVERSATION,
    LEAD_FORM,
    LOW_INTENT,
    ORIGINAL_SOURCES,
    OTHER,
    OVERVIEW,
    UnifiedLead,
)
from .vocabulary import (
    APARTMENT_RULES,
    CONTACT_METHOD_RULES,
    EMPLOYMENT_RULES,
    ENGAGEMENT_RULES,
    ENGAGEMENT_UNKNOWN,
    INCOME_RULES,
    INTENT_RULES,
    LAST_NAME_PLACEHOLDERS,
    LEAD_SOURCE_DEFAULT,
    LEAD_SOURCE_RULES,
    MOVE_IN_RULES,
    OUTREACH_TIME_RULES,
    PET_DEFAULT,
    PET_RULES,
    STATUS_RULES,
    UTM_SOURCE_RULES,
    classify,
    clean_text,
)

LOGGER = logging.getLogger(__name__)

# pandas resolves these against the wall clock instead of rejecting them.
_RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})

RawRow = Mapping[str, Any]
ColumnMapping = Mapping[str, Union[str, Sequence[str]]]

# Header synonyms, compared after lower-casing and collapsing whitespace/underscores.
_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "id": ("id", "lead id", "record id"),
    "timestamp": ("date and time stamp", "timestamp", "date", "submitted at"),
    "name": ("name", "full name"),
    "first_name": ("first name", "firstname"),
    "last_name": ("last name", "lastname", "surname"),
    "email": ("email address", "email"),
    "phone": ("phone number", "phone"),
    "lead_source": ("lead source",),
    "lead_intent": ("lead intent", "intent"),
    "lead_score": ("lead score", "score"),
    "lead_status": ("lead status", "status"),
    "move_in_timing": ("move-in timing", "move in timing"),
    "preferred_contact_method": ("preferred contact method", "preferred contact"),
    "income_range": ("income range", "income"),
    "number_of_occupants": ("number of occupants", "occupants"),
    "pets": ("pets", "pet preference"),
    "apartment_preference": ("preferred apartment", "apartment preference", "apartment selection"),
    "assigned_to": ("assigned to", "agent"),
    "best_time_for_outreach": ("best time for outreach", "best outreach time"),
    "employment_status": ("employment status",),
    "rental_history": ("rental history",),
    "document_readiness": ("document readiness",),
    "conversation_summary": ("conversation summary",),
    "budget_mentioned": ("budget mentioned", "budget"),
    "concerns_questions": ("concerns/questions", "concerns / questions", "concerns"),
    "sentiment_score": ("sentiment score", "sentiment"),
    "engagement_level": ("engagement level", "engagement"),
    "utm_source": ("utm source",),
    "utm_medium": ("utm medium",),
    "utm_campaign": ("utm campaign",),
}

_COMMON_FIELDS = ("id", "timestamp", "email", "phone", "lead_intent", "lead_score")

# Columns each tab carries on top of the common ones.
_SOURCE_FIELDS: Mapping[str, Sequence[str]] = {
    OVERVIEW: _COMMON_FIELDS
    + (
        "name",
        "lead_source",
        "lead_status",
        "move_in_timing",
        "preferred_contact_method",
        "income_range",
        "number_of_occupants",
        "pets",
        "apartment_preference",
        "assigned_to",
    ),
    LEAD_FORM: _COMMON_FIELDS
    + (
        "first_name",
        "last_name",
        "best_time_for_outreach",
        "preferred_contact_method",
        "move_in_timing",
        "employment_status",
        "rental_history",
        "pets",
        "income_range",
        "document_readiness",
        "apartment_preference",
        "lead_source",
        "utm_source",
        "utm_medium",
        "utm_campaign",
    ),
    AI_CONVERSATION: _COMMON_FIELDS
    + (
        "name",
        "conversation_summary",
        "move_in_timing",
        "apartment_preference",
        "number_of_occupants",
        "pets",
        "budget_mentioned",
        "concerns_questions",
        "sentiment_score",
        "engagement_level",
        "utm_source",
        "utm_medium",
        "utm_campaign",
    ),
}


def normalize(
    rows: Iterable[RawRow],
    source: str,
    *,
    column_mapping: Optional[ColumnMapping] = None,
) -> List[UnifiedLead]:
    """Normalise raw rows from one sheet tab.

    Parameters
    ----------
    rows:
        Header-to-value mappings, one per sheet row.
    source:
        The tab the rows came from: ``"overview"``, ``"leadForm"`` or
        ``"aiConversation"``.
    column_mapping:
        Optional mapping of lead field names to the header (or headers) holding
        them, overriding the built-in synonyms.

    Rows without an email address or with an unparseable timestamp are skipped
    and only reported through the log.
    """

    if source not in _SOURCE_FIELDS:
        raise ValueError(f"Unknown lead source '{source}'. Expected one of {list(ORIGINAL_SOURCES)}")

    leads: List[UnifiedLead] = []
    skipped = 0
    for index, row in enumerate(rows, start=1):
        lead = normalize_row(row, source, index=index, column_mapping=column_mapping)
        if lead is None:
            skipped += 1
            continue
        leads.append(lead)

    LOGGER.info("Normalised %s %s rows into leads (%s skipped)", len(leads) + skipped, source, skipped)
    return leads


def normalize_row(
    row: RawRow,
    source: str,
    *,
    index: int = 1,
    column_mapping: Optional[ColumnMapping] = None,
) -> Optional[UnifiedLead]:
    """Normalise a single row, returning ``None`` when it cannot become a lead."""

    values = _extract_fields(row, _SOURCE_FIELDS[source], column_mapping or {})

    email = clean_text(values.get("email"))
    if email is None:
        LOGGER.debug("Skipping %s row %s: missing email", source, index)
        return None

    timestamp = parse_timestamp(values.get("timestamp"))
    if timestamp is None:
        LOGGER.debug("Skipping %s row %s: unparseable timestamp %r", source, index, values.get("timestamp"))
        return None

    return UnifiedLead(
        id=clean_text(values.get("id")) or f"{source}-{index}",
        timestamp=timestamp,
        name=_build_name(values),
        email=email,
        original_source=source,
        phone=normalize_phone(values.get("phone")),
        lead_score=coerce_score(values.get("lead_score")),
        lead_intent=normalize_intent(values.get("lead_intent")),
        lead_source=classify(values.get("lead_source"), LEAD_SOURCE_RULES, default=LEAD_SOURCE_DEFAULT),
        lead_status=normalize_status(values.get("lead_status")),
        preferred_contact_method=normalize_preferred_contact(values.get("preferred_contact_method")),
        assigned_to=clean_text(values.get("assigned_to")),
        move_in_timing=classify(values.get("move_in_timing"), MOVE_IN_RULES, default=OTHER),
        apartment_preference=normalize_apartment_preference(values.get("apartment_preference")),
        number_of_occupants=clean_text(values.get("number_of_occupants")),
        pets=classify(values.get("pets"), PET_RULES, default=PET_DEFAULT),
        income_range=classify(values.get("income_range"), INCOME_RULES, default=OTHER),
        budget_mentioned=clean_text(values.get("budget_mentioned")),
        best_time_for_outreach=normalize_outreach_time(values.get("best_time_for_outreach")),
        employment_status=classify(values.get("employment_status"), EMPLOYMENT_RULES, default=OTHER),
        rental_history=clean_text(values.get("rental_history")),
        document_readiness=clean_text(values.get("document_readiness")),
        conversation_summary=clean_text(values.get("conversation_summary")),
        concerns_questions=clean_text(values.get("concerns_questions")),
        sentiment_score=_to_number(values.get("sentiment_score")),
        engagement_level=classify(values.get("engagement_level"), ENGAGEMENT_RULES, default=ENGAGEMENT_UNKNOWN),
        utm_source=classify(values.get("utm_source"), UTM_SOURCE_RULES) or clean_text(values.get("utm_source")),
        utm_medium=clean_text(values.get("utm_medium")),
        utm_campaign=clean_text(values.get("utm_campaign")),
    )


# --- Field normalisers ---

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a sheet timestamp into a naive local :class:`datetime`.

    Timezone-aware values are converted to local wall-clock time. Blank or
    unparseable values return ``None``; they are never defaulted to "now".
    """

    if isinstance(value, (datetime, pd.Timestamp)):
        parsed = pd.Timestamp(value)
    else:
        text = clean_text(value)
        if text is None or text.lower() in _RELATIVE_DATE_WORDS:
            return None
        parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None

    moment = parsed.to_pydatetime()
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def coerce_score(value: Any) -> float:
    """Return a non-negative lead score; absent or non-numeric scores count as 0."""

    number = _to_number(value)
    if number is None or number < 0:
        return 0
    return number


def normalize_phone(value: Any) -> Optional[str]:
    text = clean_text(value)
    if text is None:
        return None
    return "".join(text.split()) or None


def normalize_last_name(value: Any) -> Optional[str]:
    text = clean_text(value)
    if text is None or text.lower() in LAST_NAME_PLACEHOLDERS:
        return None
    return text


def normalize_preferred_contact(value: Any) -> Optional[str]:
    return classify(value, CONTACT_METHOD_RULES)


def normalize_outreach_time(value: Any) -> Optional[str]:
    return classify(value, OUTREACH_TIME_RULES)


def normalize_apartment_preference(value: Any) -> Optional[str]:
    """Map each comma separated choice onto the known apartment types.

    Multi-select answers keep every recognised choice, joined by ``", "``;
    unrecognised choices are dropped.
    """

    text = clean_text(value)
    if text is None:
        return None
    matches: List[str] = []
    for part in text.split(","):
        match = classify(part, APARTMENT_RULES)
        if match and match not in matches:
            matches.append(match)
    return ", ".join(matches) or None


def normalize_intent(value: Any) -> str:
    text = clean_text(value)
    if text is None:
        return LOW_INTENT
    intent = classify(text, INTENT_RULES)
    if intent is None:
        # Kept as-is so the residual "medium" bucket surfaces it downstream.
        LOGGER.debug("Unrecognised lead intent %r", text)
        return text.title()
    return intent


def normalize_status(value: Any) -> Optional[str]:
    status = classify(value, STATUS_RULES)
    if status is None and clean_text(value) is not None:
        LOGGER.debug("Unrecognised lead status %r", value)
    return status


# --- Row helpers ---

def _normalise_key(value: Any) -> str:
    return " ".join(str(value).replace("_", " ").lower().split())


def _extract_fields(
    row: RawRow,
    fields: Sequence[str],
    mapping: ColumnMapping,
) -> Dict[str, Any]:
    normalised = {_normalise_key(key): value for key, value in row.items() if key is not None and str(key).strip()}
    values: Dict[str, Any] = {}
    for field in fields:
        if field in mapping:
            candidates = _normalize_column_spec(mapping[field])
        else:
            candidates = list(_FIELD_SYNONYMS.get(field, (field,)))
        for candidate in candidates:
            value = normalised.get(_normalise_key(candidate))
            if clean_text(value) is not None or isinstance(value, (datetime, pd.Timestamp)):
                values[field] = value
                break
    return values


def _normalize_column_spec(value: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _build_name(values: Mapping[str, Any]) -> str:
    name = clean_text(values.get("name"))
    if name:
        return name
    first_name = clean_text(values.get("first_name"))
    last_name = normalize_last_name(values.get("last_name"))
    return " ".join(filter(None, [first_name, last_name])) or "Unknown"


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = clean_text(value)
        if text is None:
            return None
        try:
            number = float(text.replace(",", ""))
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


__all__ = [
    "normalize",
    "normalize_row",
    "parse_timestamp",
    "coerce_score",
    "normalize_phone",
    "normalize_last_name",
    "normalize_preferred_contact",
    "normalize_outreach_time",
    "normalize_apartment_preference",
    "normalize_intent",
    "normalize_status",
]
