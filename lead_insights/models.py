"""Unified lead model shared by the normaliser, analytics and reports."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional


# --- Vocabularies ---

HIGH_INTENT = "High"
LOW_INTENT = "Low"
LEAD_INTENTS = (HIGH_INTENT, LOW_INTENT)

LEAD_STATUSES = ("New", "Contacted", "Qualified", "Converted", "Lost")
DEFAULT_STATUS = "New"

OVERVIEW = "overview"
LEAD_FORM = "leadForm"
AI_CONVERSATION = "aiConversation"
ORIGINAL_SOURCES = (OVERVIEW, LEAD_FORM, AI_CONVERSATION)

LEAD_FORM_SOURCE = "Lead Form"
AI_CONVERSATION_SOURCE = "AI Conversation"
OTHER_SOURCE = "Other"
LEAD_SOURCES = (LEAD_FORM_SOURCE, AI_CONVERSATION_SOURCE, OTHER_SOURCE)

NOT_SPECIFIED = "Not specified"
OTHER = "Other"


# --- Lead record ---

@dataclass(slots=True)
class UnifiedLead:
    """A lead captured by any of the three sheet tabs, normalised to one shape."""

    id: str
    timestamp: datetime
    name: str
    email: str
    original_source: str
    phone: Optional[str] = None
    lead_score: float = 0
    lead_intent: str = LOW_INTENT

    # Overview tab
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    assigned_to: Optional[str] = None

    # Move-in and apartment preferences
    move_in_timing: Optional[str] = None
    apartment_preference: Optional[str] = None
    number_of_occupants: Optional[str] = None
    pets: Optional[str] = None

    # Financial
    income_range: Optional[str] = None
    budget_mentioned: Optional[str] = None

    # Lead form tab
    best_time_for_outreach: Optional[str] = None
    employment_status: Optional[str] = None
    rental_history: Optional[str] = None
    document_readiness: Optional[str] = None

    # Talking funnel tab
    conversation_summary: Optional[str] = None
    concerns_questions: Optional[str] = None
    sentiment_score: Optional[float] = None
    engagement_level: Optional[str] = None

    # Attribution
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    def display_source(self) -> str:
        """Return the source label shown in activity tables."""
        if self.lead_source:
            return self.lead_source
        if self.original_source == LEAD_FORM:
            return LEAD_FORM_SOURCE
        if self.original_source == AI_CONVERSATION:
            return AI_CONVERSATION_SOURCE
        return OTHER_SOURCE

    def as_row(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping using the dashboard's camelCase keys."""
        row: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            row[_camel_case(item.name)] = value
        return row


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


__all__ = [
    "UnifiedLead",
    "HIGH_INTENT",
    "LOW_INTENT",
    "LEAD_INTENTS",
    "LEAD_STATUSES",
    "DEFAULT_STATUS",
    "OVERVIEW",
    "LEAD_FORM",
    "AI_CONVERSATION",
    "ORIGINAL_SOURCES",
    "LEAD_FORM_SOURCE",
    "AI_CONVERSATION_SOURCE",
    "OTHER_SOURCE",
    "LEAD_SOURCES",
    "NOT_SPECIFIED",
    "OTHER",
]
