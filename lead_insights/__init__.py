"""Lead analytics toolkit: normalise exported sheet tabs and aggregate them into dashboard reports."""

from . import models  # noqa: F401
from .models import UnifiedLead
from .reports import ReportBuilder, error_envelope, success_envelope

__all__ = [
    "UnifiedLead",
    "ReportBuilder",
    "success_envelope",
    "error_envelope",
    "analytics",
    "ingestion",
]
