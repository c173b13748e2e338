"""Loading exported sheet tabs and normalising them into unified leads."""
from __future__ import annotations

from .exporters import export_leads, leads_to_dataframe
from .loaders import UnsupportedFileTypeError, load_leads, load_rows
from .normalizer import normalize, normalize_row

__all__ = [
    "normalize",
    "normalize_row",
    "load_rows",
    "load_leads",
    "export_leads",
    "leads_to_dataframe",
    "UnsupportedFileTypeError",
]
