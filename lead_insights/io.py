"""Writing rendered reports to disk."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .ingestion import export_leads
from .models import UnifiedLead

_JSON_SUFFIXES = {".json"}
TABLE_SUFFIXES = {".csv", ".tsv", ".xlsx", ".xlsm"}


def is_table_path(path: str | Path) -> bool:
    return Path(path).suffix.lower() in TABLE_SUFFIXES


def write_report(path: str | Path, envelope: Dict[str, Any]) -> Path:
    """Write a response envelope as indented UTF-8 JSON."""

    file_path = Path(path)
    if file_path.suffix and file_path.suffix.lower() not in _JSON_SUFFIXES:
        raise ValueError(f"Unsupported report format '{file_path.suffix}'. Use a .json file")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as handle:
        json.dump(envelope, handle, ensure_ascii=False, indent=2, allow_nan=False)
        handle.write("\n")
    return file_path


def write_leads_table(path: str | Path, leads: Sequence[UnifiedLead]) -> Path:
    return export_leads(leads, path)
