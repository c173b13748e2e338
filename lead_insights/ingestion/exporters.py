"""Export utilities for normalised lead tables."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import UnifiedLead

PathLike = Union[str, Path]

# Leading columns of an exported table; the remaining attributes follow in model order.
_LEADING_COLUMNS = (
    "id",
    "timestamp",
    "name",
    "email",
    "phone",
    "leadIntent",
    "leadScore",
    "leadStatus",
    "leadSource",
    "originalSource",
)


def export_leads(
    leads: Sequence[UnifiedLead],
    path: PathLike,
    *,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write normalised leads to a CSV, TSV or Excel file."""

    dataframe = leads_to_dataframe(leads)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def leads_to_dataframe(leads: Iterable[UnifiedLead]) -> pd.DataFrame:
    """Convert leads into a :class:`pandas.DataFrame` with camelCase columns."""

    rows = [lead.as_row() for lead in leads]
    dataframe = pd.DataFrame(rows)
    if dataframe.empty:
        return pd.DataFrame(columns=list(_LEADING_COLUMNS))
    leading = [column for column in _LEADING_COLUMNS if column in dataframe.columns]
    trailing = [column for column in dataframe.columns if column not in leading]
    return dataframe[leading + trailing]


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["export_leads", "leads_to_dataframe"]
