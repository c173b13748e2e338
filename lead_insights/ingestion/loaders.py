"""Utilities for loading exported sheet tabs from spreadsheets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import UnifiedLead
from .normalizer import normalize

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_CSV_SUFFIXES = {".csv", ".tsv"}
_EXCEL_SUFFIXES = {".xls", ".xlsx", ".xlsm", ".xlsb"}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_rows(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Dict[str, str]]:
    """Read a CSV/TSV/Excel export of a sheet tab into header-to-text rows.

    Every cell is read as text so phone numbers and scores keep the exact
    spelling the sheet holds; completely blank rows are dropped.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    rows: List[Dict[str, str]] = []
    for _, series in dataframe.iterrows():
        if _row_is_empty(series):
            continue
        rows.append({str(column): _cell_text(series[column]) for column in dataframe.columns})
    return rows


def load_leads(
    path: PathLike,
    source: str,
    *,
    sheet_name: Union[str, int, None] = 0,
    column_mapping: Optional[Mapping[str, Union[str, Sequence[str]]]] = None,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[UnifiedLead]:
    """Load one exported tab and normalise it into :class:`UnifiedLead` records.

    Parameters
    ----------
    path:
        Path to the CSV/XLSX export of the tab.
    source:
        Which tab the export holds (``"overview"``, ``"leadForm"`` or
        ``"aiConversation"``).
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel` when loading an Excel
        workbook. Ignored for CSV files.
    column_mapping:
        Optional mapping of lead field names to column names, overriding the
        built-in header synonyms.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    rows = load_rows(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    leads = normalize(rows, source, column_mapping=column_mapping)
    LOGGER.info("Loaded %s leads from %s (%s rows skipped)", len(leads), path, len(rows) - len(leads))
    return leads


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    loader_kwargs.setdefault("dtype", str)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in _CSV_SUFFIXES:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("keep_default_na", False)
        loader_kwargs.setdefault("encoding", "utf-8-sig")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in _EXCEL_SUFFIXES:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=engine, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _row_is_empty(row: pd.Series) -> bool:
    return all(pd.isna(value) or (isinstance(value, str) and not value.strip()) for value in row.values)


def _cell_text(value: Any) -> str:
    if pd.isna(value):
        return ""
    return str(value).strip()


__all__ = ["load_rows", "load_leads", "UnsupportedFileTypeError"]
