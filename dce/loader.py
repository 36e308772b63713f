"""
Curve data providers (JSON / HTTP / table -> CurveStore)
========================================================

A *provider* is any zero-argument callable that returns the raw nested
mapping `{hazard_key: {category: {"x": [...], "y": [...]}}}`. This module
ships three of them plus `load_curves`, which validates the mapping into a
`CurveStore`.

Failures are split in two:
- `ProviderUnavailable`: the data could not be fetched/read at all.
- `DataFormatError`: data arrived but has the wrong shape.

Both end the load attempt; nothing half-built is ever returned.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import json
import logging
import math
import os
import re
import zipfile

import pandas as pd
import requests

from .hazards import Hazard
from .store import CurveStore, DataFormatError

logger = logging.getLogger(__name__)

__all__ = [
    "DataFormatError", "ProviderUnavailable", "load_curves", "read_curves_json",
    "fetch_curves", "read_curves_table", "provider_for",
]

CURVES_URL = os.environ.get("DCE_CURVES_URL", "")
CURVES_FILE = os.environ.get("DCE_CURVES_FILE", "")
DEFAULT_HTTP_TIMEOUT = 30.0


def _env_timeout(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number); using %ss", name, value, default)
        return default


HTTP_TIMEOUT = _env_timeout("DCE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)

RawCurves = Dict[str, Dict[str, Dict[str, List[float]]]]
CurveProvider = Callable[[], Any]


class ProviderUnavailable(RuntimeError):
    """The curve data could not be fetched or read."""


def load_curves(raw: Any) -> CurveStore:
    """Validate raw provider data into a CurveStore (raises DataFormatError)."""
    store = CurveStore.from_raw(raw)
    logger.info(
        "Loaded curves: %s",
        ", ".join(f"{h.name.lower()}={store.sample_count(h)}" for h in store.hazards()),
    )
    return store


# ---------------- JSON file ----------------
def read_curves_json(path: Union[str, Path]) -> Any:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ProviderUnavailable(f"Cannot read curve file {p}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DataFormatError(f"{p} is not valid JSON: {e}") from e


# ---------------- HTTP ----------------
def fetch_curves(url: str, timeout: float = HTTP_TIMEOUT) -> Any:
    """GET the curve document from the API."""
    logger.debug("Fetching curves from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ProviderUnavailable(f"Curve request to {url} failed: {e}") from e
    try:
        return response.json()
    except ValueError as e:
        raise DataFormatError(f"Curve response from {url} is not JSON") from e


# ---------------- Long-format table (CSV / Excel) ----------------
def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise DataFormatError(f"Missing required column. Tried={names}. Available={cols}")


def _category_key(v: Any, where: str) -> str:
    if pd.isna(v) or not str(v).strip():
        raise DataFormatError(f"{where}: missing category")
    # floor levels typed into a spreadsheet come back as floats (1.0)
    if isinstance(v, float) and v.is_integer():
        return f"{v:.1f}"
    return str(v).strip()


def _to_float(v: Any, where: str) -> float:
    try:
        fv = float(v)
    except (TypeError, ValueError):
        raise DataFormatError(f"{where}: expected a number, got {v!r}") from None
    if math.isnan(fv):
        raise DataFormatError(f"{where}: missing value")
    return fv


def read_curves_table(path: Union[str, Path]) -> RawCurves:
    """Read a long table (hazard, category, x, y) into the nested mapping.

    Rows are grouped per (hazard, category) in file order. Hazards may be
    given by provider key ("banjir") or name ("flood").
    """
    p = Path(path)
    try:
        if p.suffix.lower() in (".xlsx", ".xlsm"):
            df = pd.read_excel(p, engine="openpyxl")
        else:
            df = pd.read_csv(p)
    except OSError as e:
        raise ProviderUnavailable(f"Cannot read curve table {p}: {e}") from e
    # pandas ParserError / EmptyDataError are ValueErrors; a broken xlsx is a BadZipFile
    except (ValueError, zipfile.BadZipFile) as e:
        raise DataFormatError(f"Cannot parse curve table {p}: {e}") from e
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)

    hazard_col = _col(df, "hazard", "Hazard", "disaster", "bencana")
    category_col = _col(df, "category", "Category", "taxonomy", "floor", "lantai")
    x_col = _col(df, "x", "intensity", "Intensity")
    y_col = _col(df, "y", "damage", "Damage", "damage_ratio")

    raw: RawCurves = {}
    for i, row in df.iterrows():
        where = f"{p.name} row {i + 2}"
        try:
            hazard = Hazard.parse(row[hazard_col])
        except ValueError as e:
            raise DataFormatError(f"{where}: {e}") from None
        entry = raw.setdefault(hazard.key, {}).setdefault(_category_key(row[category_col], where), {"x": [], "y": []})
        entry["x"].append(_to_float(row[x_col], where))
        entry["y"].append(_to_float(row[y_col], where))
    logger.debug("Read %d rows from %s", len(df), p)
    return raw


def provider_for(source: str, timeout: Optional[float] = None) -> CurveProvider:
    """Pick a provider for a URL, a JSON file, or a CSV/XLSX table."""
    if source.startswith(("http://", "https://")):
        t = HTTP_TIMEOUT if timeout is None else timeout
        return lambda: fetch_curves(source, timeout=t)
    if Path(source).suffix.lower() in (".csv", ".xlsx", ".xlsm"):
        return lambda: read_curves_table(source)
    return lambda: read_curves_json(source)
