"""
Core engine (DCE)
=================

DCE is a small, read-only "damage curve engine":

1) A provider returns raw curve data (JSON file, HTTP API, spreadsheet)
2) The data is validated once into an immutable CurveStore
3) Queries read the store:
   - batch damage lookup for every category of a hazard (`check`)
   - nearest curve point to an intensity / pointer position (`nearest`)
4) Results can be exported to CSV / JSON

If loading fails the engine stays in the *unavailable* state: it keeps the
reason and refuses every query instead of answering from partial data.
"""

from __future__ import annotations
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union
import csv
import json
import logging
import math

from .hazards import Hazard, display_label
from .interp import damage_at
from .loader import CurveProvider, DataFormatError, ProviderUnavailable, load_curves
from .locator import LinearScale, nearest, nearest_at_pixel
from .models import NOT_FOUND, DamageEntry, NearestPoint, QueryResult
from .store import AxisBounds, CurveStore, HazardLike

logger = logging.getLogger(__name__)

INVALID_INPUT = "invalid input"


class InvalidQueryInput(ValueError):
    """Intensity text that is not a finite number."""


class CurvesUnavailable(RuntimeError):
    """Query against an engine whose curve data failed to load."""


def parse_intensity(text: Union[str, float, int]) -> float:
    """Parse user-typed intensity ("2.5", " 7 ") into a float."""
    if isinstance(text, bool):
        raise InvalidQueryInput(f"Not an intensity: {text!r}")
    if isinstance(text, (int, float)):
        v = float(text)
    else:
        try:
            v = float(str(text).strip())
        except ValueError:
            raise InvalidQueryInput(f"Not a number: {text!r}") from None
    if not math.isfinite(v):
        raise InvalidQueryInput(f"Intensity must be finite: {text!r}")
    return v


def batch_damage_at(store: CurveStore, hazard: HazardLike, x: Union[str, float, int]) -> QueryResult:
    """Damage for every category of `hazard` at intensity `x`.

    Categories without data get NOT_FOUND. If `x` is unparsable text the
    whole result carries the INVALID_INPUT marker instead of entries.
    """
    h = Hazard.parse(hazard)
    try:
        xv = parse_intensity(x)
    except InvalidQueryInput as e:
        logger.debug("Rejected query for %s: %s", h.name.lower(), e)
        return QueryResult(hazard=h, intensity=None, error=INVALID_INPUT)
    entries = []
    for category in store.categories_for(h):
        y = damage_at(store.curve_for(h, category), xv)
        entries.append(DamageEntry(category, display_label(h, category), NOT_FOUND if y is None else y))
    return QueryResult(hazard=h, intensity=xv, entries=tuple(entries))


@dataclass
class DCE:
    """Damage Curve Engine.

    Holds one CurveStore (or none, when loading failed) and exposes the
    query operations. The store is never modified after construction.
    """
    store: Optional[CurveStore] = None
    source: Optional[str] = None
    # why the store is missing, for the "unavailable" message
    error: Optional[str] = None
    # commands that produced the current results (exported with them)
    command_log: List[str] = field(default_factory=list)
    last_result: Optional[QueryResult] = field(default=None, init=False)

    @classmethod
    def from_provider(cls, provider: CurveProvider, source: Optional[str] = None) -> "DCE":
        """Run the provider once; failures give an unavailable engine."""
        try:
            store = load_curves(provider())
        except ProviderUnavailable as e:
            logger.error("Curve provider unavailable: %s", e)
            return cls(store=None, source=source, error=str(e))
        except DataFormatError as e:
            logger.error("Curve data rejected: %s", e)
            return cls(store=None, source=source, error=f"Malformed curve data: {e}")
        return cls(store=store, source=source)

    @classmethod
    def load_async(cls, provider: CurveProvider, source: Optional[str] = None,
                   executor: Optional[ThreadPoolExecutor] = None) -> "Future[DCE]":
        """Load on a worker thread; the future resolves to a DCE (never raises)."""
        if executor is not None:
            return executor.submit(cls.from_provider, provider, source)
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dce-load")
        future = pool.submit(cls.from_provider, provider, source)
        # submitted work still runs; the pool just stops taking new jobs
        pool.shutdown(wait=False)
        return future

    # ---------------- State ----------------
    @property
    def available(self) -> bool:
        return self.store is not None

    def _require(self) -> CurveStore:
        if self.store is None:
            raise CurvesUnavailable(f"Curve data unavailable: {self.error or 'not loaded'}")
        return self.store

    # ---------------- Queries ----------------
    def categories(self, hazard: HazardLike) -> List[str]:
        return list(self._require().categories_for(hazard))

    def bounds(self, hazard: HazardLike) -> AxisBounds:
        return self._require().bounds(hazard)

    def check(self, hazard: HazardLike, text: Union[str, float, int]) -> QueryResult:
        """Free-text intensity query (the "check damage" form)."""
        result = batch_damage_at(self._require(), hazard, text)
        self.last_result = result
        return result

    def nearest(self, hazard: HazardLike, x: float) -> Optional[NearestPoint]:
        return nearest(self._require(), hazard, x)

    def nearest_at_pixel(self, hazard: HazardLike, pixel_x: float, width: float) -> Optional[NearestPoint]:
        """Nearest point under a pointer on a chart `width` pixels wide."""
        store = self._require()
        if store.max_intensity(hazard) == 0:
            # [0, 0] domain: every pixel maps to intensity 0
            return nearest(store, hazard, 0.0)
        scale = LinearScale.for_hazard(store, hazard, width)
        return nearest_at_pixel(store, hazard, pixel_x, scale)

    # ---------------- Export ----------------
    def export_csv(self, path: str, result: Optional[QueryResult] = None) -> None:
        rows = _result_rows(self._export_target(result))
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["hazard", "intensity", "category", "label", "damage"])
            for r in rows:
                w.writerow([r["hazard"], r["intensity"], r["category"], r["label"], r["damage"]])

    def export_json(self, path: str, result: Optional[QueryResult] = None) -> None:
        """Export a query result to JSON, with the command log for provenance."""
        payload = {
            "source": self.source,
            "commands": self.command_log,
            "results": _result_rows(self._export_target(result)),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def export_curves_csv(self, path: str, hazard: HazardLike) -> int:
        """Write the hazard's curves as a long table; returns the row count."""
        store = self._require()
        h = Hazard.parse(hazard)
        n = 0
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["hazard", "category", "x", "y"])
            for category, curve in store.curves(h):
                for s in curve:
                    w.writerow([h.key, category, s.intensity, s.damage]); n += 1
        return n

    def _export_target(self, result: Optional[QueryResult]) -> QueryResult:
        result = result or self.last_result
        if result is None:
            raise ValueError("Nothing to export: run a damage check first")
        if not result.ok:
            raise ValueError(f"Nothing to export: last query failed ({result.error})")
        return result


def _result_rows(result: QueryResult) -> List[dict]:
    out: List[dict] = []
    for e in result.entries:
        value: Any = e.value if e.found else None
        out.append({
            "hazard": result.hazard.name.lower(),
            "intensity": result.intensity,
            "category": e.category,
            "label": e.label,
            "damage": value,
        })
    return out
