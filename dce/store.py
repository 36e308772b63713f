"""
Curve store (validated, immutable curve tables)
===============================================

The provider sends a nested mapping:

    {hazard_key: {category_key: {"x": [...], "y": [...]}}}

`CurveStore.from_raw` validates that shape once and turns every category into
a `Curve` sorted by intensity. After that the store never changes; all query
functions (`dce.interp`, `dce.engine`, `dce.locator`) only read it.

Key decisions:
- x/y length mismatch is an error, not a silent truncation.
- Samples are sorted ascending by intensity here, so interpolation never
  sees an out-of-order curve.
- Missing hazards/categories are not errors: they read back as empty curves.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple, Union
import logging
import math

from .hazards import CATALOG, Hazard
from .models import Curve, Sample

logger = logging.getLogger(__name__)

HazardLike = Union[Hazard, str]

_EMPTY = Curve()


class DataFormatError(ValueError):
    """Raw curve data does not have the expected shape."""


@dataclass(frozen=True)
class AxisBounds:
    """Plot domain for one hazard: [0, max intensity] x [0, 1]."""
    x_min: float
    x_max: float
    y_min: float = 0.0
    y_max: float = 1.0


def _to_number(v: Any, where: str) -> float:
    # bool is an int subclass; a True/False sample is a provider bug
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise DataFormatError(f"{where}: expected a number, got {v!r}")
    fv = float(v)
    if not math.isfinite(fv):
        raise DataFormatError(f"{where}: value must be finite, got {v!r}")
    return fv


def _build_curve(hazard_key: str, category: str, entry: Any) -> Curve:
    where = f"{hazard_key}/{category}"
    if not isinstance(entry, Mapping):
        raise DataFormatError(f"{where}: expected an object with 'x' and 'y', got {type(entry).__name__}")
    try:
        xs, ys = entry["x"], entry["y"]
    except KeyError as e:
        raise DataFormatError(f"{where}: missing {e.args[0]!r} array") from None
    for name, arr in (("x", xs), ("y", ys)):
        if isinstance(arr, (str, bytes)) or not isinstance(arr, (list, tuple)):
            raise DataFormatError(f"{where}: '{name}' must be an array, got {type(arr).__name__}")
    if len(xs) != len(ys):
        raise DataFormatError(f"{where}: x has {len(xs)} values but y has {len(ys)}")

    samples = [
        Sample(_to_number(x, f"{where} x[{i}]"), _to_number(y, f"{where} y[{i}]"))
        for i, (x, y) in enumerate(zip(xs, ys))
    ]
    ordered = sorted(samples, key=lambda s: s.intensity)
    if ordered != samples:
        logger.debug("Re-ordered %s by intensity (%d samples)", where, len(samples))
    return Curve(tuple(ordered))


class CurveStore:
    """All curves of one provider load, grouped per hazard.

    Build it with `CurveStore.from_raw(raw)`; the constructor takes already
    validated curves.
    """

    def __init__(self, curves: Mapping[Hazard, Mapping[str, Curve]]) -> None:
        tables: Dict[Hazard, Mapping[str, Curve]] = {}
        categories: Dict[Hazard, Tuple[str, ...]] = {}
        for h in Hazard:
            table = dict(curves.get(h, {}))
            tables[h] = MappingProxyType(table)
            categories[h] = CATALOG[h].policy.resolve(table.keys())
        self._curves = MappingProxyType(tables)
        self._categories = MappingProxyType(categories)

    @classmethod
    def from_raw(cls, raw: Any) -> "CurveStore":
        """Validate the provider's nested mapping and build the store."""
        if not isinstance(raw, Mapping):
            raise DataFormatError(f"Curve data must be an object keyed by hazard, got {type(raw).__name__}")
        curves: Dict[Hazard, Dict[str, Curve]] = {}
        for hazard_key, grouped in raw.items():
            try:
                hazard = Hazard(hazard_key)
            except ValueError:
                logger.warning("Ignoring unknown hazard key %r in curve data", hazard_key)
                continue
            if not isinstance(grouped, Mapping):
                raise DataFormatError(f"{hazard_key}: expected an object keyed by category, got {type(grouped).__name__}")
            curves[hazard] = {
                str(category): _build_curve(hazard_key, str(category), entry)
                for category, entry in grouped.items()
            }
        for h in Hazard:
            if h not in curves:
                logger.info("No curves for %s (%r) in provider data", h.name.lower(), h.key)
        return cls(curves)

    # ---------------- Accessors ----------------
    def hazards(self) -> Tuple[Hazard, ...]:
        return tuple(CATALOG)

    def categories_for(self, hazard: HazardLike) -> Tuple[str, ...]:
        """Category keys for a hazard, in display order."""
        return self._categories[Hazard.parse(hazard)]

    def curve_for(self, hazard: HazardLike, category: str) -> Curve:
        """Curve for (hazard, category); empty if the data has none."""
        return self._curves[Hazard.parse(hazard)].get(category, _EMPTY)

    def curves(self, hazard: HazardLike) -> List[Tuple[str, Curve]]:
        h = Hazard.parse(hazard)
        return [(c, self.curve_for(h, c)) for c in self.categories_for(h)]

    def max_intensity(self, hazard: HazardLike) -> float:
        """Largest intensity over the hazard's categories; 0 when empty."""
        xs = [s.intensity for _, curve in self.curves(hazard) for s in curve]
        return max(xs) if xs else 0

    def bounds(self, hazard: HazardLike) -> AxisBounds:
        return AxisBounds(x_min=0.0, x_max=float(self.max_intensity(hazard)))

    def sample_count(self, hazard: HazardLike) -> int:
        return sum(len(curve) for _, curve in self.curves(hazard))
