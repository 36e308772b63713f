"""
Data model (Sample, Curve, query results)
=========================================

Every (hazard, category) pair owns one `Curve`: an ordered tuple of
`Sample(intensity, damage)` points taken from the curve data provider.

All records are immutable (`frozen=True`) so that:
- a loaded store can be shared by any number of callers, and
- queries are pure functions over data that never changes after loading.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from .hazards import Hazard


@dataclass(frozen=True)
class Sample:
    """One knot of a fragility/vulnerability curve."""
    intensity: float
    damage: float


@dataclass(frozen=True)
class Curve:
    """Ordered samples for one (hazard, category) pair. May be empty."""
    samples: Tuple[Sample, ...] = ()

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __getitem__(self, i: int) -> Sample:
        return self.samples[i]

    @property
    def is_empty(self) -> bool:
        return not self.samples

    @property
    def xs(self) -> List[float]:
        return [s.intensity for s in self.samples]

    @property
    def ys(self) -> List[float]:
        return [s.damage for s in self.samples]

    @classmethod
    def from_pairs(cls, pairs) -> "Curve":
        """Build a curve from (x, y) pairs, keeping the given order."""
        return cls(tuple(Sample(float(x), float(y)) for x, y in pairs))


class _NotFound:
    """Marker for "no damage value for this category"."""
    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __str__(self) -> str:
        return "not found"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()

DamageValue = Union[float, _NotFound]


@dataclass(frozen=True)
class DamageEntry:
    """One row of a batch damage query."""
    category: str
    label: str
    value: DamageValue

    @property
    def found(self) -> bool:
        return self.value is not NOT_FOUND


@dataclass(frozen=True)
class QueryResult:
    """Damage values for every category of a hazard at one intensity.

    If the intensity text could not be parsed, `error` holds the marker text
    and `entries` is empty: the whole query failed, not single categories.
    """
    hazard: Hazard
    intensity: Optional[float]
    entries: Tuple[DamageEntry, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_pairs(self) -> List[Tuple[str, DamageValue]]:
        return [(e.label, e.value) for e in self.entries]


@dataclass(frozen=True)
class NearestPoint:
    """Closest sample to a queried intensity, with its owning category."""
    hazard: Hazard
    category: str
    label: str
    sample: Sample

    @property
    def x(self) -> float:
        return self.sample.intensity

    @property
    def y(self) -> float:
        return self.sample.damage
