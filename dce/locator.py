"""
Nearest sample lookup
=====================

Used for "click on the chart, show the closest curve point".

The display side turns a pointer position into an intensity with a
`LinearScale` (pixel -> data), then `nearest` scans every sample of every
category and keeps the one with the smallest |intensity - x|. Only the x
distance counts; the pointer's y is ignored.

Ties go to the first sample seen: categories in `categories_for` order, then
samples in curve order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import math

from .hazards import Hazard, display_label
from .models import NearestPoint
from .store import CurveStore, HazardLike


@dataclass(frozen=True)
class LinearScale:
    """Maps a data domain onto a pixel range (and back)."""
    domain_min: float
    domain_max: float
    pixel_min: float
    pixel_max: float

    def __post_init__(self) -> None:
        if self.domain_max == self.domain_min:
            raise ValueError("Scale domain has zero width")
        if self.pixel_max == self.pixel_min:
            raise ValueError("Scale pixel range has zero width")

    def value_for_pixel(self, px: float) -> float:
        t = (px - self.pixel_min) / (self.pixel_max - self.pixel_min)
        return self.domain_min + t * (self.domain_max - self.domain_min)

    def pixel_for_value(self, v: float) -> float:
        t = (v - self.domain_min) / (self.domain_max - self.domain_min)
        return self.pixel_min + t * (self.pixel_max - self.pixel_min)

    @classmethod
    def for_hazard(cls, store: CurveStore, hazard: HazardLike, width: float, left: float = 0.0) -> "LinearScale":
        """x axis of a chart `width` pixels wide showing [0, max intensity]."""
        b = store.bounds(hazard)
        return cls(b.x_min, b.x_max, left, left + width)


def nearest(store: CurveStore, hazard: HazardLike, query_x: float) -> Optional[NearestPoint]:
    """Closest sample (by intensity) across all categories of a hazard."""
    h = Hazard.parse(hazard)
    if math.isnan(query_x):
        raise ValueError("Query intensity is NaN")
    best = None
    best_category = None
    best_dist = float("inf")
    for category, curve in store.curves(h):
        for s in curve:
            dist = abs(s.intensity - query_x)
            # an infinite query puts every sample at inf; keep the first one
            if best is None or dist < best_dist:
                best, best_category, best_dist = s, category, dist
    if best is None:
        return None
    return NearestPoint(hazard=h, category=best_category, label=display_label(h, best_category), sample=best)


def nearest_at_pixel(store: CurveStore, hazard: HazardLike, pixel_x: float, scale: LinearScale) -> Optional[NearestPoint]:
    return nearest(store, hazard, scale.value_for_pixel(pixel_x))
