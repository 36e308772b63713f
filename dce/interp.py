"""
Piecewise-linear interpolation
==============================

`damage_at(curve, x)` reads a damage ratio off a curve:

1) empty curve          -> None (no data for this category)
2) x <= first intensity -> first damage (left clamp)
3) x >= last intensity  -> last damage (right clamp)
4) otherwise            -> linear interpolation inside the first interval
                           [x1, x2] that contains x
5) no interval found    -> None

Curves coming from `CurveStore` are already sorted. (5) is only a guard: the
consecutive intervals always chain from the first to the last intensity.
"""

from __future__ import annotations
from typing import Optional

from .models import Curve


def _lerp(x1: float, y1: float, x2: float, y2: float, x: float) -> float:
    # vertical step (x1 == x2): take the left knot
    if x2 == x1:
        return y1
    t = (x - x1) / (x2 - x1)
    return y1 + (y2 - y1) * t


def damage_at(curve: Curve, x: float) -> Optional[float]:
    """Damage ratio at intensity `x`, clamped to the curve's end points."""
    if curve.is_empty:
        return None
    first, last = curve[0], curve[len(curve) - 1]
    if x <= first.intensity:
        return first.damage
    if x >= last.intensity:
        return last.damage
    for i in range(1, len(curve)):
        a, b = curve[i - 1], curve[i]
        if a.intensity <= x <= b.intensity:
            return _lerp(a.intensity, a.damage, b.intensity, b.damage, x)
    return None
