"""
Hazard catalog (static registry)
================================

DCE knows exactly four hazards. Each one carries a small static `HazardSpec`:

- the key the curve data provider uses for it (`gempa`, `banjir`, ...),
- a title and x-axis label for whoever draws the curves,
- a *category policy*: either a fixed list of building taxonomies, or
  "take the categories from the data" (flood curves are keyed by floor level),
- a label table `{category: display label}` plus a fallback rule for keys the
  table does not know.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Mapping, Tuple, Union


class Hazard(Enum):
    """Hazard types, valued by the provider's wire key."""
    EARTHQUAKE = "gempa"
    FLOOD = "banjir"
    VOLCANIC = "gunungberapi"
    LANDSLIDE = "longsor"

    @property
    def key(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Hazard", str]) -> "Hazard":
        """Accept a Hazard, a provider key ("banjir") or a name ("flood")."""
        if isinstance(value, Hazard):
            return value
        s = str(value).strip().lower()
        for h in cls:
            if s in (h.value, h.name.lower()):
                return h
        raise ValueError(f"Unknown hazard: {value!r}. Expected one of {[h.name.lower() for h in cls]}")


TAXONOMIES: Tuple[str, ...] = ("lightwood", "mur", "mcf", "cr")


# Category policies (tagged variant)

@dataclass(frozen=True)
class FixedCategories:
    """Always the same categories, in this order, whatever the data holds."""
    keys: Tuple[str, ...]

    def resolve(self, present: Iterable[str]) -> Tuple[str, ...]:
        return self.keys


@dataclass(frozen=True)
class CategoriesFromData:
    """Categories are whatever keys the provider sent, in its order."""

    def resolve(self, present: Iterable[str]) -> Tuple[str, ...]:
        return tuple(present)


CategoryPolicy = Union[FixedCategories, CategoriesFromData]


@dataclass(frozen=True)
class HazardSpec:
    hazard: Hazard
    title: str
    x_axis_label: str
    policy: CategoryPolicy
    labels: Mapping[str, str] = field(default_factory=dict)
    # format string for unmapped categories; "{category}" passes the key through
    fallback: str = "{category}"

    def label_for(self, category: str) -> str:
        if category in self.labels:
            return self.labels[category]
        return self.fallback.format(category=category)


_TAXONOMY_LABELS = {"lightwood": "Lightwood", "mur": "MUR", "mcf": "MCF", "cr": "CR"}
_FLOOR_LABELS = {"1.0": "Floor 1", "2.0": "Floor 2"}

CATALOG: Dict[Hazard, HazardSpec] = {
    Hazard.EARTHQUAKE: HazardSpec(
        Hazard.EARTHQUAKE, "Earthquake", "Intensity (MMI)",
        FixedCategories(TAXONOMIES), _TAXONOMY_LABELS,
    ),
    Hazard.FLOOD: HazardSpec(
        Hazard.FLOOD, "Flood", "Flood depth (m)",
        CategoriesFromData(), _FLOOR_LABELS, fallback="Curve {category}",
    ),
    Hazard.VOLCANIC: HazardSpec(
        Hazard.VOLCANIC, "Volcano", "Intensity (kPa)",
        FixedCategories(TAXONOMIES), _TAXONOMY_LABELS,
    ),
    Hazard.LANDSLIDE: HazardSpec(
        Hazard.LANDSLIDE, "Landslide", "Intensity (momentum flux)",
        FixedCategories(TAXONOMIES), _TAXONOMY_LABELS,
    ),
}


def spec_for(hazard: Union[Hazard, str]) -> HazardSpec:
    return CATALOG[Hazard.parse(hazard)]


def display_label(hazard: Union[Hazard, str], category: str) -> str:
    """Human label for a category, e.g. ("banjir", "1.0") -> "Floor 1"."""
    return spec_for(hazard).label_for(category)
