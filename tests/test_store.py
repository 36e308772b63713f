import pytest

from dce.hazards import Hazard, TAXONOMIES
from dce.models import Sample
from dce.store import CurveStore, DataFormatError


def test_fixed_categories_keep_taxonomy_order(store):
    assert store.categories_for(Hazard.EARTHQUAKE) == ("lightwood", "mur", "mcf", "cr")
    assert store.categories_for("gunungberapi") == TAXONOMIES


def test_flood_categories_follow_provider_order(store):
    assert store.categories_for("flood") == ("1.0", "2.0")
    reversed_store = CurveStore.from_raw({"banjir": {"2.0": {"x": [0], "y": [0]}, "1.0": {"x": [0], "y": [0]}}})
    assert reversed_store.categories_for(Hazard.FLOOD) == ("2.0", "1.0")


def test_missing_category_is_an_empty_curve(store):
    assert store.curve_for("gempa", "mcf").is_empty
    assert store.curve_for("gempa", "no-such-taxonomy").is_empty


def test_missing_hazard_defaults_to_empty():
    store = CurveStore.from_raw({"banjir": {"1.0": {"x": [0, 1], "y": [0, 0.5]}}})
    assert store.categories_for(Hazard.EARTHQUAKE) == ("lightwood", "mur", "mcf", "cr")
    for c in store.categories_for(Hazard.EARTHQUAKE):
        assert store.curve_for(Hazard.EARTHQUAKE, c).is_empty
    assert store.max_intensity(Hazard.EARTHQUAKE) == 0
    assert store.categories_for(Hazard.LANDSLIDE) == TAXONOMIES


def test_empty_raw_mapping_gives_empty_flood():
    store = CurveStore.from_raw({})
    assert store.categories_for(Hazard.FLOOD) == ()
    assert store.sample_count(Hazard.FLOOD) == 0


def test_max_intensity_and_bounds(store):
    assert store.max_intensity(Hazard.EARTHQUAKE) == 12
    assert store.max_intensity(Hazard.FLOOD) == 4
    b = store.bounds("volcanic")
    assert (b.x_min, b.x_max, b.y_min, b.y_max) == (0.0, 6.0, 0.0, 1.0)


def test_samples_pair_x_with_y(store):
    curve = store.curve_for(Hazard.EARTHQUAKE, "mur")
    assert list(curve) == [Sample(5.0, 0.0), Sample(7.0, 0.3), Sample(9.0, 0.7), Sample(12.0, 1.0)]


def test_unsorted_samples_are_sorted_on_load():
    store = CurveStore.from_raw({"longsor": {"cr": {"x": [10, 0, 5], "y": [1.0, 0.0, 0.5]}}})
    curve = store.curve_for(Hazard.LANDSLIDE, "cr")
    assert curve.xs == [0.0, 5.0, 10.0]
    assert curve.ys == [0.0, 0.5, 1.0]


def test_length_mismatch_is_rejected():
    with pytest.raises(DataFormatError, match="x has 3 values but y has 2"):
        CurveStore.from_raw({"gempa": {"mur": {"x": [1, 2, 3], "y": [0.1, 0.2]}}})


@pytest.mark.parametrize("raw", [
    [],
    {"gempa": ["mur"]},
    {"gempa": {"mur": [1, 2]}},
    {"gempa": {"mur": {"x": [1, 2]}}},
    {"gempa": {"mur": {"x": "12", "y": "34"}}},
    {"gempa": {"mur": {"x": [1, "two"], "y": [0.1, 0.2]}}},
    {"gempa": {"mur": {"x": [1, float("nan")], "y": [0.1, 0.2]}}},
    {"gempa": {"mur": {"x": [1, 2], "y": [True, 0.2]}}},
])
def test_malformed_shapes_raise_data_format_error(raw):
    with pytest.raises(DataFormatError):
        CurveStore.from_raw(raw)


def test_unknown_hazard_key_is_ignored(caplog):
    store = CurveStore.from_raw({"tsunami": {"cr": {"x": [1], "y": [1]}}, "banjir": {}})
    assert store.categories_for(Hazard.FLOOD) == ()
    assert "tsunami" in caplog.text


def test_store_is_read_only(store):
    with pytest.raises(TypeError):
        store._curves[Hazard.FLOOD] = {}
    with pytest.raises(TypeError):
        store._curves[Hazard.FLOOD]["3.0"] = None
