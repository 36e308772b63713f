import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from dce.engine import (
    DCE,
    INVALID_INPUT,
    CurvesUnavailable,
    InvalidQueryInput,
    batch_damage_at,
    parse_intensity,
)
from dce.hazards import Hazard
from dce.loader import ProviderUnavailable
from dce.models import NOT_FOUND


def test_flood_batch_example(store):
    result = batch_damage_at(store, Hazard.FLOOD, 1)
    assert result.ok
    pairs = result.as_pairs()
    assert [label for label, _ in pairs] == ["Floor 1", "Floor 2"]
    assert pairs[0][1] == pytest.approx(0.4)
    assert pairs[1][1] == pytest.approx(0.075)


def test_batch_covers_every_fixed_category(store):
    result = batch_damage_at(store, "earthquake", "8")
    assert [e.category for e in result.entries] == ["lightwood", "mur", "mcf", "cr"]
    assert [e.label for e in result.entries] == ["Lightwood", "MUR", "MCF", "CR"]
    values = {e.category: e.value for e in result.entries}
    assert values["lightwood"] == pytest.approx(0.5)
    assert values["mur"] == pytest.approx(0.5)
    assert values["mcf"] is NOT_FOUND
    assert values["cr"] == pytest.approx(0.24)


def test_invalid_text_marks_the_whole_query(store):
    result = batch_damage_at(store, Hazard.FLOOD, "abc")
    assert not result.ok
    assert result.error == INVALID_INPUT
    assert result.entries == ()
    assert result.intensity is None


@pytest.mark.parametrize("text, expected", [("2.5", 2.5), (" 7 ", 7.0), ("-1e-1", -0.1), (3, 3.0)])
def test_parse_intensity(text, expected):
    assert parse_intensity(text) == expected


@pytest.mark.parametrize("text", ["abc", "", "1,5", "nan", "inf", None, True])
def test_parse_intensity_rejects(text):
    with pytest.raises(InvalidQueryInput):
        parse_intensity(text)


def test_engine_from_provider(raw):
    engine = DCE.from_provider(lambda: raw, source="memory")
    assert engine.available
    assert engine.categories("banjir") == ["1.0", "2.0"]
    assert engine.check("banjir", "2").as_pairs()[0][1] == pytest.approx(0.8)
    assert engine.last_result.intensity == 2.0


def test_provider_failure_leaves_engine_unavailable():
    def broken():
        raise ProviderUnavailable("connection refused")

    engine = DCE.from_provider(broken)
    assert not engine.available
    assert "connection refused" in engine.error
    with pytest.raises(CurvesUnavailable):
        engine.check(Hazard.FLOOD, "1")
    with pytest.raises(CurvesUnavailable):
        engine.nearest(Hazard.FLOOD, 1.0)


def test_malformed_data_leaves_engine_unavailable():
    engine = DCE.from_provider(lambda: {"gempa": {"mur": {"x": [1, 2], "y": [0.1]}}})
    assert not engine.available
    assert engine.error.startswith("Malformed curve data")


def test_load_async_resolves_to_engine(raw):
    future = DCE.load_async(lambda: raw, source="memory")
    engine = future.result(timeout=5)
    assert engine.available
    assert engine.source == "memory"


def test_load_async_with_executor_reports_failure():
    def broken():
        raise ProviderUnavailable("timeout")

    with ThreadPoolExecutor(max_workers=1) as pool:
        engine = DCE.load_async(broken, executor=pool).result(timeout=5)
    assert not engine.available


def test_nearest_at_pixel_uses_chart_scale(store):
    engine = DCE(store=store)
    # 400 px wide chart over [0, 4] m: 100 px per metre
    pt = engine.nearest_at_pixel(Hazard.FLOOD, 390, 400)
    assert (pt.category, pt.x, pt.y) == ("2.0", 4.0, 0.3)


def test_nearest_at_pixel_with_zero_width_domain():
    engine = DCE.from_provider(lambda: {"banjir": {"1.0": {"x": [0], "y": [0.1]}}})
    pt = engine.nearest_at_pixel(Hazard.FLOOD, 50, 100)
    assert pt.y == 0.1


def test_export_csv_and_json(store, tmp_path):
    engine = DCE(store=store, source="memory")
    engine.command_log.append("check banjir 1")
    engine.check("banjir", "1")

    csv_path = tmp_path / "out.csv"
    engine.export_csv(str(csv_path))
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "hazard,intensity,category,label,damage"
    assert lines[1].startswith("flood,1.0,1.0,Floor 1,0.4")

    json_path = tmp_path / "out.json"
    engine.export_json(str(json_path))
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert payload["commands"] == ["check banjir 1"]
    assert [r["label"] for r in payload["results"]] == ["Floor 1", "Floor 2"]


def test_export_writes_null_for_not_found(store, tmp_path):
    engine = DCE(store=store)
    engine.check("gempa", 6)
    path = tmp_path / "out.json"
    engine.export_json(str(path))
    rows = {r["category"]: r["damage"] for r in json.loads(path.read_text())["results"]}
    assert rows["mcf"] is None


def test_export_requires_a_successful_check(store, tmp_path):
    engine = DCE(store=store)
    with pytest.raises(ValueError, match="run a damage check"):
        engine.export_csv(str(tmp_path / "x.csv"))
    engine.check("gempa", "abc")
    with pytest.raises(ValueError, match="last query failed"):
        engine.export_csv(str(tmp_path / "x.csv"))


def test_export_curves_csv(store, tmp_path):
    engine = DCE(store=store)
    path = tmp_path / "curves.csv"
    assert engine.export_curves_csv(str(path), "banjir") == 4
    assert path.read_text().splitlines()[1] == "banjir,1.0,0.0,0.0"


def test_nearest_at_pixel_rejects_zero_width_chart(store):
    engine = DCE(store=store)
    with pytest.raises(ValueError, match="pixel range"):
        engine.nearest_at_pixel(Hazard.EARTHQUAKE, 500, 0)
