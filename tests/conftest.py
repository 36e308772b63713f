import pytest

from dce.store import CurveStore


RAW = {
    "gempa": {
        "lightwood": {"x": [5, 6, 7, 8, 9], "y": [0.0, 0.05, 0.2, 0.5, 0.8]},
        "mur": {"x": [5, 7, 9, 12], "y": [0.0, 0.3, 0.7, 1.0]},
        "cr": {"x": [5, 10], "y": [0.0, 0.4]},
    },
    "banjir": {
        "1.0": {"x": [0, 2], "y": [0, 0.8]},
        "2.0": {"x": [0, 4], "y": [0, 0.3]},
    },
    "gunungberapi": {
        "lightwood": {"x": [0, 2, 4], "y": [0, 0.6, 1.0]},
        "mcf": {"x": [0, 3, 6], "y": [0, 0.2, 0.5]},
    },
}


@pytest.fixture
def raw():
    return RAW


@pytest.fixture
def store():
    return CurveStore.from_raw(RAW)
