"""
Pytest configuration and shared fixtures.
"""

from typing import List

import numpy as np
import pytest

from eras.entities import Entity


@pytest.fixture
def scenario_entities() -> List[Entity]:
    """Two early and two late songs with well separated features."""
    return [
        Entity(name="A", energy=0.80, acousticness=0.10, valence=0.90, year=1965),
        Entity(name="B", energy=0.82, acousticness=0.12, valence=0.88, year=1965),
        Entity(name="C", energy=0.20, acousticness=0.80, valence=0.30, year=1968),
        Entity(name="D", energy=0.25, acousticness=0.78, valence=0.28, year=1969),
    ]


@pytest.fixture
def random_entities() -> List[Entity]:
    """Forty songs with random features in the unit cube."""
    rng = np.random.default_rng(7)
    features = rng.random((40, 3))
    years = rng.integers(1963, 1971, size=40)
    return [
        Entity(
            name=f"song-{i}",
            energy=float(row[0]),
            acousticness=float(row[1]),
            valence=float(row[2]),
            year=int(year),
        )
        for i, (row, year) in enumerate(zip(features, years))
    ]


class FixedGenerator:
    """Stand-in random generator that returns preset initial node indices."""

    def __init__(self, indices):
        self.indices = list(indices)

    def integers(self, low, high, size):
        assert size == len(self.indices)
        assert all(low <= i < high for i in self.indices)
        return np.array(self.indices, dtype=np.int64)


@pytest.fixture
def fixed_generator():
    return FixedGenerator
