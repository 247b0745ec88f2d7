"""Tests for the entity model and divergence metric."""

import math

import numpy as np
import pytest

from eras.entities import (
    Entity,
    cross_divergence,
    divergence,
    feature_matrix,
    pairwise_divergence,
)
from eras.errors import MalformedEntityError


class TestEntity:
    """Entity construction and validation."""

    def test_features_order(self):
        """Feature vector is energy, acousticness, valence."""
        song = Entity(name="x", energy=0.1, acousticness=0.2, valence=0.3, year=1967)
        assert song.features().tolist() == [0.1, 0.2, 0.3]

    def test_integer_features_are_coerced(self):
        song = Entity(name="x", energy=1, acousticness=0, valence=0, year=np.int64(1967))
        assert isinstance(song.energy, float)
        assert isinstance(song.year, int)
        assert song == Entity(name="x", energy=1.0, acousticness=0.0, valence=0.0, year=1967)

    def test_value_equality_and_hash(self):
        a = Entity(name="x", energy=0.1, acousticness=0.2, valence=0.3, year=1967)
        b = Entity(name="x", energy=0.1, acousticness=0.2, valence=0.3, year=1967)
        assert a == b
        assert len({a, b}) == 1

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), "0.5", None, True])
    def test_rejects_bad_feature(self, bad):
        with pytest.raises(MalformedEntityError):
            Entity(name="x", energy=bad, acousticness=0.2, valence=0.3, year=1967)

    @pytest.mark.parametrize("bad", [1967.0, "1967", None, False])
    def test_rejects_bad_year(self, bad):
        with pytest.raises(MalformedEntityError):
            Entity(name="x", energy=0.1, acousticness=0.2, valence=0.3, year=bad)

    def test_rejects_non_string_name(self):
        with pytest.raises(MalformedEntityError):
            Entity(name=42, energy=0.1, acousticness=0.2, valence=0.3, year=1967)


class TestDivergence:
    """Euclidean divergence over the feature triple."""

    def test_zero_on_self(self, random_entities):
        for entity in random_entities:
            assert divergence(entity, entity) == 0.0

    def test_symmetric(self, random_entities):
        for a in random_entities[:10]:
            for b in random_entities[:10]:
                assert divergence(a, b) == divergence(b, a)

    def test_scenario_values(self, scenario_entities):
        a, b, c, d = scenario_entities
        assert divergence(a, b) == pytest.approx(math.sqrt(3 * 0.02 ** 2))
        assert divergence(a, c) == pytest.approx(1.1)
        assert divergence(c, d) == pytest.approx(math.sqrt(0.05 ** 2 + 2 * 0.02 ** 2))

    def test_year_does_not_matter(self):
        a = Entity(name="a", energy=0.5, acousticness=0.5, valence=0.5, year=1963)
        b = Entity(name="b", energy=0.5, acousticness=0.5, valence=0.5, year=1970)
        assert divergence(a, b) == 0.0

    def test_accepts_bare_triple(self, scenario_entities):
        a = scenario_entities[0]
        assert divergence(a, [0.80, 0.10, 0.90]) == 0.0

    def test_rejects_wrong_length_triple(self, scenario_entities):
        with pytest.raises(MalformedEntityError):
            divergence(scenario_entities[0], [0.1, 0.2])

    def test_pairwise_matches_scalar(self, random_entities):
        entities = random_entities[:12]
        matrix = pairwise_divergence(feature_matrix(entities))
        for i, a in enumerate(entities):
            for j, b in enumerate(entities):
                assert matrix[i, j] == pytest.approx(divergence(a, b))
        assert np.all(np.diag(matrix) == 0.0)
        assert np.array_equal(matrix, matrix.T)

    def test_cross_shape(self, random_entities):
        left = feature_matrix(random_entities[:5])
        right = feature_matrix(random_entities[:2])
        assert cross_divergence(left, right).shape == (5, 2)

    def test_empty_feature_matrix(self):
        assert feature_matrix([]).shape == (0, 3)
