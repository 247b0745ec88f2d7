from __future__ import annotations

from dataclasses import dataclass, fields
import math
import numbers
from typing import Iterable, Sequence, Union

import numpy as np

from eras.errors import MalformedEntityError

# Comparison features, in feature-vector order.
FEATURE_FIELDS = ("energy", "acousticness", "valence")


@dataclass(frozen=True)
class Entity:
    """A song described by three normalized audio features and a release year.

    Only the feature triple takes part in comparisons; ``year`` is carried for
    reporting. Two entities with equal field values are the same entity.
    """

    name: str
    energy: float
    acousticness: float
    valence: float
    year: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise MalformedEntityError(f"Entity name must be a string, got {type(self.name).__name__}")

        for field_name in FEATURE_FIELDS:
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise MalformedEntityError(
                    f"Entity {self.name!r} has non-numeric {field_name}: {value!r}"
                )
            if not math.isfinite(float(value)):
                raise MalformedEntityError(
                    f"Entity {self.name!r} has non-finite {field_name}: {value!r}"
                )
            object.__setattr__(self, field_name, float(value))

        if isinstance(self.year, bool) or not isinstance(self.year, numbers.Integral):
            raise MalformedEntityError(f"Entity {self.name!r} has non-integer year: {self.year!r}")
        object.__setattr__(self, "year", int(self.year))

    def features(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_FIELDS], dtype=float)


def entity_attributes() -> list[str]:
    return [f.name for f in fields(Entity)]


def feature_matrix(entities: Iterable[Entity]) -> np.ndarray:
    rows = [entity.features() for entity in entities]
    if not rows:
        return np.empty((0, len(FEATURE_FIELDS)), dtype=float)
    return np.vstack(rows)


def _as_vector(value: Union[Entity, Sequence[float], np.ndarray]) -> np.ndarray:
    if isinstance(value, Entity):
        return value.features()
    vec = np.asarray(value, dtype=float)
    if vec.shape != (len(FEATURE_FIELDS),):
        raise MalformedEntityError(
            f"Feature vector must have {len(FEATURE_FIELDS)} components, got shape {vec.shape}"
        )
    return vec


def _norm(diff: np.ndarray) -> np.ndarray:
    return np.sqrt(np.square(diff).sum(axis=-1))


def divergence(
    a: Union[Entity, Sequence[float], np.ndarray],
    b: Union[Entity, Sequence[float], np.ndarray],
) -> float:
    """Euclidean distance between two feature triples.

    Larger means *more* different. Either side may be an ``Entity`` or a bare
    feature triple such as a centroid.
    """
    return float(_norm(_as_vector(a) - _as_vector(b)))


def cross_divergence(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Divergence between every row of ``left`` and every row of ``right``.

    Cell ``(i, j)`` equals ``divergence(left[i], right[j])``.
    """
    left = np.asarray(left, dtype=float)
    right = np.asarray(right, dtype=float)
    if left.ndim != 2 or right.ndim != 2:
        raise ValueError(f"Feature matrices must be 2D, got shapes {left.shape} and {right.shape}")
    return _norm(left[:, None, :] - right[None, :, :])


def pairwise_divergence(matrix: np.ndarray) -> np.ndarray:
    return cross_divergence(matrix, matrix)
