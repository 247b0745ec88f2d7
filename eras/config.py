from __future__ import annotations

from dataclasses import dataclass
import math
import os
from pathlib import Path

from dotenv import load_dotenv

from eras.dedup import DEDUP_TOLERANCE
from eras.errors import ConfigurationError
from eras.graph import DEFAULT_THRESHOLD


@dataclass(frozen=True)
class PipelineConfig:
    num_clusters: int = 3
    max_iterations: int = 100
    seed: int = 42
    edge_threshold: float = DEFAULT_THRESHOLD
    dedup_tolerance: float = DEDUP_TOLERANCE

    def validate(self, n_entities: int | None = None) -> None:
        if self.num_clusters < 1:
            raise ConfigurationError(f"Cluster count must be at least 1, got {self.num_clusters}")
        if n_entities is not None and self.num_clusters > n_entities:
            raise ConfigurationError(
                f"Cluster count {self.num_clusters} exceeds the number of entities ({n_entities})"
            )
        if self.max_iterations < 0:
            raise ConfigurationError(f"Iteration budget must be non-negative, got {self.max_iterations}")
        if not math.isfinite(self.edge_threshold) or self.edge_threshold < 0:
            raise ConfigurationError(
                f"Edge threshold must be a finite non-negative number, got {self.edge_threshold}"
            )
        if not math.isfinite(self.dedup_tolerance) or self.dedup_tolerance < 0:
            raise ConfigurationError(f"Dedup tolerance must be a finite non-negative number, got {self.dedup_tolerance}")


def _env_value(name: str, default: str, cast: type) -> int | float:
    raw = os.getenv(name, "").strip() or default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a valid {cast.__name__}, got {raw!r}") from exc


def load_config(
    env_file: str | None = None,
    num_clusters: int | None = None,
    max_iterations: int | None = None,
    seed: int | None = None,
    edge_threshold: float | None = None,
    dedup_tolerance: float | None = None,
) -> PipelineConfig:
    if env_file:
        load_dotenv(env_file)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env)

    config = PipelineConfig(
        num_clusters=num_clusters if num_clusters is not None else _env_value("ERAS_NUM_CLUSTERS", "3", int),
        max_iterations=(
            max_iterations if max_iterations is not None else _env_value("ERAS_MAX_ITERATIONS", "100", int)
        ),
        seed=seed if seed is not None else _env_value("ERAS_SEED", "42", int),
        edge_threshold=(
            edge_threshold
            if edge_threshold is not None
            else _env_value("ERAS_EDGE_THRESHOLD", str(DEFAULT_THRESHOLD), float)
        ),
        dedup_tolerance=(
            dedup_tolerance
            if dedup_tolerance is not None
            else _env_value("ERAS_DEDUP_TOLERANCE", repr(DEDUP_TOLERANCE), float)
        ),
    )
    config.validate()
    return config
