from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import numpy as np
import pandas as pd

from eras.analysis import AnalysisResult
from eras.entities import FEATURE_FIELDS, Entity
from eras.errors import MalformedEntityError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"name", "energy", "valence", "acousticness", "year"}
COLUMN_ALIASES = {"acoust": "acousticness"}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for column in df.columns:
        key = str(column).strip().lower()
        renamed[column] = COLUMN_ALIASES.get(key, key)

    targets = list(renamed.values())
    clashes = sorted({key for key in targets if targets.count(key) > 1})
    if clashes:
        raise MalformedEntityError(f"CSV has conflicting columns for: {clashes}")
    return df.rename(columns=renamed)


def parse_entity_row(row: Mapping[str, Any]) -> Entity:
    name = str(row.get("name", "")).strip()
    if not name:
        raise MalformedEntityError("Missing entity name")

    features: dict[str, float] = {}
    for column in FEATURE_FIELDS:
        text = str(row.get(column, "")).strip()
        try:
            features[column] = float(text)
        except ValueError as exc:
            raise MalformedEntityError(f"Entity {name!r} has unparseable {column}: {text!r}") from exc

    year_text = str(row.get("year", "")).strip()
    try:
        year = int(year_text)
    except ValueError as exc:
        raise MalformedEntityError(f"Entity {name!r} has unparseable year: {year_text!r}") from exc

    return Entity(name=name, year=year, **features)


def load_entities_csv(input_path: str) -> list[Entity]:
    csv_path = Path(input_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    try:
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as exc:
        raise MalformedEntityError(f"CSV has no header row: {input_path}") from exc
    except pd.errors.ParserError as exc:
        raise MalformedEntityError(f"Malformed CSV row shape in {input_path}: {exc}") from exc
    df = _normalize_columns(df)
    missing = sorted(REQUIRED_COLUMNS - set(df.columns))
    if missing:
        raise MalformedEntityError(f"CSV is missing required columns: {missing}")

    entities: list[Entity] = []
    for row_number, row in enumerate(df.to_dict(orient="records"), start=1):
        try:
            entities.append(parse_entity_row(row))
        except MalformedEntityError as exc:
            raise MalformedEntityError(f"Row {row_number}: {exc}") from exc

    logger.info(f"Loaded {len(entities)} entities from {csv_path}")
    return entities


def prepare_clusters_for_csv(result: AnalysisResult) -> pd.DataFrame:
    rows: list[dict[str, object]] = []
    for cluster_index, members in result.cluster_members().items():
        for entity in members:
            rows.append(
                {
                    "cluster": int(cluster_index),
                    "name": entity.name,
                    "year": int(entity.year),
                    **{column: float(getattr(entity, column)) for column in FEATURE_FIELDS},
                }
            )

    columns = ["cluster", "name", "year", *FEATURE_FIELDS]
    out = pd.DataFrame(rows, columns=columns)
    if not out.empty:
        out["cluster"] = out["cluster"].astype(np.int64)
    return out
