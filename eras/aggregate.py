from __future__ import annotations

import logging
from typing import Callable, Union

import networkx as nx
import numpy as np

from eras.clustering import Partition
from eras.entities import Entity, entity_attributes
from eras.errors import ConfigurationError, DegenerateClusterError
from eras.graph import node_entity

logger = logging.getLogger(__name__)

AttributeSelector = Union[str, Callable[[Entity], float]]


def _selector(attribute: AttributeSelector) -> Callable[[Entity], float]:
    if callable(attribute):
        return attribute
    if attribute == "name" or attribute not in entity_attributes():
        raise ConfigurationError(f"Cannot aggregate over entity attribute {attribute!r}")
    return lambda entity: getattr(entity, attribute)


def aggregate_clusters(
    partition: Partition,
    graph: nx.DiGraph,
    attribute: AttributeSelector = "year",
) -> dict[int, float]:
    """Mean of ``attribute`` over each cluster's members, keyed by ascending cluster index."""
    select = _selector(attribute)

    means: dict[int, float] = {}
    for cluster_index in sorted(partition):
        members = partition[cluster_index]
        if not members:
            raise DegenerateClusterError(f"Cluster {cluster_index} has no members to aggregate")
        values = [select(node_entity(graph, node)) for node in members]
        if len(values) == 1:
            means[cluster_index] = float(values[0])
        else:
            means[cluster_index] = float(np.mean(values))
        logger.debug(f"Cluster {cluster_index}: mean over {len(values)} members = {means[cluster_index]}")

    return means
