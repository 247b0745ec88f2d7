from __future__ import annotations

import logging

import networkx as nx
import numpy as np

from eras.clustering import Partition
from eras.entities import divergence
from eras.graph import node_entity

logger = logging.getLogger(__name__)

DEDUP_TOLERANCE = float(np.finfo(np.float32).eps)


def dedupe_clusters(
    partition: Partition,
    graph: nx.DiGraph,
    tolerance: float = DEDUP_TOLERANCE,
) -> Partition:
    """Drop members that are near-identical to an earlier member of the same cluster.

    A node is kept only when its divergence from every node already kept in its
    cluster is at least ``tolerance``. Kept nodes stay in their original order.
    """
    deduped: Partition = {}
    removed = 0
    for cluster_index in sorted(partition):
        kept: list[int] = []
        for node in partition[cluster_index]:
            entity = node_entity(graph, node)
            if any(divergence(node_entity(graph, other), entity) < tolerance for other in kept):
                continue
            kept.append(node)
        removed += len(partition[cluster_index]) - len(kept)
        deduped[cluster_index] = kept

    logger.info(f"Deduplication removed {removed} near-duplicate members")
    return deduped
