from __future__ import annotations

import logging
from typing import Sequence

import networkx as nx
import numpy as np

from eras.entities import Entity, feature_matrix, pairwise_divergence

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.75


def _register_nodes(graph: nx.DiGraph, entities: Sequence[Entity]) -> list[int]:
    """Add one node per distinct entity and return the node id of every input position."""
    registry: dict[Entity, int] = {}
    positions: list[int] = []
    for entity in entities:
        node = registry.get(entity)
        if node is None:
            node = len(registry)
            registry[entity] = node
            graph.add_node(node, entity=entity)
        positions.append(node)
    return positions


def build_graph(entities: Sequence[Entity], threshold: float = DEFAULT_THRESHOLD) -> nx.DiGraph:
    """Connect every ordered pair of entities whose divergence exceeds ``threshold``.

    Nodes are integer ids in first-seen order, each holding its ``entity``.
    Edges hold the divergence as ``weight``; since the metric is symmetric an
    edge u->v always comes with v->u of equal weight.
    """
    graph = nx.DiGraph(threshold=float(threshold))
    positions = _register_nodes(graph, entities)

    distances = pairwise_divergence(feature_matrix(entities))
    rows, cols = np.nonzero(distances > threshold)

    edges = []
    for i, j in zip(rows.tolist(), cols.tolist()):
        if positions[i] == positions[j]:
            continue
        edges.append((positions[i], positions[j], {"weight": float(distances[i, j])}))
    graph.add_edges_from(edges)

    logger.info(
        f"Built graph with {graph.number_of_nodes()} nodes and {graph.number_of_edges()} edges "
        f"(threshold={threshold})"
    )
    return graph


def node_entity(graph: nx.DiGraph, node: int) -> Entity:
    return graph.nodes[node]["entity"]


def node_entities(graph: nx.DiGraph) -> list[Entity]:
    return [data["entity"] for _, data in graph.nodes(data=True)]


def node_features(graph: nx.DiGraph) -> np.ndarray:
    """Feature matrix with one row per node, rows in node id order."""
    return feature_matrix(node_entities(graph))
