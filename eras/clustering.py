from __future__ import annotations

import logging
from typing import Any

import networkx as nx
import numpy as np
from sklearn.metrics import silhouette_score

from eras.entities import cross_divergence
from eras.errors import ConfigurationError, EmptyInputError
from eras.graph import node_features

logger = logging.getLogger(__name__)

Partition = dict[int, list[int]]


def _validate(n_nodes: int, k: int, max_iterations: int) -> None:
    if n_nodes == 0:
        raise EmptyInputError("Cannot cluster a graph with no nodes")
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise ConfigurationError(f"Cluster count must be a positive integer, got {k!r}")
    if k > n_nodes:
        raise ConfigurationError(f"Cluster count {k} exceeds the number of nodes ({n_nodes})")
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)) or max_iterations < 0:
        raise ConfigurationError(
            f"Iteration budget must be a non-negative integer, got {max_iterations!r}"
        )


def _assign(features: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    # argmin keeps the first minimum, so ties go to the lowest cluster index.
    return np.argmin(cross_divergence(features, centroids), axis=1)


def _update_centroids(features: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    updated = centroids.copy()
    for cluster_index in range(centroids.shape[0]):
        mask = labels == cluster_index
        if mask.any():
            updated[cluster_index] = features[mask].mean(axis=0)
    return updated


def kmeans_cluster(
    graph: nx.DiGraph,
    k: int,
    max_iterations: int,
    seed: int | None = 42,
    rng: np.random.Generator | None = None,
) -> Partition:
    """Partition the graph's nodes into at most ``k`` clusters.

    Centroids start at ``k`` node feature vectors sampled with replacement and
    are refined for exactly ``max_iterations`` rounds. Every round reassigns
    all nodes from scratch; a cluster left empty keeps its previous centroid.
    With a zero budget nodes are assigned to the initial centroids.

    Returns cluster index -> node ids (in node order) for every cluster that is
    populated after the final round, in ascending index order.
    """
    nodes = list(graph.nodes)
    _validate(len(nodes), k, max_iterations)

    features = node_features(graph)
    if rng is None:
        rng = np.random.default_rng(seed)

    initial = rng.integers(0, len(nodes), size=k)
    centroids = features[initial].copy()
    logger.info(
        f"Running k-means on {len(nodes)} nodes (k={k}, iterations={max_iterations}, "
        f"initial nodes={initial.tolist()})"
    )

    labels = None
    for iteration in range(max_iterations):
        labels = _assign(features, centroids)
        centroids = _update_centroids(features, labels, centroids)
        logger.debug(
            f"Iteration {iteration + 1}: cluster sizes {np.bincount(labels, minlength=k).tolist()}"
        )

    if labels is None:
        labels = _assign(features, centroids)

    partition: Partition = {}
    for cluster_index in range(k):
        members = [nodes[i] for i in np.flatnonzero(labels == cluster_index).tolist()]
        if not members:
            logger.warning(f"Cluster {cluster_index} has no members after the final iteration")
            continue
        partition[cluster_index] = members

    logger.info(
        f"Clustering complete: {len(partition)} populated clusters, "
        f"sizes {[len(m) for m in partition.values()]}"
    )
    return partition


def partition_labels(graph: nx.DiGraph, partition: Partition) -> np.ndarray:
    """Cluster label per node, in node order; -1 for nodes outside the partition."""
    position = {node: i for i, node in enumerate(graph.nodes)}
    labels = np.full(len(position), -1, dtype=np.int64)
    for cluster_index, members in partition.items():
        for node in members:
            labels[position[node]] = cluster_index
    return labels


def partition_quality(graph: nx.DiGraph, partition: Partition) -> dict[str, Any]:
    """Silhouette score and cluster size statistics for a partition."""
    features = node_features(graph)
    labels = partition_labels(graph, partition)
    mask = labels != -1
    n_clusters = len(partition)

    metrics: dict[str, Any] = {"n_clusters": n_clusters}

    n_samples = int(mask.sum())
    if 2 <= n_clusters <= n_samples - 1:
        score = silhouette_score(features[mask], labels[mask], metric="euclidean")
        metrics["silhouette_score"] = float(score)
        logger.info(f"Silhouette score: {score:.3f}")
    else:
        logger.warning(
            f"Silhouette score undefined for {n_clusters} clusters over {n_samples} nodes"
        )
        metrics["silhouette_score"] = None

    sizes = [len(members) for members in partition.values()]
    if sizes:
        metrics["min_cluster_size"] = int(min(sizes))
        metrics["max_cluster_size"] = int(max(sizes))
        metrics["mean_cluster_size"] = float(np.mean(sizes))
        metrics["median_cluster_size"] = float(np.median(sizes))

    return metrics
