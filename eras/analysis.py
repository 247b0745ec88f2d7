from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Sequence

import networkx as nx

from eras.aggregate import AttributeSelector, aggregate_clusters
from eras.clustering import Partition, kmeans_cluster, partition_quality
from eras.config import PipelineConfig
from eras.dedup import dedupe_clusters
from eras.entities import Entity
from eras.errors import EmptyInputError, MalformedEntityError
from eras.graph import build_graph, node_entity

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    graph: nx.DiGraph
    partition: Partition
    deduped: Partition
    aggregates: dict[int, float]
    quality: dict[str, Any] = field(default_factory=dict)

    def cluster_members(self) -> dict[int, list[Entity]]:
        return {
            cluster_index: [node_entity(self.graph, node) for node in members]
            for cluster_index, members in self.deduped.items()
        }

    def cluster_names(self) -> dict[int, list[str]]:
        return {
            cluster_index: [entity.name for entity in entities]
            for cluster_index, entities in self.cluster_members().items()
        }


def run_analysis(
    entities: Sequence[Entity],
    config: PipelineConfig,
    attribute: AttributeSelector = "year",
) -> AnalysisResult:
    """Build the divergence graph, cluster it, dedupe the clusters and aggregate them.

    Either every stage completes or the first failure propagates.
    """
    if not entities:
        raise EmptyInputError("No entities to analyze")
    for position, entity in enumerate(entities):
        if not isinstance(entity, Entity):
            raise MalformedEntityError(
                f"Item {position} is not an Entity: {type(entity).__name__}"
            )
    config.validate(n_entities=len(entities))

    logger.info(f"Analyzing {len(entities)} entities")
    graph = build_graph(entities, threshold=config.edge_threshold)
    partition = kmeans_cluster(
        graph,
        config.num_clusters,
        config.max_iterations,
        seed=config.seed,
    )
    quality = partition_quality(graph, partition)
    deduped = dedupe_clusters(partition, graph, tolerance=config.dedup_tolerance)
    aggregates = aggregate_clusters(deduped, graph, attribute=attribute)

    return AnalysisResult(
        graph=graph,
        partition=partition,
        deduped=deduped,
        aggregates=aggregates,
        quality=quality,
    )
