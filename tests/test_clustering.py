"""Tests for fixed-budget k-means clustering."""

import networkx as nx
import pytest

from eras.clustering import kmeans_cluster, partition_labels, partition_quality
from eras.errors import ConfigurationError, EmptyInputError
from eras.graph import build_graph


def _members(partition):
    return sorted(node for members in partition.values() for node in members)


class TestKMeansCluster:
    """Partition invariants, tie-breaking and configuration checks."""

    def test_scenario_groups_with_a_and_c_as_seeds(self, scenario_entities, fixed_generator):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=2, max_iterations=5, rng=fixed_generator([0, 2]))
        assert partition == {0: [0, 1], 1: [2, 3]}

    @pytest.mark.parametrize("seed", [0, 1, 2, 42, 1234])
    def test_scenario_groups_for_any_seed(self, scenario_entities, seed):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=2, max_iterations=5, seed=seed)
        groups = {frozenset(members) for members in partition.values()}
        assert groups == {frozenset({0, 1}), frozenset({2, 3})}

    def test_partition_covers_every_node_once(self, random_entities):
        graph = build_graph(random_entities)
        partition = kmeans_cluster(graph, k=4, max_iterations=10, seed=3)
        assert _members(partition) == list(graph.nodes)
        assert set(partition) <= {0, 1, 2, 3}

    def test_members_keep_node_order(self, random_entities):
        graph = build_graph(random_entities)
        partition = kmeans_cluster(graph, k=3, max_iterations=4, seed=11)
        for members in partition.values():
            assert members == sorted(members)

    def test_reproducible_for_same_seed(self, random_entities):
        graph = build_graph(random_entities)
        first = kmeans_cluster(graph, k=5, max_iterations=8, seed=99)
        second = kmeans_cluster(graph, k=5, max_iterations=8, seed=99)
        assert first == second

    def test_duplicate_centroids_tie_goes_to_lowest_index(self, scenario_entities, fixed_generator):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=2, max_iterations=1, rng=fixed_generator([0, 0]))
        assert partition == {0: [0, 1, 2, 3]}

    def test_empty_cluster_keeps_its_centroid(self, scenario_entities, fixed_generator):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=2, max_iterations=2, rng=fixed_generator([0, 0]))
        # Cluster 1 was empty in round one and still sits on A for round two.
        assert partition == {0: [2, 3], 1: [0, 1]}

    def test_zero_iterations_assigns_to_initial_centroids(self, scenario_entities, fixed_generator):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=2, max_iterations=0, rng=fixed_generator([0, 2]))
        assert partition == {0: [0, 1], 1: [2, 3]}

    def test_k_equal_to_node_count(self, scenario_entities):
        graph = build_graph(scenario_entities)
        partition = kmeans_cluster(graph, k=4, max_iterations=3, seed=5)
        assert _members(partition) == [0, 1, 2, 3]

    def test_k_larger_than_nodes(self, scenario_entities):
        graph = build_graph(scenario_entities)
        with pytest.raises(ConfigurationError):
            kmeans_cluster(graph, k=5, max_iterations=10)

    @pytest.mark.parametrize("k", [0, -1, 1.5, True])
    def test_invalid_k(self, scenario_entities, k):
        graph = build_graph(scenario_entities)
        with pytest.raises(ConfigurationError):
            kmeans_cluster(graph, k=k, max_iterations=10)

    def test_negative_iterations(self, scenario_entities):
        graph = build_graph(scenario_entities)
        with pytest.raises(ConfigurationError):
            kmeans_cluster(graph, k=2, max_iterations=-1)

    def test_empty_graph(self):
        with pytest.raises(EmptyInputError):
            kmeans_cluster(nx.DiGraph(), k=1, max_iterations=1)


class TestPartitionQuality:
    """Silhouette and size statistics."""

    def test_scenario_quality(self, scenario_entities):
        graph = build_graph(scenario_entities)
        partition = {0: [0, 1], 1: [2, 3]}
        metrics = partition_quality(graph, partition)

        assert metrics["n_clusters"] == 2
        assert metrics["silhouette_score"] > 0.9
        assert metrics["min_cluster_size"] == 2
        assert metrics["max_cluster_size"] == 2
        assert metrics["mean_cluster_size"] == 2.0

    def test_single_cluster_has_no_silhouette(self, scenario_entities):
        graph = build_graph(scenario_entities)
        metrics = partition_quality(graph, {0: [0, 1, 2, 3]})
        assert metrics["silhouette_score"] is None

    def test_labels_follow_node_order(self, scenario_entities):
        graph = build_graph(scenario_entities)
        labels = partition_labels(graph, {1: [0, 1], 0: [2, 3]})
        assert labels.tolist() == [1, 1, 0, 0]
