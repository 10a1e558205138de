"""Unit tests for hop distance calculation."""

from actornet.graph.hops import build_adjacency, calculate_hop_distances, group_by_hop
from actornet.models import Link


class TestCalculateHopDistances:
    """Tests for breadth-first hop distances."""

    def test_shortest_paths(self) -> None:
        """Distances equal shortest paths; a shortcut beats the long way round."""
        nodes = ["P", "A", "B", "C", "D"]
        links = [
            Link("P", "A"),
            Link("A", "B"),
            Link("B", "C"),
            Link("P", "D"),
            Link("D", "C"),
        ]

        distances = calculate_hop_distances(nodes, links, "P")

        assert distances == {"P": 0, "A": 1, "D": 1, "B": 2, "C": 2}

    def test_links_are_undirected(self) -> None:
        distances = calculate_hop_distances(["P", "A"], [Link("A", "P")], "P")

        assert distances == {"P": 0, "A": 1}

    def test_disconnected_component_absent(self) -> None:
        nodes = ["P", "A", "X", "Y"]
        links = [("P", "A"), ("X", "Y")]

        distances = calculate_hop_distances(nodes, links, "P")

        assert "X" not in distances
        assert "Y" not in distances

    def test_principal_missing(self) -> None:
        assert calculate_hop_distances(["A", "B"], [("A", "B")], "P") == {}

    def test_links_outside_node_list_ignored(self) -> None:
        """Links to nodes not in the list do not create paths."""
        nodes = ["P", "B"]
        links = [("P", "Hidden"), ("Hidden", "B")]

        assert calculate_hop_distances(nodes, links, "P") == {"P": 0}

    def test_long_chain_is_iterative(self) -> None:
        """A 20k-node chain does not hit recursion limits."""
        nodes = [f"n{i}" for i in range(20000)]
        links = [(nodes[i], nodes[i + 1]) for i in range(len(nodes) - 1)]

        distances = calculate_hop_distances(nodes, links, "n0")

        assert len(distances) == 20000
        assert distances["n19999"] == 19999


class TestHelpers:
    """Tests for adjacency and hop grouping."""

    def test_build_adjacency(self) -> None:
        adjacency = build_adjacency(["A", "B", "C"], [("A", "B")])

        assert adjacency == {"A": {"B"}, "B": {"A"}, "C": set()}

    def test_group_by_hop_overflow(self) -> None:
        groups = group_by_hop(["P", "A", "X"], {"P": 0, "A": 1}, overflow_hop=10)

        assert groups == {0: ["P"], 1: ["A"], 10: ["X"]}
