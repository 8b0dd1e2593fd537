"""Tests for registry dependency cycle detection."""

from __future__ import annotations

from forge.validators import DependencyGraph, find_cycles, format_cycle


def test_three_node_cycle_contains_every_participant() -> None:
    cycles = find_cycles({"a": ["b"], "b": ["c"], "c": ["a"]}, "a")

    assert cycles == [["a", "b", "c"]]
    assert format_cycle(cycles[0]) == "a -> b -> c -> a"


def test_cycle_not_through_start_is_ignored() -> None:
    dependencies = {"a": ["b"], "b": ["c"], "c": ["b"]}

    assert find_cycles(dependencies, "a") == []
    assert find_cycles(dependencies, "b") == [["b", "c"]]


def test_self_dependency_is_a_cycle() -> None:
    assert find_cycles({"a": ["a"]}, "a") == [["a"]]


def test_edges_to_unknown_nodes_are_dropped() -> None:
    graph = DependencyGraph.from_dependencies({"a": ["missing"], "b": []})

    assert graph.successors("a") == []
    assert "missing" not in graph
    assert len(graph) == 2


def test_acyclic_graph_has_no_cycles() -> None:
    graph = DependencyGraph.from_dependencies({"a": ["b", "c"], "b": ["c"], "c": []})

    assert graph.cycles_through("a") == []
    assert graph.find_cycles() == []


def test_find_cycles_deduplicates_rotations() -> None:
    graph = DependencyGraph.from_dependencies({"a": ["b"], "b": ["c"], "c": ["a"]})

    assert graph.find_cycles() == [["a", "b", "c"]]
