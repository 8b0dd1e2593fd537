"""Directed graph of registry dependencies between sibling components."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Set


class DependencyGraph:
    """Explicit node set plus adjacency mapping; no filesystem access."""

    def __init__(self) -> None:
        self._nodes: Set[str] = set()
        self._adjacency: Dict[str, List[str]] = {}

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[str, Sequence[str]]) -> "DependencyGraph":
        """Build a graph keeping only edges whose target is itself a node."""
        graph = cls()
        for name in dependencies:
            graph.add_node(name)
        for name, targets in dependencies.items():
            for target in targets:
                if target in graph:
                    graph.add_edge(name, target)
        return graph

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def add_node(self, name: str) -> None:
        self._nodes.add(name)
        self._adjacency.setdefault(name, [])

    def add_edge(self, source: str, target: str) -> None:
        self.add_node(source)
        self.add_node(target)
        if target not in self._adjacency[source]:
            self._adjacency[source].append(target)

    def successors(self, name: str) -> List[str]:
        return list(self._adjacency.get(name, ()))

    def cycles_through(self, start: str) -> List[List[str]]:
        """Return every cycle found by a DFS from ``start`` that includes ``start``.

        Each cycle is listed in traversal order beginning at ``start``.
        """
        return [cycle for cycle in self._walk(start) if cycle[0] == start]

    def find_cycles(self) -> List[List[str]]:
        """Return the distinct cycles reachable from any node."""
        seen: Set[tuple[str, ...]] = set()
        cycles: List[List[str]] = []
        for node in sorted(self._nodes):
            for cycle in self._walk(node):
                key = _canonical(cycle)
                if key in seen:
                    continue
                seen.add(key)
                cycles.append(cycle)
        return cycles

    def _walk(self, start: str) -> List[List[str]]:
        if start not in self._nodes:
            return []
        visited: Set[str] = set()
        stack: List[str] = []
        on_stack: Set[str] = set()
        cycles: List[List[str]] = []

        def visit(node: str) -> None:
            visited.add(node)
            stack.append(node)
            on_stack.add(node)
            for successor in self._adjacency.get(node, ()):
                if successor in on_stack:
                    cycles.append(stack[stack.index(successor):])
                elif successor not in visited:
                    visit(successor)
            stack.pop()
            on_stack.discard(node)

        visit(start)
        return cycles


def find_cycles(dependencies: Mapping[str, Sequence[str]], start: str) -> List[List[str]]:
    """Convenience wrapper: cycles through ``start`` in a name -> deps mapping."""
    return DependencyGraph.from_dependencies(dependencies).cycles_through(start)


def format_cycle(cycle: Iterable[str]) -> str:
    names = list(cycle)
    if not names:
        return ""
    return " -> ".join(names + [names[0]])


def _canonical(cycle: Sequence[str]) -> tuple[str, ...]:
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:]) + tuple(cycle[:pivot])


__all__ = ["DependencyGraph", "find_cycles", "format_cycle"]
