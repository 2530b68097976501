"""Directed graph of template namespaces; cycles are allowed and reported."""

from collections import defaultdict, deque
from typing import Deque, Dict, Iterator, List, Set, Tuple


class CallGraph:
    """A directed graph from calling namespace to called namespace."""

    def __init__(self) -> None:
        """Initialize an empty graph."""
        self.nodes: Set[str] = set()
        self._edges: Dict[str, Set[str]] = defaultdict(set)
        self.predecessors: Dict[str, Set[str]] = defaultdict(set)

    def add_node(self, node: str) -> None:
        self.nodes.add(node)

    def add_edge(self, from_node: str, to_node: str) -> None:
        """Add an edge from from_node to to_node."""
        self.nodes.add(from_node)
        self.nodes.add(to_node)

        self._edges[from_node].add(to_node)
        self.predecessors[to_node].add(from_node)

    def successors(self, node: str) -> Set[str]:
        return set(self._edges.get(node, ()))

    def descendants(self, source: str) -> Set[str]:
        """
        Return every namespace reachable from source.

        The source itself is only included when it sits on a cycle.
        """
        seen: Set[str] = set()
        queue: Deque[str] = deque(self._edges.get(source, ()))
        while queue:
            node = queue.popleft()
            if node in seen:
                continue
            seen.add(node)
            queue.extend(self._edges.get(node, set()) - seen)
        return seen

    def find_cycle(self, source: str) -> List[str]:
        """
        Find a cycle reachable from source.

        Returns:
            The cycle as a node path whose first and last element are equal,
            or an empty list when the reachable subgraph is acyclic.
        """
        if source not in self.nodes:
            return []

        path: List[str] = [source]
        on_path: Set[str] = {source}
        done: Set[str] = set()
        stack: List[Iterator[str]] = [iter(sorted(self._edges.get(source, ())))]

        while stack:
            for neighbor in stack[-1]:
                if neighbor in on_path:
                    return path[path.index(neighbor) :] + [neighbor]
                if neighbor not in done:
                    path.append(neighbor)
                    on_path.add(neighbor)
                    stack.append(iter(sorted(self._edges.get(neighbor, ()))))
                    break
            else:
                stack.pop()
                node = path.pop()
                on_path.discard(node)
                done.add(node)
        return []

    @property
    def edges(self) -> Iterator[Tuple[str, str]]:
        """Return an iterator of edge tuples (source, target)."""
        for source, targets in self._edges.items():
            for target in targets:
                yield (source, target)
