"""
Transitive discovery of the namespaces a template calls into.

Each called namespace is looked up and expanded at most once, so cyclic
call graphs (``a -> b -> a``) terminate. The entry namespace is not treated
specially: when something calls back into it, the file the lookup picks
(the last candidate declaring it) is expanded like any other. Namespaces
that no candidate file declares are kept in the result but not expanded
further.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Deque, Iterable, List, Optional, Set, Union

from soyloader.dag import CallGraph
from soyloader.soy import AstCache, SoyCall, SoyFile, SoyVisitor, visit

logger = logging.getLogger(__name__)


class _ExternalCallCollector(SoyVisitor):
    def __init__(self) -> None:
        self.namespaces: List[str] = []

    def visit_call(self, node: SoyCall) -> None:
        if node.namespace:
            self.namespaces.append(node.namespace)


def direct_external_calls(ast: SoyFile) -> List[str]:
    """Namespaces called by ``ast`` itself, in source order, duplicates kept."""
    return visit(ast, _ExternalCallCollector()).namespaces


def external_calls(
    ast: SoyFile,
    candidates: Iterable[Union[str, Path]],
    asts: AstCache,
    graph: Optional[CallGraph] = None,
) -> List[str]:
    """
    Collect the namespaces ``ast`` depends on, transitively.

    Args:
        ast: Parsed entry template
        candidates: Files the called namespaces are looked up in
        asts: Session AST cache used to parse candidates
        graph: Optional graph that receives every discovered call edge

    Returns:
        Called namespaces, duplicates preserved. The order is breadth-first
        by template, source order within each template.

    Raises:
        SoyParseError: If a candidate that has to be scanned is malformed
    """
    candidates = list(candidates)
    if graph is None:
        graph = CallGraph()
    graph.add_node(ast.namespace)

    calls: List[str] = []
    expanded: Set[str] = set()
    queue: Deque[SoyFile] = deque([ast])

    while queue:
        current = queue.popleft()
        found = direct_external_calls(current)
        calls.extend(found)

        for namespace in found:
            graph.add_edge(current.namespace, namespace)
            if namespace in expanded:
                continue
            expanded.add(namespace)

            dependency = asts.get_by_namespace(namespace, candidates)
            if dependency is None:
                logger.debug(f"No template declares namespace '{namespace}'")
                continue
            queue.append(dependency)

    return calls
