# src/dspace_core/parameters/store.py

"""
The lookup service over one design space's parameter tree.

`ParameterStore` is the single owner of the parameter nodes handed over by a
descriptor reader. It provides:

1.  **Lookup:** global lookup by dotted id (`get_param`, `contains_param`) and
    scoped lookup of a local id relative to a context node
    (`get_param_for_local_id`).

2.  **Linking:** `link()` runs the `DependencyLinker` over every unordered
    pair of nodes, then verifies with a `networkx` dependency graph that the
    bound dependencies are acyclic. A cycle fails fast with
    `CircularParameterDependencyError` instead of surfacing later as unbounded
    recursion during ordering.

3.  **Ordering:** `evaluation_order()` sorts all nodes with the
    `EvaluationOrderComparator`, so callers can evaluate or sample values in
    that order.

4.  **Construction:** `attach_mappings()` binds code mappings to their nodes
    and gives each one a `ConstructorResolver`; `new_instance()` builds the
    object of a mapped parameter from already-evaluated argument values.
"""

import logging
from itertools import combinations
from typing import Any, Dict, Iterable, List, Optional, Sequence

import networkx as nx

from .exceptions import (
    CircularParameterDependencyError,
    ParameterDefinitionError,
    ParameterError,
    ParameterLookupError,
)
from .linker import DependencyLinker, MatchMode
from .node import ParameterNode
from .ordering import EvaluationOrderComparator

logger = logging.getLogger(__name__)


class ParameterStore:
    """Owns the parameter nodes of one design space and their dependency graph."""

    def __init__(self, roots: Iterable[ParameterNode] = (), match_mode: MatchMode = MatchMode.SUBSTRING):
        self._params: Dict[str, ParameterNode] = {}
        self._roots: List[ParameterNode] = []
        self._linker = DependencyLinker(match_mode)
        self._comparator = EvaluationOrderComparator()
        self._dependency_graph = nx.DiGraph()
        self._linked = False
        for root in roots:
            self.add(root)

    # --- Registration and lookup ---

    def add(self, root: ParameterNode) -> ParameterNode:
        """Registers a root node and all of its descendants by dotted id."""
        if root.parent is not None:
            raise ParameterDefinitionError(param_id=root.fqn, details="Only root nodes can be added to a parameter store.")
        subtree = list(root.iter_subtree())
        seen_fqns = set(self._params)
        for node in subtree:
            if node.fqn in seen_fqns:
                raise ParameterDefinitionError(param_id=node.fqn, details=f"Duplicate parameter id '{node.fqn}' detected.")
            seen_fqns.add(node.fqn)
        for node in subtree:
            self._params[node.fqn] = node
        self._roots.append(root)
        self._linked = False
        logger.debug("Added parameter tree '%s' (%d node(s)).", root.fqn, len(subtree))
        return root

    @property
    def params(self) -> List[ParameterNode]:
        return list(self._params.values())

    @property
    def roots(self) -> List[ParameterNode]:
        return list(self._roots)

    def __len__(self) -> int:
        return len(self._params)

    def __contains__(self, param_id: str) -> bool:
        return self.contains_param(param_id)

    def contains_param(self, param_id: str) -> bool:
        return param_id in self._params

    def get_param(self, param_id: str) -> Optional[ParameterNode]:
        return self._params.get(param_id)

    def require_param(self, param_id: str) -> ParameterNode:
        param = self.get_param(param_id)
        if param is None:
            raise ParameterLookupError(param_id=param_id, details=f"No parameter with id '{param_id}' is defined.")
        return param

    def get_param_for_local_id(self, local_id: str, context: ParameterNode) -> Optional[ParameterNode]:
        """
        Resolves `local_id` relative to `context`: first among the context's own
        children, then among the children of each ancestor, finally at top level.
        """
        scope: Optional[ParameterNode] = context
        while scope is not None:
            candidate = self._params.get(f"{scope.fqn}.{local_id}")
            if candidate is not None:
                return candidate
            scope = scope.parent
        return self._params.get(local_id)

    # --- Dependency linking and ordering ---

    def link(self) -> nx.DiGraph:
        """
        Populates the dependency sets of all nodes and checks them for cycles.
        Calling it again re-links from scratch.
        """
        nodes = self.params
        for node in nodes:
            node.clear_dependencies()

        for node_a, node_b in combinations(nodes, 2):
            self._linker.link(node_a, node_b)

        self._dependency_graph = self._build_dependency_graph(nodes)
        self._check_circular_dependencies()
        self._linked = True
        logger.info(
            f"Linked {len(nodes)} parameter(s): {self._dependency_graph.number_of_edges()} bound dependency edge(s)."
        )
        return self._dependency_graph

    @staticmethod
    def _build_dependency_graph(nodes: Sequence[ParameterNode]) -> nx.DiGraph:
        # Edges point from a dependency to its dependent, i.e. in evaluation direction.
        graph = nx.DiGraph()
        graph.add_nodes_from(node.fqn for node in nodes)
        for node in nodes:
            for dependency in node.direct_dependencies:
                graph.add_edge(dependency.fqn, node.fqn)
        return graph

    def _check_circular_dependencies(self):
        try:
            cycles = list(nx.simple_cycles(self._dependency_graph))
        except nx.NetworkXError as e:
            raise ParameterError(f"NetworkX error during cycle check: {e}") from e
        if cycles:
            self._linked = False
            raise CircularParameterDependencyError(cycle=sorted(cycles, key=len)[0])

    @property
    def dependency_graph(self) -> nx.DiGraph:
        if not self._linked:
            self.link()
        return self._dependency_graph

    def evaluation_order(self) -> List[ParameterNode]:
        """All parameters, dependencies first. Links the store if necessary."""
        if not self._linked:
            self.link()
        return self._comparator.sort(self._params.values())

    @property
    def comparator(self) -> EvaluationOrderComparator:
        return self._comparator

    # --- Code mappings ---

    def class_of(self, param: ParameterNode, registry=None) -> Optional[type]:
        """
        The class a parameter's values have: the Python type of its numeric
        kind, otherwise the target class of its code mapping, otherwise None.
        """
        if param.numeric is not None:
            return param.numeric.python_type
        if param.code_mapping is not None:
            from ..mapping.registry import TYPE_REGISTRY
            return (registry or TYPE_REGISTRY).find(param.code_mapping.class_name)
        return None

    def attach_mappings(self, mappings: Iterable[Any], registry=None) -> None:
        """Binds `CodeMapping` records to their parameters and creates their resolvers."""
        from ..mapping.resolver import ConstructorResolver

        for mapping in mappings:
            param = self.get_param(mapping.param_id)
            if param is None:
                raise ParameterLookupError(
                    param_id=mapping.param_id,
                    details=f"The code mapping for class '{mapping.class_name}' refers to an undefined parameter.",
                )
            param.code_mapping = mapping
            param.constructor = ConstructorResolver(param, mapping, self, registry)
            logger.debug("Attached mapping '%s' -> %s.", mapping.param_id, mapping.class_name)

    def new_instance(self, param_id: str, actual_values: Sequence[Any]) -> Any:
        """Instantiates the code-mapped parameter `param_id` with the given argument values."""
        from ..mapping.instantiator import Instantiator

        param = self.require_param(param_id)
        if param.constructor is None:
            raise ParameterLookupError(param_id=param_id, details="The parameter has no code mapping attached.")
        return Instantiator(param.constructor).new_instance(actual_values)
