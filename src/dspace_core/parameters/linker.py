# src/dspace_core/parameters/linker.py

"""
Pairwise detection of bound dependencies between parameter nodes.

A node depends on another when one of its minimum/maximum expressions
mentions the other node's id and the other node is a leaf. The check is
purely textual: by default a raw substring test on the expression, which
means an id that happens to be a substring of another id or token
(e.g. `rate` inside `learningrate`) also creates a dependency. Callers that
want whole-identifier matching choose `MatchMode.TOKEN`.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from .dependency_parser import ASTDependencyExtractor
from .node import MAX_BOUNDS, MIN_BOUNDS, Bound, ParameterNode

logger = logging.getLogger(__name__)


class MatchMode(Enum):
    SUBSTRING = "substring"
    TOKEN = "token"


class DependencyLinker:
    """Registers max/min dependency edges and their inverse dependee edges."""

    def __init__(self, match_mode: MatchMode = MatchMode.SUBSTRING):
        self.match_mode = match_mode
        self._extractor: Optional[ASTDependencyExtractor] = (
            ASTDependencyExtractor() if match_mode is MatchMode.TOKEN else None
        )

    def link(self, node_a: ParameterNode, node_b: ParameterNode) -> bool:
        """
        Inspects both directions for the pair; the reverse direction (`b`
        relative to `a`) is only checked when `a` does not depend on `b`.
        Returns True if any edge was registered.
        """
        if node_a is node_b:
            return False
        if self._link_directed(node_a, node_b):
            return True
        return self._link_directed(node_b, node_a)

    def _link_directed(self, dependent: ParameterNode, dependency: ParameterNode) -> bool:
        linked = False
        if self._relative_to(dependent, dependency, MAX_BOUNDS):
            dependent.add_max_dependency(dependency)
            dependency.add_dependee(dependent)
            linked = True
        if self._relative_to(dependent, dependency, MIN_BOUNDS):
            dependent.add_min_dependency(dependency)
            dependency.add_dependee(dependent)
            linked = True
        if linked:
            logger.debug("Parameter '%s' depends on '%s'.", dependent.fqn, dependency.fqn)
        return linked

    def _relative_to(self, dependent: ParameterNode, dependency: ParameterNode, bounds: Iterable[Bound]) -> bool:
        if not dependency.is_leaf:
            return False
        for which in bounds:
            expression = dependent.bound(which)
            if expression is not None and self._mentions(expression, dependency.id):
                return True
        return False

    def _mentions(self, expression: str, identifier: str) -> bool:
        if self._extractor is None:
            return identifier in expression
        return self._extractor.references(expression, identifier)
