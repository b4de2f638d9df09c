# src/dspace_core/parameters/ordering.py

"""
Evaluation order of design-space parameters.

`EvaluationOrderComparator` is a classic three-way comparator (`-1/0/1`) that
sorts parameters so that every parameter referenced by a bound expression is
evaluated before the parameter whose bound references it. It accepts linked
`ParameterNode`s as well as raw `DescriptorElement`s, i.e. descriptor entries
for which no node (and therefore no dependency information) exists.

Rules, first decisive rule wins:

1. If x (transitively) depends on y, x sorts after y, and vice versa.
2. The parameter with more dependencies sorts later. The count is taken over
   the transitive dependency set: a dependent always has strictly more
   transitive dependencies than anything it depends on, which keeps rules 1
   and 2 consistent and makes the comparator a total order on acyclic graphs.
3. The parameter with more dependees sorts earlier.
4. Nodes sort before raw elements; otherwise ids compare lexicographically
   (nodes by their dotted id).
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

from .node import ParameterNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DescriptorElement:
    """A raw descriptor entry: an id and its declared attributes, without linked dependencies."""
    id: str
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


Orderable = Union[ParameterNode, DescriptorElement]


def _sign(a, b) -> int:
    return (a > b) - (a < b)


class EvaluationOrderComparator:
    """Three-way comparator placing bound dependencies before their dependents."""

    def __call__(self, x: Orderable, y: Orderable) -> int:
        return self.compare(x, y)

    def compare(self, x: Orderable, y: Orderable) -> int:
        if x is y:
            return 0

        x_is_node = isinstance(x, ParameterNode)
        y_is_node = isinstance(y, ParameterNode)

        if x_is_node and y_is_node:
            if x.depends_on(y):
                return 1
            if y.depends_on(x):
                return -1

        result = _sign(self._dependency_count(x), self._dependency_count(y))
        if result:
            return result

        # More dependees sorts earlier.
        result = _sign(self._dependee_count(y), self._dependee_count(x))
        if result:
            return result

        if x_is_node != y_is_node:
            return -1 if x_is_node else 1
        return _sign(self._sort_id(x), self._sort_id(y))

    def sort(self, items: Iterable[Orderable]) -> List[Orderable]:
        """Returns a new list of `items` in evaluation order."""
        return sorted(items, key=functools.cmp_to_key(self.compare))

    @staticmethod
    def _dependency_count(item: Orderable) -> int:
        if isinstance(item, ParameterNode):
            return len(item.transitive_dependencies())
        return 0

    @staticmethod
    def _dependee_count(item: Orderable) -> int:
        if isinstance(item, ParameterNode):
            return len(item.dependees)
        return 0

    @staticmethod
    def _sort_id(item: Orderable) -> str:
        if isinstance(item, ParameterNode):
            return item.fqn
        return item.id
