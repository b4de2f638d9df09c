# src/dspace_core/parameters/node.py

"""
The in-memory representation of a declared design-space parameter.

A `ParameterNode` is created once per descriptor parse by an external reader.
Its dependency sets are populated by a single linking pass
(see `DependencyLinker` and `ParameterStore.link()`) and stay unchanged
afterwards; the only state that changes later is the lazy constructor
resolution attached through `constructor`.
"""

from __future__ import annotations

import logging
import weakref
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Set

import numpy as np

if TYPE_CHECKING:
    from ..mapping.raw_data import CodeMapping
    from ..mapping.resolver import ConstructorResolver

logger = logging.getLogger(__name__)


class ParamKind(Enum):
    """Structured (scalar, range or complex) parameter vs. a variant of a choice."""
    STRUCTURED = "structured"
    CHOICE = "choice"


class Bound(Enum):
    """The four bound attributes a parameter may declare."""
    INCL_MIN = "inclMin"
    EXCL_MIN = "exclMin"
    INCL_MAX = "inclMax"
    EXCL_MAX = "exclMax"

    @property
    def is_max(self) -> bool:
        return self in (Bound.INCL_MAX, Bound.EXCL_MAX)

    @property
    def is_min(self) -> bool:
        return self in (Bound.INCL_MIN, Bound.EXCL_MIN)


MAX_BOUNDS = (Bound.INCL_MAX, Bound.EXCL_MAX)
MIN_BOUNDS = (Bound.INCL_MIN, Bound.EXCL_MIN)


class Numeric(Enum):
    """
    Primitive numeric kinds that can be named directly as formal arguments of a
    code mapping (e.g., `constructor: "integer double"`). Keywords are matched
    case-insensitively.
    """
    INTEGER = "integer"
    LONG = "long"
    SHORT = "short"
    DOUBLE = "double"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"

    @property
    def python_type(self) -> type:
        return _NUMERIC_TYPES[self]

    @classmethod
    def is_numeric(cls, keyword: str) -> bool:
        return isinstance(keyword, str) and keyword.upper() in cls.__members__

    @classmethod
    def from_keyword(cls, keyword: str) -> "Numeric":
        try:
            return cls[keyword.upper()]
        except KeyError:
            raise ValueError(f"'{keyword}' is not a numeric keyword. Known keywords: {sorted(cls.__members__)}") from None

    @staticmethod
    def accepts(formal_type: type, value: Any) -> bool:
        """
        True if `value` may be passed where `formal_type` (one of the numeric
        Python types) is declared. Numpy scalars are accepted alongside builtins;
        `bool` never satisfies an integer formal, and integers widen to float
        and Decimal.
        """
        if formal_type is bool:
            return isinstance(value, (bool, np.bool_))
        if isinstance(value, (bool, np.bool_)):
            return False
        if formal_type is int:
            return isinstance(value, (int, np.integer))
        if formal_type is float:
            return isinstance(value, (int, float, np.integer, np.floating))
        if formal_type is Decimal:
            return isinstance(value, (Decimal, int, np.integer))
        return isinstance(value, formal_type)


_NUMERIC_TYPES: Dict[Numeric, type] = {
    Numeric.INTEGER: int,
    Numeric.LONG: int,
    Numeric.SHORT: int,
    Numeric.DOUBLE: float,
    Numeric.FLOAT: float,
    Numeric.BOOLEAN: bool,
    Numeric.DECIMAL: Decimal,
}
NUMERIC_PYTHON_TYPES = frozenset(_NUMERIC_TYPES.values())


class ParameterNode:
    """
    One declared dimension of the design space.

    Nodes compare and hash by identity, so the dependency sets are keyed by
    the node object itself rather than by its (scope-local) id.
    """

    def __init__(
        self,
        param_id: str,
        kind: ParamKind = ParamKind.STRUCTURED,
        bounds: Optional[Dict[Bound, str]] = None,
        numeric: Optional[Numeric] = None,
        children: Iterable["ParameterNode"] = (),
    ):
        if not param_id:
            raise ValueError("A parameter node requires a non-empty id.")
        self.id: str = param_id
        self.kind: ParamKind = kind
        self.bounds: Dict[Bound, str] = dict(bounds or {})
        self.numeric: Optional[Numeric] = numeric
        self.children: List[ParameterNode] = []
        self._parent_ref: Optional[weakref.ReferenceType] = None

        self.max_dependencies: Set[ParameterNode] = set()
        self.min_dependencies: Set[ParameterNode] = set()
        self.dependees: Set[ParameterNode] = set()

        self.code_mapping: Optional["CodeMapping"] = None
        self.constructor: Optional["ConstructorResolver"] = None

        for child in children:
            self.add_child(child)

    # --- Tree navigation ---

    @property
    def parent(self) -> Optional["ParameterNode"]:
        return self._parent_ref() if self._parent_ref is not None else None

    def add_child(self, child: "ParameterNode") -> "ParameterNode":
        if child is self:
            raise ValueError(f"Parameter '{self.id}' cannot be its own child.")
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    @property
    def fqn(self) -> str:
        """Dotted id from the root of the tree, e.g. 'Mutation.Rate'."""
        parent = self.parent
        return self.id if parent is None else f"{parent.fqn}.{self.id}"

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_choice(self) -> bool:
        return self.kind is ParamKind.CHOICE

    def iter_subtree(self) -> Iterable["ParameterNode"]:
        """Yields this node followed by all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.iter_subtree()

    def bound(self, which: Bound) -> Optional[str]:
        return self.bounds.get(which)

    # --- Dependencies ---

    def add_max_dependency(self, other: "ParameterNode") -> None:
        self.max_dependencies.add(other)

    def add_min_dependency(self, other: "ParameterNode") -> None:
        self.min_dependencies.add(other)

    def add_dependee(self, other: "ParameterNode") -> None:
        self.dependees.add(other)

    def clear_dependencies(self) -> None:
        self.max_dependencies.clear()
        self.min_dependencies.clear()
        self.dependees.clear()

    @property
    def direct_dependencies(self) -> Set["ParameterNode"]:
        return self.max_dependencies | self.min_dependencies

    def transitive_dependencies(self) -> Set["ParameterNode"]:
        """All nodes reachable over max/min dependency edges (excluding self unless on a cycle)."""
        seen: Set[ParameterNode] = set()
        stack = list(self.direct_dependencies)
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(current.direct_dependencies)
        return seen

    def depends_on(self, other: "ParameterNode") -> bool:
        """True if `other` is reachable from this node over dependency edges, at any depth."""
        return other in self.transitive_dependencies()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fqn='{self.fqn}', kind={self.kind.value})"
