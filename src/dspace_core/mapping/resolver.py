# src/dspace_core/mapping/resolver.py

"""
Heuristic constructor resolution for code-mapped parameters.

A code mapping only states the target class and, optionally, an ordered list
of formal-argument identifiers. It does not say which of the class's
constructors to use. `ConstructorResolver` decides, in this order:

1. If the class has exactly one public constructor, that one is used.
2. Otherwise, if exactly one public constructor can be called with as many
   arguments as the mapping declares identifiers (trailing parameters with
   defaults may be left out), that one is used.
3. Otherwise the identifiers that name global or local parameters contribute
   their resolved class as "context", and candidates whose argument type at
   that position is a different class are eliminated. A single survivor wins.
4. Otherwise every identifier is resolved to a class on its own (global
   parameter, local parameter, numeric keyword or class name, in that order)
   and the constructor with exactly that signature is looked up.

Resolution is lazy, happens at most once, and leaves no partial state
behind when it fails. It is not thread-safe.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence, Tuple

from ..parameters.node import Numeric, ParameterNode
from .exceptions import MappingError, MappingErrorKind
from .raw_data import CodeMapping
from .registry import TYPE_REGISTRY, ConstructorSignature, TypeRegistry

if TYPE_CHECKING:
    from ..parameters.store import ParameterStore

logger = logging.getLogger(__name__)


class ResolutionState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class IdentifierKind(Enum):
    GLOBAL = "global"
    LOCAL = "local"
    NUMERIC = "numeric"
    LITERAL_CLASS = "class"


class ConstructorResolver:
    """Lazily binds a parameter's code mapping to one constructor of its target class."""

    def __init__(
        self,
        param: ParameterNode,
        mapping: CodeMapping,
        store: "ParameterStore",
        registry: Optional[TypeRegistry] = None,
    ):
        self._param = param
        self._mapping = mapping
        self._store = store
        self._registry = registry or TYPE_REGISTRY
        self._formal_ids: Optional[Tuple[str, ...]] = None

        self._state = ResolutionState.UNRESOLVED
        self._target: Optional[type] = None
        self._constructor: Optional[ConstructorSignature] = None
        self._global_references: FrozenSet[str] = frozenset()
        self._local_references: FrozenSet[str] = frozenset()

    # --- Public API ---

    @property
    def param(self) -> ParameterNode:
        return self._param

    @property
    def mapping(self) -> CodeMapping:
        return self._mapping

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def formal_ids(self) -> Tuple[str, ...]:
        """
        The mapping's explicit identifiers; for a choice variant without its own
        list, the parent's identifiers; otherwise empty (no-argument construction).
        """
        if self._formal_ids is None:
            self._formal_ids = self._init_formal_ids()
        return self._formal_ids

    @property
    def target_class(self) -> type:
        self.resolve()
        return self._target

    @property
    def argument_types(self) -> Tuple[type, ...]:
        return self.resolve().parameter_types

    def resolve(self) -> ConstructorSignature:
        """Returns the constructor to invoke, resolving it on first use."""
        if self._state is ResolutionState.RESOLVED:
            return self._constructor

        self._state = ResolutionState.RESOLVING
        try:
            target = self._load_target_class()
            global_refs, local_refs = self._classify_references()
            constructor = self._guess_constructor(target, global_refs, local_refs)
            if constructor is None:
                constructor = self._constructor_by_identifiers(target)
        except BaseException:
            self._state = ResolutionState.UNRESOLVED
            raise

        self._target = target
        self._constructor = constructor
        self._global_references = frozenset(global_refs)
        self._local_references = frozenset(local_refs)
        self._state = ResolutionState.RESOLVED
        logger.debug("Parameter '%s' resolved to constructor %s.", self._param.fqn, constructor.describe())
        return constructor

    def uses_global_reference(self, param_id: str) -> bool:
        """True if `param_id` is a global parameter used as a constructor argument."""
        self.resolve()
        return param_id in self._global_references

    def initializes_local(self, local_id: str) -> bool:
        """True if the local parameter `local_id` is passed to the constructor."""
        self.resolve()
        return local_id in self._local_references

    def classify(self, identifier: str) -> IdentifierKind:
        """Determines which of the four identifier kinds `identifier` is."""
        return self._resolve_identifier(identifier)[0]

    def resolve_identifier(self, identifier: str) -> type:
        """Resolves a single formal-argument identifier to the class it stands for."""
        return self._resolve_identifier(identifier)[1]

    # --- Formal identifiers and context ---

    def _init_formal_ids(self) -> Tuple[str, ...]:
        explicit = self._mapping.formal_ids
        if explicit is not None:
            return explicit
        if self._param.is_choice:
            parent = self._param.parent
            parent_constructor = parent.constructor if parent is not None else None
            if parent_constructor is not None:
                return parent_constructor.formal_ids
            logger.debug("Choice '%s' has no parent constructor to inherit identifiers from.", self._param.fqn)
        return ()

    def _classify_references(self) -> Tuple[set, set]:
        global_refs = {fid for fid in self.formal_ids if self._store.contains_param(fid)}
        local_refs = {
            fid for fid in self.formal_ids
            if fid not in global_refs and self._store.get_param_for_local_id(fid, self._param) is not None
        }
        return global_refs, local_refs

    def _available_context(self, global_refs: set, local_refs: set) -> List[Optional[type]]:
        context: List[Optional[type]] = []
        for fid in self.formal_ids:
            cls = None
            if fid in global_refs:
                cls = self._class_of_param(self._store.get_param(fid))
            elif fid in local_refs:
                cls = self._class_of_param(self._store.get_param_for_local_id(fid, self._param))
            context.append(cls)
        return context

    def _class_of_param(self, param: Optional[ParameterNode]) -> Optional[type]:
        if param is None:
            return None
        return self._store.class_of(param, self._registry)

    # --- Constructor selection ---

    def _load_target_class(self) -> type:
        class_name = self._mapping.class_name
        if not class_name:
            raise self._error(
                MappingErrorKind.MAPPING_NOT_FOUND,
                "No class entry for this parameter could be found in the code mappings.",
            )
        target = self._registry.find(class_name)
        if target is None:
            raise self._error(
                MappingErrorKind.MAPPING_NOT_FOUND,
                f"A class by name '{class_name}' does not exist, but it has been defined as the mapping of parameter '{self._mapping.param_id}'.",
            )
        return target

    def _guess_constructor(self, target: type, global_refs: set, local_refs: set) -> Optional[ConstructorSignature]:
        candidates = self._registry.public_constructors_of(target)
        if len(candidates) == 1:
            logger.debug("'%s': single public constructor of %s selected.", self._param.fqn, target.__name__)
            return candidates[0]

        by_arity = [c for c in candidates if c.accepts_count(len(self.formal_ids))]
        if len(by_arity) == 1:
            logger.debug("'%s': constructor selected by argument count %d.", self._param.fqn, len(self.formal_ids))
            return by_arity[0]

        context = self._available_context(global_refs, local_refs)
        if not by_arity or all(cls is None for cls in context):
            return None

        survivors = list(by_arity)
        for position, cls in enumerate(context):
            if cls is None:
                continue
            if len(survivors) == 1:
                break
            survivors = [c for c in survivors if c.parameter_types[position] is cls]

        if len(survivors) == 1:
            logger.debug("'%s': constructor selected by argument context.", self._param.fqn)
            return survivors[0]
        return None

    def _constructor_by_identifiers(self, target: type) -> ConstructorSignature:
        types = tuple(self.resolve_identifier(fid) for fid in self.formal_ids)
        matches = [
            c for c in self._registry.constructors_of(target)
            if c.accepts_count(len(types)) and c.parameter_types[:len(types)] == types
        ]
        public_matches = [c for c in matches if c.is_public]
        if public_matches:
            return public_matches[0]

        signature = f"({', '.join(t.__name__ for t in types)})"
        if matches:
            raise self._error(
                MappingErrorKind.CONSTRUCTOR_INACCESSIBLE,
                f"The constructor {matches[0].describe()} is not public and cannot be invoked.",
            )
        arity_candidates = [c for c in self._registry.public_constructors_of(target) if c.accepts_count(len(types))]
        if len(arity_candidates) > 1:
            raise self._error(
                MappingErrorKind.CONSTRUCTOR_AMBIGUOUS,
                f"{len(arity_candidates)} constructors take {len(types)} argument(s) and none matches {signature} exactly: "
                f"{', '.join(c.describe() for c in arity_candidates)}.",
            )
        raise self._error(
            MappingErrorKind.CONSTRUCTOR_NOT_FOUND,
            f"There is no such constructor: {target.__name__}{signature}.",
        )

    # --- Identifier lookup ---

    def _resolve_identifier(self, identifier: str) -> Tuple[IdentifierKind, type]:
        global_param = self._store.get_param(identifier)
        if global_param is not None:
            cls = self._class_of_param(global_param)
            if cls is not None:
                return IdentifierKind.GLOBAL, cls

        local_param = self._store.get_param_for_local_id(identifier, self._param)
        if local_param is not None:
            cls = self._class_of_param(local_param)
            if cls is not None:
                return IdentifierKind.LOCAL, cls

        if Numeric.is_numeric(identifier):
            return IdentifierKind.NUMERIC, Numeric.from_keyword(identifier).python_type

        cls = self._registry.find(identifier)
        if cls is not None:
            return IdentifierKind.LITERAL_CLASS, cls

        raise self._error(
            MappingErrorKind.IDENTIFIER_UNRESOLVABLE,
            f"There is no class, subparam or parameter with identifier '{identifier}'.",
        )

    def _error(self, kind: MappingErrorKind, details: str) -> MappingError:
        return MappingError(
            param_id=self._param.fqn,
            kind=kind,
            details=details,
            class_name=self._mapping.class_name,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(param='{self._param.fqn}', class='{self._mapping.class_name}', state={self._state.value})"
