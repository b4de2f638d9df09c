# src/dspace_core/mapping/registry.py

"""
Name-to-class lookup and constructor discovery for code mappings.

A code mapping names its target class by string. `TypeRegistry` turns that
string back into a class: classes registered at configuration-load time
(through `register_type` or `TypeRegistry.register`) are found first, and any
other name is treated as an importable dotted path (`package.module.Class`).

Python classes have a single `__init__`, so a class that wants to offer
several construction signatures to a code mapping declares additional
factory classmethods with the `@constructor` decorator:

    @register_type("Gauss")
    class GaussianMutation:
        def __init__(self, sigma: float): ...

        @constructor
        def from_rate(cls, rate: float, size: int): ...

`constructors_of(GaussianMutation)` then reports two `ConstructorSignature`s.
Factories whose name starts with an underscore are discovered but are not
public, and are never selected by guessing.
"""

import builtins
import importlib
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

_CONSTRUCTOR_MARKER = "_is_mapping_constructor"
_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def constructor(func: Callable) -> classmethod:
    """
    Marks `func` as an alternate constructor of its class and turns it into a
    classmethod. The first parameter receives the class; the remaining
    positional parameters, with their annotations, form the signature.
    """
    setattr(func, _CONSTRUCTOR_MARKER, True)
    return classmethod(func)


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True)
class ConstructorSignature:
    """One way of constructing `owner`: a factory plus its positional argument types."""
    owner: type
    name: str
    parameter_types: Tuple[type, ...]
    factory: Callable[..., Any]
    required: Optional[int] = None

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    @property
    def min_arity(self) -> int:
        """Number of leading arguments without a default value."""
        return self.arity if self.required is None else self.required

    def accepts_count(self, count: int) -> bool:
        return self.min_arity <= count <= self.arity

    @property
    def is_public(self) -> bool:
        return self.name == "__init__" or not self.name.startswith("_")

    def invoke(self, args: Sequence[Any]) -> Any:
        return self.factory(*args)

    def describe(self) -> str:
        arg_names = ", ".join(getattr(t, "__name__", repr(t)) for t in self.parameter_types)
        prefix = self.owner.__name__ if self.name == "__init__" else f"{self.owner.__name__}.{self.name}"
        return f"{prefix}({arg_names})"


def _annotation_to_type(annotation: Any) -> type:
    if annotation is inspect.Parameter.empty or annotation is Any:
        return object
    if isinstance(annotation, type):
        return annotation
    # Parametrized generics (List[int], Optional[X], ...) are matched on their origin.
    origin = typing.get_origin(annotation)
    if isinstance(origin, type):
        return origin
    return object


def _type_hints(func: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception:
        # Unresolvable forward references or a slot wrapper; raw annotations are still usable.
        return dict(getattr(func, "__annotations__", None) or {})


def _positional_types(parameters: Sequence[inspect.Parameter], hints: Dict[str, Any]) -> Tuple[Tuple[type, ...], int]:
    """Argument types of the leading positional parameters, plus how many of them have no default."""
    types = []
    required = 0
    for param in parameters:
        if param.kind not in _POSITIONAL_KINDS:
            break
        types.append(_annotation_to_type(hints.get(param.name, param.annotation)))
        if param.default is inspect.Parameter.empty:
            required = len(types)
    return tuple(types), required


def _signature_types(func: Callable, skip_first: bool) -> Optional[Tuple[Tuple[type, ...], int]]:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        logger.debug("Signature of %r cannot be inspected.", func)
        return None

    parameters = list(signature.parameters.values())
    if skip_first and parameters:
        parameters = parameters[1:]
    return _positional_types(parameters, _type_hints(func))


def _primary_signature_types(cls: type) -> Optional[Tuple[Tuple[type, ...], int]]:
    """
    The argument types of calling `cls` itself. `inspect.signature(cls)` covers
    classes that take their arguments in `__new__` (NamedTuple, Decimal) as well
    as in `__init__`; builtins without a signature fall back to `__init__`.
    """
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return _signature_types(cls.__init__, skip_first=True)

    hints: Dict[str, Any] = {}
    for method in (cls.__init__, cls.__new__):
        hints.update({k: v for k, v in _type_hints(method).items() if k not in hints})
    hints.pop("return", None)
    return _positional_types(list(signature.parameters.values()), hints)


class TypeRegistry:
    """Maps declared type names to classes and caches their constructor signatures."""

    def __init__(self):
        self._types: Dict[str, type] = {}
        self._constructor_cache: Dict[type, List[ConstructorSignature]] = {}

    def register(self, cls: type, name: Optional[str] = None) -> type:
        if not inspect.isclass(cls):
            raise TypeError(f"Only classes can be registered, got {cls!r}.")
        names = {qualified_name(cls)}
        if name:
            names.add(name)
        for key in names:
            existing = self._types.get(key)
            if existing is not None and existing is not cls:
                logger.warning(f"Type name '{key}' is being redefined/overwritten.")
            self._types[key] = cls
        self._constructor_cache.pop(cls, None)
        logger.info(f"Registered type {sorted(names)} -> {cls.__name__}")
        return cls

    def __contains__(self, name: str) -> bool:
        return name in self._types

    @property
    def names(self) -> List[str]:
        return sorted(self._types)

    def find(self, name: str) -> Optional[type]:
        """Returns the class for `name`, or None if it is neither registered nor importable."""
        if not name:
            return None
        if name in self._types:
            return self._types[name]
        return self._import_class(name)

    def lookup(self, name: str) -> type:
        cls = self.find(name)
        if cls is None:
            raise LookupError(f"No class named '{name}' is registered or importable.")
        return cls

    @staticmethod
    def _import_class(name: str) -> Optional[type]:
        parts = name.split(".")
        if len(parts) == 1:
            candidate = getattr(builtins, name, None)
            return candidate if inspect.isclass(candidate) else None

        # Longest importable module prefix, remaining parts are attributes.
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                obj: Any = importlib.import_module(module_name)
            except ImportError:
                continue
            except Exception as e:
                # Empty segments (".Foo") or a module failing while it loads.
                logger.debug("Module '%s' cannot be imported: %s: %s", module_name, type(e).__name__, e)
                continue
            try:
                for attr in parts[split:]:
                    obj = getattr(obj, attr)
            except AttributeError:
                return None
            return obj if inspect.isclass(obj) else None
        return None

    def constructors_of(self, cls: type) -> List[ConstructorSignature]:
        """All discovered constructors of `cls`, public and non-public, `__init__` first."""
        cached = self._constructor_cache.get(cls)
        if cached is not None:
            return cached

        signatures: List[ConstructorSignature] = []
        primary = _primary_signature_types(cls)
        if primary is not None:
            types, required = primary
            signatures.append(ConstructorSignature(cls, "__init__", types, cls, required))

        # Alternate constructors are not inherited: only the class's own namespace counts.
        for attr_name, member in vars(cls).items():
            if not isinstance(member, classmethod):
                continue
            func = member.__func__
            if not getattr(func, _CONSTRUCTOR_MARKER, False):
                continue
            alternate = _signature_types(func, skip_first=True)
            if alternate is None:
                continue
            types, required = alternate
            signatures.append(ConstructorSignature(cls, attr_name, types, getattr(cls, attr_name), required))

        self._constructor_cache[cls] = signatures
        logger.debug("Discovered constructors of %s: %s", cls.__name__, [s.describe() for s in signatures])
        return signatures

    def public_constructors_of(self, cls: type) -> List[ConstructorSignature]:
        return [sig for sig in self.constructors_of(cls) if sig.is_public]


# --- Default Registry and Decorator ---

TYPE_REGISTRY = TypeRegistry()


def register_type(name: Optional[str] = None, registry: Optional[TypeRegistry] = None):
    """
    A class decorator registering a class with a type registry (the default
    one unless given), making it available to code mappings by its qualified
    name and, optionally, by a short alias.
    """
    def decorator(cls: type) -> type:
        return (registry or TYPE_REGISTRY).register(cls, name)
    return decorator
