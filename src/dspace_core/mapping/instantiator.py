# src/dspace_core/mapping/instantiator.py

import inspect
import logging
from typing import Any, Sequence, Tuple

from ..parameters.node import NUMERIC_PYTHON_TYPES, Numeric
from .exceptions import MappingError, MappingErrorKind
from .registry import ConstructorSignature
from .resolver import ConstructorResolver

logger = logging.getLogger(__name__)


def _type_name(value: Any) -> str:
    if value is None:
        return "None"
    cls = type(value)
    return cls.__name__ if cls.__module__ == "builtins" else f"{cls.__module__}.{cls.__qualname__}"


def accepts(formal_type: type, value: Any) -> bool:
    """True if `value` can be passed for an argument declared as `formal_type`."""
    if formal_type is object:
        return True
    if value is None:
        return formal_type not in NUMERIC_PYTHON_TYPES
    if formal_type in NUMERIC_PYTHON_TYPES:
        return Numeric.accepts(formal_type, value)
    try:
        return isinstance(value, formal_type)
    except TypeError:
        # Not usable with isinstance (e.g. special typing forms).
        return True


class Instantiator:
    """
    Invokes the resolved constructor of a code-mapped parameter with
    already-evaluated argument values.
    """

    def __init__(self, resolver: ConstructorResolver):
        self._resolver = resolver

    @property
    def resolver(self) -> ConstructorResolver:
        return self._resolver

    def new_instance(self, actual_values: Sequence[Any]) -> Any:
        """
        Creates the object for this parameter. `actual_values` must correspond
        positionally to the resolved argument types.
        """
        signature = self._resolver.resolve()
        values = tuple(actual_values)
        param_id = self._resolver.param.fqn

        if inspect.isabstract(signature.owner):
            raise self._error(
                MappingErrorKind.NOT_INSTANTIABLE,
                f"The class '{signature.owner.__name__}' is abstract and cannot be instantiated.",
            )
        if not self._arguments_match(signature, values):
            raise self._error(
                MappingErrorKind.ARGUMENT_MISMATCH,
                f"There is no constructor {signature.describe()} accepting the supplied arguments.",
                argument_types=tuple(_type_name(v) for v in values),
            )

        try:
            instance = signature.invoke(values)
        except Exception as e:
            raise self._error(
                MappingErrorKind.INVOCATION_FAILED,
                f"Something went wrong inside {signature.describe()}: {type(e).__name__}: {e}",
            ) from e

        logger.debug("Parameter '%s' instantiated %s.", param_id, _type_name(instance))
        return instance

    @staticmethod
    def _arguments_match(signature: ConstructorSignature, values: Tuple[Any, ...]) -> bool:
        if not signature.accepts_count(len(values)):
            return False
        return all(accepts(formal, value) for formal, value in zip(signature.parameter_types, values))

    def _error(self, kind: MappingErrorKind, details: str,
               argument_types: Tuple[str, ...] = ()) -> MappingError:
        return MappingError(
            param_id=self._resolver.param.fqn,
            kind=kind,
            details=details,
            class_name=self._resolver.mapping.class_name,
            argument_types=argument_types,
        )
