"""Transform registry and registration decorator.

Transforms are named post-fetch functions applied to a binding's data.
Built-ins are registered with the @register_transform decorator into a
module-level catalog; each resolver gets its own TransformRegistry seeded
from that catalog, so custom registrations never leak between resolvers.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from binding_resolver.errors import TransformFailed

logger = logging.getLogger(__name__)

# (data, context) -> data, or (data, context, argument) -> data when parameterized
Transform = Callable[..., Any]

# Parameterized transforms are referenced as "name:argument", e.g. "pick:title"
ARGUMENT_SEPARATOR = ":"


@dataclass(frozen=True)
class TransformDefinition:
    """Complete definition of a transform."""

    name: str
    func: Transform
    description: str = ""
    parameterized: bool = False


class TransformRegistry:
    """Registry of transforms for one resolver instance.

    Append/overwrite only: there is no removal API.
    """

    def __init__(self, definitions: dict[str, TransformDefinition] | None = None):
        self._transforms: dict[str, TransformDefinition] = dict(definitions or {})

    def register(
        self,
        name: str,
        func: Transform,
        description: str = "",
        parameterized: bool = False,
    ) -> None:
        """Register a transform, replacing any existing one of that name."""
        if name in self._transforms:
            logger.warning("[TRANSFORM] '%s' already registered, overwriting", name)
        self._transforms[name] = TransformDefinition(
            name=name,
            func=func,
            description=description,
            parameterized=parameterized,
        )

    def get(self, name: str) -> TransformDefinition | None:
        """Get a transform definition by its base name."""
        return self._transforms.get(name)

    def names(self) -> list[str]:
        return sorted(self._transforms)

    def count(self) -> int:
        return len(self._transforms)

    def copy(self) -> "TransformRegistry":
        return TransformRegistry(self._transforms)

    def lookup(self, name: str) -> Callable[[Any, Any], Any] | None:
        """Resolve a transform reference to a (data, context) callable.

        An exact registration wins; otherwise "base:argument" binds the
        argument to a parameterized transform.
        """
        definition = self._transforms.get(name)
        if definition is not None:
            if definition.parameterized:
                return lambda data, context: definition.func(data, context, None)
            return definition.func

        base, sep, argument = name.partition(ARGUMENT_SEPARATOR)
        if not sep:
            return None
        definition = self._transforms.get(base)
        if definition is None or not definition.parameterized:
            return None
        return lambda data, context: definition.func(data, context, argument)

    def apply(self, data: Any, name: str, context: Any) -> Any:
        """Apply a named transform to data.

        An unknown transform logs a warning and returns data unchanged.

        Raises:
            TransformFailed: if the transform itself raises
        """
        transform = self.lookup(name)
        if transform is None:
            logger.warning("[TRANSFORM] '%s' not found, returning data unchanged", name)
            return data

        try:
            return transform(data, context)
        except Exception as e:
            logger.error("[TRANSFORM] '%s' failed: %s", name, e)
            raise TransformFailed(name, e) from e


# Built-in catalog, filled by @register_transform at import time
_BUILTINS: dict[str, TransformDefinition] = {}


def register_transform(
    name: str,
    description: str = "",
    parameterized: bool = False,
) -> Callable[[Transform], Transform]:
    """Decorator to register a built-in transform.

    Usage:
        @register_transform(
            name="first",
            description="First item of an array",
        )
        def first(data, context):
            if isinstance(data, list):
                return data[0] if data else None
            return data
    """

    def decorator(func: Transform) -> Transform:
        _BUILTINS[name] = TransformDefinition(
            name=name,
            func=func,
            description=description,
            parameterized=parameterized,
        )
        return func

    return decorator


def default_registry() -> TransformRegistry:
    """Get a fresh registry seeded with the built-in transforms."""
    # Importing the package registers every built-in
    from binding_resolver import transforms  # noqa: F401

    return TransformRegistry(_BUILTINS)
