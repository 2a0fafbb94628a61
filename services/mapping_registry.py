"""
Registry of pure functions referenced by mapping descriptors.

Descriptors name their transformation/validation instead of embedding code,
so tables built from JSON category configuration stay serializable.
Registration mutates the registry: the host serializes it (register at
startup, then only read).
"""

from typing import Any, Callable, Optional

import structlog

from exceptions import UnknownFunctionError
from utils.text_utils import normalize_condition, truncate_text

logger = structlog.get_logger(__name__)

Transform = Callable[[Any], Any]
Predicate = Callable[[Any], bool]

DESCRIPTION_MAX_LENGTH = 500


# ===================
# BUILT-IN TRANSFORMS
# ===================

def truncate_description(value: Any) -> str:
    """Cut descriptions to 500 characters; empty becomes ""."""
    return truncate_text(value, DESCRIPTION_MAX_LENGTH)


def coerce_list(value: Any) -> list:
    """Scalar → [scalar], list/tuple → list, empty → []."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value] if value else []


def coerce_boolean(value: Any) -> bool:
    return bool(value)


def strip_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# ===================
# BUILT-IN PREDICATES
# ===================

def is_not_empty(value: Any) -> bool:
    return value is not None and value != "" and value != []


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class MappingRegistry:
    """
    Named transformations and validations.

    Usage:
        registry = MappingRegistry.with_builtins()

        @registry.transform("upper")
        def upper(value):
            return str(value).upper()
    """

    def __init__(self):
        self._transforms: dict[str, Transform] = {}
        self._validators: dict[str, Predicate] = {}

    @classmethod
    def with_builtins(cls) -> "MappingRegistry":
        registry = cls()
        registry.register_transform("truncate_description", truncate_description)
        registry.register_transform("coerce_list", coerce_list)
        registry.register_transform("coerce_boolean", coerce_boolean)
        registry.register_transform("normalize_condition", normalize_condition)
        registry.register_transform("strip_text", strip_text)
        registry.register_validator("not_empty", is_not_empty)
        registry.register_validator("is_number", is_number)
        return registry

    # ===================
    # REGISTRATION
    # ===================

    def register_transform(self, name: str, fn: Transform) -> None:
        """
        Register a value -> value function under name.

        Raises:
            UnknownFunctionError: If fn is not callable
        """
        if not callable(fn):
            raise UnknownFunctionError(name, "transformation", name)
        self._transforms[name] = fn
        logger.debug("transform_registered", name=name)

    def register_validator(self, name: str, fn: Predicate) -> None:
        """
        Register a value -> bool predicate under name.

        Raises:
            UnknownFunctionError: If fn is not callable
        """
        if not callable(fn):
            raise UnknownFunctionError(name, "validation", name)
        self._validators[name] = fn
        logger.debug("validator_registered", name=name)

    def transform(self, name: str) -> Callable[[Transform], Transform]:
        """Decorator form of register_transform."""
        def decorator(fn: Transform) -> Transform:
            self.register_transform(name, fn)
            return fn
        return decorator

    def validator(self, name: str) -> Callable[[Predicate], Predicate]:
        """Decorator form of register_validator."""
        def decorator(fn: Predicate) -> Predicate:
            self.register_validator(name, fn)
            return fn
        return decorator

    # ===================
    # LOOKUP
    # ===================

    def has_transform(self, name: str) -> bool:
        return name in self._transforms

    def has_validator(self, name: str) -> bool:
        return name in self._validators

    def get_transform(self, name: str, field: Optional[str] = None) -> Transform:
        """
        Resolve a transformation by name.

        Args:
            name: Registered transformation name
            field: Field to attribute a lookup failure to

        Raises:
            UnknownFunctionError: If nothing is registered under name
        """
        try:
            return self._transforms[name]
        except KeyError:
            raise UnknownFunctionError(field or name, "transformation", name)

    def get_validator(self, name: str, field: Optional[str] = None) -> Predicate:
        """
        Resolve a validation predicate by name.

        Raises:
            UnknownFunctionError: If nothing is registered under name
        """
        try:
            return self._validators[name]
        except KeyError:
            raise UnknownFunctionError(field or name, "validation", name)


# Singleton instance
_default_registry: Optional[MappingRegistry] = None


def get_default_registry() -> MappingRegistry:
    """Get or create the registry holding the built-in functions."""
    global _default_registry
    if _default_registry is None:
        _default_registry = MappingRegistry.with_builtins()
    return _default_registry
