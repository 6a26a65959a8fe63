"""Application components: one shared instance per class, wired by annotation."""

from __future__ import annotations

import re
import threading
import typing
from typing import Any, ClassVar, Optional, TypeVar

T = TypeVar("T", bound="Component")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _component_class(hint: Any) -> Optional[type]:
    if isinstance(hint, str):
        names = set(_IDENTIFIER.findall(hint))
        for klass in Component._registry:
            if klass.__name__ in names:
                return klass
        return None
    candidates = (hint, *typing.get_args(hint))
    for candidate in candidates:
        if isinstance(candidate, str):
            found = _component_class(candidate)
            if found is not None:
                return found
            continue
        try:
            if isinstance(candidate, type) and issubclass(candidate, Component):
                return candidate
        except TypeError:
            continue
    return None


def _dependency_hints(klass: type) -> dict[str, type]:
    hints: dict[str, Any] = {}
    for base in reversed(klass.__mro__):
        hints.update(base.__dict__.get("__annotations__", {}))
    dependencies = {}
    for name, hint in hints.items():
        if name.startswith("_"):
            continue
        component = _component_class(hint)
        if component is not None:
            dependencies[name] = component
    return dependencies


class Component:
    """Base for classes the application creates once and shares.

    Every subclass is registered when it is defined. Public attributes
    annotated with a component class are filled with that component's
    shared instance unless they already hold a value.
    """

    _registry: ClassVar[list[type]] = []
    _instances: ClassVar[dict[type, "Component"]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        Component._registry.append(cls)

    @classmethod
    def initialize_components(cls) -> list["Component"]:
        """Create every registered component not yet created and wire them all."""
        with Component._lock:
            for klass in list(Component._registry):
                if klass not in Component._instances:
                    Component._instances[klass] = klass()
            instances = list(Component._instances.values())
            for instance in instances:
                Component._autowire(instance)
            return instances

    @staticmethod
    def _find(component_type: type) -> Optional["Component"]:
        instance = Component._instances.get(component_type)
        if instance is not None:
            return instance
        for candidate in Component._instances.values():
            if isinstance(candidate, component_type):
                return candidate
        return None

    @staticmethod
    def _autowire(instance: "Component") -> None:
        for name, dependency_type in _dependency_hints(type(instance)).items():
            if getattr(instance, name, None) is not None:
                continue
            dependency = Component._find(dependency_type)
            if dependency is None:
                raise LookupError(
                    f"no component of type {dependency_type.__name__} for "
                    f"{type(instance).__name__}.{name}"
                )
            setattr(instance, name, dependency)

    @classmethod
    def get_component(cls, component_type: type[T]) -> T:
        """Return the shared instance of ``component_type``; raise LookupError if none exists."""
        with Component._lock:
            instance = Component._find(component_type)
        if instance is None:
            raise LookupError(f"no component of type {component_type.__name__}")
        return instance  # type: ignore[return-value]