"""Minimal inversion-of-control container.

This package provides a small IoC container for Python: bind constructors or
factories to tokens, declare their dependencies as token lists, and resolve
them with singleton or transient lifecycles. Circular dependencies are detected
while resolving.

Exports:
- `Container`: the container (`bind`, `factory`, `instance`).
- `create_container`: builds a container, optionally through an enhancer.
- `is_container`: structural check for the container interface.
- `Lifecycle`: enum of lifecycles (singleton, transient).
- Errors: `ContainerError` and its subclasses.
"""

from ._container import (
    CONTAINER_TOKEN,
    CONTAINER_TYPE,
    CircularDependencyError,
    Container,
    ContainerError,
    InvalidArgumentError,
    Lifecycle,
    ResolutionError,
    StrictModeViolationError,
    SupportsInstance,
    UnknownLifecycleError,
    UnresolvedDependencyError,
    create_container,
    is_container,
)


__version__ = "1.0.0"

__all__ = [
    "CONTAINER_TOKEN",
    "CONTAINER_TYPE",
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "InvalidArgumentError",
    "Lifecycle",
    "ResolutionError",
    "StrictModeViolationError",
    "SupportsInstance",
    "UnknownLifecycleError",
    "UnresolvedDependencyError",
    "create_container",
    "is_container",
]
