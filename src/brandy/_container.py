from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    overload,
    runtime_checkable,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Sequence

    T = TypeVar("T")

    Token = Hashable

CONTAINER_TYPE = "[object Container]"
CONTAINER_TOKEN = "@@container"

_binding_ids = itertools.count()


class Lifecycle(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"

    @classmethod
    def parse(cls, value: Lifecycle | str | None) -> Lifecycle:
        """Parse a lifecycle name (case-insensitive); `None` means singleton."""
        if value is None:
            return cls.SINGLETON

        if isinstance(value, cls):
            return value

        if not isinstance(value, str):
            msg = f"lifecycle must be a string, got {type(value).__name__}."
            raise InvalidArgumentError(msg)

        try:
            return cls(value.lower())
        except ValueError:
            msg = f"Unable to parse {value!r} as Lifecycle."
            raise UnknownLifecycleError(msg) from None


@dataclass
class Descriptor:
    activator: Callable[..., object]
    dependencies: tuple[Any, ...]
    lifecycle: Lifecycle
    id: str
    pending: bool = False  # set while the token is being resolved


class ContainerError(Exception):
    pass


class InvalidArgumentError(ContainerError, TypeError):
    pass


class UnknownLifecycleError(ContainerError, ValueError):
    pass


class ResolutionError(ContainerError, RuntimeError):
    def __init__(self, msg: str, token: Any) -> None:
        super().__init__(msg)
        self.token = token


class UnresolvedDependencyError(ResolutionError):
    pass


class CircularDependencyError(ResolutionError):
    pass


class StrictModeViolationError(ResolutionError):
    pass


@runtime_checkable
class SupportsInstance(Protocol):
    """Structural interface shared by containers (and enhanced containers)."""

    def bind(self, token: Any, constructor: Callable[..., Any], **options: Any) -> Any: ...

    def factory(self, token: Any, factory: Callable[..., Any], **options: Any) -> Any: ...

    def instance(self, token: Any, strict: bool = False) -> Any: ...


class Container:
    """Minimal IoC container.

    - bind constructors or register factories under a token
    - dependencies are declared as token lists and injected positionally
    - lifecycles: singleton (default) / transient
    - circular dependencies are detected on re-entrant resolution.

    Every container binds itself under ``"@@container"``.
    """

    def __init__(self) -> None:
        self._descriptors: dict[Any, Descriptor] = {}
        self._singletons: dict[Any, object] = {}
        self._lock = threading.RLock()

        self.factory(CONTAINER_TOKEN, lambda: self)

    def bind(
        self,
        token: Token,
        constructor: Callable[..., Any],
        *,
        dependencies: Sequence[Token] = (),
        lifecycle: Lifecycle | str | None = None,
    ) -> Container:
        """Bind a constructor to a token.

        Resolved dependencies are passed to the constructor positionally, in
        the order they are declared.

        Example:
          container.bind("db", Database, dependencies=["connection", "logger"])

        """
        if not callable(constructor):
            msg = f"constructor must be callable, got {type(constructor).__name__}."
            raise InvalidArgumentError(msg)

        return self.factory(token, constructor, dependencies=dependencies, lifecycle=lifecycle)

    def factory(
        self,
        token: Token,
        factory: Callable[..., Any],
        *,
        dependencies: Sequence[Token] = (),
        lifecycle: Lifecycle | str | None = None,
    ) -> Container:
        """Register a factory for a token, replacing any previous binding."""
        _validate_token(token)

        if not callable(factory):
            msg = f"factory must be callable, got {type(factory).__name__}."
            raise InvalidArgumentError(msg)

        if not isinstance(dependencies, (list, tuple)):
            msg = f"dependencies must be a list or tuple, got {type(dependencies).__name__}."
            raise InvalidArgumentError(msg)

        for dependency in dependencies:
            _validate_token(dependency)

        descriptor = Descriptor(
            activator=factory,
            dependencies=tuple(dependencies),
            lifecycle=Lifecycle.parse(lifecycle),
            id=f":{next(_binding_ids)}",
        )

        with self._lock:
            self._descriptors[token] = descriptor
            if self._singletons.pop(token, _MISSING) is not _MISSING:
                logger.debug("Dropped cached singleton for rebound token %r", token)

        logger.debug(
            "Registered %s (%s) with dependencies %r",
            _format_token(token, descriptor.id),
            descriptor.lifecycle.value,
            descriptor.dependencies,
        )
        return self

    @overload
    def instance(self, token: type[T], strict: bool = ...) -> T: ...

    @overload
    def instance(self, token: Token, strict: bool = ...) -> Any: ...

    def instance(self, token: Token, strict: bool = False) -> Any:
        """Resolve the value bound to `token`, resolving its dependencies first.

        Raises:
            UnresolvedDependencyError: `token` (or a transitive dependency) is not bound.
            CircularDependencyError: `token` is already being resolved.
            StrictModeViolationError: `strict` is set and the value is None.

        """
        _validate_token(token)

        with self._lock:
            descriptor = self._descriptors.get(token)

            if descriptor is None:
                msg = f"Dependency {_format_token(token)} could not be resolved because it has not been registered."
                raise UnresolvedDependencyError(msg, token)

            if descriptor.pending:
                msg = f"Circular dependency detected while resolving {_format_token(token, descriptor.id)}."
                raise CircularDependencyError(msg, token)

            singleton = descriptor.lifecycle is Lifecycle.SINGLETON
            value = self._singletons.get(token, _MISSING) if singleton else _MISSING

            if value is _MISSING:
                descriptor.pending = True
                try:
                    value = self._activate(token, descriptor)
                finally:
                    descriptor.pending = False

                # the binding may have been replaced while its dependencies resolved
                if singleton and self._descriptors.get(token) is descriptor:
                    self._singletons[token] = value

        if value is None and strict:
            msg = f"{_format_token(token, descriptor.id)} did not return a value in strict mode."
            raise StrictModeViolationError(msg, token)

        return value

    def _activate(self, token: Token, descriptor: Descriptor) -> Any:
        values = [self.instance(dependency) for dependency in descriptor.dependencies]
        logger.debug("Activating %s", _format_token(token, descriptor.id))
        return descriptor.activator(*values)

    @property
    def keys(self) -> list[Any]:
        """Bound tokens, in registration order."""
        with self._lock:
            return list(self._descriptors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)

    def __contains__(self, token: object) -> bool:
        try:
            hash(token)
        except TypeError:
            return False

        with self._lock:
            return token in self._descriptors

    def __str__(self) -> str:
        return CONTAINER_TYPE

    def __repr__(self) -> str:
        return f"<{type(self).__name__} bindings={len(self)}>"


def create_container(enhancer: Callable[..., Callable[[], Any]] | None = None) -> Any:
    """Create a container, optionally through an enhancer.

    The enhancer receives `create_container` and must return a zero-argument
    callable that builds the final container:

        def preloaded(create):
            def build():
                container = create().bind("clock", Clock)
                return container
            return build

    """
    if enhancer is None:
        return Container()

    if not callable(enhancer):
        msg = f"enhancer must be callable, got {type(enhancer).__name__}."
        raise InvalidArgumentError(msg)

    return enhancer(create_container)()


def is_container(value: object) -> bool:
    """Return True if `value` exposes the container interface."""
    return isinstance(value, SupportsInstance)


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


_MISSING: Any = _Missing()


def _validate_token(token: object) -> None:
    try:
        hash(token)
    except TypeError:
        msg = f"token must be hashable, got {type(token).__name__}."
        raise InvalidArgumentError(msg) from None


def _format_token(token: object, binding_id: str | None = None) -> str:
    name = getattr(token, "__qualname__", None) if isinstance(token, type) else None
    text = name or repr(token)
    if binding_id is not None:
        text += f"({binding_id})"
    return text
