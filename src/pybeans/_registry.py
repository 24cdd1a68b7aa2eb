from __future__ import annotations

import inspect
import logging
import threading
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._conformance import conformance_problems
from ._errors import (
    BeanError,
    DuplicateNameError,
    EmptyNameError,
    NoPrimaryAvailableError,
    OverridesDisallowedError,
    TypeMismatchError,
    UnknownContractError,
    UnknownNameError,
)
from ._hooks import FirstTimeResolveHandler, ResolveHandler
from ._keys import ContractKey, contract_key


logger = logging.getLogger(__name__)

T = TypeVar("T")

if TYPE_CHECKING:
    from collections.abc import Callable

    ContractRef = type[T] | ContractKey
    ErrorHandler = Callable[[BeanError], None]


@dataclass
class Constructor:
    factory: Callable[[], object]
    singleton: bool = False


@dataclass
class CachedInstance:
    instance: object


class FiredInstances:
    """Instances of one bean name whose first-time resolve hook already fired.

    Tracked by identity. Instances are held weakly where possible, so
    transient beans are not kept alive by the registry.
    """

    def __init__(self) -> None:
        self._refs: dict[int, Callable[[], object]] = {}

    def __contains__(self, instance: object) -> bool:
        ref = self._refs.get(id(instance))
        return ref is not None and ref() is instance

    def add(self, instance: object) -> None:
        key = id(instance)

        def forget(_: object) -> None:
            self._refs.pop(key, None)

        try:
            self._refs[key] = weakref.ref(instance, forget)
        except TypeError:
            # not weakly referenceable: keep it alive so its id stays unique
            self._refs[key] = lambda: instance


@dataclass
class DependencyCollection:
    primary: str = ""
    constructors: dict[str, Constructor] = field(default_factory=dict)
    cached: dict[str, CachedInstance] = field(default_factory=dict)
    fired: dict[str, FiredInstances] = field(default_factory=dict)


class Registry:
    """Maps contracts to named bean constructors.

    - register constructors (lazy, optionally singleton) or ready instances
    - resolve by contract and name, or by contract alone via the primary bean
    - resolve hooks: `on_first_time_resolve` / `on_resolve`
    - `allow_overrides` gates re-registration and `clear()`, meant for tests.

    Mutating operations raise `BeanError` subclasses. `resolve` and `primary`
    never raise registry errors: failures go to the error handler and the
    call returns None.
    """

    def __init__(self, *, allow_overrides: bool = False, error_handler: ErrorHandler | None = None) -> None:
        self._collections: dict[ContractKey, DependencyCollection] = {}
        self._allow_overrides = allow_overrides
        self._error_handler = error_handler
        self._lock = threading.RLock()

    @property
    def allow_overrides(self) -> bool:
        return self._allow_overrides

    def set_allow_overrides(self, allow: bool) -> None:
        """Allow re-registering existing names and clearing the registry.

        Normally used when testing, e.g. to swap a bean for a mock.
        """
        with self._lock:
            self._allow_overrides = allow

    def set_error_handler(self, handler: ErrorHandler | None) -> None:
        """Install the callback that receives errors reported by `resolve`."""
        with self._lock:
            self._error_handler = handler

    def register_constructor(
        self,
        contract: ContractRef[T],
        name: str,
        factory: Callable[[], object],
        *,
        singleton: bool = False,
    ) -> None:
        """Register a zero-argument factory for a contract under `name`.

        The factory runs lazily on resolve: once for singletons (the result is
        cached), on every resolve otherwise.

        Example:
          registry.register_constructor(IService, "default", ServiceImpl, singleton=True)

        """
        key = contract_key(contract)
        if not name or not name.strip():
            msg = "the name cannot be empty"
            raise EmptyNameError(msg, contract=key, name=name)

        with self._lock:
            collection = self._collections.setdefault(key, DependencyCollection())

            if name in collection.constructors:
                if not self._allow_overrides:
                    msg = f"a dependency with name {name} is already registered for {key}"
                    raise DuplicateNameError(msg, contract=key, name=name)

                collection.fired.pop(name, None)
                if collection.cached.pop(name, None) is not None:
                    logger.debug("evicted cached instance %s for %s", name, key)

            collection.constructors[name] = Constructor(factory=factory, singleton=singleton)
            logger.debug("registered %s for %s (singleton=%s)", name, key, singleton)

    def register_instance(self, contract: ContractRef[T], name: str, instance: object) -> None:
        """Register a pre-built instance (always singleton)."""
        key = contract_key(contract)
        problems = conformance_problems(key.type, instance)
        if problems:
            msg = (
                f"the component type '{type(instance).__name__}' does not implement "
                f"the provided type '{key}': {'; '.join(problems)}"
            )
            raise TypeMismatchError(msg, contract=key, name=name)

        self.register_constructor(key, name, lambda: instance, singleton=True)

    def provides(
        self,
        contract: ContractRef[T],
        name: str | None = None,
        *,
        singleton: bool = False,
        primary: bool = False,
    ) -> Callable[[Any], Any]:
        """Decorator registering a class or zero-argument function as a constructor.

        Args:
            contract: The contract the decorated object implements.
            name: Bean name; defaults to the class name, or the function name
                with any 'make_' prefix removed.
            singleton: Cache the first constructed instance.
            primary: Make this bean the primary one, replacing any previous primary.

        Example:
            @registry.provides(IService, singleton=True)
            def make_service() -> IService:
                return ServiceImpl()
        """

        def decorator(obj: Any) -> Any:
            if not callable(obj):
                msg = f"{obj!r} is not a class or function"
                raise TypeError(msg)

            bean_name = name if name is not None else inferred_name(obj)
            self.register_constructor(contract, bean_name, obj, singleton=singleton)
            if primary:
                self.set_primary(contract, bean_name, replace=True)
            return obj

        return decorator

    @overload
    def resolve(self, contract: type[T], name: str = ...) -> T | None: ...

    @overload
    def resolve(self, contract: ContractKey, name: str = ...) -> object | None: ...

    def resolve(self, contract: ContractRef[T], name: str = "") -> object | None:
        """Resolve the bean registered under `name`, or the primary bean when `name` is empty.

        Returns None, after reporting to the error handler, when nothing can be
        resolved. Exceptions from factories or resolve hooks propagate.
        """
        key = contract_key(contract)
        with self._lock:
            collection = self._collections.get(key)
            if collection is None:
                msg = f"no dependencies found for type {key}, unable to resolve"
                self._report(UnknownContractError(msg, contract=key, name=name or None))
                return None

            if not name:
                return self._resolve_primary(key, collection)

            return self._resolve_named(key, collection, name)

    @overload
    def primary(self, contract: type[T]) -> T | None: ...

    @overload
    def primary(self, contract: ContractKey) -> object | None: ...

    def primary(self, contract: ContractRef[T]) -> object | None:
        return self.resolve(contract, "")

    def set_primary(self, contract: ContractRef[T], name: str, *, replace: bool = False) -> None:
        """Set the bean resolved when no name is given.

        An existing primary is kept unless `replace` is True, so a default
        registration can claim primary once while allowing a deliberate
        replacement later.
        """
        key = contract_key(contract)
        with self._lock:
            collection = self._collections.get(key)
            if collection is None:
                msg = f"no dependencies found for type {key}, unable to resolve"
                raise UnknownContractError(msg, contract=key, name=name)

            if name not in collection.constructors:
                msg = f"dependency {name} not registered, unable to set as primary"
                raise UnknownNameError(msg, contract=key, name=name)

            if collection.primary and not replace:
                return

            collection.primary = name
            logger.debug("primary for %s set to %s", key, name)

    def exists(self, contract: ContractRef[T], name: str) -> bool:
        key = contract_key(contract)
        with self._lock:
            collection = self._collections.get(key)
            return collection is not None and name in collection.constructors

    def get_primary_name(self, contract: ContractRef[T]) -> str:
        """Return the explicitly set primary name, or "" when there is none."""
        key = contract_key(contract)
        with self._lock:
            collection = self._collections.get(key)
            return collection.primary if collection else ""

    def names(self, contract: ContractRef[T]) -> list[str]:
        """Registered bean names for a contract, in registration order."""
        key = contract_key(contract)
        with self._lock:
            collection = self._collections.get(key)
            return list(collection.constructors) if collection else []

    def clear(self) -> None:
        """Remove every registration. Only allowed while overrides are allowed."""
        with self._lock:
            if not self._allow_overrides:
                msg = "overrides are disallowed, unable to clear the registry"
                raise OverridesDisallowedError(msg)

            self._collections.clear()
            logger.debug("registry cleared")

    def __contains__(self, contract: object) -> bool:
        if not isinstance(contract, ContractKey) and not inspect.isclass(contract):
            return False
        with self._lock:
            return contract_key(contract) in self._collections

    def _resolve_primary(self, key: ContractKey, collection: DependencyCollection) -> object | None:
        name = collection.primary
        if not name and len(collection.constructors) == 1:
            # a single registration is the implicit primary
            name = next(iter(collection.constructors))

        if not name:
            msg = f"no primary dependency found for type '{key}'"
            self._report(NoPrimaryAvailableError(msg, contract=key))
            return None

        return self._resolve_named(key, collection, name)

    def _resolve_named(self, key: ContractKey, collection: DependencyCollection, name: str) -> object | None:
        entry = collection.cached.get(name)
        if entry is None:
            ctor = collection.constructors.get(name)
            if ctor is None:
                msg = f"dependency {name} not registered, unable to resolve"
                self._report(UnknownNameError(msg, contract=key, name=name))
                return None

            entry = CachedInstance(ctor.factory())
            if ctor.singleton:
                collection.cached[name] = entry

        fired = collection.fired.setdefault(name, FiredInstances())
        _fire_resolve_hooks(entry.instance, fired)
        return entry.instance

    def _report(self, err: BeanError) -> None:
        logger.debug("%s: %s", err.kind.value, err)
        if self._error_handler is not None:
            self._error_handler(err)


def _fire_resolve_hooks(instance: object, fired: FiredInstances) -> None:
    if isinstance(instance, FirstTimeResolveHandler) and instance not in fired:
        instance.on_first_time_resolve()
        fired.add(instance)

    if isinstance(instance, ResolveHandler):
        instance.on_resolve()


def inferred_name(target: Any) -> str:
    """Derive a bean name from a class or function, removing a 'make_' prefix if present.

    Example:
        >>> inferred_name(ServiceImpl)   # "ServiceImpl"
        >>> inferred_name(make_service)  # "service"
    """
    bean_name = getattr(target, "__name__", type(target).__name__)
    if not inspect.isclass(target) and bean_name.startswith("make_"):
        return bean_name[len("make_") :]
    return bean_name
