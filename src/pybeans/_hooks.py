from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ResolveHandler(Protocol):
    """Optional capability: called every time the bean is resolved."""

    def on_resolve(self) -> None: ...


@runtime_checkable
class FirstTimeResolveHandler(Protocol):
    """Optional capability: called on the first successful resolve of an instance only.

    Meant for lazy initialization of components that should only be prepared
    once they are actually used.
    """

    def on_first_time_resolve(self) -> None: ...
