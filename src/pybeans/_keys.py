from __future__ import annotations

import inspect
from dataclasses import dataclass


@dataclass(frozen=True)
class ContractKey:
    """Hashable identity of a contract class.

    Equality follows the identity of the wrapped class, so two references to
    the same class always produce equal keys.
    """

    type: type

    @property
    def name(self) -> str:
        return self.type.__qualname__

    def __str__(self) -> str:
        return self.name


def contract_key(ref: type | ContractKey) -> ContractKey:
    """Derive the contract key for a class (plain class, ABC or Protocol).

    Passing an existing `ContractKey` returns it unchanged.
    """
    if isinstance(ref, ContractKey):
        return ref

    if not inspect.isclass(ref):
        msg = f"Contract must be a class or ContractKey, got {ref!r}"
        raise TypeError(msg)

    return ContractKey(ref)
