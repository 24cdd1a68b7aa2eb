"""Named-bean dependency registry.

This package maps abstract contracts (classes, ABCs or protocols) to one or
more named implementations, so application code can depend on a capability
and leave the choice of implementation to a registration step.

Exports:
- `Registry`: registers named constructors or instances per contract and
  resolves them, lazily and optionally as singletons, with a primary bean per
  contract for unnamed lookups.
- `ResolveHandler` / `FirstTimeResolveHandler`: optional hooks a bean may
  implement to be notified when it is resolved.
- `BeanError` and its subclasses, with `ErrorKind`: the registry error taxonomy.
- `log_errors` / `raise_errors`: ready-made error handlers for `resolve` failures.
"""

from ._errors import (
    BeanError,
    DuplicateNameError,
    EmptyNameError,
    ErrorKind,
    NoPrimaryAvailableError,
    OverridesDisallowedError,
    TypeMismatchError,
    UnknownContractError,
    UnknownNameError,
)
from ._hooks import FirstTimeResolveHandler, ResolveHandler
from ._keys import ContractKey, contract_key
from ._logging import log_errors, raise_errors
from ._registry import Registry


__all__ = [
    "BeanError",
    "ContractKey",
    "DuplicateNameError",
    "EmptyNameError",
    "ErrorKind",
    "FirstTimeResolveHandler",
    "NoPrimaryAvailableError",
    "OverridesDisallowedError",
    "Registry",
    "ResolveHandler",
    "TypeMismatchError",
    "UnknownContractError",
    "UnknownNameError",
    "contract_key",
    "log_errors",
    "raise_errors",
]
