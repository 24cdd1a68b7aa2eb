from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._keys import ContractKey


class ErrorKind(Enum):
    EMPTY_NAME = "empty_name"
    DUPLICATE_NAME = "duplicate_name"
    TYPE_MISMATCH = "type_mismatch"
    UNKNOWN_CONTRACT = "unknown_contract"
    UNKNOWN_NAME = "unknown_name"
    NO_PRIMARY_AVAILABLE = "no_primary_available"
    OVERRIDES_DISALLOWED = "overrides_disallowed"


class BeanError(Exception):
    """Base class for every error reported by a registry.

    Carries the error `kind` plus the contract and bean name it concerns, so
    error handlers can act on structured fields instead of parsing messages.
    """

    kind: ErrorKind

    def __init__(self, msg: str, *, contract: ContractKey | None = None, name: str | None = None) -> None:
        super().__init__(msg)
        self.contract = contract
        self.name = name


class EmptyNameError(BeanError, ValueError):
    kind = ErrorKind.EMPTY_NAME


class DuplicateNameError(BeanError, ValueError):
    kind = ErrorKind.DUPLICATE_NAME


class TypeMismatchError(BeanError, TypeError):
    kind = ErrorKind.TYPE_MISMATCH


class UnknownContractError(BeanError, LookupError):
    kind = ErrorKind.UNKNOWN_CONTRACT


class UnknownNameError(BeanError, LookupError):
    kind = ErrorKind.UNKNOWN_NAME


class NoPrimaryAvailableError(BeanError, LookupError):
    kind = ErrorKind.NO_PRIMARY_AVAILABLE


class OverridesDisallowedError(BeanError, RuntimeError):
    kind = ErrorKind.OVERRIDES_DISALLOWED
