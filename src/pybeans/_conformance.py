"""Checks that a registered instance satisfies its contract.

Ordinary classes and ABCs are checked with `isinstance`. `typing.Protocol`
contracts are satisfied nominally (the protocol is in the instance's MRO) or
structurally: every public member the protocol declares must be present, and
methods must accept at least as many required positional arguments and
return a compatible annotated type.
"""

from __future__ import annotations

import inspect
import typing
from typing import Any, Protocol, get_type_hints


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and tp is not Protocol and bool(getattr(tp, "_is_protocol", False))


def conformance_problems(contract: type, instance: object) -> list[str]:
    """Return why `instance` does not satisfy `contract`; empty when it does."""
    if not is_protocol(contract):
        if isinstance(instance, contract):
            return []
        return [f"{type(instance).__name__} is not an instance of {contract.__name__}"]

    if contract in type(instance).__mro__:
        return []

    return _structural_problems(contract, instance)


def _structural_problems(proto_cls: type, instance: object) -> list[str]:  # noqa: C901
    impl_name = type(instance).__name__
    missing: list[str] = []
    signature_mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto_cls, include_extras=True)
    except (NameError, TypeError):
        proto_hints = {}

    for name in proto_hints:
        if name.startswith("_"):
            continue
        if not hasattr(instance, name):
            missing.append(name)

    for name, proto_attr in _protocol_members(proto_cls).items():

        if not hasattr(instance, name):
            missing.append(name)
            continue

        impl_attr = getattr(instance, name)
        if not callable(impl_attr):
            signature_mismatches.append(f"{name}: not callable on {impl_name}")
            continue

        try:
            proto_sig = inspect.signature(proto_attr)
            impl_sig = inspect.signature(impl_attr)
        except (TypeError, ValueError):
            # builtins without introspectable signatures
            continue

        proto_arity = _positional_arity(proto_sig, skip_self=True)
        impl_arity = _positional_arity(impl_sig, skip_self=False)
        if impl_arity < proto_arity:
            signature_mismatches.append(
                f"{name}: {impl_name} has fewer required positional params ({impl_arity}) "
                f"than the protocol ({proto_arity})"
            )

        proto_ret = proto_sig.return_annotation
        impl_ret = impl_sig.return_annotation
        if (
            proto_ret is not inspect.Signature.empty
            and impl_ret is not inspect.Signature.empty
            and proto_ret is not Any
            and impl_ret is not Any
            and not _is_return_type_compatible(impl_ret, proto_ret)
        ):
            signature_mismatches.append(
                f"{name}: return type {impl_ret!r} is not compatible with protocol return type {proto_ret!r}"
            )

    problems = []
    if missing:
        problems.append(f"missing members: {', '.join(missing)}")
    if signature_mismatches:
        problems.append(f"signature mismatches: {', '.join(signature_mismatches)}")
    return problems


def _protocol_members(proto_cls: type) -> dict[str, Any]:
    """Public methods declared by `proto_cls` and every protocol it extends."""
    members: dict[str, Any] = {}
    for base in reversed(proto_cls.__mro__):
        if not is_protocol(base):
            continue
        for name, attr in vars(base).items():
            if not name.startswith("_") and inspect.isfunction(attr):
                members[name] = attr
    return members


def _positional_arity(sig: inspect.Signature, *, skip_self: bool) -> int:
    params = list(sig.parameters.values())
    if skip_self and params:
        # protocol members are plain functions, instance members are bound
        params = params[1:]

    return sum(
        1
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _is_return_type_compatible(impl_ret: object, proto_ret: object) -> bool:
    if impl_ret == proto_ret:
        return True

    if isinstance(impl_ret, type) and isinstance(proto_ret, type):
        return issubclass(impl_ret, proto_ret)

    # with `from __future__ import annotations` both sides may be strings
    if isinstance(impl_ret, str) or isinstance(proto_ret, str):
        return _annotation_name(impl_ret) == _annotation_name(proto_ret)

    return False


def _annotation_name(annotation: object) -> str:
    if isinstance(annotation, str):
        return annotation
    return getattr(annotation, "__name__", repr(annotation))
