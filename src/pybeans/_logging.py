"""Ready-made handlers for the registry error channel.

A registry discards the errors reported by `resolve` unless a handler is
installed; these helpers cover the two common choices:

    registry.set_error_handler(log_errors())    # write to the "pybeans" logger
    registry.set_error_handler(raise_errors)    # fail loudly, e.g. in tests
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._errors import BeanError

    ErrorHandler = Callable[[BeanError], None]


def log_errors(logger: logging.Logger | None = None, level: int = logging.ERROR) -> ErrorHandler:
    """Return an error handler that logs each report at `level`."""
    target = logger or logging.getLogger("pybeans")

    def handler(err: BeanError) -> None:
        target.log(
            level,
            "%s (kind=%s contract=%s name=%s)",
            err,
            err.kind.value,
            err.contract,
            err.name,
        )

    return handler


def raise_errors(err: BeanError) -> None:
    raise err
