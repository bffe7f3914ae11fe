"""Fatal kernel errors and kernel assertions."""

from __future__ import annotations

import inspect
import os
from typing import Any, NoReturn

from n7sim.doprnt import sprintf

PANIC_PREFIX = "PANIC: "


class KernelPanic(RuntimeError):
    """The kernel hit an unrecoverable condition."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def panic(fmt: str, *args: Any) -> NoReturn:
    """Format a message with the kernel printf rules and stop with KernelPanic."""
    raise KernelPanic(PANIC_PREFIX + sprintf(fmt, *args))


def kernel_assert(condition: Any, expression: str) -> None:
    """Panic, naming the caller's file and line, when ``condition`` is false."""
    if condition:
        return
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    if caller is not None:
        filename = os.path.basename(caller.f_code.co_filename)
        lineno = caller.f_lineno
    else:
        filename, lineno = "?", 0
    del frame, caller
    panic("%s:%u: failed assertion `%s'", filename, lineno, expression)