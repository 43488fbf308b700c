"""Error conditions reported by the interpreter.

Traced code cannot raise, so ``step`` reports faults as a ``StepError`` code in
its result. The exception classes are for host-side callers; ``raise_for_error``
converts a step result into one of them.
"""

from enum import IntEnum

import numpy as np


class StepError(IntEnum):
    """Fault codes returned in ``StepResult.error``."""
    NONE = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2


class VipaxError(Exception):
    """Base class for interpreter errors."""


class ProgramTooLargeError(VipaxError, ValueError):
    """Program does not fit in memory above the load address."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Program is {size} bytes, at most {limit} bytes fit in memory")
        self.size = size
        self.limit = limit


class ProgramReadError(VipaxError, OSError):
    """Program source could not be read."""


class StackOverflowError(VipaxError):
    """Subroutine call with all 16 stack levels in use."""


class StackUnderflowError(VipaxError):
    """Return from subroutine with an empty stack."""


_EXCEPTIONS = {
    StepError.STACK_OVERFLOW: StackOverflowError,
    StepError.STACK_UNDERFLOW: StackUnderflowError,
}


def raise_for_error(result) -> None:
    """Raise the exception matching a step result's fault, if any.

    Accepts a single ``StepResult``; batched results from ``run_steps`` are
    checked in order and the first fault is raised.
    """
    errors = np.atleast_1d(np.asarray(result.error))
    pcs = np.atleast_1d(np.asarray(result.pc))
    instructions = np.atleast_1d(np.asarray(result.instruction))
    for error, pc, instruction in zip(errors, pcs, instructions):
        code = StepError(int(error))
        if code != StepError.NONE:
            raise _EXCEPTIONS[code](
                f"{code.name.lower().replace('_', ' ')} at 0x{int(pc):03X} "
                f"(instruction 0x{int(instruction):04X})"
            )
