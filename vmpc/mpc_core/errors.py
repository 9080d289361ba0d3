# vmpc/mpc_core/errors.py
"""Errors raised by the field, sharing, memory and VM layers.

Every error is fatal to a simulation run. Each one also derives from the
closest builtin so callers outside the package can catch it generically.
"""


class MPCError(Exception):
    """Base class for all vmpc errors."""


class DivisionByZero(MPCError, ZeroDivisionError):
    """Inversion of the additive identity."""


class TypeMismatch(MPCError, TypeError):
    """A memory id was used as the other kind (public vs. secret)."""


class UndefinedVariable(MPCError, LookupError):
    """Read of an id that was never written."""

    def __str__(self):
        # LookupError would quote the message like a dict key otherwise
        return str(self.args[0]) if self.args else ""


class IncompleteShareSet(MPCError, ValueError):
    """Reconstruction was attempted without exactly one share per party."""


class UnsupportedOperation(MPCError, NotImplementedError):
    """Secret x secret multiplication needs a triple protocol we do not have."""


class ProtocolAbort(MPCError, RuntimeError):
    """A peer did not deliver (or double-delivered) its contribution."""


class MachineStateError(MPCError, RuntimeError):
    """Illegal virtual machine or session state transition."""
