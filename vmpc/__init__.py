# vmpc/__init__.py
"""Simulated multi-party computation over additive shares in GF(2^61 - 1)."""

__version__ = "0.1.0"

from .mpc_core import (
    Circuit, Field, FieldElement, MPCConfig, MPCError, Orchestrator, Prg,
    Share, VirtualMachine, combine, split,
)
