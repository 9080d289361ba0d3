# mpc_core/__init__.py
from .errors import (
    MPCError, DivisionByZero, TypeMismatch, UndefinedVariable,
    IncompleteShareSet, UnsupportedOperation, ProtocolAbort, MachineStateError,
)
from .field import Field, FieldElement, FieldParams
from .prg import Prg, derive_seed
from .sharing import Share, AdditiveScheme, split, combine
from .memory import Memory, Kind
from .instructions import (
    Circuit, PrivateInput, SessionSpec, Input, Const, ShareAndDistribute,
    Add, Sub, ScalarMul, Mul, Open, Output,
)
from .network import Message, Network
from .vm import VirtualMachine, MachineState
from .config import MPCConfig, configure_logging
from .orchestrator import Orchestrator
