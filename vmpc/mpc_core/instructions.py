# vmpc/mpc_core/instructions.py
"""Instruction set shared by every virtual machine, and the circuit container.

Instructions are pydantic models discriminated by `op` so a circuit can be
loaded from JSON, e.g.

    {"instructions": [
        {"op": "input", "id": "x", "party": 0},
        {"op": "share", "id": "x", "party": 0},
        {"op": "scalar_mul", "dest": "y", "a": "x", "scalar": 6},
        {"op": "open", "dest": "out", "id": "y"},
        {"op": "output", "id": "out"}
    ]}
"""
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

VarId = Union[int, str]


class _Instr(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def communicates(self) -> bool:
        return False


class Input(_Instr):
    """`party` records a private plaintext under `id`."""
    op: Literal["input"] = "input"
    id: VarId
    party: int = Field(ge=0)
    value: Optional[int] = None


class Const(_Instr):
    """Every party records the same public constant."""
    op: Literal["const"] = "const"
    id: VarId
    value: int


class ShareAndDistribute(_Instr):
    """`party` splits its plaintext at `id` and sends one share to each peer."""
    op: Literal["share"] = "share"
    id: VarId
    party: int = Field(ge=0)

    @property
    def communicates(self) -> bool:
        return True


class Add(_Instr):
    op: Literal["add"] = "add"
    dest: VarId
    a: VarId
    b: VarId


class Sub(_Instr):
    op: Literal["sub"] = "sub"
    dest: VarId
    a: VarId
    b: VarId


class ScalarMul(_Instr):
    op: Literal["scalar_mul"] = "scalar_mul"
    dest: VarId
    a: VarId
    scalar: int


class Mul(_Instr):
    """Product with at most one secret operand."""
    op: Literal["mul"] = "mul"
    dest: VarId
    a: VarId
    b: VarId


class Open(_Instr):
    """All-to-all reveal of the shares at `id`; plaintext lands at `dest`."""
    op: Literal["open"] = "open"
    dest: VarId
    id: VarId

    @property
    def communicates(self) -> bool:
        return True


class Output(_Instr):
    op: Literal["output"] = "output"
    id: VarId


Instruction = Annotated[
    Union[Input, Const, ShareAndDistribute, Add, Sub, ScalarMul, Mul, Open, Output],
    Field(discriminator="op"),
]


class PrivateInput(BaseModel):
    """A private value owned by one party, supplied outside the circuit."""
    party: int = Field(ge=0)
    id: VarId
    value: int


class Circuit(BaseModel):
    """Ordered instruction list executed identically by every VM."""
    model_config = ConfigDict(frozen=True)

    instructions: List[Instruction] = Field(default_factory=list)

    @classmethod
    def of(cls, *instructions) -> "Circuit":
        return cls(instructions=list(instructions))

    @classmethod
    def from_json(cls, text) -> "Circuit":
        return cls.model_validate_json(text)

    @classmethod
    def from_file(cls, path) -> "Circuit":
        return cls.from_json(Path(path).read_text())

    def check_parties(self, n_parties: int):
        """Raise ValueError if an instruction names a party outside 0..n-1."""
        for pos, instr in enumerate(self.instructions):
            party = getattr(instr, "party", None)
            if party is not None and party >= n_parties:
                raise ValueError(f"instruction #{pos} ({instr.op}) names party {party}, only {n_parties} parties")


class SessionSpec(BaseModel):
    """A whole session as read from a JSON file or an HTTP body."""
    parties: Optional[int] = Field(default=None, ge=2)
    seed: Optional[str] = None
    inputs: List[PrivateInput] = Field(default_factory=list)
    instructions: List[Instruction] = Field(default_factory=list)

    @property
    def circuit(self) -> Circuit:
        return Circuit(instructions=self.instructions)

    @classmethod
    def from_file(cls, path) -> "SessionSpec":
        return cls.model_validate_json(Path(path).read_text())
