# vmpc/mpc_core/memory.py
"""ID-addressed store owned by a single virtual machine."""
import enum
from typing import Dict, Hashable, Iterator, Tuple, Union

from .errors import TypeMismatch, UndefinedVariable
from .field import FieldElement
from .sharing import Share

Value = Union[FieldElement, Share]


class Kind(enum.Enum):
    PUBLIC = "public"
    SECRET = "secret"


def kind_of(value) -> Kind:
    if isinstance(value, Share):
        return Kind.SECRET
    if isinstance(value, FieldElement):
        return Kind.PUBLIC
    raise TypeError(f"memory holds FieldElement or Share, not {type(value).__name__}")


class Memory:
    """
    Maps an opaque id to a public FieldElement or a secret Share.
    The kind of an id is fixed by its first write; later writes of the same
    kind overwrite (last write wins).
    """

    def __init__(self):
        self._cells: Dict[Hashable, Tuple[Kind, Value]] = {}

    def write(self, var_id, value: Value):
        kind = kind_of(value)
        cell = self._cells.get(var_id)
        if cell is not None and cell[0] is not kind:
            raise TypeMismatch(f"id {var_id!r} holds a {cell[0].value} value, cannot store a {kind.value} one")
        self._cells[var_id] = (kind, value)

    def read(self, var_id) -> Value:
        try:
            return self._cells[var_id][1]
        except KeyError:
            raise UndefinedVariable(f"id {var_id!r} was never written") from None

    def kind(self, var_id) -> Kind:
        try:
            return self._cells[var_id][0]
        except KeyError:
            raise UndefinedVariable(f"id {var_id!r} was never written") from None

    def read_public(self, var_id) -> FieldElement:
        return self._read_as(var_id, Kind.PUBLIC)

    def read_secret(self, var_id) -> Share:
        return self._read_as(var_id, Kind.SECRET)

    def _read_as(self, var_id, expected: Kind):
        kind = self.kind(var_id)
        if kind is not expected:
            raise TypeMismatch(f"id {var_id!r} is {kind.value}, expected {expected.value}")
        return self._cells[var_id][1]

    def ids(self) -> Iterator[Hashable]:
        return iter(list(self._cells))

    def __contains__(self, var_id):
        return var_id in self._cells

    def __len__(self):
        return len(self._cells)

    def __repr__(self):
        return f"Memory({len(self)} entries)"
