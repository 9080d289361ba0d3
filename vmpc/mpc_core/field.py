# vmpc/mpc_core/field.py
"""Arithmetic in GF(p) for a Mersenne prime p = 2^k - 1 (default k = 61).

Reduction uses the Mersenne identity 2^k = 1 (mod p): a wide integer is split
into its low k bits and everything above, and the two halves are summed until
the result fits. A product of two reduced elements (at most 2k bits) needs two
folds at most.
"""
from pydantic import BaseModel, ConfigDict, field_validator

from .errors import DivisionByZero

# exponents k for which 2^k - 1 is prime and small enough to be practical here
MERSENNE_EXPONENTS = (2, 3, 5, 7, 13, 17, 19, 31, 61, 89, 107, 127)
DEFAULT_POWER = 61


class FieldParams(BaseModel):
    """Immutable field configuration, passed explicitly to every Field."""
    model_config = ConfigDict(frozen=True)

    power: int = DEFAULT_POWER

    @field_validator("power")
    @classmethod
    def _check_mersenne(cls, v: int) -> int:
        if v not in MERSENNE_EXPONENTS:
            raise ValueError(f"2^{v} - 1 is not a supported Mersenne prime")
        return v

    @property
    def modulus(self) -> int:
        return (1 << self.power) - 1


class Field:
    """GF(2^k - 1). Instances with equal params are interchangeable."""

    def __init__(self, params: FieldParams = None):
        self.params = params if params is not None else FieldParams()
        self.power = self.params.power
        self.p = self.params.modulus

    def __eq__(self, other):
        return isinstance(other, Field) and other.params == self.params

    def __hash__(self):
        return hash(self.params)

    def __repr__(self):
        return f"Field(2^{self.power} - 1)"

    def __call__(self, value) -> "FieldElement":
        return self.element(value)

    # ------------------------------------------------------------------
    # integer level
    # ------------------------------------------------------------------
    def reduce(self, x: int) -> int:
        """Canonical representative of x in [0, p)."""
        if x < 0:
            r = self.reduce(-x)
            return self.p - r if r else 0
        p, k = self.p, self.power
        while x > p:
            x = (x & p) + (x >> k)
        return 0 if x == p else x

    def element(self, value) -> "FieldElement":
        if isinstance(value, FieldElement):
            self._check_same(value)
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"cannot build a field element from {type(value).__name__}")
        return FieldElement(self, self.reduce(value))

    @property
    def zero(self) -> "FieldElement":
        return FieldElement(self, 0)

    @property
    def one(self) -> "FieldElement":
        return FieldElement(self, 1)

    # ------------------------------------------------------------------
    # element level
    # ------------------------------------------------------------------
    def add(self, a, b) -> "FieldElement":
        a, b = self.element(a), self.element(b)
        s = a.value + b.value
        if s >= self.p:
            s -= self.p
        return FieldElement(self, s)

    def sub(self, a, b) -> "FieldElement":
        a, b = self.element(a), self.element(b)
        d = a.value - b.value
        if d < 0:
            d += self.p
        return FieldElement(self, d)

    def mul(self, a, b) -> "FieldElement":
        a, b = self.element(a), self.element(b)
        return FieldElement(self, self.reduce(a.value * b.value))

    def neg(self, a) -> "FieldElement":
        a = self.element(a)
        return FieldElement(self, self.p - a.value if a.value else 0)

    def inv(self, a) -> "FieldElement":
        """Multiplicative inverse via Fermat's little theorem (a^(p-2))."""
        a = self.element(a)
        if a.value == 0:
            raise DivisionByZero("cannot invert the zero element of the field")
        return FieldElement(self, pow(a.value, self.p - 2, self.p))

    def div(self, a, b) -> "FieldElement":
        return self.mul(a, self.inv(b))

    def pow(self, a, e: int) -> "FieldElement":
        a = self.element(a)
        if e < 0:
            a, e = self.inv(a), -e
        return FieldElement(self, pow(a.value, e, self.p))

    def random(self, prg) -> "FieldElement":
        return prg.next_field_element(self)

    def _check_same(self, x: "FieldElement"):
        if x.field is not self and x.field != self:
            raise ValueError(f"element of {x.field!r} used in {self!r}")


class FieldElement:
    """An immutable, fully reduced element of a Field."""
    __slots__ = ("field", "value")

    def __init__(self, field: Field, value: int):
        object.__setattr__(self, "field", field)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError("FieldElement is immutable")

    def __int__(self):
        return self.value

    def __index__(self):
        return self.value

    def __repr__(self):
        return f"FieldElement({self.value})"

    def __eq__(self, other):
        if isinstance(other, FieldElement):
            return other.field == self.field and other.value == self.value
        if isinstance(other, int) and not isinstance(other, bool):
            return self.field.reduce(other) == self.value
        return NotImplemented

    def __hash__(self):
        # consistent with equality against plain ints
        return hash(self.value)

    def __add__(self, other):
        if not isinstance(other, (int, FieldElement)):
            return NotImplemented
        return self.field.add(self, other)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, (int, FieldElement)):
            return NotImplemented
        return self.field.sub(self, other)

    def __rsub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self.field.sub(other, self)

    def __mul__(self, other):
        if not isinstance(other, (int, FieldElement)):
            return NotImplemented
        return self.field.mul(self, other)

    def __rmul__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self.field.mul(other, self)

    def __truediv__(self, other):
        if not isinstance(other, (int, FieldElement)):
            return NotImplemented
        return self.field.div(self, other)

    def __neg__(self):
        return self.field.neg(self)

    def __pow__(self, e):
        return self.field.pow(self, e)

    def inverse(self) -> "FieldElement":
        return self.field.inv(self)

