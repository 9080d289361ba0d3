# vmpc/mpc_core/sharing.py
"""n-party additive secret sharing over a Mersenne field.

A secret s is split into s_0 .. s_{n-1} with s_0 + ... + s_{n-1} = s (mod p).
The first n-1 shares are PRG draws, the last one closes the sum, so any n-1
of them are independent of s. Addition of shares and multiplication by a
public scalar are local; multiplying two shares is not supported (it needs
Beaver triples).
"""
from dataclasses import dataclass
from typing import Iterable, List

from .errors import IncompleteShareSet, UnsupportedOperation
from .field import Field, FieldElement


@dataclass(frozen=True)
class Share:
    """Party `owner`'s additive fragment of some secret."""
    owner: int
    value: FieldElement

    def __repr__(self):
        # never print the value by accident in logs
        return f"Share(owner={self.owner})"

    def _check_peer(self, other: "Share"):
        if other.owner != self.owner:
            raise ValueError(f"cannot combine shares of party {self.owner} and party {other.owner} locally")

    def __add__(self, other):
        if not isinstance(other, Share):
            return NotImplemented
        self._check_peer(other)
        return Share(self.owner, self.value + other.value)

    def __sub__(self, other):
        if not isinstance(other, Share):
            return NotImplemented
        self._check_peer(other)
        return Share(self.owner, self.value - other.value)

    def __neg__(self):
        return Share(self.owner, -self.value)

    def __mul__(self, other):
        if isinstance(other, Share):
            raise UnsupportedOperation("secret x secret multiplication requires Beaver triples")
        if not isinstance(other, (int, FieldElement)) or isinstance(other, bool):
            return NotImplemented
        return Share(self.owner, self.value * other)

    __rmul__ = __mul__

    def add_public(self, c) -> "Share":
        """Add a public constant: only party 0 absorbs it."""
        if self.owner == 0:
            return Share(self.owner, self.value + c)
        return self

    def sub_public(self, c) -> "Share":
        if self.owner == 0:
            return Share(self.owner, self.value - c)
        return self

    def rsub_public(self, c) -> "Share":
        """c - self, i.e. negate then absorb c at party 0."""
        return (-self).add_public(c)


def split(secret: FieldElement, n: int, prg) -> List[Share]:
    """Split a field element into n additive shares tagged 0..n-1."""
    if n < 2:
        raise ValueError(f"need at least 2 parties to share a secret, got {n}")
    field = secret.field
    shares = []
    acc = field.zero
    for owner in range(n - 1):
        r = prg.next_field_element(field)
        acc = acc + r
        shares.append(Share(owner, r))
    shares.append(Share(n - 1, secret - acc))
    return shares


def combine(shares: Iterable[Share], n: int) -> FieldElement:
    """Sum exactly one share per party 0..n-1."""
    if n < 1:
        raise ValueError(f"party count must be positive, got {n}")
    shares = list(shares)
    owners = [s.owner for s in shares]
    missing = sorted(set(range(n)) - set(owners))
    dupes = sorted({o for o in owners if owners.count(o) > 1})
    extra = sorted(set(owners) - set(range(n)))
    if missing or dupes or extra:
        raise IncompleteShareSet(
            f"expected one share from each of {n} parties; "
            f"missing={missing} duplicated={dupes} unknown={extra}"
        )
    total = shares[0].value
    for s in shares[1:]:
        total = total + s.value
    return total


class AdditiveScheme:
    """split / combine bound to one field and party count."""

    def __init__(self, field: Field, n: int):
        if n < 2:
            raise ValueError(f"need at least 2 parties, got {n}")
        self.field = field
        self.n = n

    def split(self, secret, prg) -> List[Share]:
        return split(self.field.element(secret), self.n, prg)

    def combine(self, shares) -> FieldElement:
        return combine(shares, self.n)

