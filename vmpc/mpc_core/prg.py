# vmpc/mpc_core/prg.py
"""Deterministic PRG on top of AES-128-CTR.

Block i of the stream is AES(key, iv_prefix || i) where iv_prefix is the
first 8 bytes of the IV half of the seed and i is a big-endian 64-bit block
counter. The counter only moves forward, so a (key, counter) pair is never
encrypted twice unless reset() is called explicitly.

Field elements are drawn by reducing a little-endian word modulo p. For
fields up to 2^61 - 1 the word is 64 bits taken from one block. For p = 2^61 - 1
this is not perfectly uniform: 2^64 mod p = 8, so the residues 0..7 are
produced by nine words each instead of eight, a statistical distance of about
2^-61. Wider fields draw power + 64 bits (rounded up to whole bytes) across as
many blocks as that takes, which keeps the distance below 2^-64. There is no
rejection sampling.
"""
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

# all lengths in bytes
KEY_LEN = 16
IV_LEN = 16
SEED_LEN = KEY_LEN + IV_LEN
BLOCK_LEN = 16
WORD_LEN = 8

_MAX_COUNTER = 1 << 64


def word_len(power: int) -> int:
    """Bytes drawn per field element for p = 2^power - 1."""
    if power <= 61:
        return WORD_LEN
    return -(-(power + 64) // 8)


def normalize_seed(seed) -> bytes:
    """Pad with zeros or crop so the seed is exactly SEED_LEN bytes."""
    if seed is None:
        return bytes(SEED_LEN)
    if isinstance(seed, str):
        raise TypeError("seed must be bytes; decode hex seeds with bytes.fromhex")
    raw = bytes(seed)
    if len(raw) >= SEED_LEN:
        return raw[:SEED_LEN]
    return raw + bytes(SEED_LEN - len(raw))


def derive_seed(session_seed, party_id: int, length: int = SEED_LEN) -> bytes:
    """Per-party seed: HKDF-SHA256(session seed, info="vmpc-party-<id>")."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=None,
        info=f"vmpc-party-{party_id}".encode(),
    )
    return hkdf.derive(normalize_seed(session_seed))


class Prg:
    """Seeded pseudo-random byte / field element generator."""

    def __init__(self, seed: Optional[bytes] = None):
        self._seed = normalize_seed(seed)
        self._key = self._seed[:KEY_LEN]
        self._iv_prefix = self._seed[KEY_LEN:KEY_LEN + 8]
        self._counter = 0

    @property
    def counter(self) -> int:
        """Number of blocks consumed so far."""
        return self._counter

    def reset(self):
        """Rewind to block 0. Replays the stream, so only use it in tests."""
        self._counter = 0

    def next(self, n_bytes: int) -> bytes:
        """Next n_bytes of keystream; consumes ceil(n_bytes / 16) blocks."""
        if n_bytes < 0:
            raise ValueError("n_bytes must be non-negative")
        if n_bytes == 0:
            return b""
        n_blocks = -(-n_bytes // BLOCK_LEN)
        if self._counter + n_blocks > _MAX_COUNTER:
            raise OverflowError("PRG counter exhausted for this seed")

        nonce = self._iv_prefix + self._counter.to_bytes(8, "big")
        enc = Cipher(algorithms.AES(self._key), modes.CTR(nonce)).encryptor()
        out = enc.update(bytes(n_blocks * BLOCK_LEN)) + enc.finalize()
        self._counter += n_blocks
        return out[:n_bytes]

    def next_field_element(self, field):
        """Word of word_len(field.power) bytes -> Field.reduce."""
        word = int.from_bytes(self.next(word_len(field.power)), "little")
        return field.element(field.reduce(word))
