"""Tests for the AES-CTR pseudo-random generator."""
import pytest

from vmpc.mpc_core import Field, FieldParams, Prg, derive_seed
from vmpc.mpc_core.prg import SEED_LEN, normalize_seed, word_len


def test_default_seed_is_all_zeros():
    assert Prg(None).next(2) == Prg(bytes(32)).next(2)


def test_known_answer_for_zero_seed():
    # AES-128 of the all-zero block under the all-zero key
    assert Prg().next(16) == bytes.fromhex("66e94bd4ef8a2c3b884cfa59ca342b2e")


def test_short_seed_is_zero_padded():
    seed = bytes([0x24] * 30)
    assert Prg(seed).next(2) == Prg(seed + b"\x00\x00").next(2)
    assert normalize_seed(seed) == seed + b"\x00\x00"


def test_long_seed_is_cropped():
    assert Prg(b"\x01" * 40).next(16) == Prg(b"\x01" * 32).next(16)
    assert len(normalize_seed(b"\x01" * 40)) == SEED_LEN


def test_seed_accepts_byte_lists():
    assert Prg([0x4A, 0x4B]).next(8) == Prg(b"\x4a\x4b").next(8)


def test_text_seed_rejected():
    with pytest.raises(TypeError):
        Prg("0102")


def test_counter_advances_per_block():
    prg = Prg(b"counter")
    assert prg.counter == 0
    prg.next(1)
    assert prg.counter == 1
    prg.next(17)
    assert prg.counter == 3
    assert prg.next(0) == b""
    assert prg.counter == 3


def test_stream_is_contiguous():
    whole = Prg(b"k").next(48)
    prg = Prg(b"k")
    assert prg.next(16) + prg.next(16) + prg.next(16) == whole


def test_blocks_never_repeat():
    prg = Prg(b"k")
    blocks = [prg.next(16) for _ in range(200)]
    assert len(set(blocks)) == len(blocks)


def test_reset_replays_stream():
    prg = Prg(b"replay")
    first = prg.next(32)
    prg.reset()
    assert prg.counter == 0
    assert prg.next(32) == first


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        Prg().next(-1)


def test_field_elements_are_deterministic(field):
    a, b = Prg(b"same"), Prg(b"same")
    xs = [a.next_field_element(field) for _ in range(50)]
    ys = [b.next_field_element(field) for _ in range(50)]
    assert xs == ys
    assert all(0 <= x.value < field.p for x in xs)


def test_different_seeds_diverge(field):
    assert Prg(b"one").next_field_element(field) != Prg(b"two").next_field_element(field)


def test_field_element_consumes_one_block(field):
    prg = Prg(b"x")
    prg.next_field_element(field)
    field.random(prg)
    assert prg.counter == 2


def test_derive_seed():
    s0 = derive_seed(b"session", 0)
    assert len(s0) == SEED_LEN
    assert s0 == derive_seed(b"session", 0)
    assert s0 != derive_seed(b"session", 1)
    assert s0 != derive_seed(b"other", 0)


def test_word_length_tracks_field_width():
    assert word_len(61) == 8
    assert word_len(31) == 8
    assert word_len(89) == 20
    assert word_len(127) == 24


def test_wide_field_draws_cover_the_field():
    wide = Field(FieldParams(power=127))
    prg = Prg(b"wide")
    draws = [prg.next_field_element(wide) for _ in range(200)]
    assert prg.counter == 400
    assert all(0 <= x.value < wide.p for x in draws)
    assert max(x.value for x in draws).bit_length() > 100
    assert sum(x.value >= 1 << 64 for x in draws) > 190
