"""Tests for authcrypt forward-secure generator."""

import os
import hmac
import hashlib
import pytest
from authcrypt.prf import PRF, Blake2bPRF
from authcrypt.prgen import (
    ForwardSecureGenerator,
    ratchet,
    SEED_SIZE,
    OUTPUT_LABEL,
    ADVANCE_LABEL,
)


class RandomOracle(PRF):
    """Lazily sampled random function with optional programmed entries."""

    output_size = 32

    def __init__(self):
        self.table = {}

    def program(self, key, message, value):
        self.table[(key, message)] = value

    def evaluate(self, key, message):
        if (key, message) not in self.table:
            self.table[(key, message)] = os.urandom(self.output_size)
        return self.table[(key, message)]


class TestRatchet:
    """Test the pure ratchet step."""

    def test_labels_distinct(self):
        """Output and advance labels differ."""
        assert OUTPUT_LABEL != ADVANCE_LABEL

    def test_blake2b_step(self):
        """Step is PRF(state, output), PRF(state, advance)."""
        state = os.urandom(32)
        block, next_state = ratchet(Blake2bPRF(), state)
        assert block == hashlib.blake2b(OUTPUT_LABEL, key=state, digest_size=32).digest()
        assert next_state == hashlib.blake2b(ADVANCE_LABEL, key=state, digest_size=32).digest()

    def test_output_independent_of_next_state(self):
        """Output block and next state differ."""
        block, next_state = ratchet(RandomOracle(), os.urandom(32))
        assert block != next_state


class TestForwardSecureGenerator:
    """Test ForwardSecureGenerator class."""

    def test_invalid_seed_length(self):
        """Seeds other than 32 bytes raise ValueError."""
        with pytest.raises(ValueError):
            ForwardSecureGenerator(os.urandom(SEED_SIZE - 1))
        with pytest.raises(ValueError):
            ForwardSecureGenerator(os.urandom(SEED_SIZE + 1))

    def test_deterministic(self):
        """Same seed and draw sizes give same outputs."""
        seed = os.urandom(32)
        g1 = ForwardSecureGenerator(seed)
        g2 = ForwardSecureGenerator(seed)
        for bits in (1, 7, 8, 13, 32, 256):
            assert g1.next_bits(bits) == g2.next_bits(bits)
        assert g1.next_bytes(16) == g2.next_bytes(16)

    def test_different_seeds(self):
        """Different seeds give different streams."""
        g1 = ForwardSecureGenerator(os.urandom(32))
        g2 = ForwardSecureGenerator(os.urandom(32))
        assert g1.next_bytes(32) != g2.next_bytes(32)

    def test_top_bits_msb_first(self):
        """next_bits returns the leading bits of the HMAC block."""
        seed = os.urandom(32)
        block = hmac.new(seed, OUTPUT_LABEL, hashlib.sha256).digest()
        gen = ForwardSecureGenerator(seed)
        assert gen.next_bits(12) == (block[0] << 4) | (block[1] >> 4)

    def test_full_block(self):
        """Drawing 256 bits returns the whole block."""
        seed = os.urandom(32)
        block = hmac.new(seed, OUTPUT_LABEL, hashlib.sha256).digest()
        assert ForwardSecureGenerator(seed).next_bits(256) == int.from_bytes(block, "big")

    def test_state_advances(self):
        """Second draw comes from the advanced state."""
        seed = os.urandom(32)
        state1 = hmac.new(seed, ADVANCE_LABEL, hashlib.sha256).digest()
        block2 = hmac.new(state1, OUTPUT_LABEL, hashlib.sha256).digest()
        gen = ForwardSecureGenerator(seed)
        gen.next_byte()
        assert gen.next_byte() == block2[0]

    def test_bits_range(self):
        """Out-of-range bit counts raise ValueError."""
        gen = ForwardSecureGenerator(os.urandom(32))
        with pytest.raises(ValueError):
            gen.next_bits(0)
        with pytest.raises(ValueError):
            gen.next_bits(257)

    def test_bits_bounded(self):
        """Values fit in the requested width."""
        gen = ForwardSecureGenerator(os.urandom(32))
        for bits in range(1, 17):
            assert 0 <= gen.next_bits(bits) < (1 << bits)

    def test_next_bytes_one_draw_per_byte(self):
        """next_bytes matches repeated next_byte calls."""
        seed = os.urandom(32)
        g1 = ForwardSecureGenerator(seed)
        g2 = ForwardSecureGenerator(seed)
        assert g1.next_bytes(10) == bytes(g2.next_byte() for _ in range(10))

    def test_fill(self):
        """fill() writes into a caller buffer."""
        seed = os.urandom(32)
        buffer = bytearray(20)
        ForwardSecureGenerator(seed).fill(buffer)
        assert bytes(buffer) == ForwardSecureGenerator(seed).next_bytes(20)

    def test_next_bytes_negative(self):
        """Negative length raises ValueError."""
        with pytest.raises(ValueError):
            ForwardSecureGenerator(os.urandom(32)).next_bytes(-1)

    def test_next_int_signed(self):
        """Unbounded next_int is a signed 32-bit value."""
        gen = ForwardSecureGenerator(os.urandom(32))
        for _ in range(50):
            assert -(1 << 31) <= gen.next_int() < (1 << 31)

    def test_next_int_bounded(self):
        """Bounded next_int stays in range."""
        gen = ForwardSecureGenerator(os.urandom(32))
        values = {gen.next_int(6) for _ in range(200)}
        assert values <= set(range(6))
        assert len(values) > 1

    def test_next_int_bound_one(self):
        """Bound of one always returns zero."""
        assert ForwardSecureGenerator(os.urandom(32)).next_int(1) == 0

    def test_next_int_invalid_bound(self):
        """Non-positive bound raises ValueError."""
        with pytest.raises(ValueError):
            ForwardSecureGenerator(os.urandom(32)).next_int(0)

    def test_next_boolean(self):
        """next_boolean returns bools."""
        gen = ForwardSecureGenerator(os.urandom(32))
        assert {gen.next_boolean() for _ in range(64)} == {True, False}

    def test_custom_prf(self):
        """Generator uses the supplied PRF."""
        seed = os.urandom(32)
        assert (
            ForwardSecureGenerator(seed, Blake2bPRF()).next_bytes(8)
            != ForwardSecureGenerator(seed).next_bytes(8)
        )


class TestForwardSecrecy:
    """Past output is not recoverable from current state."""

    def test_seed_not_retained(self):
        """After a draw the generator no longer holds its seed."""
        seed = os.urandom(32)
        gen = ForwardSecureGenerator(seed)
        gen.next_byte()
        assert seed not in vars(gen).values()

    def test_state_does_not_determine_past_output(self):
        """Two histories reach one state with different earlier outputs."""
        oracle = RandomOracle()
        seed_a, seed_b = os.urandom(32), os.urandom(32)
        shared_state = os.urandom(32)
        oracle.program(seed_a, ADVANCE_LABEL, shared_state)
        oracle.program(seed_b, ADVANCE_LABEL, shared_state)

        gen_a = ForwardSecureGenerator(seed_a, oracle)
        gen_b = ForwardSecureGenerator(seed_b, oracle)
        out_a = gen_a.next_bits(256)
        out_b = gen_b.next_bits(256)

        # Identical state at step 1, yet step 0 outputs differ
        assert gen_a._state == gen_b._state == shared_state
        assert out_a != out_b

        # Everything after the shared state agrees
        assert gen_a.next_bytes(16) == gen_b.next_bytes(16)

    def test_old_keys_unused_after_advance(self):
        """Later draws never evaluate the PRF under an earlier state."""
        oracle = RandomOracle()
        seed = os.urandom(32)
        gen = ForwardSecureGenerator(seed, oracle)
        gen.next_byte()
        calls_before = set(oracle.table)
        gen.next_bytes(5)
        new_keys = {key for key, _ in set(oracle.table) - calls_before}
        assert seed not in new_keys
