"""Tests for native secp256k1 ECDSA."""

from primitives.ecdsa import (
    GENERATOR,
    SCALAR_MODULUS,
    SigData,
    generate_keypair,
    generate_signature,
    is_on_curve,
    public_key,
    sign,
    verify_signature,
)


class TestKeys:
    """Tests for key generation."""

    def test_public_key_on_curve(self) -> None:
        """Generated public keys lie on the curve."""
        secret, pk = generate_keypair()
        assert 0 < secret < SCALAR_MODULUS
        assert is_on_curve(pk)

    def test_public_key_of_one_is_generator(self) -> None:
        """1 * G = G."""
        assert public_key(1) == GENERATOR


class TestSignatures:
    """Tests for signing and verification."""

    def test_random_nonce_signature_verifies(self) -> None:
        """generate_signature output verifies under the matching key."""
        secret, pk = generate_keypair()
        sig = generate_signature(secret, 123456789)
        assert verify_signature(sig, pk, 123456789)

    def test_deterministic_signature_verifies(self) -> None:
        """sign output verifies and is reproducible."""
        secret = 0xC0FFEE
        pk = public_key(secret)
        assert sign(secret, 42) == sign(secret, 42)
        assert verify_signature(sign(secret, 42), pk, 42)

    def test_wrong_message_rejected(self) -> None:
        """A signature does not verify for another message hash."""
        secret, pk = generate_keypair()
        sig = generate_signature(secret, 1000)
        assert not verify_signature(sig, pk, 1001)

    def test_wrong_key_rejected(self) -> None:
        """A signature does not verify under another key."""
        secret, _ = generate_keypair()
        _, other = generate_keypair()
        assert not verify_signature(generate_signature(secret, 5), other, 5)

    def test_out_of_range_components_rejected(self) -> None:
        """r and s must lie in (0, N)."""
        secret, pk = generate_keypair()
        sig = generate_signature(secret, 5)
        assert not verify_signature(SigData(0, sig.s), pk, 5)
        assert not verify_signature(SigData(sig.r, SCALAR_MODULUS), pk, 5)

    def test_from_bytes(self) -> None:
        """SigData decodes big-endian bytes."""
        sig = SigData.from_bytes(b"\x00" * 31 + b"\x07", b"\x01" + b"\x00" * 31)
        assert sig.r == 7
        assert sig.s == 1 << 248
