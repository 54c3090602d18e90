"""Multiplicative-to-additive share conversion over Paillier encryption.

Alice holds ``a`` and Bob holds ``b``; after the exchange Alice learns
``alpha`` and Bob learns ``beta`` with ``alpha + beta = a * b`` modulo the
secp256k1 group order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .arith import sample_below
from .curve import Point, Scalar
from .errors import InvalidKey, ProofError
from .paillier import DecryptionKey, EncryptionKey, add, decrypt, encrypt_with_randomness, mul
from .range_proofs import AliceProof
from .sigma import DLogProof
from .zkproofs import DLogStatement


@dataclass(frozen=True)
class MessageA:
    """Alice's Paillier ciphertext of ``a`` with range proofs for each verifier."""

    c: int
    range_proofs: tuple[AliceProof, ...] = ()

    @classmethod
    def a(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageA, int]:
        """Encrypt ``a`` with fresh randomness; return the message and the randomness.

        ``dlog_statements`` may be empty when no range proofs are wanted.
        """
        randomness = sample_below(alice_ek.n)
        message = cls.a_with_predefined_randomness(a, alice_ek, randomness, dlog_statements)
        return message, randomness

    @classmethod
    def a_with_predefined_randomness(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        randomness: int,
        dlog_statements: Sequence[DLogStatement],
    ) -> MessageA:
        """Encrypt ``a`` with the given randomness and prove it is small."""
        a_bn = int(a)
        c_a = encrypt_with_randomness(alice_ek, a_bn, randomness)
        proofs = tuple(
            AliceProof.generate(a_bn, c_a, alice_ek, statement, randomness)
            for statement in dlog_statements
        )
        return cls(c=c_a, range_proofs=proofs)


@dataclass(frozen=True)
class MessageB:
    """Bob's answer: ``Enc(a * b + beta_tag)`` with proofs of knowledge of ``b`` and ``beta_tag``."""

    c: int
    b_proof: DLogProof
    beta_tag_proof: DLogProof

    @classmethod
    def b(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageB, Scalar, int, int]:
        """Answer ``m_a``; return the message, ``beta``, the randomness and ``beta_tag``.

        Raises :class:`InvalidKey` if Alice's range proofs do not verify.
        """
        beta_tag = sample_below(alice_ek.n)
        randomness = sample_below(alice_ek.n)
        message, beta = cls.b_with_predefined_randomness(
            b, alice_ek, m_a, randomness, beta_tag, dlog_statements
        )
        return message, beta, randomness, beta_tag

    @classmethod
    def b_with_predefined_randomness(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        randomness: int,
        beta_tag: int,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageB, Scalar]:
        """Answer ``m_a`` using the given randomness and ``beta_tag``."""
        if len(m_a.range_proofs) != len(dlog_statements):
            raise InvalidKey("number of range proofs does not match the statements")
        if not all(
            proof.verify(m_a.c, alice_ek, statement)
            for proof, statement in zip(m_a.range_proofs, dlog_statements)
        ):
            raise InvalidKey("range proof of message A failed to verify")

        beta_tag_fe = Scalar(beta_tag)
        c_beta_tag = encrypt_with_randomness(alice_ek, beta_tag, randomness)
        b_c_a = mul(alice_ek, m_a.c, int(b))
        c_b = add(alice_ek, b_c_a, c_beta_tag)
        beta = Scalar(0) - beta_tag_fe
        message = cls(
            c=c_b,
            b_proof=DLogProof.prove(b),
            beta_tag_proof=DLogProof.prove(beta_tag_fe),
        )
        return message, beta

    def verify_proofs_get_alpha(self, dk: DecryptionKey, a: Scalar) -> tuple[Scalar, int]:
        """Decrypt Alice's share and check it; return ``alpha`` and the raw plaintext.

        Raises :class:`InvalidKey` if the proofs or the consistency check fail.
        """
        alice_share = decrypt(dk, self.c)
        alpha = Scalar(alice_share)
        g_alpha = Point.generator() * alpha
        ba_btag = self.b_proof.pk * a + self.beta_tag_proof.pk
        try:
            self.b_proof.verify()
            self.beta_tag_proof.verify()
        except ProofError as exc:
            raise InvalidKey("proof of knowledge in message B failed") from exc
        if ba_btag != g_alpha:
            raise InvalidKey("message B is not consistent with its proofs")
        return alpha, alice_share

    @staticmethod
    def verify_b_against_public(public_gb: Point, mta_gb: Point) -> bool:
        """Whether the point proven in MtA equals the known public point."""
        return public_gb == mta_gb