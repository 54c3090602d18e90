"""Interactive proof that a Paillier ciphertext encrypts the discrete log of a point.

Statement ``(c, pk, Q, G)``; witness ``(x, r, sk)`` with ``Q = x * G``,
``c = Enc(pk, x, r)`` and ``Dec(sk, c) = x``.  Because of the range proof
the protocol is sound only for ``x < q / 3``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .arith import int_from_bytes, sample_below
from .curve import CURVE_ORDER, Point, Scalar
from .errors import IncorrectProof, ProtocolError
from .hashing import create_commitment
from .paillier import DecryptionKey, EncryptionKey, add, decrypt, encrypt, mul
from .zkproofs import RangeProofNi


class ZkPdlError(ProtocolError):
    """A step of the PDL protocol failed to verify."""


@dataclass(frozen=True)
class PDLStatement:
    """Public statement: ciphertext, Paillier key, the point ``Q`` and the base ``G``."""

    ciphertext: int
    ek: EncryptionKey
    q_point: Point
    g_point: Point


@dataclass(frozen=True)
class PDLWitness:
    """Prover's secrets: the scalar, the encryption randomness and the Paillier key."""

    x: Scalar
    r: int
    dk: DecryptionKey


@dataclass
class PDLVerifierState:
    """What the verifier keeps between its messages."""

    c_tag: int
    c_tag_tag: int
    a: int
    b: int
    blindness: int
    q_tag: Point
    c_hat: int = 0


@dataclass(frozen=True)
class PDLProverDecommit:
    """Opening of the prover's commitment to ``q_hat``."""

    q_hat: Point
    blindness: int


@dataclass(frozen=True)
class PDLProverState:
    """What the prover keeps between its messages."""

    decommit: PDLProverDecommit
    alpha: int


@dataclass(frozen=True)
class PDLVerifierFirstMessage:
    """The verifier's challenge ciphertext and its commitment to ``(a, b)``."""

    c_tag: int
    c_tag_tag: int


@dataclass(frozen=True)
class PDLProverFirstMessage:
    """The prover's commitment to ``q_hat`` and a range proof for the ciphertext."""

    c_hat: int
    range_proof: RangeProofNi


@dataclass(frozen=True)
class PDLVerifierSecondMessage:
    """Opening of the verifier's commitment to ``(a, b)``."""

    a: int
    b: int
    blindness: int


@dataclass(frozen=True)
class PDLProverSecondMessage:
    """Opening of the prover's commitment."""

    decommit: PDLProverDecommit


def _concat(a: int, b: int) -> int:
    # b|a (the paper writes a|b)
    return a + (b << a.bit_length())


def _point_commitment(point: Point, blindness: int) -> int:
    return create_commitment(int_from_bytes(point.to_bytes(True)), blindness)


class Verifier:
    """The verifier's side of the protocol."""

    @staticmethod
    def message1(statement: PDLStatement) -> tuple[PDLVerifierFirstMessage, PDLVerifierState]:
        """Send ``c' = a * c + Enc(b)`` and a commitment to ``(a, b)``."""
        a_fe = Scalar.random()
        a = int(a_fe)
        b = sample_below(CURVE_ORDER**2)
        b_fe = Scalar(b)
        b_enc = encrypt(statement.ek, b)
        ac = mul(statement.ek, statement.ciphertext, a)
        c_tag = add(statement.ek, ac, b_enc)
        blindness = sample_below(CURVE_ORDER)
        c_tag_tag = create_commitment(_concat(a, b), blindness)
        q_tag = statement.q_point * a_fe + statement.g_point * b_fe
        return (
            PDLVerifierFirstMessage(c_tag=c_tag, c_tag_tag=c_tag_tag),
            PDLVerifierState(
                c_tag=c_tag,
                c_tag_tag=c_tag_tag,
                a=a,
                b=b,
                blindness=blindness,
                q_tag=q_tag,
            ),
        )

    @staticmethod
    def message2(
        prover_first_message: PDLProverFirstMessage,
        statement: PDLStatement,
        state: PDLVerifierState,
    ) -> PDLVerifierSecondMessage:
        """Record ``c_hat`` and open ``(a, b)`` if the range proof holds.

        Raises :class:`ZkPdlError` if the range proof fails.
        """
        decommit = PDLVerifierSecondMessage(a=state.a, b=state.b, blindness=state.blindness)
        try:
            prover_first_message.range_proof.verify(statement.ek, statement.ciphertext)
            range_proof_ok = True
        except IncorrectProof:
            range_proof_ok = False
        state.c_hat = prover_first_message.c_hat
        if not range_proof_ok:
            raise ZkPdlError("zk pdl message2 failed")
        return decommit

    @staticmethod
    def finalize(
        prover_first_message: PDLProverFirstMessage,
        prover_second_message: PDLProverSecondMessage,
        state: PDLVerifierState,
    ) -> None:
        """Raise :class:`ZkPdlError` unless the prover's opening matches ``q_tag``."""
        decommit = prover_second_message.decommit
        c_hat_test = _point_commitment(decommit.q_hat, decommit.blindness)
        if prover_first_message.c_hat != c_hat_test or decommit.q_hat != state.q_tag:
            raise ZkPdlError("zk pdl finalize failed")


class Prover:
    """The prover's side of the protocol."""

    @staticmethod
    def message1(
        witness: PDLWitness,
        statement: PDLStatement,
        verifier_first_message: PDLVerifierFirstMessage,
    ) -> tuple[PDLProverFirstMessage, PDLProverState]:
        """Decrypt the challenge, commit to ``alpha * G`` and prove the range."""
        alpha = decrypt(witness.dk, verifier_first_message.c_tag)
        q_hat = statement.g_point * Scalar(alpha)
        blindness = sample_below(CURVE_ORDER)
        c_hat = _point_commitment(q_hat, blindness)
        range_proof = RangeProofNi.prove(
            statement.ek, CURVE_ORDER, statement.ciphertext, int(witness.x), witness.r
        )
        return (
            PDLProverFirstMessage(c_hat=c_hat, range_proof=range_proof),
            PDLProverState(decommit=PDLProverDecommit(q_hat=q_hat, blindness=blindness), alpha=alpha),
        )

    @staticmethod
    def message2(
        verifier_first_message: PDLVerifierFirstMessage,
        verifier_second_message: PDLVerifierSecondMessage,
        witness: PDLWitness,
        state: PDLProverState,
    ) -> PDLProverSecondMessage:
        """Check the verifier's opening and open ``q_hat``.

        Raises :class:`ZkPdlError` if the opening or ``alpha`` does not match.
        """
        a, b = verifier_second_message.a, verifier_second_message.b
        c_tag_tag_test = create_commitment(_concat(a, b), verifier_second_message.blindness)
        alpha_test = a * int(witness.x) + b
        if alpha_test != state.alpha or verifier_first_message.c_tag_tag != c_tag_tag_test:
            raise ZkPdlError("zk pdl message2 failed")
        return PDLProverSecondMessage(decommit=state.decommit)