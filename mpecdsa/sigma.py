"""Sigma protocols on secp256k1: knowledge of a discrete log and DDH tuples."""

from __future__ import annotations

from dataclasses import dataclass

from .curve import Point, Scalar
from .errors import ProofError
from .hashing import hash_points


def _challenge(*points: Point) -> Scalar:
    return Scalar(hash_points(*points))


@dataclass(frozen=True)
class DLogProof:
    """Non-interactive Schnorr proof of knowledge of ``x`` with ``pk = x * G``."""

    pk: Point
    pk_t_rand_commitment: Point
    challenge_response: Scalar

    @classmethod
    def prove(cls, secret: Scalar) -> DLogProof:
        """Prove knowledge of ``secret`` for the public key ``secret * G``."""
        secret = Scalar(secret)
        generator = Point.generator()
        nonce = Scalar.random()
        commitment = generator * nonce
        pk = generator * secret
        challenge = _challenge(commitment, generator, pk)
        return cls(pk, commitment, nonce - challenge * secret)

    def verify(self) -> None:
        """Raise :class:`ProofError` unless the proof is valid."""
        generator = Point.generator()
        challenge = _challenge(self.pk_t_rand_commitment, generator, self.pk)
        expected = generator * self.challenge_response + self.pk * challenge
        if expected != self.pk_t_rand_commitment:
            raise ProofError("discrete log proof failed to verify")


@dataclass(frozen=True)
class ECDDHStatement:
    """The claim that ``h1 = x * g1`` and ``h2 = x * g2`` for one ``x``."""

    g1: Point
    h1: Point
    g2: Point
    h2: Point

    def _points(self) -> tuple[Point, Point, Point, Point]:
        return self.g1, self.h1, self.g2, self.h2


@dataclass(frozen=True)
class ECDDHProof:
    """Non-interactive proof of equality of discrete logs."""

    a1: Point
    a2: Point
    z: Scalar

    @classmethod
    def prove(cls, secret: Scalar, statement: ECDDHStatement) -> ECDDHProof:
        """Prove that ``secret`` is the common discrete log of ``statement``."""
        secret = Scalar(secret)
        nonce = Scalar.random()
        a1 = statement.g1 * nonce
        a2 = statement.g2 * nonce
        challenge = _challenge(*statement._points(), a1, a2)
        return cls(a1, a2, nonce + challenge * secret)

    def verify(self, statement: ECDDHStatement) -> None:
        """Raise :class:`ProofError` unless the proof holds for ``statement``."""
        challenge = _challenge(*statement._points(), self.a1, self.a2)
        if statement.g1 * self.z != self.a1 + statement.h1 * challenge:
            raise ProofError("DDH proof failed on the first base")
        if statement.g2 * self.z != self.a2 + statement.h2 * challenge:
            raise ProofError("DDH proof failed on the second base")