"""Proof that a Paillier ciphertext encrypts the discrete log of a curve point.

Statement: ``(c, pk, Q, G)``; witness ``(x, r)`` with ``Q = x * G`` and
``c = Enc(pk, x, r)``.  Because of the range argument the proof has slack:
it shows only that ``x`` lies in ``[-q^3, q^3]``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .arith import int_from_bytes, mod_inv, sample_below, sample_range
from .curve import CURVE_ORDER, Point, Scalar
from .errors import ProtocolError
from .hashing import hash_ints
from .paillier import EncryptionKey


class ZkPdlWithSlackError(ProtocolError):
    """The PDL-with-slack proof failed to verify."""


@dataclass(frozen=True)
class PDLwSlackStatement:
    """Public statement: ciphertext, Paillier key, points and the ring-Pedersen setup."""

    ciphertext: int
    ek: EncryptionKey
    q_point: Point
    g_point: Point
    h1: int
    h2: int
    n_tilde: int


@dataclass(frozen=True)
class PDLwSlackWitness:
    """Secret witness: the scalar ``x`` and the encryption randomness ``r``."""

    x: Scalar
    r: int


def commitment_unknown_order(h1: int, h2: int, n_tilde: int, x: int, r: int) -> int:
    """Compute ``h1^x * h2^r mod n_tilde``, allowing a negative ``r``.

    Raises ValueError if ``r`` is negative and ``h2`` has no inverse.
    """
    h1_x = pow(h1, x, n_tilde)
    if r < 0:
        h2_inv = mod_inv(h2, n_tilde)
        if h2_inv is None:
            raise ValueError("h2 is not invertible modulo n_tilde")
        h2_r = pow(h2_inv, -r, n_tilde)
    else:
        h2_r = pow(h2, r, n_tilde)
    return h1_x * h2_r % n_tilde


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


def _challenge(statement: PDLwSlackStatement, z: int, u1: Point, u2: int, u3: int) -> int:
    return hash_ints(
        _point_int(statement.g_point),
        _point_int(statement.q_point),
        statement.ciphertext,
        z,
        _point_int(u1),
        u2,
        u3,
    )


@dataclass(frozen=True)
class PDLwSlackProof:
    """Non-interactive PDL-with-slack proof."""

    z: int
    u1: Point
    u2: int
    u3: int
    s1: int
    s2: int
    s3: int

    @classmethod
    def prove(cls, witness: PDLwSlackWitness, statement: PDLwSlackStatement) -> PDLwSlackProof:
        """Prove the statement with the given witness."""
        n, nn = statement.ek.n, statement.ek.nn
        q3 = CURVE_ORDER**3
        x = int(witness.x)

        alpha = sample_below(q3)
        beta = sample_range(1, n - 1)
        rho = sample_below(CURVE_ORDER * statement.n_tilde)
        gamma = sample_below(q3 * statement.n_tilde)

        z = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, x, rho)
        u1 = statement.g_point * Scalar(alpha)
        u2 = commitment_unknown_order(n + 1, beta, nn, alpha, n)
        u3 = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, alpha, gamma)

        e = _challenge(statement, z, u1, u2, u3)

        return cls(
            z=z,
            u1=u1,
            u2=u2,
            u3=u3,
            s1=e * x + alpha,
            s2=commitment_unknown_order(witness.r, beta, n, e, 1),
            s3=e * rho + gamma,
        )

    def verify(self, statement: PDLwSlackStatement) -> None:
        """Raise :class:`ZkPdlWithSlackError` unless the proof holds."""
        n, nn = statement.ek.n, statement.ek.nn
        e = _challenge(statement, self.z, self.u1, self.u2, self.u3)

        g_s1 = statement.g_point * Scalar(self.s1)
        y_minus_e = statement.q_point * Scalar(CURVE_ORDER - e)
        u1_test = g_s1 + y_minus_e

        try:
            u2_tmp = commitment_unknown_order(n + 1, self.s2, nn, self.s1, n)
            u2_test = commitment_unknown_order(u2_tmp, statement.ciphertext, nn, 1, -e)
            u3_tmp = commitment_unknown_order(
                statement.h1, statement.h2, statement.n_tilde, self.s1, self.s3
            )
            u3_test = commitment_unknown_order(u3_tmp, self.z, statement.n_tilde, 1, -e)
        except ValueError as exc:
            raise ZkPdlWithSlackError("zk pdl with slack verification failed") from exc

        if not (self.u1 == u1_test and self.u2 == u2_test and self.u3 == u3_test):
            raise ZkPdlWithSlackError("zk pdl with slack verification failed")