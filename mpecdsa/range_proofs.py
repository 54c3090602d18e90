"""Non-interactive zero-knowledge range proofs for the MtA protocol.

Alice proves that her Paillier ciphertext encrypts a small value; Bob proves
that his MtA response was formed from a small multiplier and additive share.
The challenge is derived with Fiat-Shamir over SHA-256.  Bob's ``gamma`` is
sampled from ``[0, q^2 * N)`` and ``tau`` from ``[0, q^3 * N_tilde)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .arith import mod_inv, sample_below, sample_coprime
from .curve import CURVE_ORDER, Point, Scalar
from .hashing import hash_ints
from .paillier import EncryptionKey
from .zkproofs import DLogStatement

_Q = CURVE_ORDER


def sample_from_paillier_key(ek: EncryptionKey) -> int:
    """A random unit modulo the Paillier modulus of ``ek``."""
    return sample_coprime(ek.n)


def _commit(h1: int, h2: int, n_tilde: int, x: int, r: int) -> int:
    return pow(h1, x, n_tilde) * pow(h2, r, n_tilde) % n_tilde


def _inverse_power(base: int, exponent: int, modulus: int) -> int | None:
    return mod_inv(pow(base, exponent, modulus), modulus)


def _coordinates(point: Point) -> tuple[int, int]:
    if point.x is None:
        raise ValueError("the point at infinity has no coordinates")
    return point.x, point.y


@dataclass(frozen=True)
class AliceProof:
    """Alice's proof that her ciphertext encrypts a value below ``q^3``."""

    z: int
    e: int
    s: int
    s1: int
    s2: int

    @classmethod
    def generate(
        cls,
        a: int,
        cipher: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
    ) -> AliceProof:
        """Prove that ``cipher = Enc(alice_ek, a, r)`` with small ``a``."""
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n
        n, nn = alice_ek.n, alice_ek.nn

        alpha = sample_below(_Q**3)
        beta = sample_from_paillier_key(alice_ek)
        gamma = sample_below(_Q**3 * n_tilde)
        ro = sample_below(_Q * n_tilde)

        z = _commit(h1, h2, n_tilde, a, ro)
        u = (alpha * n + 1) * pow(beta, n, nn) % nn
        w = _commit(h1, h2, n_tilde, alpha, gamma)

        e = hash_ints(n, n + 1, cipher, z, u, w)
        return cls(
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * a + alpha,
            s2=e * ro + gamma,
        )

    def verify(
        self,
        cipher: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
    ) -> bool:
        """Check the proof against the ciphertext and public parameters."""
        n, nn = alice_ek.n, alice_ek.nn
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n

        if self.s1 > _Q**3:
            return False

        z_e_inv = _inverse_power(self.z, self.e, n_tilde)
        if z_e_inv is None:
            return False
        w = pow(h1, self.s1, n_tilde) * pow(h2, self.s2, n_tilde) * z_e_inv % n_tilde

        cipher_e_inv = _inverse_power(cipher, self.e, nn)
        if cipher_e_inv is None:
            return False
        gs1 = (self.s1 * n + 1) % nn
        u = gs1 * pow(self.s, n, nn) * cipher_e_inv % nn

        return hash_ints(n, n + 1, cipher, self.z, u, w) == self.e


@dataclass(frozen=True)
class BobCheck:
    """Extra points bound into Bob's challenge when MtA runs with a check."""

    u: Point
    x_point: Point

    def _hash_values(self) -> tuple[int, int, int, int]:
        return (*_coordinates(self.x_point), *_coordinates(self.u))


@dataclass(frozen=True)
class BobProof:
    """Bob's proof that his MtA response is well formed."""

    t: int
    z: int
    e: int
    s: int
    s1: int
    s2: int
    t1: int
    t2: int

    @classmethod
    def generate(
        cls,
        a_encrypted: int,
        mta_encrypted: int,
        b: Scalar,
        beta_prim: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
        check: bool,
    ) -> tuple[BobProof, Point | None]:
        """Build the proof; with ``check`` also return the point ``alpha * G``."""
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n
        n, nn = alice_ek.n, alice_ek.nn
        b_bn = int(b)

        alpha = sample_below(_Q**3)
        beta = sample_from_paillier_key(alice_ek)
        gamma = sample_below(_Q**2 * n)
        ro = sample_below(_Q * n_tilde)
        ro_prim = sample_below(_Q**3 * n_tilde)
        sigma = sample_below(_Q * n_tilde)
        tau = sample_below(_Q**3 * n_tilde)

        z = _commit(h1, h2, n_tilde, b_bn, ro)
        z_prim = _commit(h1, h2, n_tilde, alpha, ro_prim)
        t = _commit(h1, h2, n_tilde, beta_prim, sigma)
        w = _commit(h1, h2, n_tilde, gamma, tau)
        v = (
            pow(a_encrypted, alpha, nn)
            * (gamma * n + 1)
            * pow(beta, n, nn)
            % nn
        )

        values = [n, n + 1, a_encrypted, mta_encrypted, z, z_prim, t, v, w]
        check_u = None
        if check:
            generator = Point.generator()
            check_u = generator * Scalar(alpha)
            values.extend(BobCheck(check_u, generator * b)._hash_values())
        e = hash_ints(*values)

        proof = cls(
            t=t,
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * b_bn + alpha,
            s2=e * ro + ro_prim,
            t1=e * beta_prim + gamma,
            t2=e * sigma + tau,
        )
        return proof, check_u

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        check: BobCheck | None = None,
    ) -> bool:
        """Check the proof; ``check`` must match the one used to generate it."""
        n, nn = alice_ek.n, alice_ek.nn
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n

        if self.s1 > _Q**3:
            return False

        z_e_inv = _inverse_power(self.z, self.e, n_tilde)
        if z_e_inv is None:
            return False
        z_prim = pow(h1, self.s1, n_tilde) * pow(h2, self.s2, n_tilde) * z_e_inv % n_tilde

        mta_e_inv = _inverse_power(mta_avc_out, self.e, nn)
        if mta_e_inv is None:
            return False
        v = (
            pow(a_enc, self.s1, nn)
            * pow(self.s, n, nn)
            * (self.t1 * n + 1)
            * mta_e_inv
            % nn
        )

        t_e_inv = _inverse_power(self.t, self.e, n_tilde)
        if t_e_inv is None:
            return False
        w = pow(h1, self.t1, n_tilde) * pow(h2, self.t2, n_tilde) * t_e_inv % n_tilde

        values = [n, n + 1, a_enc, mta_avc_out, self.z, z_prim, self.t, v, w]
        if check is not None:
            values.extend(check._hash_values())
        return hash_ints(*values) == self.e


@dataclass(frozen=True)
class BobProofExt:
    """Bob's extended proof, adding knowledge of ``b`` behind ``X = b * G``."""

    proof: BobProof
    u: Point

    @classmethod
    def generate(
        cls,
        a_encrypted: int,
        mta_encrypted: int,
        b: Scalar,
        beta_prim: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
    ) -> BobProofExt:
        """Build a checked proof bound to the point ``b * G``."""
        proof, u = BobProof.generate(
            a_encrypted,
            mta_encrypted,
            b,
            beta_prim,
            alice_ek,
            dlog_statement,
            r,
            True,
        )
        return cls(proof=proof, u=u)

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        x_point: Point,
    ) -> bool:
        """Check the basic proof and that ``s1 * G == e * X + u``."""
        if not self.proof.verify(
            a_enc,
            mta_avc_out,
            alice_ek,
            dlog_statement,
            BobCheck(u=self.u, x_point=x_point),
        ):
            return False
        generator = Point.generator()
        left = generator * Scalar(self.proof.s1)
        right = x_point * Scalar(self.proof.e) + self.u
        return left == right