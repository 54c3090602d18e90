"""Zero-knowledge proofs over Paillier moduli and composite groups."""

from __future__ import annotations

import hashlib
import math
import secrets
from dataclasses import dataclass

from .arith import int_from_bytes, int_to_bytes, mod_inv, sample_below
from .errors import IncorrectProof
from .hashing import hash_ints
from .paillier import (
    DecryptionKey,
    EncryptionKey,
    add,
    encrypt_with_randomness,
    sample_randomness,
)

SALT_STRING = b"mpecdsa-correct-paillier-key"

CHALLENGE_BITS = 128
STATISTICAL_BITS = 128
SECRET_BITS = 256
CORRECT_KEY_ROUNDS = 11
SMALL_PRIME_BOUND = 6370
RANGE_ERROR_FACTOR = 40


def _primes_below(bound: int) -> tuple[int, ...]:
    sieve = bytearray([1]) * bound
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(bound - 1) + 1):
        if sieve[i]:
            sieve[i * i :: i] = bytes(len(range(i * i, bound, i)))
    return tuple(i for i, flag in enumerate(sieve) if flag)


_SMALL_PRIMES = _primes_below(SMALL_PRIME_BOUND)


@dataclass(frozen=True)
class DLogStatement:
    """Public parameters ``(N, g, ni)`` of a discrete log in ``Z_N^*``."""

    n: int
    g: int
    ni: int


@dataclass(frozen=True)
class CompositeDLogProof:
    """Proof of knowledge of ``x`` with ``ni = g^(-x) mod N``."""

    x: int
    y: int

    @staticmethod
    def _challenge(commitment: int, statement: DLogStatement) -> int:
        digest = hash_ints(commitment, statement.g, statement.n, statement.ni)
        return digest % (1 << CHALLENGE_BITS)

    @classmethod
    def prove(cls, statement: DLogStatement, secret: int) -> CompositeDLogProof:
        """Prove knowledge of ``secret`` for ``statement``."""
        nonce = sample_below(1 << (SECRET_BITS + CHALLENGE_BITS + STATISTICAL_BITS))
        commitment = pow(statement.g, nonce, statement.n)
        challenge = cls._challenge(commitment, statement)
        return cls(commitment, nonce + challenge * secret)

    def verify(self, statement: DLogStatement) -> None:
        """Raise :class:`IncorrectProof` unless the proof holds."""
        n = statement.n
        if n <= 1:
            raise IncorrectProof("modulus must be greater than one")
        for value in (statement.g, statement.ni, self.x):
            if not 0 < value < n or math.gcd(value, n) != 1:
                raise IncorrectProof("value is not a unit modulo N")
        if self.y < 0:
            raise IncorrectProof("negative response")
        challenge = self._challenge(self.x, statement)
        if pow(statement.g, self.y, n) * pow(statement.ni, challenge, n) % n != self.x:
            raise IncorrectProof("composite discrete log proof failed to verify")


def _derive_rho(n: int, salt: bytes, index: int) -> int:
    wanted = (n.bit_length() + 7) // 8 + 16
    prefix = int_to_bytes(n) + bytes(salt) + index.to_bytes(4, "big")
    stream = b""
    counter = 0
    while len(stream) < wanted:
        stream += hashlib.sha256(prefix + counter.to_bytes(4, "big")).digest()
        counter += 1
    return int_from_bytes(stream[:wanted]) % n


@dataclass(frozen=True)
class NiCorrectKeyProof:
    """Proof that a Paillier modulus ``N`` is coprime to ``phi(N)``."""

    sigma: tuple[int, ...]

    @classmethod
    def prove(cls, dk: DecryptionKey, salt: bytes | None = None) -> NiCorrectKeyProof:
        """Prove the key behind ``dk`` is well formed."""
        salt = SALT_STRING if salt is None else salt
        exponent = mod_inv(dk.n, dk.phi)
        if exponent is None:
            raise ValueError("modulus is not invertible modulo phi(N)")
        return cls(
            tuple(
                pow(_derive_rho(dk.n, salt, index), exponent, dk.n)
                for index in range(CORRECT_KEY_ROUNDS)
            )
        )

    def verify(self, ek: EncryptionKey, salt: bytes | None = None) -> None:
        """Raise :class:`IncorrectProof` unless the proof holds for ``ek``."""
        salt = SALT_STRING if salt is None else salt
        n = ek.n
        if len(self.sigma) != CORRECT_KEY_ROUNDS:
            raise IncorrectProof("wrong number of rounds")
        if any(n % prime == 0 for prime in _SMALL_PRIMES):
            raise IncorrectProof("modulus has a small prime factor")
        for index, sigma in enumerate(self.sigma):
            if not 0 < sigma < n:
                raise IncorrectProof("proof value out of range")
            if pow(sigma, n, n) != _derive_rho(n, salt, index):
                raise IncorrectProof("correct key proof failed to verify")


@dataclass(frozen=True)
class _PairOpening:
    w1: int
    r1: int
    w2: int
    r2: int


@dataclass(frozen=True)
class _MaskedSecret:
    index: int
    masked_x: int
    masked_r: int


@dataclass(frozen=True)
class RangeProofNi:
    """Proof that a Paillier ciphertext encrypts a value below ``range_bound``.

    The secret must lie in ``[0, range_bound / 3)``; the verifier is then
    convinced that the plaintext lies in ``[-range_bound/3, 2*range_bound/3)``.
    """

    range_bound: int
    encrypted_pairs: tuple[tuple[int, int], ...]
    responses: tuple[_PairOpening | _MaskedSecret, ...]

    @staticmethod
    def _challenge(
        ek: EncryptionKey,
        range_bound: int,
        ciphertext: int,
        pairs: tuple[tuple[int, int], ...],
    ) -> int:
        flat = [c for pair in pairs for c in pair]
        return hash_ints(ek.n, range_bound, ciphertext, *flat) % (1 << RANGE_ERROR_FACTOR)

    @classmethod
    def prove(
        cls,
        ek: EncryptionKey,
        range_bound: int,
        ciphertext: int,
        secret: int,
        randomness: int,
    ) -> RangeProofNi:
        """Prove that ``ciphertext = Enc(ek, secret, randomness)`` is in range."""
        third = range_bound // 3
        if third < 1:
            raise ValueError("range bound must be at least three")
        openings: list[list[tuple[int, int]]] = []
        for _ in range(RANGE_ERROR_FACTOR):
            w_low = sample_below(third)
            items = [
                (w_low + third, sample_randomness(ek)),
                (w_low, sample_randomness(ek)),
            ]
            if secrets.randbits(1):
                items.reverse()
            openings.append(items)
        pairs = tuple(
            tuple(encrypt_with_randomness(ek, w, r) for w, r in items) for items in openings
        )
        bits = cls._challenge(ek, range_bound, ciphertext, pairs)
        responses: list[_PairOpening | _MaskedSecret] = []
        for round_index, items in enumerate(openings):
            (w1, r1), (w2, r2) = items
            if not (bits >> round_index) & 1:
                responses.append(_PairOpening(w1, r1, w2, r2))
                continue
            high = 0 if w1 > w2 else 1
            index = next(
                (i for i, (w, _) in enumerate(items) if third <= secret + w < 2 * third),
                high,
            )
            w, r = items[index]
            responses.append(_MaskedSecret(index, secret + w, randomness * r % ek.n))
        return cls(range_bound, pairs, tuple(responses))

    def verify(self, ek: EncryptionKey, ciphertext: int) -> None:
        """Raise :class:`IncorrectProof` unless the proof holds for ``ciphertext``."""
        third = self.range_bound // 3
        if third < 1:
            raise IncorrectProof("range bound must be at least three")
        if len(self.encrypted_pairs) != RANGE_ERROR_FACTOR or len(self.responses) != RANGE_ERROR_FACTOR:
            raise IncorrectProof("wrong number of rounds")
        bits = self._challenge(ek, self.range_bound, ciphertext, self.encrypted_pairs)
        for round_index, (pair, response) in enumerate(zip(self.encrypted_pairs, self.responses)):
            if len(pair) != 2:
                raise IncorrectProof("malformed ciphertext pair")
            if not (bits >> round_index) & 1:
                self._check_opening(ek, third, pair, response)
            else:
                self._check_masked(ek, third, ciphertext, pair, response)

    @staticmethod
    def _check_opening(ek, third, pair, response) -> None:
        if not isinstance(response, _PairOpening):
            raise IncorrectProof("expected an opened pair")
        c1, c2 = pair
        if encrypt_with_randomness(ek, response.w1, response.r1) != c1:
            raise IncorrectProof("first ciphertext of a pair does not open")
        if encrypt_with_randomness(ek, response.w2, response.r2) != c2:
            raise IncorrectProof("second ciphertext of a pair does not open")
        low, high = sorted((response.w1, response.w2))
        if not (0 <= low < third and high == low + third):
            raise IncorrectProof("opened pair is out of range")

    @staticmethod
    def _check_masked(ek, third, ciphertext, pair, response) -> None:
        if not isinstance(response, _MaskedSecret) or response.index not in (0, 1):
            raise IncorrectProof("expected a masked secret")
        if not third <= response.masked_x < 2 * third:
            raise IncorrectProof("masked secret is out of range")
        expected = add(ek, ciphertext, pair[response.index])
        if encrypt_with_randomness(ek, response.masked_x, response.masked_r) != expected:
            raise IncorrectProof("masked secret does not match the ciphertext")