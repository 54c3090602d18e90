"""The Paillier additively homomorphic cryptosystem with generator n + 1."""

from __future__ import annotations

from dataclasses import dataclass, field

from .arith import generate_prime, mod_inv, sample_coprime


@dataclass(frozen=True)
class EncryptionKey:
    """Public Paillier key: the modulus ``n``."""

    n: int
    nn: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.n <= 1:
            raise ValueError("modulus must be greater than one")
        object.__setattr__(self, "nn", self.n * self.n)


@dataclass(frozen=True)
class DecryptionKey:
    """Private Paillier key: the primes ``p`` and ``q``."""

    p: int
    q: int
    n: int = field(init=False, repr=False, compare=False)
    nn: int = field(init=False, repr=False, compare=False)
    phi: int = field(init=False, repr=False, compare=False)
    _mu: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.p <= 1 or self.q <= 1 or self.p == self.q:
            raise ValueError("p and q must be distinct primes")
        n = self.p * self.q
        phi = (self.p - 1) * (self.q - 1)
        mu = mod_inv(phi, n)
        if mu is None:
            raise ValueError("phi(n) is not invertible modulo n")
        object.__setattr__(self, "n", n)
        object.__setattr__(self, "nn", n * n)
        object.__setattr__(self, "phi", phi)
        object.__setattr__(self, "_mu", mu)

    @property
    def ek(self) -> EncryptionKey:
        """The matching public key."""
        return EncryptionKey(self.n)


def generate_keypair(bits: int = 2048) -> tuple[EncryptionKey, DecryptionKey]:
    """Generate a key pair whose modulus has exactly ``bits`` bits."""
    if bits < 16:
        raise ValueError("modulus must have at least 16 bits")
    while True:
        p = generate_prime(bits // 2)
        q = generate_prime(bits - bits // 2)
        if p == q:
            continue
        try:
            dk = DecryptionKey(p, q)
        except ValueError:
            continue
        return dk.ek, dk


def sample_randomness(ek: EncryptionKey) -> int:
    """Random encryption randomness, a unit modulo ``n``."""
    return sample_coprime(ek.n)


def encrypt_with_randomness(ek: EncryptionKey, plaintext: int, randomness: int) -> int:
    """Encrypt ``plaintext`` using the given randomness."""
    return (1 + plaintext * ek.n) * pow(randomness, ek.n, ek.nn) % ek.nn


def encrypt(ek: EncryptionKey, plaintext: int) -> int:
    """Encrypt ``plaintext`` with fresh randomness."""
    return encrypt_with_randomness(ek, plaintext, sample_randomness(ek))


def decrypt(dk: DecryptionKey, ciphertext: int) -> int:
    """Decrypt to a plaintext in ``[0, n)``."""
    u = pow(ciphertext, dk.phi, dk.nn)
    return (u - 1) // dk.n * dk._mu % dk.n


def add(ek: EncryptionKey, c1: int, c2: int) -> int:
    """Ciphertext of the sum of the two plaintexts."""
    return c1 * c2 % ek.nn


def mul(ek: EncryptionKey, ciphertext: int, scalar: int) -> int:
    """Ciphertext of the plaintext multiplied by ``scalar``."""
    return pow(ciphertext, scalar, ek.nn)