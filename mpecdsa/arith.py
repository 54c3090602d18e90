"""Integer helpers: random sampling, modular inverses, primality and byte encoding."""

from __future__ import annotations

import math
import secrets

_SMALL_PRIMES: tuple[int, ...] = tuple(
    candidate
    for candidate in range(2, 2000)
    if all(candidate % d for d in range(2, math.isqrt(candidate) + 1))
)


def sample_below(upper: int) -> int:
    """Return a uniformly random integer in ``[0, upper)``."""
    if upper <= 0:
        raise ValueError("upper bound must be positive")
    return secrets.randbelow(upper)


def sample_range(low: int, high: int) -> int:
    """Return a uniformly random integer in ``[low, high)``."""
    if high <= low:
        raise ValueError("empty sampling range")
    return low + secrets.randbelow(high - low)


def sample_bits(bits: int) -> int:
    """Return a uniformly random integer of at most ``bits`` bits."""
    if bits < 0:
        raise ValueError("bit count must not be negative")
    return secrets.randbits(bits)


def sample_coprime(modulus: int) -> int:
    """Return a random element of the multiplicative group modulo ``modulus``."""
    if modulus <= 1:
        raise ValueError("modulus must be greater than one")
    while True:
        candidate = secrets.randbelow(modulus)
        if math.gcd(candidate, modulus) == 1:
            return candidate


def mod_inv(value: int, modulus: int) -> int | None:
    """Return the inverse of ``value`` modulo ``modulus``, or None if there is none."""
    if modulus < 1:
        raise ValueError("modulus must be positive")
    try:
        return pow(value, -1, modulus)
    except ValueError:
        return None


def is_probable_prime(n: int, rounds: int = 40) -> bool:
    """Miller-Rabin primality test with ``rounds`` random bases."""
    if n < 2:
        return False
    for prime in _SMALL_PRIMES:
        if n == prime:
            return True
        if n % prime == 0:
            return False
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for _ in range(rounds):
        x = pow(sample_range(2, n - 1), d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_prime(bits: int) -> int:
    """Return a random prime of exactly ``bits`` bits with its two top bits set."""
    if bits < 2:
        raise ValueError("a prime needs at least two bits")
    top = (1 << (bits - 1)) | (1 << (bits - 2))
    while True:
        candidate = secrets.randbits(bits) | top | 1
        if is_probable_prime(candidate):
            return candidate


def int_to_bytes(value: int) -> bytes:
    """Big-endian minimal encoding of the magnitude of ``value``; zero is empty."""
    magnitude = abs(value)
    return magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")


def int_from_bytes(data: bytes) -> int:
    """Decode a big-endian unsigned integer."""
    return int.from_bytes(bytes(data), "big")