"""Arithmetic on the secp256k1 curve: scalars modulo the group order and points."""

from __future__ import annotations

import functools
import hashlib
import secrets
from dataclasses import dataclass

FIELD_PRIME = 2**256 - 2**32 - 977
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
_GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
_B = 7

_Affine = "tuple[int, int] | None"


def _on_curve(x: int, y: int) -> bool:
    return 0 <= x < FIELD_PRIME and 0 <= y < FIELD_PRIME and (y * y - x**3 - _B) % FIELD_PRIME == 0


def _add(a, b):
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    p = FIELD_PRIME
    if x1 == x2:
        if (y1 + y2) % p == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, p) % p
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, p) % p
    x3 = (slope * slope - x1 - x2) % p
    y3 = (slope * (x1 - x3) - y1) % p
    return x3, y3


def _multiply(k: int, point):
    k %= CURVE_ORDER
    result = None
    for bit in bin(k)[2:]:
        result = _add(result, result)
        if bit == "1":
            result = _add(result, point)
    return result


def _lift_x(x: int, odd: bool) -> tuple[int, int]:
    rhs = (pow(x, 3, FIELD_PRIME) + _B) % FIELD_PRIME
    y = pow(rhs, (FIELD_PRIME + 1) // 4, FIELD_PRIME)
    if y * y % FIELD_PRIME != rhs:
        raise ValueError("x coordinate is not on the curve")
    if (y & 1) != odd:
        y = FIELD_PRIME - y
    return x, y


@dataclass(frozen=True)
class Scalar:
    """An integer modulo the secp256k1 group order."""

    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", int(self.value) % CURVE_ORDER)

    @classmethod
    def random(cls) -> Scalar:
        """A uniformly random non-zero scalar."""
        return cls(secrets.randbelow(CURVE_ORDER - 1) + 1)

    def invert(self) -> Scalar | None:
        """The multiplicative inverse, or None for zero."""
        if self.value == 0:
            return None
        return Scalar(pow(self.value, -1, CURVE_ORDER))

    def __int__(self) -> int:
        return self.value

    def __add__(self, other):
        if isinstance(other, (Scalar, int)):
            return Scalar(self.value + int(other))
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, (Scalar, int)):
            return Scalar(self.value - int(other))
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, int):
            return Scalar(other - self.value)
        return NotImplemented

    def __neg__(self) -> Scalar:
        return Scalar(-self.value)

    def __mul__(self, other):
        if isinstance(other, Point):
            return other * self
        if isinstance(other, (Scalar, int)):
            return Scalar(self.value * int(other))
        return NotImplemented

    __rmul__ = __mul__


@dataclass(frozen=True)
class Point:
    """A secp256k1 point in affine coordinates; both coordinates None is infinity."""

    x: int | None = None
    y: int | None = None

    def __post_init__(self) -> None:
        if (self.x is None) != (self.y is None):
            raise ValueError("a point needs both coordinates or neither")
        if self.x is not None and not _on_curve(self.x, self.y):
            raise ValueError("point is not on the curve")

    @property
    def _affine(self):
        return None if self.x is None else (self.x, self.y)

    @classmethod
    def _from_affine(cls, coords) -> Point:
        return cls() if coords is None else cls(*coords)

    @classmethod
    def generator(cls) -> Point:
        """The standard base point G."""
        return cls(_GX, _GY)

    @classmethod
    def base_point2(cls) -> Point:
        """A second base point whose discrete log relative to G is unknown."""
        return cls(*_second_base())

    @classmethod
    def infinity(cls) -> Point:
        """The point at infinity (group identity)."""
        return cls()

    def to_bytes(self, compressed: bool = True) -> bytes:
        """SEC1 encoding; the point at infinity is a single zero byte."""
        if self.x is None:
            return b"\x00"
        x_bytes = self.x.to_bytes(32, "big")
        if compressed:
            return bytes([2 + (self.y & 1)]) + x_bytes
        return b"\x04" + x_bytes + self.y.to_bytes(32, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """Decode a SEC1 encoding produced by :meth:`to_bytes`."""
        data = bytes(data)
        if data == b"\x00":
            return cls()
        if len(data) == 33 and data[0] in (2, 3):
            x = int.from_bytes(data[1:], "big")
            if x >= FIELD_PRIME:
                raise ValueError("x coordinate out of range")
            return cls(*_lift_x(x, bool(data[0] & 1)))
        if len(data) == 65 and data[0] == 4:
            return cls(int.from_bytes(data[1:33], "big"), int.from_bytes(data[33:], "big"))
        raise ValueError("malformed point encoding")

    def __add__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return Point._from_affine(_add(self._affine, other._affine))

    def __neg__(self) -> Point:
        if self.x is None:
            return self
        return Point(self.x, (-self.y) % FIELD_PRIME)

    def __sub__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self + (-other)

    def __mul__(self, other):
        if isinstance(other, (Scalar, int)):
            return Point._from_affine(_multiply(int(other), self._affine))
        return NotImplemented

    __rmul__ = __mul__


@functools.cache
def _second_base() -> tuple[int, int]:
    seed = hashlib.sha256(Point.generator().to_bytes(True)).digest()
    x = int.from_bytes(seed, "big") % FIELD_PRIME
    while True:
        try:
            return _lift_x(x, False)
        except ValueError:
            x = (x + 1) % FIELD_PRIME