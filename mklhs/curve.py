"""
Bilinear group arithmetic on BLS12-381 via py_ecc.

``G1Point`` and ``G2Point`` wrap the projective points of
``py_ecc.optimized_bls12_381`` behind an additive interface
(``P + Q``, ``s * P``); ``GTElement`` wraps the target field
``F_{p^12}`` multiplicatively.  ``Scalar`` is arithmetic in Z_r where
*r* = ``ORDER`` is the prime order shared by all three groups.

Install
-------
    pip install "py_ecc>=7.0"

Caveat
------
Pure-Python big-integer arithmetic is **not** constant time.  Secret
scalars only ever enter ``Scalar.__mul__(Point)``; callers needing
side-channel resistance should swap this module for a native backend.

References
----------
- draft-irtf-cfrg-pairing-friendly-curves  BLS12-381 parameters
- ZCash serialisation format for compressed BLS12-381 points
"""

from __future__ import annotations

import secrets
from typing import Callable, Iterable, List, Optional, Tuple, Union

from py_ecc.bls.point_compression import (
    compress_G1,
    compress_G2,
    decompress_G1,
    decompress_G2,
)
from py_ecc.optimized_bls12_381 import (
    FQ12,
    G1 as _G1_GEN,
    G2 as _G2_GEN,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    eq,
    final_exponentiate,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    pairing as _pairing,
)

from .errors import MalformedEncoding, RandomnessFailure

# ── BLS12-381 constants ─────────────────────────────────────────────────
ORDER = curve_order
SCALAR_BYTES = 32
G1_BYTES = 48
G2_BYTES = 96

RandBytes = Callable[[int], bytes]

_MAX_SAMPLING_ATTEMPTS = 256


def random_bytes(n: int, randbytes: Optional[RandBytes] = None) -> bytes:
    """
    Draw *n* bytes from ``randbytes`` (default: the OS CSPRNG).

    Any failure of the source, including a short read, is surfaced as
    ``RandomnessFailure``.
    """
    source = randbytes if randbytes is not None else secrets.token_bytes
    try:
        data = source(n)
    except Exception as exc:
        raise RandomnessFailure("randomness source failed") from exc
    if not isinstance(data, (bytes, bytearray)) or len(data) != n:
        raise RandomnessFailure("randomness source returned a short read")
    return bytes(data)


# ── Scalar  (Z_r arithmetic) ────────────────────────────────────────────
class Scalar:
    """Element of the scalar field  Z_r  where *r* = ``ORDER``."""

    __slots__ = ("_v",)

    def __init__(self, value: int) -> None:
        self._v = value % ORDER

    # constructors -----------------------------------------------------------
    @classmethod
    def zero(cls) -> Scalar:
        return cls(0)

    @classmethod
    def one(cls) -> Scalar:
        return cls(1)

    @classmethod
    def coerce(cls, value: Union[int, Scalar]) -> Scalar:
        """Accept an ``int`` (reduced mod *r*) or an existing ``Scalar``."""
        if isinstance(value, Scalar):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise TypeError(f"expected int or Scalar, got {type(value).__name__}")

    @classmethod
    def random(cls, randbytes: Optional[RandBytes] = None) -> Scalar:
        """Uniform in [1, r-1] via rejection sampling."""
        for _ in range(_MAX_SAMPLING_ATTEMPTS):
            c = int.from_bytes(random_bytes(SCALAR_BYTES, randbytes), "big")
            if 0 < c < ORDER:
                return cls(c)
        raise RandomnessFailure("randomness source never produced a scalar")

    @classmethod
    def from_bytes(cls, data: bytes) -> Scalar:
        if len(data) != SCALAR_BYTES:
            raise MalformedEncoding(
                f"need {SCALAR_BYTES} bytes, got {len(data)}"
            )
        v = int.from_bytes(data, "big")
        if v >= ORDER:
            raise MalformedEncoding("scalar out of range")
        return cls(v)

    @classmethod
    def from_bytes_reduce(cls, data: bytes) -> Scalar:
        """Hash-output safe: reduce arbitrary length modulo *r*."""
        return cls(int.from_bytes(data, "big"))

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._v.to_bytes(SCALAR_BYTES, "big")

    @property
    def value(self) -> int:
        return self._v

    def is_zero(self) -> bool:
        return self._v == 0

    # arithmetic -------------------------------------------------------------
    def __add__(self, o):
        if isinstance(o, int):
            o = Scalar(o)
        if not isinstance(o, Scalar):
            return NotImplemented
        return Scalar(self._v + o._v)

    def __radd__(self, o):
        if isinstance(o, int):
            return Scalar(o + self._v)          # for sum()
        return NotImplemented

    def __sub__(self, o):
        if isinstance(o, int):
            o = Scalar(o)
        if not isinstance(o, Scalar):
            return NotImplemented
        return Scalar(self._v - o._v)

    def __rsub__(self, o):
        if isinstance(o, int):
            return Scalar(o - self._v)
        return NotImplemented

    def __mul__(self, o):
        if isinstance(o, Scalar):
            return Scalar(self._v * o._v)
        if isinstance(o, int):
            return Scalar(self._v * o)
        if isinstance(o, _CurvePoint):
            return o._smul(self)
        return NotImplemented

    def __rmul__(self, o):
        if isinstance(o, int):
            return Scalar(o * self._v)
        return NotImplemented

    def __neg__(self) -> Scalar:
        return Scalar(-self._v)

    def __truediv__(self, o: Scalar) -> Scalar:
        if not isinstance(o, Scalar):
            return NotImplemented
        return self * o.inv()

    def __pow__(self, e: int) -> Scalar:
        if e < 0:
            return self.inv() ** (-e)
        return Scalar(pow(self._v, e, ORDER))

    def inv(self) -> Scalar:
        """Multiplicative inverse via Fermat's little theorem."""
        if self._v == 0:
            raise ZeroDivisionError("cannot invert zero scalar")
        return Scalar(pow(self._v, ORDER - 2, ORDER))

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, Scalar):
            return self._v == o._v
        if isinstance(o, int):
            return self._v == o % ORDER
        return False

    def __hash__(self) -> int:
        return hash(self._v)

    def __bool__(self) -> bool:
        return self._v != 0

    def __repr__(self) -> str:
        h = hex(self._v)
        return f"Scalar(0x{h[2:10]}…)" if len(h) > 14 else f"Scalar({h})"


# ── points (G1 / G2 via py_ecc) ─────────────────────────────────────────
class _CurvePoint:
    """
    Shared behaviour of ``G1Point`` and ``G2Point``.

    Points are kept in py_ecc's projective form; the identity is any
    point with *z* = 0, which ``is_inf`` and ``eq`` already understand.
    """

    __slots__ = ("_p",)

    _GENERATOR: tuple
    _IDENTITY: tuple
    _CURVE_B: object
    ENCODED_BYTES: int
    NAME: str

    def __init__(self, point: tuple) -> None:
        self._p = point

    # constructors -----------------------------------------------------------
    @classmethod
    def generator(cls):
        return cls(cls._GENERATOR)

    @classmethod
    def identity(cls):
        return cls(cls._IDENTITY)

    @classmethod
    def from_bytes(cls, data: bytes):
        """Strict decoding: curve membership and prime-order subgroup."""
        if len(data) != cls.ENCODED_BYTES:
            raise MalformedEncoding(
                f"{cls.NAME} point needs {cls.ENCODED_BYTES} bytes, "
                f"got {len(data)}"
            )
        try:
            point = cls(cls._decompress(data))
        except ValueError as exc:
            raise MalformedEncoding(f"invalid {cls.NAME} encoding") from exc
        if not point.in_subgroup():
            raise MalformedEncoding(f"point not in the {cls.NAME} subgroup")
        return point

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        raise NotImplementedError

    @staticmethod
    def _decompress(data: bytes) -> tuple:
        raise NotImplementedError

    def is_identity(self) -> bool:
        return is_inf(self._p)

    def in_subgroup(self) -> bool:
        """On the curve and killed by the group order."""
        return is_on_curve(self._p, self._CURVE_B) and is_inf(
            multiply(self._p, ORDER)
        )

    # group operations -------------------------------------------------------
    def _smul(self, s: Scalar):
        if s.is_zero():
            return self.identity()
        return self.__class__(multiply(self._p, s.value))

    def __neg__(self):
        return self.__class__(neg(self._p))

    def __add__(self, o):
        if not isinstance(o, self.__class__):
            return NotImplemented
        return self.__class__(add(self._p, o._p))

    def __sub__(self, o):
        if not isinstance(o, self.__class__):
            return NotImplemented
        return self + (-o)

    def __mul__(self, s):
        if isinstance(s, Scalar):
            return self._smul(s)
        if isinstance(s, int):
            return self._smul(Scalar(s))
        return NotImplemented

    __rmul__ = __mul__

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, self.__class__):
            return False
        return eq(self._p, o._p)

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        if self.is_identity():
            return f"{self.NAME}(∞)"
        return f"{self.NAME}(0x{self.to_bytes().hex()[:16]}…)"

    @classmethod
    def sum_points(cls, points: Iterable):
        """Σ points; the identity for an empty input."""
        acc = cls._IDENTITY
        for p in points:
            acc = add(acc, p._p)
        return cls(acc)


class G1Point(_CurvePoint):
    """Element of G1 ⊂ E(F_p), 48-byte compressed encoding."""

    __slots__ = ()

    _GENERATOR = _G1_GEN
    _IDENTITY = Z1
    _CURVE_B = b
    ENCODED_BYTES = G1_BYTES
    NAME = "G1"

    def to_bytes(self) -> bytes:
        return compress_G1(self._p).to_bytes(G1_BYTES, "big")

    @staticmethod
    def _decompress(data: bytes) -> tuple:
        return decompress_G1(int.from_bytes(data, "big"))


class G2Point(_CurvePoint):
    """Element of G2 ⊂ E'(F_{p^2}), 96-byte compressed encoding."""

    __slots__ = ()

    _GENERATOR = _G2_GEN
    _IDENTITY = Z2
    _CURVE_B = b2
    ENCODED_BYTES = G2_BYTES
    NAME = "G2"

    def to_bytes(self) -> bytes:
        z1, z2 = compress_G2(self._p)
        half = G2_BYTES // 2
        return z1.to_bytes(half, "big") + z2.to_bytes(half, "big")

    @staticmethod
    def _decompress(data: bytes) -> tuple:
        half = G2_BYTES // 2
        z1 = int.from_bytes(data[:half], "big")
        z2 = int.from_bytes(data[half:], "big")
        return decompress_G2((z1, z2))


# ── target group ────────────────────────────────────────────────────────
class GTElement:
    """Element of GT ⊂ F_{p^12}^*, written multiplicatively."""

    __slots__ = ("_f",)

    def __init__(self, value: FQ12) -> None:
        self._f = value

    @classmethod
    def one(cls) -> GTElement:
        return cls(FQ12.one())

    def __mul__(self, o: GTElement) -> GTElement:
        if not isinstance(o, GTElement):
            return NotImplemented
        return GTElement(self._f * o._f)

    def __truediv__(self, o: GTElement) -> GTElement:
        if not isinstance(o, GTElement):
            return NotImplemented
        return GTElement(self._f / o._f)

    def __pow__(self, e: Union[int, Scalar]) -> GTElement:
        if isinstance(e, Scalar):
            e = e.value
        return GTElement(self._f ** (e % ORDER))

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, GTElement):
            return False
        return self._f == o._f

    def __repr__(self) -> str:
        return "GT(1)" if self._f == FQ12.one() else "GT(…)"


# ── pairing ─────────────────────────────────────────────────────────────
def pairing(p: G1Point, q: G2Point) -> GTElement:
    """Optimal ate pairing  e(P, Q)  with  e(aP, bQ) = e(P, Q)^{ab}."""
    return GTElement(_pairing(q._p, p._p))


def pairing_product_is_one(pairs: Iterable[Tuple[G1Point, G2Point]]) -> bool:
    """
    Check  Π e(P_i, Q_i) == 1  with a single final exponentiation.

    Miller loops are accumulated unreduced, the same shortcut py_ecc's
    own BLS verifier takes.
    """
    acc = FQ12.one()
    for p, q in pairs:
        acc = acc * _pairing(q._p, p._p, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()


def inner_product(
    scalars: List[Scalar],
    points: List[_CurvePoint],
):
    """Σ s_i · P_i  for equally long, non-empty lists."""
    if len(scalars) != len(points):
        raise ValueError("scalars and points must have equal length")
    if not points:
        raise ValueError("inner product of empty lists")
    return points[0].sum_points(s * p for s, p in zip(scalars, points))
