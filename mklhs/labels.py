"""
Labels and linear functions.

A **label**  ℓ = (id, τ)  names one data item of one signer: the
signer identity *id* and a tag *τ*, both ``id_length`` bytes.  Because
the identity is part of the label, a linear function keyed by labels is
automatically keyed by (signer, label) pairs.

A **linear function**  f = {ℓ_i ↦ c_i}  describes the computation
Σ c_i · m_i  the evaluator performs.  Iteration follows insertion
order, and every consumer (combine, verify, encoding) walks the terms
in that same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .curve import Scalar, SCALAR_BYTES
from .errors import InvalidInput, MalformedEncoding

Coefficient = Union[int, Scalar]


# ── label ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Label:
    """Label  ℓ = (id, τ);  wire form  id ‖ τ."""

    signer_id: bytes
    tag: bytes

    def to_bytes(self) -> bytes:
        return self.signer_id + self.tag

    @classmethod
    def from_bytes(cls, data: bytes, id_length: int) -> Label:
        if len(data) != 2 * id_length:
            raise MalformedEncoding(
                f"label needs {2 * id_length} bytes, got {len(data)}"
            )
        return cls(signer_id=bytes(data[:id_length]), tag=bytes(data[id_length:]))

    def __repr__(self) -> str:
        return f"Label({self.signer_id.hex()[:8]}…/{self.tag.hex()[:8]}…)"


# ── linear function ─────────────────────────────────────────────────────

class LinearFunction:
    """
    Immutable, ordered map  Label → coefficient ∈ Z_r.

    Build from a mapping, or with :meth:`from_terms` from a sequence of
    ``(label, coefficient)`` pairs (duplicates rejected).  Coefficients
    may be given as ``int`` and are reduced mod *r*.
    """

    __slots__ = ("_terms",)

    def __init__(
        self,
        terms: Optional[Mapping[Label, Coefficient]] = None,
    ) -> None:
        self._terms: Dict[Label, Scalar] = {}
        if terms:
            for label, c in terms.items():
                self._terms[label] = Scalar.coerce(c)

    @classmethod
    def from_terms(
        cls,
        terms: Iterable[Tuple[Label, Coefficient]],
    ) -> LinearFunction:
        f = cls()
        for label, c in terms:
            if label in f._terms:
                raise InvalidInput(f"duplicate label {label!r}")
            f._terms[label] = Scalar.coerce(c)
        return f

    @classmethod
    def compose(
        cls,
        parts: Iterable[Tuple[LinearFunction, Coefficient]],
    ) -> LinearFunction:
        """Σ a_j · f_j, the function a nested evaluation computes."""
        out = cls()
        for f, a in parts:
            out = out + f.scaled(a)
        return out

    # mapping protocol -------------------------------------------------------
    def __iter__(self) -> Iterator[Tuple[Label, Scalar]]:
        return iter(self._terms.items())

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, label: object) -> bool:
        return label in self._terms

    def __getitem__(self, label: Label) -> Scalar:
        return self._terms[label]

    @property
    def labels(self) -> List[Label]:
        return list(self._terms)

    def coefficient(self, label: Label) -> Scalar:
        """Coefficient of *label*; zero when the label is not a term."""
        return self._terms.get(label, Scalar.zero())

    # algebra ----------------------------------------------------------------
    def scaled(self, a: Coefficient) -> LinearFunction:
        a = Scalar.coerce(a)
        f = LinearFunction()
        f._terms = {label: a * c for label, c in self._terms.items()}
        return f

    def __add__(self, o: LinearFunction) -> LinearFunction:
        if not isinstance(o, LinearFunction):
            return NotImplemented
        f = LinearFunction()
        f._terms = dict(self._terms)
        for label, c in o._terms.items():
            f._terms[label] = f._terms.get(label, Scalar.zero()) + c
        return f

    def support(self) -> LinearFunction:
        """Same function without its zero-coefficient terms."""
        f = LinearFunction()
        f._terms = {
            label: c for label, c in self._terms.items() if not c.is_zero()
        }
        return f

    def by_signer(self) -> Dict[bytes, List[Tuple[Label, Scalar]]]:
        """Non-zero terms grouped by signer, in first-appearance order."""
        groups: Dict[bytes, List[Tuple[Label, Scalar]]] = {}
        for label, c in self._terms.items():
            if c.is_zero():
                continue
            groups.setdefault(label.signer_id, []).append((label, c))
        return groups

    def signer_ids(self) -> List[bytes]:
        return list(self.by_signer())

    def apply(self, values: Mapping[Label, Coefficient]) -> Scalar:
        """Evaluate  Σ c_ℓ · m_ℓ  on plaintext values."""
        total = Scalar.zero()
        for label, c in self._terms.items():
            if label not in values:
                raise InvalidInput(f"no value for label {label!r}")
            total = total + c * Scalar.coerce(values[label])
        return total

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        """``n(4) ‖ (id ‖ τ ‖ c)*n`` in iteration order."""
        out = bytearray(len(self._terms).to_bytes(4, "big"))
        for label, c in self._terms.items():
            out += label.to_bytes()
            out += c.to_bytes()
        return bytes(out)

    @classmethod
    def from_bytes(cls, data: bytes, id_length: int) -> LinearFunction:
        if len(data) < 4:
            raise MalformedEncoding("linear function truncated")
        n = int.from_bytes(data[:4], "big")
        width = 2 * id_length + SCALAR_BYTES
        if len(data) != 4 + n * width:
            raise MalformedEncoding(
                f"linear function of {n} terms needs {4 + n * width} bytes, "
                f"got {len(data)}"
            )
        terms = []
        for i in range(n):
            chunk = data[4 + i * width: 4 + (i + 1) * width]
            label = Label.from_bytes(chunk[: 2 * id_length], id_length)
            terms.append((label, Scalar.from_bytes(chunk[2 * id_length:])))
        try:
            return cls.from_terms(terms)
        except InvalidInput as exc:
            raise MalformedEncoding(str(exc)) from exc

    # comparison -------------------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if not isinstance(o, LinearFunction):
            return False
        return self.support()._terms == o.support()._terms

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"LinearFunction({len(self._terms)} terms)"
