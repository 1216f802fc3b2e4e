# SPDX-License-Identifier: MIT

"""codec.py – mixed-radix encoder / decoder for categorical interactions

Motivation
----------
Several categorical columns that interact (say ``colour`` x ``size``) are
easier to aggregate or look up when their joint value is one **dense
integer**.  This module turns a tuple of per-column values into exactly that
code and back again, losslessly.

The interaction value is encoded as::

    code = v1 + v2 * card1 + ... + vN * card1 * ... * cardN-1

where ``v1..vN`` are the per-column slot values and ``card1..cardN`` are the
*extended* cardinalities of the interacting domains.  Every domain is
extended with one slot for values never seen at build time and, unless
``encode_unseen_as_na`` is set, one more slot for NA.

Key points

* Domains are supplied by the caller; the codec never discovers them.
* Any integer is a valid per-column input: ``>= card`` means unseen,
  ``< 0`` means NA.
* Tables are computed once at construction and never mutated afterwards,
  so an instance can be shared freely between threads.
"""
from __future__ import annotations

import logging
import operator
from collections.abc import Sequence as _SequenceABC
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

__all__ = [
    "InteractionCodec",
    "InteractionCodecError",
    "InteractionDomain",
    "UNSEEN",
    "NA",
]

logger = logging.getLogger(__name__)

UNSEEN = "_UNSEEN_"
NA = "_NA_"


class InteractionCodecError(ValueError):
    """Raised for any misuse of :class:`InteractionCodec`."""


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class _ColMeta:
    name: str
    labels: Tuple[str, ...]
    label2index: Mapping[str, int]

    @property
    def card(self) -> int:
        return len(self.labels)


def _column_meta(name: str, domain: Sequence[str]) -> _ColMeta:
    if isinstance(domain, (str, bytes)):
        raise InteractionCodecError(
            f"domain of '{name}' must be a sequence of labels, got the string {domain!r}"
        )
    labels = tuple(domain)
    label2index: Dict[str, int] = {}
    for i, lab in enumerate(labels):
        if not isinstance(lab, str):
            raise InteractionCodecError(
                f"domain of '{name}' holds a non-string label {lab!r}"
            )
        if lab in label2index:
            raise InteractionCodecError(f"duplicate label {lab!r} in domain of '{name}'")
        label2index[lab] = i
    return _ColMeta(name=name, labels=labels, label2index=label2index)


class InteractionDomain(_SequenceABC):
    """Read-only view over the display labels ``"0" .. str(size - 1)``.

    Labels are produced on access; nothing is materialised, so the view
    stays cheap even when the code space is huge.
    """

    __slots__ = ("_size",)

    def __init__(self, size: int) -> None:
        self._size = int(size)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, item):
        if isinstance(item, slice):
            return [str(k) for k in range(self._size)[item]]
        k = range(self._size)[item]  # IndexError for out of range
        return str(k)

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
            return False
        if value != "0" and value.startswith("0"):
            return False
        return int(value) < self._size

    def __repr__(self) -> str:  # pragma: no cover
        return f"InteractionDomain(size={self._size})"


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

class InteractionCodec:
    """Encode tuples of categorical values to a single integer and back.

    Parameters
    ----------
    domains : sequence of sequences of str
        One ordered, duplicate-free domain per interacting column.  A
        domain may be empty, it then only reserves the unseen / NA slots.
    encode_unseen_as_na : bool, default False
        If *True* unseen values and NA share one slot per column, and
        decoding that slot yields ``None``.  Otherwise NA gets its own
        slot after the unseen one and unseen decodes to :data:`UNSEEN`.
    columns : sequence of str, optional
        Names of the interacting columns, defaults to ``c0, c1, ...``.
        Only used by the frame helpers and the CLI.
    """

    def __init__(
        self,
        domains: Sequence[Sequence[str]],
        *,
        encode_unseen_as_na: bool = False,
        columns: Optional[Sequence[str]] = None,
    ):
        domains = list(domains)
        if not domains:
            raise InteractionCodecError("at least one interacting domain is required")
        if columns is None:
            columns = [f"c{i}" for i in range(len(domains))]
        columns = [str(c) for c in columns]
        if len(columns) != len(domains):
            raise InteractionCodecError(
                f"got {len(columns)} column names for {len(domains)} domains"
            )
        if len(set(columns)) != len(columns):
            raise InteractionCodecError(f"duplicate column names: {columns}")

        self._unseen_as_na: bool = bool(encode_unseen_as_na)
        self._meta: List[_ColMeta] = [
            _column_meta(name, dom) for name, dom in zip(columns, domains)
        ]
        self._ext_cards: Tuple[int, ...] = tuple(
            m.card + (1 if self._unseen_as_na else 2)  # +1 unseen, +1 NA
            for m in self._meta
        )
        self._factors: Tuple[int, ...] = self._create_encoding_factors()
        self._size: int = self._factors[-1] * self._ext_cards[-1]

        logger.debug(
            "InteractionCodec columns=%s ext_cards=%s code_space=%d",
            columns, self._ext_cards, self._size,
        )

    # .................................................................
    # Derived tables
    # .................................................................
    def _create_encoding_factors(self) -> Tuple[int, ...]:
        factors = []
        multiplier = 1
        for ext in self._ext_cards:
            factors.append(multiplier)
            multiplier *= ext
        return tuple(factors)

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self._meta)

    @property
    def domains(self) -> Tuple[Tuple[str, ...], ...]:
        return tuple(m.labels for m in self._meta)

    @property
    def encode_unseen_as_na(self) -> bool:
        return self._unseen_as_na

    @property
    def cardinalities(self) -> Tuple[int, ...]:
        return tuple(m.card for m in self._meta)

    @property
    def extended_cardinalities(self) -> Tuple[int, ...]:
        return self._ext_cards

    @property
    def encoding_factors(self) -> Tuple[int, ...]:
        return self._factors

    @property
    def code_space_size(self) -> int:
        """Number of distinct codes, i.e. the product of extended cardinalities."""
        return self._size

    @property
    def interaction_domain(self) -> InteractionDomain:
        """Display labels for every code, generated lazily."""
        return InteractionDomain(self._size)

    def __len__(self) -> int:
        return len(self._meta)

    # .................................................................
    # Slot helpers
    # .................................................................
    def unseen_slot(self, i: int) -> int:
        return self._meta[i].card

    def na_slot(self, i: int) -> int:
        card = self._meta[i].card
        return card if self._unseen_as_na else card + 1

    def _check_arity(self, values: Sequence[Any]) -> None:
        if len(values) != len(self._meta):
            raise InteractionCodecError(
                f"expected {len(self._meta)} values, got {len(values)}"
            )

    # .................................................................
    # ENCODE
    # .................................................................
    def encode(self, indices: Sequence[int]) -> int:
        """Encode one resolved index per column into an interaction code.

        Indices ``>= card`` are treated as unseen, negative indices as NA.
        Non-integer indices raise :class:`TypeError`.
        """
        self._check_arity(indices)
        value = 0
        for i, (meta, factor) in enumerate(zip(self._meta, self._factors)):
            ival = operator.index(indices[i])  # TypeError for floats
            if ival >= meta.card:
                ival = meta.card  # unseen during build
            if ival < 0:
                ival = self.na_slot(i)
            value += ival * factor
        return value

    def encode_labels(self, labels: Sequence[Optional[str]]) -> int:
        """Encode one label (or ``None`` for NA) per column."""
        self._check_arity(labels)
        indices = []
        for meta, lab in zip(self._meta, labels):
            if lab is None:
                indices.append(-1)
            else:
                # non-null but unknown is unseen, not NA
                indices.append(meta.label2index.get(lab, meta.card))
        return self.encode(indices)

    def resolve(self, i: int, label: Optional[str]) -> int:
        """Resolve a single label of column *i* to its index (-1 for NA)."""
        meta = self._meta[i]
        if label is None:
            return -1
        return meta.label2index.get(label, meta.card)

    # .................................................................
    # DECODE
    # .................................................................
    def decode(self, code: int) -> Tuple[int, ...]:
        """Split *code* back into one slot value per column.

        Raises :class:`InteractionCodecError` if *code* is outside
        ``[0, code_space_size)``.
        """
        code = int(code)
        if code < 0 or code >= self._size:
            raise InteractionCodecError(
                f"code {code} outside code space [0, {self._size})"
            )
        values = [0] * len(self._factors)
        value = code
        for i in range(len(self._factors) - 1, -1, -1):
            factor = self._factors[i]
            values[i] = value // factor
            value %= factor
        return tuple(values)

    def decode_labels(self, code: int) -> Tuple[Optional[str], ...]:
        values = self.decode(code)
        out: List[Optional[str]] = []
        for meta, val in zip(self._meta, values):
            if val < meta.card:
                out.append(meta.labels[val])
            elif val == meta.card:
                out.append(None if self._unseen_as_na else UNSEEN)
            else:
                out.append(None)
        return tuple(out)

    def slot_labels(self, i: int) -> List[Optional[str]]:
        """Label for every slot of column *i*, indexed by slot value."""
        meta = self._meta[i]
        out: List[Optional[str]] = list(meta.labels)
        out.append(None if self._unseen_as_na else UNSEEN)
        if not self._unseen_as_na:
            out.append(None)
        return out

    # .................................................................
    # Metadata – plain dict round trip
    # .................................................................
    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "domains": [list(m.labels) for m in self._meta],
            "encode_unseen_as_na": self._unseen_as_na,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "InteractionCodec":
        try:
            domains = d["domains"]
        except KeyError as err:
            raise InteractionCodecError("codec description has no 'domains'") from err
        return cls(
            domains,
            encode_unseen_as_na=bool(d.get("encode_unseen_as_na", False)),
            columns=d.get("columns"),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InteractionCodec):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.columns, self.domains, self._unseen_as_na))

    # .................................................................
    # Debug helpers
    # .................................................................
    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"InteractionCodec({len(self._meta)} cols, unseen_as_na={self._unseen_as_na}) "
            + ", ".join(f"{m.name}:{m.card}" for m in self._meta)
        )
