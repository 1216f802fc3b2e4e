# SPDX-License-Identifier: MIT

"""
Numba kernels for batch interaction encoding.

This module applies the :class:`~interactions.codec.InteractionCodec`
arithmetic to whole NumPy arrays at once.  Kernels are ``@njit`` functions
over flat integer tables taken from the codec:

  * ``cards``   : (n_cols,) int64   base cardinality per column
  * ``factors`` : (n_cols,) int64   mixed-radix weight per column

Functions follow the Numba checklist:
  * arrays must be C-contiguous ``np.ndarray`` instances
  * no Python objects appear inside hot loops
  * outputs are preallocated and written in-place
  * optional debug assertions may be enabled via ``DEBUG = True``

``encode_indices`` and ``decode_codes`` are the Python drivers that
validate shapes, prepare the tables and call the kernels.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from numba import njit

from .codec import InteractionCodec, InteractionCodecError

logger = logging.getLogger(__name__)

# Enable or disable debug assertions within the kernels.
DEBUG = False

_INT64_MAX = int(np.iinfo(np.int64).max)


@njit(cache=True)
def encode_rows(
    indices: np.ndarray,
    cards: np.ndarray,
    factors: np.ndarray,
    unseen_as_na: bool,
    out_codes: np.ndarray,
) -> None:
    """Encode each row of ``indices`` (N, n_cols) into ``out_codes`` (N,).

    Values ``>= card`` map to the unseen slot, negative values to NA.
    """
    if DEBUG:
        assert indices.strides[1] == indices.dtype.itemsize
        assert cards.strides[0] == cards.dtype.itemsize
        assert factors.strides[0] == factors.dtype.itemsize
        assert out_codes.strides[0] == out_codes.dtype.itemsize

    N = indices.shape[0]
    C = indices.shape[1]
    for r in range(N):
        value = 0
        for c in range(C):
            card = cards[c]
            ival = indices[r, c]
            if ival >= card:
                ival = card
            if ival < 0:
                if unseen_as_na:
                    ival = card
                else:
                    ival = card + 1
            value += ival * factors[c]
        out_codes[r] = value


@njit(cache=True)
def decode_rows(
    codes: np.ndarray,
    factors: np.ndarray,
    out_values: np.ndarray,
) -> None:
    """Split each code into per-column slot values, last column first."""
    if DEBUG:
        assert codes.strides[0] == codes.dtype.itemsize
        assert factors.strides[0] == factors.dtype.itemsize
        assert out_values.strides[1] == out_values.dtype.itemsize

    N = codes.shape[0]
    C = factors.shape[0]
    for r in range(N):
        value = codes[r]
        for c in range(C - 1, -1, -1):
            f = factors[c]
            out_values[r, c] = value // f
            value = value % f


def codec_tables(codec: InteractionCodec) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(cards, factors)`` as contiguous int64 arrays.

    Raises :class:`InteractionCodecError` if the code space does not fit
    in int64.
    """
    if codec.code_space_size > _INT64_MAX:
        raise InteractionCodecError(
            f"code space {codec.code_space_size} does not fit in int64"
        )
    cards = np.ascontiguousarray(codec.cardinalities, dtype=np.int64)
    factors = np.ascontiguousarray(codec.encoding_factors, dtype=np.int64)
    return cards, factors


def encode_indices(codec: InteractionCodec, indices: np.ndarray) -> np.ndarray:
    """Encode an (N, n_cols) array of resolved indices into (N,) int64 codes."""
    idx = np.asarray(indices)
    if idx.ndim != 2 or idx.shape[1] != len(codec):
        raise ValueError(f"indices must be of shape (N, {len(codec)}), got {idx.shape}")
    if idx.dtype.kind not in "iu":
        raise ValueError(f"indices must be integers, got dtype {idx.dtype}")
    # Clamp before the cast so huge unsigned values still read as unseen.
    if idx.dtype.kind == "u":
        idx = np.minimum(idx, np.uint64(_INT64_MAX))
    idx = np.ascontiguousarray(idx, dtype=np.int64)

    cards, factors = codec_tables(codec)
    out = np.empty(idx.shape[0], dtype=np.int64)
    encode_rows(idx, cards, factors, codec.encode_unseen_as_na, out)
    logger.debug("encoded %d rows over %d columns", idx.shape[0], idx.shape[1])
    return out


def decode_codes(codec: InteractionCodec, codes: np.ndarray) -> np.ndarray:
    """Decode (N,) codes into an (N, n_cols) int64 array of slot values.

    Every code must lie in ``[0, code_space_size)``.
    """
    arr = np.asarray(codes)
    if arr.ndim != 1:
        raise ValueError(f"codes must be 1-D, got shape {arr.shape}")
    if arr.dtype.kind not in "iu":
        raise ValueError(f"codes must be integers, got dtype {arr.dtype}")
    _, factors = codec_tables(codec)
    if arr.size and (int(arr.min()) < 0 or int(arr.max()) >= codec.code_space_size):
        raise InteractionCodecError(
            f"codes outside code space [0, {codec.code_space_size})"
        )
    arr = np.ascontiguousarray(arr, dtype=np.int64)

    out = np.empty((arr.shape[0], len(codec)), dtype=np.int64)
    decode_rows(arr, factors, out)
    logger.debug("decoded %d codes into %d columns", arr.shape[0], len(codec))
    return out


__all__ = [
    "DEBUG",
    "encode_rows",
    "decode_rows",
    "codec_tables",
    "encode_indices",
    "decode_codes",
]
