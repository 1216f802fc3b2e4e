# SPDX-License-Identifier: MIT

"""Polars helpers that add or expand interaction-code columns.

``encode_frame`` resolves every interacting string column to per-column
indices (null -> NA, unknown label -> unseen) and folds them into one
``Int64`` code column through the batch kernels.  ``decode_frame`` does the
reverse and writes one ``Utf8`` label column per interacting column.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import polars as pl

from .codec import InteractionCodec, InteractionCodecError
from .kernels import decode_codes, encode_indices

logger = logging.getLogger(__name__)


def _interacting_columns(
    df: "pl.DataFrame", codec: InteractionCodec, cols: Optional[Sequence[str]]
) -> Sequence[str]:
    if cols is None:
        cols = codec.columns
    cols = list(cols)
    if len(cols) != len(codec):
        raise InteractionCodecError(
            f"codec has {len(codec)} columns, got {len(cols)}: {cols}"
        )
    if len(set(cols)) != len(cols):
        raise InteractionCodecError(f"duplicate interacting columns: {cols}")
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise InteractionCodecError(f"columns not in DataFrame: {missing}")
    return cols


def _index_expr(col: str, domain: Sequence[str]) -> "pl.Expr":
    card = len(domain)
    src = pl.col(col).cast(pl.Utf8)
    if card == 0:
        known = pl.lit(card, dtype=pl.Int64)
    else:
        known = src.replace_strict(
            list(domain), list(range(card)), default=card, return_dtype=pl.Int64
        )
    # null is NA (-1); any other label outside the domain is unseen (card)
    return pl.when(src.is_null()).then(pl.lit(-1, dtype=pl.Int64)).otherwise(known).alias(col)


def resolve_indices(
    df: "pl.DataFrame",
    codec: InteractionCodec,
    cols: Optional[Sequence[str]] = None,
) -> np.ndarray:
    """Resolve the interacting columns of *df* into an (N, n_cols) int64 array.

    *cols* maps positionally onto the codec domains and defaults to
    ``codec.columns``.
    """
    cols = _interacting_columns(df, codec, cols)
    resolved = df.select(
        [_index_expr(c, dom) for c, dom in zip(cols, codec.domains)]
    )
    if resolved.height == 0:
        return np.empty((0, len(cols)), dtype=np.int64)
    return np.ascontiguousarray(resolved.to_numpy(), dtype=np.int64)


def encode_frame(
    df: "pl.DataFrame",
    codec: InteractionCodec,
    cols: Optional[Sequence[str]] = None,
    *,
    alias: Optional[str] = None,
) -> "pl.DataFrame":
    """Return a copy of *df* with the interaction code column appended.

    The column is named *alias*, or ``"a:b:..."`` after the interacting
    columns when no alias is given.
    """
    cols = _interacting_columns(df, codec, cols)
    name = alias if alias is not None else ":".join(cols)
    codes = encode_indices(codec, resolve_indices(df, codec, cols))
    logger.debug("encode_frame: %d rows -> '%s'", df.height, name)
    return df.with_columns(pl.Series(name, codes, dtype=pl.Int64))


def decode_frame(
    df: "pl.DataFrame",
    codec: InteractionCodec,
    code_col: str,
    *,
    suffix: str = "",
) -> "pl.DataFrame":
    """Return a copy of *df* with one label column per codec column.

    Labels follow :meth:`InteractionCodec.decode_labels`: the unseen slot
    becomes ``"_UNSEEN_"`` (or null when unseen is collapsed into NA) and
    the NA slot becomes null.  Null codes decode to null labels.
    """
    if code_col not in df.columns:
        raise InteractionCodecError(f"expected '{code_col}' in DataFrame")
    codes_s = df.get_column(code_col)
    if not (codes_s.dtype.is_integer() or codes_s.dtype == pl.Null):
        raise InteractionCodecError(
            f"'{code_col}' must hold integer codes, got dtype {codes_s.dtype}"
        )
    # range check before the Int64 cast so wide unsigned codes fail cleanly
    lo, hi = codes_s.min(), codes_s.max()
    if lo is not None and (lo < 0 or hi >= codec.code_space_size):
        raise InteractionCodecError(
            f"codes in '{code_col}' outside code space [0, {codec.code_space_size})"
        )
    valid = codes_s.is_not_null().to_numpy()
    codes = codes_s.fill_null(0).cast(pl.Int64).to_numpy()

    values = decode_codes(codec, codes)
    out_cols = []
    for i, name in enumerate(codec.columns):
        lookup = np.asarray(codec.slot_labels(i), dtype=object)
        labels = lookup[values[:, i]]
        labels[~valid] = None
        out_cols.append(pl.Series(f"{name}{suffix}", labels.tolist(), dtype=pl.Utf8))
    logger.debug("decode_frame: %d rows from '%s'", df.height, code_col)
    return df.with_columns(out_cols)


__all__ = ["resolve_indices", "encode_frame", "decode_frame"]
