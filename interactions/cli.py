# SPDX-License-Identifier: MIT

"""Command line helpers for working with interaction codes.

This module exposes a small ``argparse`` driven CLI with a handful of
subcommands.  It can add an interaction-code column to a Parquet file,
expand a code column back into label columns and describe a codec.  A codec
is described by a JSON file holding ``columns``, ``domains`` and
``encode_unseen_as_na`` (see :meth:`InteractionCodec.to_dict`).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import polars as pl

from .codec import InteractionCodec
from .frame_encoding import decode_frame, encode_frame

logger = logging.getLogger(__name__)


def load_codec(path: str | Path) -> InteractionCodec:
    """Read a codec description from a JSON file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Codec description not found at {p}")
    return InteractionCodec.from_dict(json.loads(p.read_text()))


def save_codec(codec: InteractionCodec, path: str | Path, *, overwrite: bool = False) -> str:
    """Write ``codec.to_dict()`` as JSON. Returns the file path."""
    p = Path(path)
    if p.exists() and not overwrite:
        raise FileExistsError(f"{p} exists; set overwrite=True to replace.")
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(codec.to_dict(), separators=(",", ":")))
    return str(p)


def _check_output(path: Path, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(f"{path} exists; set overwrite=True to replace.")
    path.parent.mkdir(parents=True, exist_ok=True)


def _cmd_encode(args: argparse.Namespace) -> None:
    """Append the interaction code column and write the result."""

    codec = load_codec(args.codec)
    out = Path(args.output)
    _check_output(out, args.overwrite)

    df = pl.read_parquet(args.input)
    encoded = encode_frame(df, codec, alias=args.alias)
    encoded.write_parquet(out)
    logger.info("wrote %d encoded rows to %s", encoded.height, out)


def _cmd_decode(args: argparse.Namespace) -> None:
    """Expand a code column into one label column per interacting column."""

    codec = load_codec(args.codec)
    out = Path(args.output)
    _check_output(out, args.overwrite)

    df = pl.read_parquet(args.input)
    decoded = decode_frame(df, codec, args.code_col, suffix=args.suffix)
    decoded.write_parquet(out)
    logger.info("wrote %d decoded rows to %s", decoded.height, out)


def _cmd_describe(args: argparse.Namespace) -> None:
    """Print a short summary of a codec for inspection."""

    codec = load_codec(args.codec)
    print("columns:", ", ".join(codec.columns))
    print("cardinalities:", codec.cardinalities)
    print("extended cardinalities:", codec.extended_cardinalities)
    print("encoding factors:", codec.encoding_factors)
    print("unseen as NA:", codec.encode_unseen_as_na)
    print("code space size:", codec.code_space_size)


def build_parser() -> argparse.ArgumentParser:
    """Create the top level argument parser for the CLI."""

    parser = argparse.ArgumentParser(description="Categorical interaction codec helpers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="cmd", required=True)

    # --- encode -----------------------------------------------------------
    p_enc = sub.add_parser("encode", help="Add an interaction code column")
    p_enc.add_argument("input", help="Parquet file holding the interacting columns")
    p_enc.add_argument("codec", help="JSON codec description")
    p_enc.add_argument("output", help="Output Parquet file")
    p_enc.add_argument("--alias", default=None, help="Name of the code column (default 'a:b:...')")
    p_enc.add_argument("--overwrite", action="store_true", help="Overwrite existing outputs")
    p_enc.set_defaults(func=_cmd_encode)

    # --- decode -----------------------------------------------------------
    p_dec = sub.add_parser("decode", help="Expand an interaction code column into labels")
    p_dec.add_argument("input", help="Parquet file holding the code column")
    p_dec.add_argument("codec", help="JSON codec description")
    p_dec.add_argument("output", help="Output Parquet file")
    p_dec.add_argument("--code-col", required=True, help="Name of the code column")
    p_dec.add_argument("--suffix", default="", help="Postfix for decoded label columns")
    p_dec.add_argument("--overwrite", action="store_true", help="Overwrite existing outputs")
    p_dec.set_defaults(func=_cmd_decode)

    # --- describe ---------------------------------------------------------
    p_desc = sub.add_parser("describe", help="Print codec cardinalities and code space")
    p_desc.add_argument("codec", help="JSON codec description")
    p_desc.set_defaults(func=_cmd_describe)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point used by ``python -m`` or console scripts."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Each subcommand stores a callback in ``func`` that performs the actual
    # work, so dispatch to it here.
    args.func(args)


if __name__ == "__main__":
    main()
