# SPDX-License-Identifier: MIT

"""Mixed-radix codes for interactions of categorical columns."""

__version__ = "0.1.0"

from .codec import NA, UNSEEN, InteractionCodec, InteractionCodecError, InteractionDomain
from .kernels import decode_codes, encode_indices
from .frame_encoding import decode_frame, encode_frame, resolve_indices

__all__ = [
    "InteractionCodec",
    "InteractionCodecError",
    "InteractionDomain",
    "UNSEEN",
    "NA",
    "encode_indices",
    "decode_codes",
    "resolve_indices",
    "encode_frame",
    "decode_frame",
]
