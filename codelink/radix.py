#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Base-66 binary-to-text codec for URL fragments.

Bytes are cut into 37-byte windows and every window is written as 49 base-66
digits, most significant first. A short final window of r bytes takes the
smallest digit count m with 66**m >= 256**r, so each width maps back to exactly
one byte count and leading zero bytes survive. Output length depends only on
input length: 49/37 characters per byte (base64 needs 4/3).

Every alphabet character is legal inside a URL fragment as is. None of them is
a separator for `key=value&key=value` fragment parsing, and none is trailing
punctuation that chat or markdown linkifiers cut off the end of a URL.
"""

from __future__ import annotations

from typing import Dict, List

from codelink.errors import AlphabetError, TruncatedStreamError

ALPHABET = (
    "0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "-$@/"
)
BASE = len(ALPHABET)
BLOCK_BYTES = 37


def _width_for(byte_count: int) -> int:
    limit = 256 ** byte_count
    width = 0
    span = 1
    while span < limit:
        span *= BASE
        width += 1
    return width


# Index = byte count of a window, value = digits used for it.
WIDTHS = tuple(_width_for(n) for n in range(BLOCK_BYTES + 1))
BLOCK_CHARS = WIDTHS[BLOCK_BYTES]

_BYTES_FOR_WIDTH: Dict[int, int] = {w: n for n, w in enumerate(WIDTHS)}
_INDEX: Dict[str, int] = {ch: i for i, ch in enumerate(ALPHABET)}


def encoded_length(byte_count: int) -> int:
    if byte_count < 0:
        raise ValueError("byte_count must be >= 0")
    full, tail = divmod(int(byte_count), BLOCK_BYTES)
    return full * BLOCK_CHARS + WIDTHS[tail]


def is_token_text(text: str) -> bool:
    return all(ch in _INDEX for ch in text)


def _encode_window(chunk: bytes) -> str:
    value = int.from_bytes(chunk, "big")
    digits: List[str] = []
    for _ in range(WIDTHS[len(chunk)]):
        value, rem = divmod(value, BASE)
        digits.append(ALPHABET[rem])
    digits.reverse()
    return "".join(digits)


def encode(data: bytes) -> str:
    raw = bytes(data)
    parts = [_encode_window(raw[i:i + BLOCK_BYTES]) for i in range(0, len(raw), BLOCK_BYTES)]
    return "".join(parts)


def decode(text: str) -> bytes:
    if not isinstance(text, str):
        raise AlphabetError("token must be str")
    digits: List[int] = []
    for pos, ch in enumerate(text):
        idx = _INDEX.get(ch)
        if idx is None:
            raise AlphabetError(f"invalid symbol {ch!r} at position {pos}", position=pos)
        digits.append(idx)

    out = bytearray()
    for start in range(0, len(digits), BLOCK_CHARS):
        group = digits[start:start + BLOCK_CHARS]
        byte_count = _BYTES_FOR_WIDTH.get(len(group))
        if byte_count is None:
            raise TruncatedStreamError(f"final group of {len(group)} symbols is not a whole byte count")
        value = 0
        for d in group:
            value = value * BASE + d
        if value >= 256 ** byte_count:
            raise TruncatedStreamError(f"group at symbol {start} overflows {byte_count} bytes")
        out.extend(value.to_bytes(byte_count, "big"))
    return bytes(out)
