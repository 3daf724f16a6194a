#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import quote, unquote

from codelink import radix
from codelink.compression import MODE_ZSTD, SUPPORTED_MODES, CompressionAdapter, mode_name
from codelink.errors import (
    AlphabetError,
    EncodingError,
    LinkCodecError,
    LinkCorruptError,
    UnsupportedFormatError,
)

FORMAT_VERSION = 1

# Alphabet characters that quote() would escape unless told otherwise.
FRAGMENT_SAFE = "".join(ch for ch in radix.ALPHABET if not ch.isalnum() and ch not in "_.-~")


def pack_header(mode: int, version: int = FORMAT_VERSION) -> int:
    return ((int(version) & 0x0F) << 4) | (int(mode) & 0x0F)


def unpack_header(header: int) -> Tuple[int, int]:
    return (header >> 4) & 0x0F, header & 0x0F


class LinkCodec:
    """Text <-> shareable link token.

    Encode: UTF-8, compress, prefix a version/mode byte, base-66, quote.
    Decode runs the same steps backwards; whatever goes wrong is raised as
    LinkCorruptError. Decoding follows the mode recorded in the token, so a
    codec that writes zstd still reads links written with zlib, bz2 or lzma.
    """

    def __init__(
        self,
        mode: int = MODE_ZSTD,
        adapters: Optional[Iterable[CompressionAdapter]] = None,
    ) -> None:
        pool: Dict[int, CompressionAdapter] = {}
        for adapter in adapters or ():
            pool[adapter.mode] = adapter
        for m in SUPPORTED_MODES:
            if m not in pool:
                pool[m] = CompressionAdapter(m)
        if mode not in pool:
            raise ValueError(f"unsupported compression mode: {mode}")
        self.mode = int(mode)
        self._adapters = pool

    @property
    def mode_label(self) -> str:
        return mode_name(self.mode)

    def adapter(self, mode: int) -> CompressionAdapter:
        return self._adapters[mode]

    def _envelope(self, source_text: str) -> bytes:
        if not isinstance(source_text, str):
            raise TypeError("source_text must be str")
        try:
            raw = source_text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"text is not encodable as UTF-8: {e.reason}") from e
        compressed = self._adapters[self.mode].compress(raw)
        return bytes([pack_header(self.mode)]) + compressed

    def encode_for_link(self, source_text: str) -> str:
        token = radix.encode(self._envelope(source_text))
        return quote(token, safe=FRAGMENT_SAFE)

    def _open_envelope(self, envelope: bytes) -> bytes:
        if not envelope:
            raise UnsupportedFormatError("empty token")
        version, mode = unpack_header(envelope[0])
        if version != FORMAT_VERSION:
            raise UnsupportedFormatError(f"unsupported version: {version}")
        adapter = self._adapters.get(mode)
        if adapter is None:
            raise UnsupportedFormatError(f"unsupported mode: {mode}")
        return adapter.decompress(envelope[1:])

    def _decode_stages(self, token: str) -> str:
        if not isinstance(token, str):
            raise TypeError("token must be str")
        try:
            text = unquote(token, errors="strict")
        except UnicodeDecodeError as e:
            raise AlphabetError("percent escapes are not valid UTF-8") from e
        raw = self._open_envelope(radix.decode(text))
        try:
            return raw.decode("utf-8", errors="strict")
        except UnicodeDecodeError as e:
            raise EncodingError(f"decoded bytes are not valid UTF-8: {e.reason}") from e

    def decode_from_link(self, token: str) -> str:
        try:
            return self._decode_stages(token)
        except LinkCodecError as e:
            raise LinkCorruptError(e.stage) from e

    def try_decode_from_link(self, token: str) -> Tuple[str, bool]:
        try:
            return self.decode_from_link(token), True
        except LinkCorruptError:
            return "", False

    def link_stats(self, source_text: str) -> Dict[str, object]:
        """Sizes along the encode path.

        `expansion` is token length over envelope bytes: at most 49/37 plus the
        padding of one short final window.
        """
        raw_bytes = len(source_text.encode("utf-8"))
        envelope = self._envelope(source_text)
        token_chars = len(quote(radix.encode(envelope), safe=FRAGMENT_SAFE))
        return {
            "mode": self.mode_label,
            "raw_bytes": raw_bytes,
            "compressed_bytes": len(envelope) - 1,
            "envelope_bytes": len(envelope),
            "token_chars": token_chars,
            "expansion": token_chars / float(len(envelope)),
        }
