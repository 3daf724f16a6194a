#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import bz2
import importlib
import lzma
import threading
import zlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from codelink.errors import CorruptStreamError, EngineUnavailableError

MODE_ZLIB = 3
MODE_BZ2 = 4
MODE_LZMA = 5
MODE_ZSTD = 9
SUPPORTED_MODES = (
    MODE_ZLIB,
    MODE_BZ2,
    MODE_LZMA,
    MODE_ZSTD,
)
MODE_TO_NAME: Dict[int, str] = {
    MODE_ZLIB: "zlib",
    MODE_BZ2: "bz2",
    MODE_LZMA: "lzma",
    MODE_ZSTD: "zstd",
}
NAME_TO_MODE: Dict[str, int] = {name: mode for mode, name in MODE_TO_NAME.items()}

ZSTD_LEVEL = 10
ZLIB_LEVEL = 9
BZ2_LEVEL = 9
LZMA_PRESET = 9

# Raised by every engine for misuse of a finished stream or bad arguments.
_COMMON_ERRORS: Tuple[Type[BaseException], ...] = (EOFError, ValueError)


def mode_name(mode: int) -> str:
    return MODE_TO_NAME.get(int(mode), "unknown")


def parse_mode(name: str) -> int:
    key = str(name or "").strip().lower()
    if key not in NAME_TO_MODE:
        raise ValueError(f"unsupported compression mode: {name!r}")
    return NAME_TO_MODE[key]


@dataclass(frozen=True)
class Engine:
    """Loaded compressor backend.

    `decompressor()` returns a fresh streaming object exposing `decompress()`,
    `eof` and `unused_data`, so calls never share state.
    """

    mode: int
    compress: Callable[[bytes], bytes]
    decompressor: Callable[[], Any]
    errors: Tuple[Type[BaseException], ...]


def _load_zstd() -> Engine:
    zstd = importlib.import_module("zstandard")

    def compress(raw: bytes) -> bytes:
        cctx = zstd.ZstdCompressor(level=ZSTD_LEVEL, write_checksum=True, write_content_size=True)
        return cctx.compress(raw)

    def decompressor() -> Any:
        return zstd.ZstdDecompressor().decompressobj()

    return Engine(MODE_ZSTD, compress, decompressor, (zstd.ZstdError,) + _COMMON_ERRORS)


def _load_zlib() -> Engine:
    def compress(raw: bytes) -> bytes:
        return zlib.compress(raw, level=ZLIB_LEVEL)

    return Engine(MODE_ZLIB, compress, zlib.decompressobj, (zlib.error,) + _COMMON_ERRORS)


def _load_bz2() -> Engine:
    def compress(raw: bytes) -> bytes:
        return bz2.compress(raw, compresslevel=BZ2_LEVEL)

    # BZ2Decompressor reports bad data as OSError.
    return Engine(MODE_BZ2, compress, bz2.BZ2Decompressor, (OSError,) + _COMMON_ERRORS)


def _load_lzma() -> Engine:
    def compress(raw: bytes) -> bytes:
        return lzma.compress(raw, format=lzma.FORMAT_XZ, preset=LZMA_PRESET)

    def decompressor() -> Any:
        return lzma.LZMADecompressor(format=lzma.FORMAT_XZ)

    return Engine(MODE_LZMA, compress, decompressor, (lzma.LZMAError,) + _COMMON_ERRORS)


LOADERS: Dict[int, Callable[[], Engine]] = {
    MODE_ZLIB: _load_zlib,
    MODE_BZ2: _load_bz2,
    MODE_LZMA: _load_lzma,
    MODE_ZSTD: _load_zstd,
}


class EngineHandle:
    """Lazy, load-once cell around an engine loader.

    Concurrent first callers wait on the lock and reuse the winner's engine.
    A failed load is not remembered; the next call runs the loader again.
    """

    def __init__(self, mode: int, loader: Callable[[], Engine]) -> None:
        self.mode = int(mode)
        self._loader = loader
        self._lock = threading.Lock()
        self._engine: Optional[Engine] = None

    @property
    def loaded(self) -> bool:
        return self._engine is not None

    def get(self) -> Engine:
        engine = self._engine
        if engine is not None:
            return engine
        with self._lock:
            if self._engine is None:
                try:
                    self._engine = self._loader()
                except Exception as e:
                    raise EngineUnavailableError(mode_name(self.mode)) from e
            return self._engine


class CompressionAdapter:
    def __init__(self, mode: int = MODE_ZSTD, loader: Optional[Callable[[], Engine]] = None) -> None:
        if loader is None:
            if mode not in LOADERS:
                raise ValueError(f"unsupported compression mode: {mode}")
            loader = LOADERS[mode]
        self.mode = int(mode)
        self._handle = EngineHandle(self.mode, loader)

    @property
    def name(self) -> str:
        return mode_name(self.mode)

    @property
    def loaded(self) -> bool:
        return self._handle.loaded

    def compress(self, raw: bytes) -> bytes:
        engine = self._handle.get()
        return engine.compress(bytes(raw))

    def decompress(self, data: bytes) -> bytes:
        engine = self._handle.get()
        dobj = engine.decompressor()
        try:
            out = dobj.decompress(bytes(data))
        except engine.errors as e:
            raise CorruptStreamError(f"{self.name}: {e}") from e
        if not dobj.eof:
            raise CorruptStreamError(f"{self.name}: unexpected end of stream")
        if dobj.unused_data:
            raise CorruptStreamError(f"{self.name}: trailing bytes after stream")
        return out
