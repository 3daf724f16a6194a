#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Optional


STAGE_ALPHABET = "alphabet"
STAGE_TRUNCATED = "truncated"
STAGE_FORMAT = "format"
STAGE_STREAM = "stream"
STAGE_ENCODING = "encoding"


class LinkCodecError(ValueError):
    stage = ""


class AlphabetError(LinkCodecError):
    stage = STAGE_ALPHABET

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position


class TruncatedStreamError(LinkCodecError):
    stage = STAGE_TRUNCATED


class UnsupportedFormatError(LinkCodecError):
    stage = STAGE_FORMAT


class CorruptStreamError(LinkCodecError):
    stage = STAGE_STREAM


class EncodingError(LinkCodecError):
    stage = STAGE_ENCODING


class LinkCorruptError(LinkCodecError):
    """The link cannot be used.

    Raised by the facade for every decode failure. `stage` names the step that
    failed and `__cause__` holds the original error; neither is meant for end users.
    """

    def __init__(self, stage: str) -> None:
        super().__init__("link is corrupt")
        self.stage = stage


class EngineUnavailableError(RuntimeError):
    def __init__(self, mode_label: str) -> None:
        super().__init__(f"compression engine unavailable: {mode_label}")
        self.mode_label = mode_label
