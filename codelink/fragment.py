#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional, Tuple
from urllib.parse import unquote, urlsplit

from codelink.codec import LinkCodec
from codelink.errors import LinkCorruptError

DEFAULT_MARKER = "code"

# Scheme-prefixed URL; tokens never contain "=" so a bare fragment cannot match.
_URL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

LOAD_OK = "ok"
LOAD_LEGACY = "legacy"
LOAD_NONE = "none"
LOAD_CORRUPT = "corrupt"


def _field(params: str, marker: str) -> Optional[str]:
    prefix = marker + "="
    for part in params.split("&"):
        if part.startswith(prefix):
            return part[len(prefix):]
    return None


def build_share_url(base_url: str, token: str, marker: str = DEFAULT_MARKER) -> str:
    base = str(base_url or "").split("#", 1)[0]
    return f"{base}#{marker}={token}"


def extract_token(url_or_fragment: str, marker: str = DEFAULT_MARKER) -> Optional[str]:
    """Return the token after `<marker>=` in a fragment, or None.

    Accepts a full URL, `#fragment` or a bare fragment.
    """
    s = str(url_or_fragment or "").strip()
    if "#" in s:
        fragment = s.split("#", 1)[1]
    elif _URL_RE.match(s):
        return None
    else:
        fragment = s
    return _field(fragment, marker)


def extract_legacy_code(url: str, marker: str = DEFAULT_MARKER) -> Optional[str]:
    """Read the old `?code=` links: base64 of the percent-encoded text."""
    query = urlsplit(str(url or "")).query
    value = _field(query, marker)
    if value is None:
        return None
    # Query parsers turn '+' into a space; base64 needs it back.
    b64 = unquote(value).replace(" ", "+")
    try:
        quoted = base64.b64decode(b64, validate=True).decode("ascii")
        return unquote(quoted, errors="strict")
    except (binascii.Error, UnicodeDecodeError):
        return None


def share_url(codec: LinkCodec, base_url: str, source_text: str, marker: str = DEFAULT_MARKER) -> str:
    return build_share_url(base_url, codec.encode_for_link(source_text), marker=marker)


def load_from_url(codec: LinkCodec, url: str, marker: str = DEFAULT_MARKER) -> Tuple[str, Optional[str]]:
    token = extract_token(url, marker=marker)
    if token is not None:
        try:
            return LOAD_OK, codec.decode_from_link(token)
        except LinkCorruptError:
            return LOAD_CORRUPT, None
    if _field(urlsplit(str(url or "")).query, marker) is not None:
        legacy = extract_legacy_code(url, marker=marker)
        if legacy is None:
            return LOAD_CORRUPT, None
        return LOAD_LEGACY, legacy
    return LOAD_NONE, None
