#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
codelink package

Shareable-link codec for the web editor: source text in, URL fragment token
out, and back. codeLink.py is the command line entrypoint.
"""

from __future__ import annotations

from codelink.codec import LinkCodec
from codelink.errors import LinkCorruptError

__all__ = ["LinkCodec", "LinkCorruptError"]
