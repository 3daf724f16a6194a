#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import sys
from typing import Any, List, Optional

from codelink.codec import LinkCodec
from codelink.compression import MODE_TO_NAME, parse_mode
from codelink.errors import EncodingError, EngineUnavailableError, LinkCorruptError
from codelink.fragment import LOAD_CORRUPT, LOAD_NONE, LOAD_OK, load_from_url, share_url

VERSION = "1.0.0"

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CORRUPT = 2
EXIT_ENGINE = 3

DEFAULTS = {
    "mode": "zstd",
    "marker": "code",
    "base_url": "",
}


def out(msg: str) -> None:
    sys.stdout.write(msg + "\n")
    sys.stdout.flush()


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def write_text(text: str) -> None:
    # Source text is always UTF-8, whatever the console encoding is.
    sys.stdout.flush()
    sys.stdout.buffer.write(text.encode("utf-8"))
    sys.stdout.buffer.flush()


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.buffer.read().decode("utf-8")
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def looks_like_url(value: str) -> bool:
    # Tokens never contain "#" or "=".
    return "#" in value or "=" in value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="codeLink.py",
        description="codeLink.py: pack source code into a shareable URL fragment and back.",
    )
    action = ap.add_mutually_exclusive_group(required=False)
    action.add_argument("--encode", metavar="PATH", default=None, help="encode a UTF-8 file ('-' reads stdin).")
    action.add_argument("--decode", metavar="TOKEN_OR_URL", default=None, help="decode a token, a #fragment or a full share URL.")
    ap.add_argument(
        "--mode",
        default=DEFAULTS["mode"],
        choices=sorted(MODE_TO_NAME.values()),
        help=f"compression engine for --encode (default: {DEFAULTS['mode']}).",
    )
    ap.add_argument("--marker", default=DEFAULTS["marker"], help=f"fragment field name (default: {DEFAULTS['marker']}).")
    ap.add_argument("--base-url", dest="base_url", default=DEFAULTS["base_url"], help="print a full share URL instead of the bare token.")
    ap.add_argument("--stats", action="store_true", help="print size stats to stderr after --encode.")
    ap.add_argument("--quiet", action="store_true", help="print only the result.")
    ap.add_argument("--version", action="store_true", help="print version and exit.")
    return ap


def run_encode(codec: LinkCodec, args: argparse.Namespace) -> int:
    try:
        text = read_source(args.encode)
    except (OSError, UnicodeDecodeError) as e:
        eprint(f"ERROR: cannot read {args.encode}: {e}")
        return EXIT_USAGE
    try:
        if args.base_url:
            out(share_url(codec, args.base_url, text, marker=args.marker))
        else:
            out(codec.encode_for_link(text))
    except EncodingError as e:
        eprint(f"ERROR: {e}")
        return EXIT_USAGE
    if args.stats and not args.quiet:
        st = codec.link_stats(text)
        eprint(
            f"mode={st['mode']} raw={st['raw_bytes']}B compressed={st['compressed_bytes']}B "
            f"token={st['token_chars']} chars expansion={st['expansion']:.3f}"
        )
    return EXIT_OK


def run_decode(codec: LinkCodec, args: argparse.Namespace) -> int:
    value = str(args.decode).strip()
    if looks_like_url(value):
        status, text = load_from_url(codec, value, marker=args.marker)
        if status == LOAD_NONE:
            eprint(f"ERROR: no '{args.marker}=' field in link")
            return EXIT_USAGE
        if status == LOAD_CORRUPT or text is None:
            eprint("ERROR: link is corrupt")
            return EXIT_CORRUPT
        if not args.quiet and status != LOAD_OK:
            eprint(f"note: {status} link format")
    else:
        try:
            text = codec.decode_from_link(value)
        except LinkCorruptError as e:
            if args.quiet:
                eprint("ERROR: link is corrupt")
            else:
                eprint(f"ERROR: link is corrupt (stage: {e.stage})")
            return EXIT_CORRUPT
    write_text(text)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.version:
        out(f"codeLink.py v{VERSION}")
        return EXIT_OK
    if args.encode is None and args.decode is None:
        ap.print_usage(sys.stderr)
        eprint("ERROR: one of --encode or --decode is required")
        return EXIT_USAGE

    codec = LinkCodec(mode=parse_mode(args.mode))
    try:
        if args.encode is not None:
            return run_encode(codec, args)
        return run_decode(codec, args)
    except EngineUnavailableError as e:
        eprint(f"ERROR: {e}")
        return EXIT_ENGINE


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        eprint("Interrupted by user (Ctrl+C).")
        sys.exit(130)
