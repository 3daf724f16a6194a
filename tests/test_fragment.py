#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import base64
import unittest
from urllib.parse import quote

from codelink.codec import LinkCodec
from codelink.fragment import (
    LOAD_CORRUPT,
    LOAD_LEGACY,
    LOAD_NONE,
    LOAD_OK,
    build_share_url,
    extract_legacy_code,
    extract_token,
    load_from_url,
    share_url,
)

BASE = "https://ide.example.org/lua/"


def _legacy_url(text: str) -> str:
    b64 = base64.b64encode(quote(text, safe="~()*!.'").encode("ascii")).decode("ascii")
    return f"{BASE}?code={b64}"


class ShareUrlTests(unittest.TestCase):
    def test_build_share_url(self) -> None:
        self.assertEqual(build_share_url(BASE, "abc"), BASE + "#code=abc")

    def test_build_share_url_replaces_old_fragment(self) -> None:
        self.assertEqual(build_share_url(BASE + "#code=old", "new"), BASE + "#code=new")

    def test_custom_marker(self) -> None:
        url = build_share_url(BASE, "abc", marker="src")
        self.assertEqual(url, BASE + "#src=abc")
        self.assertEqual(extract_token(url, marker="src"), "abc")
        self.assertIsNone(extract_token(url))

    def test_extract_token_forms(self) -> None:
        self.assertEqual(extract_token(BASE + "#code=abc"), "abc")
        self.assertEqual(extract_token("#code=abc"), "abc")
        self.assertEqual(extract_token("code=abc"), "abc")
        self.assertEqual(extract_token("#theme=dark&code=abc"), "abc")
        self.assertEqual(extract_token("  #code=abc\n"), "abc")

    def test_extract_token_missing(self) -> None:
        self.assertIsNone(extract_token(BASE))
        self.assertIsNone(extract_token(BASE + "#theme=dark"))
        self.assertIsNone(extract_token(BASE + "?code=abc"))
        self.assertIsNone(extract_token(""))

    def test_token_symbols_survive_in_fragment(self) -> None:
        token = "a/b$c@d-e"
        self.assertEqual(extract_token(build_share_url(BASE, token)), token)

    def test_share_url_roundtrip(self) -> None:
        codec = LinkCodec()
        text = 'local t = {1, 2, 3}\nprint(#t, "done")\n'
        url = share_url(codec, BASE, text)
        self.assertTrue(url.startswith(BASE + "#code="))
        self.assertEqual(load_from_url(codec, url), (LOAD_OK, text))


class LegacyLinkTests(unittest.TestCase):
    def test_plain_legacy_link(self) -> None:
        self.assertEqual(extract_legacy_code(BASE + "?code=cHJpbnQoMSk="), "print(1)")

    def test_legacy_unicode(self) -> None:
        text = 'print("привет")\n-- 😊'
        self.assertEqual(extract_legacy_code(_legacy_url(text)), text)

    def test_legacy_plus_read_back_as_space(self) -> None:
        # base64 of "ab~" is "YWJ+"
        self.assertEqual(extract_legacy_code(BASE + "?code=YWJ+"), "ab~")
        self.assertEqual(extract_legacy_code(BASE + "?code=YWJ%2B"), "ab~")
        self.assertEqual(extract_legacy_code(BASE + "?code=YWJ%20"), "ab~")

    def test_legacy_bad_base64(self) -> None:
        self.assertIsNone(extract_legacy_code(BASE + "?code=!!!"))

    def test_legacy_missing(self) -> None:
        self.assertIsNone(extract_legacy_code(BASE))
        self.assertIsNone(extract_legacy_code(BASE + "?lang=lua"))


class LoadFromUrlTests(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = LinkCodec()

    def test_no_marker(self) -> None:
        self.assertEqual(load_from_url(self.codec, BASE), (LOAD_NONE, None))
        self.assertEqual(load_from_url(self.codec, BASE + "#theme=dark"), (LOAD_NONE, None))

    def test_corrupt_fragment(self) -> None:
        self.assertEqual(load_from_url(self.codec, BASE + "#code=0"), (LOAD_CORRUPT, None))
        url = share_url(self.codec, BASE, "print(1)")
        self.assertEqual(load_from_url(self.codec, url[:-1]), (LOAD_CORRUPT, None))

    def test_legacy_link(self) -> None:
        self.assertEqual(load_from_url(self.codec, _legacy_url("x = 1")), (LOAD_LEGACY, "x = 1"))

    def test_corrupt_legacy_link(self) -> None:
        self.assertEqual(load_from_url(self.codec, BASE + "?code=!!!"), (LOAD_CORRUPT, None))

    def test_fragment_wins_over_query(self) -> None:
        url = share_url(self.codec, _legacy_url("old"), "new")
        self.assertEqual(load_from_url(self.codec, url), (LOAD_OK, "new"))


if __name__ == "__main__":
    unittest.main()
