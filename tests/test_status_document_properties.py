"""
Property-based tests for status document parsing.

Uses Hypothesis to verify key/value parsing and mirror discovery.
"""

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from whazzup_feed.exceptions import ParseError
from whazzup_feed.status_document import StatusDocument


SAMPLE_STATUS = b"""; IVAO status file
; generated automatically

msg0=Welcome to IVAO
url0=https://api.ivao.aero/getdata/whazzup/whazzup.txt
gzurl0=https://api.ivao.aero/getdata/whazzup/whazzup.txt.gz
gzurl1=https://mirror.ivao.aero/whazzup.txt.gz
user0=https://www.ivao.aero/members
"""


key_strategy = st.text(
    alphabet=string.ascii_letters + string.digits + "_",
    min_size=1,
    max_size=12,
).filter(lambda s: s[0].isalpha())

value_strategy = st.text(
    alphabet=string.ascii_letters + string.digits + ":/._-?&",
    min_size=1,
    max_size=40,
)


class TestKeyValueParsingProperty:
    """Flat key=value content parses into the same mapping."""

    @given(values=st.dictionaries(key_strategy, value_strategy, max_size=10))
    @settings(max_examples=100)
    def test_key_value_lines_round_trip(self, values: dict) -> None:
        content = "\n".join(f"{k}={v}" for k, v in values.items()).encode("utf-8")

        document = StatusDocument.parse(content)

        assert dict(document) == values

    def test_sample_document(self) -> None:
        document = StatusDocument.parse(SAMPLE_STATUS)

        assert document["msg0"] == "Welcome to IVAO"
        assert document.plain_url == "https://api.ivao.aero/getdata/whazzup/whazzup.txt"
        assert document.gz_urls == [
            "https://api.ivao.aero/getdata/whazzup/whazzup.txt.gz",
            "https://mirror.ivao.aero/whazzup.txt.gz",
        ]
        assert document.has_candidates

    def test_keys_are_case_sensitive(self) -> None:
        document = StatusDocument.parse(b"URL0=https://x/upper\nurl0=https://x/lower\n")

        assert document["URL0"] == "https://x/upper"
        assert document.plain_url == "https://x/lower"

    def test_quoted_values_are_unquoted(self) -> None:
        document = StatusDocument.parse(b'url0="https://x/a.txt"\n')

        assert document.plain_url == "https://x/a.txt"

    def test_empty_document_has_no_candidates(self) -> None:
        document = StatusDocument.parse(b"")

        assert len(document) == 0
        assert document.gz_urls == []
        assert document.plain_url is None
        assert not document.has_candidates


class TestMirrorDiscoveryProperty:
    """Mirrors are collected by numeric suffix."""

    @given(indices=st.lists(st.integers(min_value=0, max_value=20), min_size=1, max_size=6, unique=True))
    @settings(max_examples=100)
    def test_gz_urls_are_ordered_by_index(self, indices: list[int]) -> None:
        content = "\n".join(f"gzurl{i}=https://m{i}/w.gz" for i in indices).encode("utf-8")

        document = StatusDocument.parse(content)

        assert document.gz_urls == [f"https://m{i}/w.gz" for i in sorted(indices)]

    def test_empty_values_are_not_candidates(self) -> None:
        document = StatusDocument.parse(b"gzurl0=\nurl0=\n")

        assert document.gz_urls == []
        assert document.plain_url is None

    def test_url_without_gz(self) -> None:
        document = StatusDocument.parse(b"url0=https://x/a.txt\nurl1=https://y/a.txt\n")

        assert document.gz_urls == []
        assert document.plain_urls == ["https://x/a.txt", "https://y/a.txt"]
        assert document.has_candidates


class TestInvalidStatusProperty:
    """Content that is not key/value syntax is rejected."""

    @given(line=st.text(alphabet=string.ascii_letters + " ", min_size=1, max_size=30))
    @settings(max_examples=50)
    def test_line_without_delimiter_fails(self, line: str) -> None:
        content = f"url0=https://x/a.txt\n{line.strip() or 'garbage'}\n".encode("utf-8")

        with pytest.raises(ParseError) as exc_info:
            StatusDocument.parse(content)

        assert exc_info.value.code == "invalid_syntax"

    def test_undecodable_content_fails(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            StatusDocument.parse(b"\x1f\x8b\x08\x00\xff\xfe", fallback_encoding="utf-8")

        assert exc_info.value.code == "invalid_encoding"

    def test_binary_content_is_not_key_value_syntax(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            StatusDocument.parse(b"\x1f\x8b\x08\x00\xff\xfe")

        assert exc_info.value.code == "invalid_syntax"


class TestLegacyEncodingProperty:
    """Status documents that are not UTF-8 fall back to the feed encoding."""

    @given(message=st.text(alphabet="abcdefghijklmnopqrstuvwxyzäöüßéèàç ", min_size=1, max_size=30))
    @settings(max_examples=50)
    def test_latin1_message_does_not_hide_mirrors(self, message: str) -> None:
        content = f"msg0={message}\ngzurl0=https://x/a.gz\n".encode("iso-8859-1")

        document = StatusDocument.parse(content)

        assert document["msg0"] == message.strip()
        assert document.gz_urls == ["https://x/a.gz"]

    def test_utf8_is_preferred(self) -> None:
        document = StatusDocument.parse("msg0=Wartung für Server\n".encode("utf-8"))

        assert document["msg0"] == "Wartung für Server"
