"""
Parser for the IVAO status document.

The status document is a small INI-style key/value file listing where the
snapshot can be downloaded. Relevant keys:

    gzurl0, gzurl1, ...  gzip-compressed snapshot mirrors
    url0, url1, ...      plain-text snapshot mirrors
"""

import configparser
import re
from collections.abc import Mapping
from typing import Iterator, Optional

from .enums import ParseErrorCode
from .exceptions import ParseError


_GZ_URL_KEY = re.compile(r"^gzurl(\d+)$")
_PLAIN_URL_KEY = re.compile(r"^url(\d+)$")

# configparser needs a section header; the status document has none
_SECTION = "status"


class StatusDocument(Mapping):
    """Read-only mapping of status keys to values."""

    def __init__(self, values: dict[str, str]) -> None:
        self._values = dict(values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"StatusDocument({self._values!r})"

    @classmethod
    def parse(cls, content: bytes, fallback_encoding: str = "iso-8859-1") -> "StatusDocument":
        """
        Parse the raw status document.

        UTF-8 is tried first. Messages in the document are sometimes sent
        in the feed's legacy encoding, so anything that is not UTF-8 is
        decoded with fallback_encoding instead.

        Args:
            content: Raw bytes as downloaded
            fallback_encoding: Encoding used when the bytes are not UTF-8

        Returns:
            Parsed StatusDocument

        Raises:
            ParseError: If the content cannot be decoded or is not valid
                key=value syntax
        """
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            try:
                text = content.decode(fallback_encoding)
            except UnicodeDecodeError as e:
                raise ParseError(
                    code=ParseErrorCode.INVALID_ENCODING.value,
                    message=f"Status document is not valid text: {e}",
                    details={"encoding": fallback_encoding},
                )

        parser = configparser.ConfigParser(
            delimiters=("=",),
            comment_prefixes=(";", "#"),
            interpolation=None,
            strict=False,
            default_section="__defaults__",
        )
        parser.optionxform = str  # keys are case-sensitive
        try:
            parser.read_string(f"[{_SECTION}]\n{text}")
        except configparser.Error as e:
            raise ParseError(
                code=ParseErrorCode.INVALID_SYNTAX.value,
                message=f"Status document is not valid key/value syntax: {e}",
            )

        values: dict[str, str] = {}
        for section in parser.sections():
            for key, value in parser.items(section, raw=True):
                values[key] = _unquote(value)
        return cls(values)

    @property
    def gz_urls(self) -> list[str]:
        """Compressed-transport URLs ordered by key index."""
        return self._collect(_GZ_URL_KEY)

    @property
    def plain_urls(self) -> list[str]:
        """Plain-transport URLs ordered by key index."""
        return self._collect(_PLAIN_URL_KEY)

    @property
    def plain_url(self) -> Optional[str]:
        """The url0 fallback, if present."""
        return self._values.get("url0") or None

    @property
    def has_candidates(self) -> bool:
        return bool(self.gz_urls) or self.plain_url is not None

    def _collect(self, pattern: re.Pattern) -> list[str]:
        found = []
        for key, value in self._values.items():
            match = pattern.match(key)
            if match and value:
                found.append((int(match.group(1)), value))
        return [value for _, value in sorted(found)]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value
