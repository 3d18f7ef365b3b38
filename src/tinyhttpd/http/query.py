"""
=============================================================================
QUERY STRING CODEC
=============================================================================

Turns the raw text after "?" into an ordered, bounded list of (key, value)
pairs.

    "q=hello+world&lang=en&flag&q=again&bad=%GG"
          │
          ▼  split on "&", drop empty segments
    ["q=hello+world", "lang=en", "flag", "q=again", "bad=%GG"]
          │
          ▼  split each on the FIRST "=", drop segments with no "="
    [("q", "hello+world"), ("lang", "en"), ("q", "again"), ("bad", "%GG")]
          │
          ▼  decode "+" and %XX in both halves
    [("q", "hello world"), ("lang", "en"), ("q", "again"), ("bad", "%GG")]

=============================================================================
DECODING RULES
=============================================================================

    "+"           → " "
    "%41"         → "A"      (two hex digits → one byte)
    "%e2%9c%93"   → "✓"      (bytes are reassembled as UTF-8)
    "%GG", "%4"   → copied literally, never an error

Nothing in this module raises on bad input. Lookups return the FIRST
value for a key, or the default.

=============================================================================
"""

from typing import Iterator, Optional
from urllib.parse import quote_plus, unquote_plus


DEFAULT_MAX_PARAMS = 32


def decode_component(text: str) -> str:
    """
    Decode one key or value from a query string.

    Invalid percent escapes are left alone, and byte sequences that are
    not valid UTF-8 become U+FFFD instead of raising.
    """
    return unquote_plus(text, encoding="utf-8", errors="replace")


def encode_component(text: str) -> str:
    """
    Percent-encode a key or value for use in a query string.

    Only unreserved characters (letters, digits, "-", "_", ".", "~") pass
    through; spaces become "+".
    """
    return quote_plus(text, safe="")


class QueryParams:
    """
    Immutable, ordered, capacity-limited query parameters.

    Duplicate keys are kept in order; get() answers with the first one.
    Pairs beyond the capacity are silently dropped.

    Example:
        >>> params = QueryParams.parse("a=1&b=2&a=3")
        >>> params.get("a")
        '1'
        >>> params.get_list("a")
        ['1', '3']
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: tuple[tuple[str, str], ...] = ()):
        self._pairs = tuple(pairs)

    @classmethod
    def parse(cls, raw_query: str, max_params: int = DEFAULT_MAX_PARAMS) -> "QueryParams":
        """
        Parse a raw query string (without the leading "?").

        Args:
            raw_query: Everything after the first "?" in the request target.
            max_params: Capacity; extra pairs are dropped.

        Returns:
            QueryParams in the order the pairs appeared.
        """
        pairs: list[tuple[str, str]] = []

        for segment in raw_query.split("&"):
            if len(pairs) >= max_params:
                break
            if not segment:
                continue

            key, sep, value = segment.partition("=")
            if not sep:
                continue  # "flag" with no "=" carries no pair

            pairs.append((decode_component(key), decode_component(value)))

        return cls(tuple(pairs))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value for key, or default."""
        for name, value in self._pairs:
            if name == key:
                return value
        return default

    def get_list(self, key: str) -> list[str]:
        """Return every value for key, in order."""
        return [value for name, value in self._pairs if name == key]

    def items(self) -> tuple[tuple[str, str], ...]:
        return self._pairs

    def keys(self) -> list[str]:
        return [name for name, _ in self._pairs]

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        return f"QueryParams({list(self._pairs)!r})"
