"""
Case-insensitive header storage with a single canonicalization point.

Keys are canonicalized on every insertion and lookup, so ``content-type``,
``CONTENT-TYPE`` and ``Content-Type`` all address the same entry. Iteration
yields keys in sorted order, which keeps response serialization
deterministic.
"""

from collections.abc import MutableMapping
from typing import Dict, Iterator


def canonical_header_key(key: str) -> str:
    """Capitalize each hyphen-delimited segment of a header name.

    >>> canonical_header_key("content-type")
    'Content-Type'
    >>> canonical_header_key("x-FORWARDED-for")
    'X-Forwarded-For'
    """
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class HeaderMap(MutableMapping):
    """Mutable mapping of canonical header names to values."""

    __slots__ = ("_items",)

    def __init__(self, *args, **kwargs):
        self._items: Dict[str, str] = {}
        self.update(*args, **kwargs)

    def __getitem__(self, key: str) -> str:
        return self._items[canonical_header_key(key)]

    def __setitem__(self, key: str, value: str) -> None:
        self._items[canonical_header_key(key)] = value

    def __delitem__(self, key: str) -> None:
        del self._items[canonical_header_key(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return canonical_header_key(key) in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderMap):
            return self._items == other._items
        return super().__eq__(other)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"HeaderMap({{{items}}})"

    def copy(self) -> "HeaderMap":
        return HeaderMap(self._items)
