"""
=============================================================================
HEADER MAP
=============================================================================

HTTP header names are case-insensitive (RFC 7230 section 3.2):
"Content-Type", "content-type" and "CONTENT-TYPE" name the same field.

A plain dict gets this wrong in one of two ways:

    - Store keys as sent   → lookups must try every spelling
    - Store keys lowered   → responses go out as "content-length: 5"

Headers keeps both: a lowercased key for lookup and the caller's spelling
for serialization.

    ┌──────────────────┬──────────────────────────────────┐
    │  lookup key      │  (display name, value)           │
    ├──────────────────┼──────────────────────────────────┤
    │  "content-type"  │  ("Content-Type", "text/plain")  │
    │  "content-length"│  ("Content-Length", "5")         │
    └──────────────────┴──────────────────────────────────┘

The backing dict preserves insertion order, so serialization is
deterministic: headers go out in the order they were first set.

=============================================================================
"""

from collections.abc import Mapping, MutableMapping
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union


class Headers(MutableMapping):
    """
    Case-insensitive, insertion-ordered header map.

    Usage:
        headers = Headers({"Content-Type": "text/plain"})
        headers["content-type"]          # "text/plain"
        "CONTENT-TYPE" in headers        # True
        headers["Content-Length"] = "5"
        list(headers.items())
        # [("Content-Type", "text/plain"), ("Content-Length", "5")]

    Re-assigning an existing header (in any case) replaces its value in
    place: the position is kept, the spelling is updated.
    """

    def __init__(
        self,
        data: Optional[Union["Headers", Dict[str, str], Iterable[Tuple[str, str]]]] = None,
        **kwargs: str,
    ):
        self._store: Dict[str, Tuple[str, str]] = {}
        if data is not None:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    # =========================================================================
    # MutableMapping protocol
    # =========================================================================

    def __setitem__(self, name: str, value: str) -> None:
        self._store[name.lower()] = (name, value)

    def __getitem__(self, name: str) -> str:
        return self._store[name.lower()][1]

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (display for display, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name.lower() in self._store

    # =========================================================================
    # Extras
    # =========================================================================

    def lower_items(self) -> Iterator[Tuple[str, str]]:
        """Yield (lowercased name, value) pairs."""
        return ((key, pair[1]) for key, pair in self._store.items())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return dict(self.lower_items()) == dict(other.lower_items())
        if isinstance(other, Mapping):
            return dict(self.lower_items()) == {
                str(k).lower(): v for k, v in other.items()
            }
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"
