"""Identifier reconciliation for entities keyed by one of two JSON fields.

List endpoints and single-fetch endpoints do not always agree on the name of
an entity's primary key (``userId`` vs ``contactId`` for contacts,
``contactGroupId`` vs ``id`` for contact groups). The resolver keeps one
value and a flag recording whether the primary field was ever written; once
it has been, writes coming from the fallback field are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class DualFieldIdentity:
    """One identifier fed from a primary and a fallback wire field."""

    def __init__(self, primary: str, fallback: str) -> None:
        self.primary = primary
        self.fallback = fallback
        self.value: Any = None
        self.primary_written = False
        self.fallback_written = False

    def write_primary(self, value: Any) -> None:
        self.value = value
        self.primary_written = True

    def write_fallback(self, value: Any) -> None:
        self.fallback_written = True
        if not self.primary_written:
            self.value = value

    @property
    def written(self) -> bool:
        return self.primary_written or self.fallback_written

    def feed(self, items: Iterable[tuple[str, Any]], *, case_insensitive: bool = True) -> None:
        """Apply ``(key, value)`` pairs in arrival order."""
        primary = self.primary.lower() if case_insensitive else self.primary
        fallback = self.fallback.lower() if case_insensitive else self.fallback
        for key, value in items:
            name = key.lower() if case_insensitive else key
            if name == primary:
                self.write_primary(value)
            elif name == fallback:
                self.write_fallback(value)


def resolve_identity(
    payload: Mapping[str, Any],
    primary: str,
    fallback: str,
    *,
    case_insensitive: bool = True,
) -> dict[str, Any]:
    """Return a copy of *payload* with the identifier folded into *primary*.

    Both wire keys are removed and, when either was present, the resolved
    value is stored under *primary*.
    """
    identity = DualFieldIdentity(primary, fallback)
    identity.feed(payload.items(), case_insensitive=case_insensitive)

    keys = {primary, fallback}
    if case_insensitive:
        keys = {k.lower() for k in keys}
    result = {
        key: value
        for key, value in payload.items()
        if (key.lower() if case_insensitive else key) not in keys
    }
    if identity.written:
        result[primary] = identity.value
    return result
