"""Helpers for notigate notification identifiers."""

from __future__ import annotations

from typing import Optional, Tuple

IDENTIFIER_PREFIX = "NIG"
VERSION_MARKER = "_v"
ENTRY_MARKER = "_id"


def mint_identifier(version: str, entry_id: int) -> str:
    """Return the stable identifier for one schedule entry of one version."""

    return f"{IDENTIFIER_PREFIX}{VERSION_MARKER}{version}{ENTRY_MARKER}{entry_id}"


def split_identifier(identifier: str) -> Optional[Tuple[str, int]]:
    """Split an identifier into (version, entry_id).

    Returns None for identifiers minted outside this namespace. The entry id
    is taken from the last marker so versions may themselves contain "_id".
    """

    head = f"{IDENTIFIER_PREFIX}{VERSION_MARKER}"
    if not identifier.startswith(head):
        return None
    version, sep, entry_part = identifier[len(head):].rpartition(ENTRY_MARKER)
    if not sep:
        return None
    try:
        return version, int(entry_part)
    except ValueError:
        return None
