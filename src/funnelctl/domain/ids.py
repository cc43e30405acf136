"""Node and edge ID generation.

IDs are 21-character URL-safe random strings. They are assigned once at
creation and never change.
"""

from __future__ import annotations

import secrets

ID_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
ID_LENGTH = 21


def generate_id(length: int = ID_LENGTH) -> str:
    """Return a fresh random ID drawn from :data:`ID_ALPHABET`."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
