"""Derived storage names for ``(namespace, key)`` pairs.

Both backends store a credential under ``{namespace}_{key}_{hash8}``. The
readable part alone is ambiguous when names contain ``_``, so the hash is
taken over an encoding that keeps the two parts apart.
"""

from __future__ import annotations

import hashlib
import json
from typing import Optional

HASH_LENGTH = 8


def derived_name(namespace: str, key: str) -> str:
    encoded = json.dumps([namespace, key]).encode("utf-8")
    digest = hashlib.sha256(encoded).hexdigest()
    return f"{namespace}_{key}_{digest[:HASH_LENGTH]}"


def key_from_name(namespace: str, name: str) -> Optional[str]:
    """Return the key ``name`` was derived from, or ``None`` if it belongs elsewhere."""
    prefix = f"{namespace}_"
    if not name.startswith(prefix):
        return None
    key, sep, _digest = name[len(prefix):].rpartition("_")
    if not sep or not key or derived_name(namespace, key) != name:
        return None
    return key
