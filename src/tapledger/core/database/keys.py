"""
Deterministic record key derivation.

Every persisted record is addressed by a key computed from a namespace and
zero or more identity parts, so the same inputs always locate the same
record and no two distinct inputs collide in practice.

Keys are the hex SHA-256 digest of the length-prefixed UTF-8 encoding of
each component. Length prefixing keeps ``("ab", "c")`` and ``("a", "bc")``
apart.

Example
-------
>>> GLOBAL_RECORD_KEY == derive_record_key("game_state")
True
>>> player_record_key("alice") == player_record_key("alice")
True
>>> player_record_key("alice") == player_record_key("bob")
False
"""

from __future__ import annotations

import hashlib

GLOBAL_NAMESPACE = "game_state"
PLAYER_NAMESPACE = "player"

RECORD_KEY_LENGTH = 64


def derive_record_key(namespace: str, *parts: str) -> str:
    """
    Derive the storage key for ``namespace`` and ``parts``.

    Raises
    ------
    ValueError
        If the namespace is empty or reserved (starts with ``__``), or if any
        component is not a string.
    """
    if not isinstance(namespace, str) or not namespace:
        raise ValueError("Record key namespace must be a non-empty string")
    if namespace.startswith("__"):
        raise ValueError(f"Record key namespace '{namespace}' is reserved")

    digest = hashlib.sha256()
    for component in (namespace, *parts):
        if not isinstance(component, str):
            raise ValueError(
                f"Record key components must be strings, got {type(component).__name__}"
            )
        encoded = component.encode("utf-8")
        digest.update(len(encoded).to_bytes(8, "big"))
        digest.update(encoded)
    return digest.hexdigest()


def player_record_key(identity: str) -> str:
    """Key of the player record owned by ``identity``."""
    return derive_record_key(PLAYER_NAMESPACE, identity)


GLOBAL_RECORD_KEY = derive_record_key(GLOBAL_NAMESPACE)
