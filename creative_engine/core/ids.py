"""Prefixed, time-sortable identifiers for engine-owned rows."""

from __future__ import annotations

import secrets
import threading
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_state = {"millis": 0, "counter": 0}
_LOCK = threading.Lock()


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    chars: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        chars.append(_ALPHABET[remainder])
    return "".join(reversed(chars))


def generate_id(prefix: str, *, random_length: int = 10) -> str:
    """Return `<prefix>_<base36 millis><counter><random>`.

    Ids created by one process sort by creation time; the counter keeps ids
    minted within the same millisecond ordered and distinct.
    """
    now_millis = int(time.time() * 1000)
    with _LOCK:
        if now_millis <= _state["millis"]:
            _state["counter"] += 1
        else:
            _state["millis"] = now_millis
            _state["counter"] = 0
        millis = _state["millis"]
        counter = _state["counter"]

    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(max(random_length, 0)))
    return f"{prefix}_{_to_base36(millis)}{_to_base36(counter).rjust(4, '0')}{random_part}"
