from __future__ import annotations

import random
import time
from datetime import datetime, timezone
from threading import Lock

CUSTOM_EPOCH_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z
TIMESTAMP_SHIFT = 22
RANDOM_SHIFT = 12
MAX_SEQUENCE = 0xFFF
SNOWFLAKE_WIDTH = 19

_lock = Lock()
_last_timestamp_ms = 0
_sequence = 0
_random_bits = 0


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def generate_snowflake() -> str:
    """Return a time-sortable id, zero padded so string order matches numeric order."""
    global _last_timestamp_ms, _sequence, _random_bits

    with _lock:
        timestamp_ms = max(_now_ms(), _last_timestamp_ms)
        if timestamp_ms == _last_timestamp_ms:
            _sequence = (_sequence + 1) & MAX_SEQUENCE
            if _sequence == 0:
                while timestamp_ms <= _last_timestamp_ms:
                    timestamp_ms = _now_ms()
        if timestamp_ms != _last_timestamp_ms:
            # Random bits are fixed within a millisecond.
            _sequence = 0
            _random_bits = random.getrandbits(10)
        _last_timestamp_ms = timestamp_ms
        sequence = _sequence
        random_bits = _random_bits

    value = ((timestamp_ms - CUSTOM_EPOCH_MS) << TIMESTAMP_SHIFT) | (random_bits << RANDOM_SHIFT) | sequence
    return f'{value:0{SNOWFLAKE_WIDTH}d}'


def snowflake_timestamp(value: str) -> datetime | None:
    try:
        raw = int(value)
    except (TypeError, ValueError):
        return None
    if raw < 0:
        return None
    timestamp_ms = (raw >> TIMESTAMP_SHIFT) + CUSTOM_EPOCH_MS
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
