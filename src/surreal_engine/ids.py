"""Process-wide correlation identifiers for RPC requests."""

import threading

# Largest integer a JavaScript peer can represent exactly.
MAX_SAFE_ID = 2**53 - 1

_lock = threading.Lock()
_last_id = 0


def next_incremental_id() -> int:
    """Return the next identifier; unique within the process, wraps to 1 after MAX_SAFE_ID."""
    global _last_id
    with _lock:
        _last_id = _last_id + 1 if _last_id < MAX_SAFE_ID else 1
        return _last_id
