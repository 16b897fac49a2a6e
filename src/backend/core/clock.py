"""Wall-clock helpers. Timestamps are persisted as epoch milliseconds."""

import time


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)
