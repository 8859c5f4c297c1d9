import time


def get_current_timestamp() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)
