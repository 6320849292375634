import time
from datetime import datetime, timezone


def epoch_now() -> int:
    """Current time as integer epoch seconds (the store's timestamp unit)."""
    return int(time.time())


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def file_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
