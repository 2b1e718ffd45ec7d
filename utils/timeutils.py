from datetime import datetime, timedelta, timezone


def utc_now():
    # Naive UTC, which is what SQLite DateTime columns round-trip
    return datetime.now(timezone.utc).replace(tzinfo=None)


def next_stamp(previous=None):
    """Current time, forced strictly past `previous` when the clock has not moved."""
    now = utc_now()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def iso(dt):
    return dt.isoformat(timespec="microseconds") + "Z" if dt else None


def ts_label(dt=None):
    return (dt or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def file_stamp(dt=None):
    return (dt or datetime.now()).strftime("%Y%m%d_%H%M%S")
