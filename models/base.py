# models/base.py

from datetime import datetime, timezone


def materialize_timestamp(value):
    """
    Normalize a stored timestamp before pydantic parses it.

    Missing values become "now" (a document read back before the store
    filled its server timestamp), and trailing-Z ISO strings are made
    parseable on every Python version.
    """
    if value is None or value == "":
        return datetime.now(timezone.utc)
    if isinstance(value, str) and value.endswith("Z"):
        return value[:-1] + "+00:00"
    return value
