# utils/ids.py
from typing import Any, Optional


def normalize_id(value: Any) -> Optional[int]:
    """Reduce any external id shape to the canonical integer id.

    Accepts a bare int, a numeric string, or a mapping carrying ``id`` or
    ``_id`` (possibly nested). Returns None for an empty value and raises
    ValueError for anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid identifier: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if isinstance(value, dict):
        for key in ("id", "_id"):
            if key in value:
                return normalize_id(value[key])
    raise ValueError(f"Invalid identifier: {value!r}")


def normalize_ref(value: Any) -> Any:
    """Like ``normalize_id``, but a non-numeric string is kept as a code."""
    if isinstance(value, str) and value.strip() and not value.strip().isdigit():
        return value.strip()
    return normalize_id(value)
