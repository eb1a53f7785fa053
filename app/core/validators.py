import re
from typing import Any

from postgrest.exceptions import APIError

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

UNIQUE_VIOLATION = "23505"


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def is_unique_violation(error: Exception) -> bool:
    """True for a Postgres unique-constraint violation reported through PostgREST"""
    if isinstance(error, APIError) and error.code == UNIQUE_VIOLATION:
        return True
    return "duplicate key value" in str(error).lower()


def derive_bin_status(fill_level: float, warning_threshold: float, full_threshold: float) -> str:
    """Map a fill percentage to normal / warning / full"""
    if fill_level >= full_threshold:
        return "full"
    if fill_level >= warning_threshold:
        return "warning"
    return "normal"
