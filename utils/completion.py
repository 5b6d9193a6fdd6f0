from typing import Any


def is_completed(value: Any) -> bool:
    """
    Read a completion flag that may be stored in a legacy form

    Historical records mark a task as done with boolean True, the number 1
    or the string "yes". Anything else counts as not done.

    Args:
        value: Raw completion value

    Returns:
        Canonical boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() == "yes"
    return False
