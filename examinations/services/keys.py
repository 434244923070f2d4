"""Key checks shared by the lookup services. Unusable keys mean "not found"."""
import re

_INTEGER = re.compile(r"-?[0-9]+")


def is_valid_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_valid_username(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def coerce_id(value):
    """Turn an integer-like string from a payload into an int. Anything else is returned as is."""
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    return value
