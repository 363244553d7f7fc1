from __future__ import annotations

from typing import Any, Union

from .errors import KeyTypeError

Key = Union[str, int, float]


def is_valid_key(key: Any) -> bool:
    # bool is an int subclass but never a valid document id here
    if isinstance(key, bool):
        return False
    return isinstance(key, (str, int, float))


def validate_key(key: Any) -> Key:
    """
    Only the type is checked: falsy keys such as `0` and `""` are valid,
    bool never is.
    """
    if not is_valid_key(key):
        raise KeyTypeError(f"Keys should be strings or numbers, got {type(key).__name__}")
    return key
