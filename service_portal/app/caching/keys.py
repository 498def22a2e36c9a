"""
Canonical cache key generation.
"""

import json
from typing import Any, Mapping, Optional

from shared.errors import CacheKeyError


# Separators of the key layout; a parameter name containing one could
# reproduce the key of a different parameter set.
RESERVED_NAME_CHARS = (":", "|")


def _check_name(name: Any) -> None:
    if not isinstance(name, str):
        raise CacheKeyError(
            "Cache key parameter names must be strings",
            details={"parameter": repr(name)},
        )
    if any(char in name for char in RESERVED_NAME_CHARS):
        raise CacheKeyError(
            f"Parameter name '{name}' contains a reserved character",
            details={"parameter": name, "reserved": list(RESERVED_NAME_CHARS)},
        )


def _check_mapping_keys(name: str, value: Any) -> None:
    # json.dumps turns {1: x} into {"1": x}; refuse instead of colliding.
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise CacheKeyError(
                    f"Parameter '{name}' has a non-string mapping key",
                    details={"parameter": name, "key": repr(key)},
                )
            _check_mapping_keys(name, item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_mapping_keys(name, item)


def _encode_value(name: str, value: Any) -> str:
    try:
        encoded = json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise CacheKeyError(
            f"Parameter '{name}' cannot be used in a cache key",
            details={"parameter": name, "type": type(value).__name__, "error": str(exc)},
        ) from exc
    # Encoding succeeded, so the value has no cycles to walk into.
    _check_mapping_keys(name, value)
    return encoded


def generate_cache_key(function_name: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a deterministic key from a query name and its parameters.

    Parameters are sorted by name and rendered as ``name:<json>`` pairs joined
    with ``|``, so construction order does not matter::

        >>> generate_cache_key("get_user_profile", {"user_id": "u1"})
        'get_user_profile:user_id:"u1"'

    Values must be plain JSON data. Tuples are treated as lists, so ``(1, 2)``
    and ``[1, 2]`` share a key; bound ``*args`` arrive as tuples. Callables,
    cyclic structures, NaN or infinite floats, mappings with non-string keys
    and parameter names containing ``:`` or ``|`` raise
    :class:`CacheKeyError` rather than producing a key that could collide
    with another input.
    """
    if not params:
        return function_name

    for name in params:
        _check_name(name)

    pairs = "|".join(f"{name}:{_encode_value(name, params[name])}" for name in sorted(params))
    return f"{function_name}:{pairs}"
