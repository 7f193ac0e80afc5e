"""
API key hygiene.

Raw values come from the environment; anything unset, blank, still equal to
its documented placeholder, or too short to be a real key is dropped before
it reaches the KeyRotator.
"""

from typing import List, Optional, Sequence

PLACEHOLDER_PREFIX = "YOUR_"
DEFAULT_MIN_KEY_LENGTH = 6


def is_placeholder_key(
    key: Optional[str],
    placeholder: Optional[str] = None,
    min_length: int = DEFAULT_MIN_KEY_LENGTH,
) -> bool:
    """True when ``key`` cannot be a usable credential."""
    if key is None:
        return True
    key = key.strip()
    if not key:
        return True
    if placeholder is not None and key == placeholder:
        return True
    if key.upper().startswith(PLACEHOLDER_PREFIX):
        return True
    return len(key) < min_length


def filter_api_keys(
    raw_values: Sequence[Optional[str]],
    placeholders: Sequence[str] = (),
    min_length: int = DEFAULT_MIN_KEY_LENGTH,
) -> List[str]:
    """
    Keep the usable keys in configuration order, stripped and de-duplicated.

    ``placeholders[i]`` is the documented placeholder for ``raw_values[i]``.
    """
    keys: List[str] = []
    for index, raw in enumerate(raw_values):
        placeholder = placeholders[index] if index < len(placeholders) else None
        if is_placeholder_key(raw, placeholder, min_length):
            continue
        key = raw.strip()
        if key not in keys:
            keys.append(key)
    return keys
