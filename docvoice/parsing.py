"""Shared parsing helpers for config and environment value normalization."""

from __future__ import annotations


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a positive integer from an int or decimal string.

    Raises:
        ValueError: If the value is a boolean, non-numeric, or not positive.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive integer.")
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_extension_list(value: object, field_name: str) -> tuple[str, ...]:
    """Parse document extensions from a list or comma-separated string.

    Each extension is lower-cased and given a leading dot.
    """

    if isinstance(value, str):
        raw_items: list[object] = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw_items = list(value)
    else:
        raise ValueError(f"`{field_name}` must be a list of file extensions.")

    extensions: list[str] = []
    for item in raw_items:
        normalized = normalize_optional_string(item)
        if normalized is None:
            continue
        lowered = normalized.lower()
        extensions.append(lowered if lowered.startswith(".") else f".{lowered}")
    if not extensions:
        raise ValueError(f"`{field_name}` must name at least one file extension.")
    return tuple(extensions)
