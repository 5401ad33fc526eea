"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations

from collections.abc import Iterable


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


def parse_keyword_list(value: object) -> tuple[str, ...]:
    """Parse a comma-separated string or a sequence into trimmed non-empty keywords.

    Keyword order is preserved and duplicates are dropped. Keywords keep their
    case because filter matching is case-sensitive.

    Raises:
        ValueError: If the value is neither a string nor an iterable of scalars.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        raw_items: Iterable[object] = value.split(",")
    elif isinstance(value, Iterable):
        raw_items = value
    else:
        raise ValueError("Keyword list must be a comma-separated string or a list.")

    keywords: list[str] = []
    for item in raw_items:
        if isinstance(item, (dict, list, tuple, set)):
            raise ValueError("Keyword list entries must be scalar values.")
        keyword = normalize_optional_string(item)
        if keyword is not None and keyword not in keywords:
            keywords.append(keyword)
    return tuple(keywords)


def parse_positive_number(
    value: object, field_name: str, *, integer: bool = False
) -> int | float:
    """Parse a strictly positive number from text or numeric input.

    Raises:
        ValueError: If the value is missing, non-numeric, boolean, or not positive.
    """

    kind = "integer" if integer else "number"
    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive {kind}.")
    if isinstance(value, (int, float)):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive {kind}.")
        try:
            parsed = int(normalized) if integer else float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive {kind}.") from exc
    if integer and (isinstance(parsed, float) and not parsed.is_integer()):
        raise ValueError(f"`{field_name}` must be a positive {kind}.")
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive {kind}.")
    return int(parsed) if integer else float(parsed)
