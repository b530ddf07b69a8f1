"""
Configuration merger for OpenCode Harness.

Implements deep merge and dotted-key access over plain dictionaries.
"""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Merge rules:
    - Scalar values and lists: override replaces base
    - Dicts: recursive deep merge
    - null/None value: remove key from result

    Args:
        base: Base configuration dictionary.
        override: Override configuration dictionary.

    Returns:
        Merged configuration dictionary.

    Examples:
        >>> deep_merge({"context": {"max_tokens": 1, "auto_compact": True}},
        ...            {"context": {"max_tokens": 2}})
        {'context': {'max_tokens': 2, 'auto_compact': True}}
    """
    result = base.copy()

    for key, value in override.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def set_nested_value(config: dict[str, Any], key: str, value: Any) -> dict[str, Any]:
    """
    Set a value using a dotted key, creating intermediate dicts.

    Args:
        config: Configuration dictionary.
        key: Dotted key path.
        value: Value to set.

    Returns:
        A new dictionary with the value set.
    """
    head, _, rest = key.partition(".")
    result = config.copy()

    if not rest:
        result[head] = value
        return result

    child = result.get(head)
    result[head] = set_nested_value(child if isinstance(child, dict) else {}, rest, value)
    return result
