"""
Shared Utility Functions

Common helper functions used across multiple modules.
"""

from typing import Any, Iterable, List


def flatten_list(items: Any) -> List[str]:
    """
    Flatten a potentially nested list to a single-level list of strings.

    Handles various formats:
    - Nested lists: [["a", "b"]] → ["a", "b"]
    - Flat lists: ["a", "b"] → ["a", "b"]
    - Single string: "a" → ["a"]
    - None/empty: None → []

    Args:
        items: Any value that could be a list, nested list, or string

    Returns:
        Flat list of strings
    """
    if not items:
        return []

    if isinstance(items, str):
        return [items]

    if not isinstance(items, (list, tuple)):
        return [str(items)]

    result = []
    for item in items:
        if isinstance(item, (list, tuple)):
            result.extend(flatten_list(item))
        elif isinstance(item, str):
            result.append(item)
        else:
            result.append(str(item))

    return result


def normalize_text(text: str) -> str:
    """Case-fold text for matching. No other transformation is applied."""
    return (text or "").casefold()


def unique_in_order(items: Iterable[str]) -> List[str]:
    """
    Drop duplicates while keeping first-seen order.

    Example:
        ["C1", "U2", "C1"] → ["C1", "U2"]
    """
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
