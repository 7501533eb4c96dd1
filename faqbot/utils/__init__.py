"""
Utility package exports
"""

from faqbot.utils.helpers import flatten_list, normalize_text, unique_in_order

__all__ = ["flatten_list", "normalize_text", "unique_in_order"]
