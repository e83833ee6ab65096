"""
Sorting Utilities Module

Provides sorting functions for statistics output.
"""

import unicodedata
from typing import List

from domain.entities import UserStat


def get_name_key(name: str) -> tuple:
    """
    Sort key for a worker name: accent-insensitive, case-insensitive.
    Returns tuple of (folded_name, full_name) for stable sorting.
    """
    if not name:
        return ("", "")
    folded = unicodedata.normalize("NFKD", name)
    folded = "".join(c for c in folded if not unicodedata.combining(c)).casefold()
    return (folded, name)


def sort_user_stats(
    user_stats: List[UserStat],
    sort_by: str = "name"
) -> List[UserStat]:
    """
    Sort per-worker statistics by specified criteria.

    Args:
        user_stats: List of UserStat objects
        sort_by: "name" or "balance"

    Returns:
        Sorted list (new list, does not modify original)
    """
    if sort_by == "balance":
        # Largest debt first, ties by name
        return sorted(
            user_stats,
            key=lambda s: (s.balance_minutes, get_name_key(s.user_name))
        )
    return sorted(user_stats, key=lambda s: get_name_key(s.user_name))
