"""
Followed Categories Filter Module

Resolves the user's subscription preference into the concrete list of
categories to sync or display. A preference of None means "follow all".
"""

import logging
from typing import List, Optional, Sequence

from kite_news.models.news_models import Category

# Configure logging
logger = logging.getLogger(__name__)


def resolve_followed(saved: Optional[Sequence[str]], all_known: Sequence[str]) -> List[str]:
    """
    Turn a saved preference into a working set of category identifiers.

    Args:
        saved: Saved followed list, or None for "all"
        all_known: Identifiers of every category in the current index, in order

    Returns:
        The saved identifiers in their stored order, or all known categories
        when nothing explicit is saved. Unknown identifiers are not validated.
    """
    if not saved:
        return list(all_known)
    return list(saved)


def normalize_for_save(selected: Optional[Sequence[str]],
                       all_known: Sequence[str]) -> Optional[List[str]]:
    """
    Normalize a selection before persisting it.

    An empty selection and a selection covering every known category are
    both stored as None, so categories added upstream later are followed too.

    Args:
        selected: Category identifiers the user picked
        all_known: Identifiers of every category in the current index

    Returns:
        None for "all", otherwise the selection verbatim
    """
    if not selected:
        return None
    if all_known and set(selected) == set(all_known):
        logger.debug("Selection covers every known category, storing 'follow all'")
        return None
    return list(selected)


def filter_categories(categories: Sequence[Category],
                      followed: Optional[Sequence[str]]) -> List[Category]:
    """Return the followed categories of an index, in index order."""
    if not followed:
        return list(categories)
    followed_set = set(followed)
    return [category for category in categories if category.file in followed_set]
