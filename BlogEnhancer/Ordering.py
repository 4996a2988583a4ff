#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Ordering Module:
Dedup and oldest-first selection over anything that has a `url` and a
`listing_date` (CandidateLink by default).
"""
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from .DateResolver import is_sentinel


T = TypeVar('T')


def _listing_date(item) -> Optional[date]:
    return getattr(item, 'listing_date', None)


def dedupe_by_url(items: Sequence[T]) -> List[T]:
    """Drops items whose url was already seen. The first occurrence wins."""
    seen = set()
    unique = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


def partition_dated(items: Sequence[T],
                    date_key: Callable[[T], Optional[date]] = _listing_date) -> Tuple[List[T], List[T]]:
    """Splits items into (real date, sentinel or missing date), keeping order."""
    dated, undated = [], []
    for item in items:
        (undated if is_sentinel(date_key(item)) else dated).append(item)
    return dated, undated


def select_oldest(items: Sequence[T],
                  count: int,
                  date_key: Callable[[T], Optional[date]] = _listing_date) -> List[T]:
    """
    Picks the `count` oldest items.

    Duplicates are collapsed first. When any item has a real date, undated
    items are dropped; otherwise the undated items are kept in discovery
    order. Sorting is stable, so items with equal dates keep discovery order.
    """
    if count <= 0:
        return []
    unique = dedupe_by_url(items)
    dated, undated = partition_dated(unique, date_key)
    if dated:
        return sorted(dated, key=date_key)[:count]
    return undated[:count]
