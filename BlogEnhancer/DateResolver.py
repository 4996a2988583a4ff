#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
DateResolver Module:
Turns the loose date strings found on blog pages into calendar dates.
Unresolvable dates become SENTINEL_DATE so that candidates still have a total
order and sort after every real date.
"""
import re
import logging
from datetime import date, datetime
from typing import Optional, Tuple

from bs4 import Tag
from dateutil import parser as date_parser

from .HtmlTree import closest, node_text


logger = logging.getLogger(__name__)

SENTINEL_DATE = date(1900, 1, 1)

EXPLICIT_FORMATS = ['%B %d, %Y', '%b %d, %Y', '%Y-%m-%d', '%d/%m/%Y']

LISTING_CONTAINER_SELECTOR = 'article, .post, .blog-post, .entry, [class*="blog"]'

DATE_ELEMENT_SELECTOR = 'time, [datetime], .date, .published-date, .post-date, [class*="date"]'

DATE_TEXT_PATTERNS = [
    re.compile(r'(\w+\s+\d{1,2},\s+\d{4})'),     # January 5, 2024
    re.compile(r'(\d{1,2}/\d{1,2}/\d{4})'),      # 05/01/2024
]


def is_sentinel(value: Optional[date]) -> bool:
    return value is None or value <= SENTINEL_DATE


def parse_date_text(text: Optional[str]) -> Optional[date]:
    """
    Parses a date string.

    dateutil gets the first try since it copes with ISO timestamps and most
    human formats. The explicit formats are tried afterwards in order.

    Returns:
        The calendar date, or None when nothing could parse the text.
    """
    if not text or not text.strip():
        return None
    text = text.strip()

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError):
        pass

    for fmt in EXPLICIT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    logger.debug("Unparseable date text: %r", text)
    return None


def find_container_date_text(container: Optional[Tag]) -> Optional[str]:
    """
    Looks for date text inside a container: first a machine readable
    `datetime` attribute or the text of a date-labelled element, then the
    date regexes over the whole container text.
    """
    if container is None:
        return None

    date_element = container.select_one(DATE_ELEMENT_SELECTOR)
    if date_element is not None:
        attr_value = date_element.get('datetime')
        if attr_value and attr_value.strip():
            return attr_value.strip()
        text = node_text(date_element)
        if text:
            return text

    container_text = node_text(container)
    for pattern in DATE_TEXT_PATTERNS:
        match = pattern.search(container_text)
        if match:
            return match.group(1)
    return None


def resolve_listing_date(anchor: Tag) -> Tuple[date, Optional[str]]:
    """
    Resolves the date of a listing entry from the container around its anchor.

    Returns:
        (date, raw date text). The date is SENTINEL_DATE when no container,
        no date text, or no parseable date was found.
    """
    container = closest(anchor, LISTING_CONTAINER_SELECTOR)
    date_text = find_container_date_text(container)
    parsed = parse_date_text(date_text)
    if parsed is None:
        return SENTINEL_DATE, date_text
    return parsed, date_text
