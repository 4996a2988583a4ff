#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
LinkClassifier Module:
Decides whether an anchor on a blog listing page points at a real article
(as opposed to tag, category, pagination or marketing pages) and works out a
usable title for it.
"""
import re
import logging
from datetime import date
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import Tag
from pydantic import BaseModel

from .Config import SiteProfile
from .DateResolver import SENTINEL_DATE
from .HtmlTree import closest, node_text


logger = logging.getLogger(__name__)

TITLE_CONTAINER_SELECTOR = 'article, .post, .blog-post, [class*="blog"]'
HEADING_SELECTOR = 'h2, h3'

# Anchor text at or above this length is trusted as the title.
MIN_ANCHOR_TITLE_LENGTH = 10
MIN_TITLE_LENGTH = 5


class CandidateLink(BaseModel):
    """An article link found on a listing page, not yet fetched."""
    url: str
    anchor_text: str = ""
    title: str
    listing_date: date = SENTINEL_DATE
    date_text: Optional[str] = None
    container_hint: Optional[str] = None
    position: int = 0


def describe_container(tag: Optional[Tag]) -> Optional[str]:
    """'article.post.card' style summary of an element, for logs and debugging."""
    if tag is None:
        return None
    classes = tag.get('class') or []
    return '.'.join([tag.name] + list(classes))


class LinkClassifier:
    """
    Link acceptance and title heuristics for one site.

    A link is an article link when its path sits directly under the blog root
    as a single slug segment and does not touch any excluded section.
    """

    def __init__(self, site: SiteProfile):
        self.site = site
        blog_root = '/' + site.blog_root.strip('/') + '/'
        self._blog_root = blog_root
        self._slug_pattern = re.compile(re.escape(blog_root) + r'[^/]+/?$')
        self._excluded = [f"{blog_root}{section}/" for section in site.listing_sections]
        self._excluded += [path.rstrip('/').lower() + '/' for path in site.excluded_paths]
        self._brand_pattern = re.compile(r'\b' + re.escape(site.brand_name) + r'\b', re.IGNORECASE)
        self._generic_labels = {label.lower() for label in site.generic_labels}
        self._generic_labels.add(site.brand_name.lower())

    # --- URL rules ---

    def is_article_url(self, url: str) -> bool:
        path = urlparse(url).path
        lowered = path.lower()
        if self._blog_root not in lowered:
            return False
        # Segment-boundary match: "/about" must not reject "/blogs/about-chatbots/".
        padded = lowered if lowered.endswith('/') else lowered + '/'
        if any(excluded in padded for excluded in self._excluded):
            return False
        return bool(self._slug_pattern.search(path))

    # --- Title rules ---

    def clean_title(self, text: Optional[str]) -> str:
        """Drops the brand token and collapses whitespace."""
        if not text:
            return ""
        without_brand = self._brand_pattern.sub('', text)
        return re.sub(r'\s+', ' ', without_brand).strip()

    def is_valid_title(self, title: Optional[str], min_length: int = MIN_TITLE_LENGTH) -> bool:
        if not title:
            return False
        if len(title) < min_length:
            return False
        return title.lower() != self.site.brand_name.lower()

    def needs_heading_fallback(self, anchor_text: str) -> bool:
        text = anchor_text.strip()
        return len(text) < MIN_ANCHOR_TITLE_LENGTH or text.lower() in self._generic_labels

    def resolve_anchor_title(self, anchor: Tag) -> str:
        """
        The anchor text, unless it is too short or generic. Then the first
        heading of the enclosing article-like container, or when there is no
        such container heading, the nearest earlier heading long enough to be
        a title.
        """
        title = node_text(anchor)
        if not self.needs_heading_fallback(title):
            return title

        container = closest(anchor, TITLE_CONTAINER_SELECTOR)
        if container is not None:
            heading = container.select_one(HEADING_SELECTOR)
            if heading is not None and node_text(heading):
                return node_text(heading)

        for heading in anchor.find_all_previous(['h2', 'h3']):
            heading_text = node_text(heading)
            if len(heading_text) > MIN_ANCHOR_TITLE_LENGTH:
                return heading_text
        return title

    # --- Combined ---

    def classify(self, anchor: Tag, base_url: str, position: int = 0) -> Optional[CandidateLink]:
        """
        Returns a CandidateLink for an acceptable article anchor, None otherwise.
        The listing date is left at the sentinel; the discoverer resolves it.
        """
        href = anchor.get('href')
        if not href or not href.strip():
            return None
        url = urljoin(base_url, href.strip())
        if not url.startswith(('http://', 'https://')):
            return None
        if not self.is_article_url(url):
            return None

        anchor_text = node_text(anchor)
        title = self.clean_title(self.resolve_anchor_title(anchor))
        if not self.is_valid_title(title):
            logger.debug("Rejected title %r for %s", title, url)
            return None

        return CandidateLink(
            url=url,
            anchor_text=anchor_text,
            title=title,
            container_hint=describe_container(closest(anchor, TITLE_CONTAINER_SELECTOR)),
            position=position,
        )

