#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Discoverer Module:
Defines the IDiscoverer interface and the paginated blog-listing discoverer
that finds the oldest article links of a blog.
"""
import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

from bs4 import BeautifulSoup

from .Config import SiteProfile
from .DateResolver import resolve_listing_date
from .HtmlTree import parse_html, node_text
from .LinkClassifier import CandidateLink, LinkClassifier
from .Ordering import dedupe_by_url, select_oldest

if TYPE_CHECKING:
    from .Fetcher import Fetcher


logger = logging.getLogger(__name__)

PAGINATION_SELECTOR = 'a[href*="page/"], .pagination a, .page-numbers a'
PAGE_NUMBER_PATTERN = re.compile(r'page/(\d+)')

# The degraded scan only trusts titles longer than this.
ALTERNATIVE_MIN_TITLE_LENGTH = 11


class IDiscoverer(ABC):
    """
    Abstract base class for a discovery component.

    A discoverer turns a site into a list of candidate article links. It
    relies on an injected Fetcher for all network operations and keeps a
    log of the last operation in `log_messages`.
    """

    def __init__(self, fetcher: "Fetcher"):
        """
        :param fetcher: An instance of a Fetcher implementation.
        """
        self.fetcher = fetcher
        self.log_messages: List[str] = []

    def _log(self, message: str, indent: int = 0):
        log_msg = f"{' ' * (indent * 4)}{message}"
        self.log_messages.append(log_msg)
        logger.info(log_msg)

    def _fetch_soup(self, url: str) -> Optional[BeautifulSoup]:
        content = self.fetcher.get_content(url)
        if not content:
            self._log(f"[Fetch] No content from {url}", indent=1)
            return None
        return parse_html(content)

    @abstractmethod
    def discover(self, count: int) -> List[CandidateLink]:
        """
        Finds up to `count` candidate article links.

        :param count: Number of candidates wanted.
        :return: Candidates in the order they should be processed.
        """
        pass


class BlogListDiscoverer(IDiscoverer):
    """
    Walks the paginated listing of a blog (`/blogs/`, `/blogs/page/2/`, ...)
    and returns the oldest article links.

    The number of pages is the highest page number the pagination controls
    on page 1 mention, capped by `max_pages`. Pages that fail to load are
    skipped. If nothing at all is found, a single-page degraded scan runs.
    """

    def __init__(self,
                 fetcher: "Fetcher",
                 site: Optional[SiteProfile] = None,
                 max_pages: int = 10,
                 classifier: Optional[LinkClassifier] = None):
        super().__init__(fetcher)
        self.site = site or SiteProfile()
        self.max_pages = max(1, max_pages)
        self.classifier = classifier or LinkClassifier(self.site)
        self._anchor_selector = f'a[href*="/{self.site.blog_root.strip("/")}/"]'

    def listing_url(self, page: int) -> str:
        return self.site.listing_url(page)

    # --- Pagination ---

    def find_last_page(self) -> int:
        """
        Fetches page 1 and returns the highest page number found in the
        pagination links (by `page/<n>` target or numeric link text).
        Returns 1 when the page cannot be fetched or has no pagination.
        """
        soup = self._fetch_soup(self.listing_url(1))
        if soup is None:
            self._log("[Pagination] Could not load page 1, assuming a single page.")
            return 1

        last_page = 1
        for link in soup.select(PAGINATION_SELECTOR):
            match = PAGE_NUMBER_PATTERN.search(link.get('href') or '')
            if match:
                last_page = max(last_page, int(match.group(1)))
            text = node_text(link)
            if text.isdigit():
                last_page = max(last_page, int(text))
        return last_page

    # --- Listing scan ---

    def scan_listing_page(self, page: int, position_offset: int = 0) -> List[CandidateLink]:
        """
        Returns the candidates of one listing page with their listing dates
        resolved. Duplicate URLs within the page keep the first occurrence.
        An unreachable page yields an empty list.
        """
        url = self.listing_url(page)
        self._log(f"[Scan] Page {page}: {url}")
        soup = self._fetch_soup(url)
        if soup is None:
            return []

        candidates: List[CandidateLink] = []
        seen = set()
        for anchor in soup.select(self._anchor_selector):
            candidate = self.classifier.classify(anchor, url, position=position_offset + len(candidates))
            if candidate is None or candidate.url in seen:
                continue
            listing_date, date_text = resolve_listing_date(anchor)
            candidate.listing_date = listing_date
            candidate.date_text = date_text
            seen.add(candidate.url)
            candidates.append(candidate)

        self._log(f"[Scan] Page {page}: {len(candidates)} candidate(s)", indent=1)
        return candidates

    def discover(self, count: int) -> List[CandidateLink]:
        self.log_messages.clear()
        if count <= 0:
            return []

        last_page = self.find_last_page()
        pages = min(last_page, self.max_pages)
        self._log(f"[Discover] Last page {last_page}, visiting {pages} page(s)")

        collected: List[CandidateLink] = []
        for page in range(1, pages + 1):
            collected.extend(self.scan_listing_page(page, position_offset=len(collected)))

        unique = dedupe_by_url(collected)
        selected = select_oldest(unique, count)
        self._log(f"[Discover] {len(unique)} unique candidate(s), selected {len(selected)} oldest")
        for candidate in selected:
            self._log(f"- {candidate.title} ({candidate.listing_date.isoformat()})", indent=1)

        if not selected:
            self._log("[Discover] No candidates found, trying the alternative scan")
            selected = self.alternative_scan(count)
        return selected

    def alternative_scan(self, count: int) -> List[CandidateLink]:
        """
        Degraded single-page scan: same link rules, stricter title length,
        no date resolution. Stops once `count` candidates are collected.
        """
        soup = self._fetch_soup(self.listing_url(1))
        if soup is None:
            return []

        url = self.listing_url(1)
        candidates: List[CandidateLink] = []
        seen = set()
        for anchor in soup.select(self._anchor_selector):
            if len(candidates) >= count:
                break
            candidate = self.classifier.classify(anchor, url, position=len(candidates))
            if candidate is None or candidate.url in seen:
                continue
            if len(candidate.title) < ALTERNATIVE_MIN_TITLE_LENGTH:
                continue
            seen.add(candidate.url)
            candidates.append(candidate)

        self._log(f"[Alternative] {len(candidates)} candidate(s)", indent=1)
        return candidates
