#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Searcher Module:
Finds competing articles for a title through a search engine result page.
The result page is fetched with a rendering fetcher since the result list
is built by JavaScript.
"""
import logging
from typing import List, Optional, TYPE_CHECKING
from urllib.parse import urlencode, urlparse

from pydantic import BaseModel

from .Enhancer import EnhancementError
from .Extractor import title_from_url
from .HtmlTree import closest, node_text, parse_html

if TYPE_CHECKING:
    from .Fetcher import Fetcher


logger = logging.getLogger(__name__)


class SearchError(EnhancementError):
    """No usable search result, even after the simplified retry."""


class ReferenceLink(BaseModel):
    url: str
    title: str


class ReferenceArticle(BaseModel):
    title: str
    url: str
    content: str


# Tried in order; the first strategy that yields any result wins.
RESULT_SELECTORS = [
    'div.g a[href^="http"]',
    'div[data-ved] a[href^="http"]',
    'a[href^="http"]:not([href*="google.com"])',
    'h3 a[href^="http"]',
]

DENIED_HOSTS = [
    'google.com',
    'youtube.com',
    'youtu.be',
    'facebook.com',
    'twitter.com',
    'x.com',
    'linkedin.com',
    'instagram.com',
    'pinterest.com',
    'tiktok.com',
]

NON_HTML_EXTENSIONS = ('.pdf', '.doc', '.docx', '.ppt', '.pptx', '.xls', '.xlsx', '.zip')

BLOG_SIGNALS = ['blog', 'article', '/post/', '/posts/', 'medium.com', 'dev.to', 'hashnode.com', 'wordpress.com']

MIN_DISPLAY_TITLE_LENGTH = 5
LONG_TITLE_LENGTH = 20
QUERY_LENGTH = 50


def is_denied_host(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return True
    if host.startswith('google.') or '.google.' in host:
        return True
    return any(host == denied or host.endswith('.' + denied) for denied in DENIED_HOSTS)


def is_document_url(url: str) -> bool:
    return urlparse(url).path.lower().endswith(NON_HTML_EXTENSIONS)


def has_blog_signal(url: str) -> bool:
    lowered = url.lower()
    return any(signal in lowered for signal in BLOG_SIGNALS)


class GoogleSearcher:
    """
    Turns an article title into a ranked list of reference links.

    Candidate anchors are read from the rendered result page, filtered
    (search engine, social and video hosts, documents, duplicates) and then
    narrowed to blog-like URLs when there are enough of them.
    """

    def __init__(self,
                 fetcher: "Fetcher",
                 search_url: str = "https://www.google.com/search",
                 max_results: int = 2,
                 max_candidates: int = 10):
        self.fetcher = fetcher
        self.search_url = search_url
        self.max_results = max_results
        self.max_candidates = max_candidates
        self.log_messages: List[str] = []

    def _log(self, message: str, indent: int = 0):
        log_msg = f"{' ' * (indent * 4)}{message}"
        self.log_messages.append(log_msg)
        logger.info(log_msg)

    # --- Queries ---

    @staticmethod
    def build_query(title: str) -> str:
        title = title.strip()
        if len(title) > LONG_TITLE_LENGTH:
            return title[:QUERY_LENGTH]
        return f"{title} article blog"

    @staticmethod
    def simplify_query(title: str, words: int = 3) -> str:
        return ' '.join(title.split()[:words])

    def query_url(self, query: str) -> str:
        return f"{self.search_url}?{urlencode({'q': query})}"

    # --- Result parsing ---

    @staticmethod
    def _display_title(anchor) -> str:
        text = node_text(anchor)
        if not text:
            container = closest(anchor, 'div')
            heading = container.select_one('h3') if container is not None else None
            text = node_text(heading)
        return text

    def parse_results(self, content: bytes) -> List[ReferenceLink]:
        """
        Extracts candidate links from a result page, using the first selector
        strategy that yields anything. At most `max_candidates` are kept.
        """
        soup = parse_html(content)
        for selector in RESULT_SELECTORS:
            links: List[ReferenceLink] = []
            seen = set()
            for anchor in soup.select(selector):
                if len(links) >= self.max_candidates:
                    break
                href = (anchor.get('href') or '').strip()
                if not href.startswith('http') or href in seen:
                    continue
                if is_denied_host(href) or is_document_url(href):
                    continue

                title = self._display_title(anchor)
                if not title or title == 'Untitled' or len(title) < MIN_DISPLAY_TITLE_LENGTH:
                    title = title_from_url(href) or href
                seen.add(href)
                links.append(ReferenceLink(url=href, title=title))
            if links:
                self._log(f"[Results] {len(links)} candidate(s) via {selector!r}", indent=1)
                return links
        return []

    def rank(self, links: List[ReferenceLink]) -> List[ReferenceLink]:
        blog_links = [link for link in links if has_blog_signal(link.url)]
        preferred = blog_links if len(blog_links) >= self.max_results else links
        return preferred[:self.max_results]

    def search(self, query: str) -> List[ReferenceLink]:
        self._log(f"[Search] {query!r}")
        content = self.fetcher.get_content(self.query_url(query))
        if not content:
            self._log("[Search] No result page", indent=1)
            return []
        results = self.rank(self.parse_results(content))
        self._log(f"[Search] {len(results)} usable result(s)", indent=1)
        return results

    def find_references(self, title: str) -> List[ReferenceLink]:
        """
        Searches for the title, retrying once with the first few words.

        Raises:
            SearchError: When neither query produced a usable result.
        """
        self.log_messages.clear()
        results = self.search(self.build_query(title))
        if results:
            return results

        simplified = self.simplify_query(title)
        self._log(f"[Search] Nothing usable, retrying with {simplified!r}")
        results = self.search(simplified) if simplified else []
        if not results:
            raise SearchError(f"No search results for {title!r}")
        return results
