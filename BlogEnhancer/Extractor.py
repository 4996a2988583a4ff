#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Extractor Module:
Defines the IExtractor interface and the two extractors of the pipeline:
BlogArticleExtractor for articles of the target blog and ReferenceExtractor
for competing articles found through search.
"""
import re
import logging
import traceback
from datetime import date
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from .Config import SiteProfile
from .DateResolver import is_sentinel, parse_date_text
from .HtmlTree import SelectorRule, block_text, first_match, node_text, parse_html
from .LinkClassifier import LinkClassifier


logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Untitled Article"


# ----------------------------------------------------------------------------------------------------------------------

class ExtractedArticle(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(default="", repr=False)
    author: Optional[str] = None
    published_date: Optional[date] = None
    source_url: str


class ExtractionResult(BaseModel):
    """
    Standardized return object for all IExtractor implementations.
    Carries either an article or the reason there is none.
    """
    url: str = ""
    article: Optional[ExtractedArticle] = None
    error: Optional[str] = Field(
        default=None,
        description="An error message if extraction failed."
    )

    @property
    def success(self) -> bool:
        """Returns True if the extraction was successful (no error)."""
        return self.error is None and self.article is not None

    def __str__(self):
        if not self.success:
            return f"[Extraction FAILED] {self.url}\n└── Error: {self.error}"

        article = self.article
        preview = article.content.replace('\n', ' ').strip()
        if len(preview) > 70:
            preview = preview[:70] + "..."
        output = [
            f"[Extraction SUCCESS] {self.url}",
            f"├── Title: {article.title}",
            f"├── Author: {article.author or '[None]'}",
            f"├── Date: {article.published_date.isoformat() if article.published_date else '[None]'}",
            f"└── Content: \"{preview}\"",
        ]
        return "\n".join(output)


def title_from_url(url: str) -> str:
    """
    Builds a readable title from the last path segment of a URL
    ('/blogs/why-chatbots-fail/' -> 'Why Chatbots Fail'). Falls back to the
    host name when the URL has no path.
    """
    parsed = urlparse(url)
    segments = [segment for segment in parsed.path.split('/') if segment]
    if not segments:
        host = parsed.hostname or ""
        return host[4:] if host.startswith('www.') else host

    slug = unquote(segments[-1])
    slug = re.sub(r'\.[A-Za-z0-9]+$', '', slug)
    words = re.sub(r'[-_]+', ' ', slug).split()
    return ' '.join(word[:1].upper() + word[1:] for word in words)


# =======================================================================
# == ABSTRACT BASE CLASS (Interface)
# =======================================================================

class IExtractor(ABC):
    """
    Abstract base class for a content extractor.

    The role of an extractor is to take raw HTML content and a URL and return
    an ExtractionResult. Implementations never raise: every failure becomes
    a result with `error` set.
    """

    def __init__(self):
        self.log_messages: List[str] = []

    def _log(self, message: str, indent: int = 0):
        log_msg = f"{' ' * (indent * 4)}{message}"
        self.log_messages.append(log_msg)
        logger.debug(log_msg)

    @abstractmethod
    def extract(self, content: bytes, url: str) -> ExtractionResult:
        """
        Extracts the main article from raw HTML content.

        Args:
            content (bytes): The raw HTML content.
            url (str): The original URL (used for fallbacks and logging).

        Returns:
            ExtractionResult: The article, or an error description.
        """
        pass


# =======================================================================
# == BLOG ARTICLE EXTRACTOR
# =======================================================================

class BlogArticleExtractor(IExtractor):
    """
    Cascading-selector extractor for blog article pages.

    Each field is looked up through an ordered list of SelectorRules, from
    the most specific structure to the most generic one; the first value the
    rule's predicate accepts wins. Fields that cannot be found are left empty,
    except the title which always ends up with something usable.
    """

    TITLE_SELECTORS = [
        'article h1',
        'main h1',
        '.post h1',
        '.entry h1',
        '.article-header h1',
        '.post-header h1',
        'h1.entry-title',
        'h1.post-title',
        'h1.article-title',
        '.entry-title',
        '.post-title',
        '.article-title',
        'h1',
    ]
    TITLE_CONTAINER_SELECTOR = 'article, .post, .entry, main'

    CONTENT_SELECTORS = [
        '.entry-content',
        '.post-content',
        '.article-content',
        'article',
        '.content',
        'main',
        '[class*="content"]',
    ]
    MIN_CONTENT_LENGTH = 100

    AUTHOR_SELECTORS = ['.author', '.by-author', '[class*="author"]', '[rel="author"]']

    DATE_SELECTORS = ['time', '.published-date', '[class*="date"]', '[datetime]']

    NOISE_SELECTOR = 'script, style, noscript'

    def __init__(self, site: Optional[SiteProfile] = None):
        super().__init__()
        self.site = site or SiteProfile()
        self.classifier = LinkClassifier(self.site)
        self._nav_labels = {label.lower() for label in self.site.nav_labels}

        self.title_rules = [SelectorRule(s, accept=self._acceptable_title) for s in self.TITLE_SELECTORS]
        self.content_rules = [SelectorRule(s, accept=lambda text: len(text) > self.MIN_CONTENT_LENGTH,
                                           text=block_text)
                              for s in self.CONTENT_SELECTORS]
        self.author_rules = [SelectorRule(s) for s in self.AUTHOR_SELECTORS]
        self.date_rules = [SelectorRule(s, accept=lambda text: parse_date_text(text) is not None,
                                        attribute='datetime')
                           for s in self.DATE_SELECTORS]

    def _acceptable_title(self, text: str) -> bool:
        lowered = text.strip().lower()
        return (lowered != self.site.brand_name.lower()
                and len(lowered) > 5
                and lowered not in self._nav_labels)

    # --- Field extraction ---

    def extract_title(self, soup: BeautifulSoup, url: str) -> str:
        title, rule = first_match(soup, self.title_rules)
        if title is not None:
            self._log(f"Title matched {rule}", indent=1)
        else:
            container = soup.select_one(self.TITLE_CONTAINER_SELECTOR)
            heading = container.select_one('h1, h2') if container is not None else None
            title = node_text(heading)
            if title:
                self._log("Title taken from the main container heading", indent=1)

        title = self.classifier.clean_title(title)
        if not self.classifier.is_valid_title(title):
            title = title_from_url(url)
            self._log(f"Title derived from URL: {title!r}", indent=1)

        if not self.classifier.is_valid_title(title):
            return PLACEHOLDER_TITLE
        return title

    def extract_content(self, soup: BeautifulSoup) -> str:
        content, rule = first_match(soup, self.content_rules)
        if content is not None:
            self._log(f"Content matched {rule} ({len(content)} chars)", indent=1)
            return content

        paragraphs = [node_text(p) for p in soup.find_all('p')]
        content = '\n\n'.join(text for text in paragraphs if text)
        self._log(f"Content from {len(paragraphs)} paragraph(s) ({len(content)} chars)", indent=1)
        return content

    def extract_author(self, soup: BeautifulSoup) -> Optional[str]:
        author, _ = first_match(soup, self.author_rules)
        return author

    def extract_date(self, soup: BeautifulSoup) -> Optional[date]:
        date_text, _ = first_match(soup, self.date_rules)
        parsed = parse_date_text(date_text)
        if is_sentinel(parsed):
            return None
        return parsed

    def extract(self, content: bytes, url: str) -> ExtractionResult:
        self.log_messages.clear()
        self._log(f"Extracting {url}")
        try:
            soup = parse_html(content)
            for noise in soup.select(self.NOISE_SELECTOR):
                noise.decompose()

            body = self.extract_content(soup)
            if not body.strip():
                return ExtractionResult(url=url, error="No article content found")

            article = ExtractedArticle(
                title=self.extract_title(soup, url),
                content=body.strip(),
                author=self.extract_author(soup),
                published_date=self.extract_date(soup),
                source_url=url,
            )
            return ExtractionResult(url=url, article=article)
        except Exception as e:
            logger.debug(traceback.format_exc())
            return ExtractionResult(url=url, error=f"{type(e).__name__}: {e}")


# =======================================================================
# == REFERENCE EXTRACTOR
# =======================================================================

class ReferenceExtractor(IExtractor):
    """
    Simplified extraction for third-party articles used as references.
    Page chrome is dropped first, the body is capped in length.
    """

    NOISE_SELECTOR = 'script, style, noscript, nav, header, footer, aside, .advertisement, .ads'

    CONTENT_SELECTORS = [
        'article',
        '.entry-content',
        '.post-content',
        '.article-content',
        '.content',
        'main',
        '[role="main"]',
        '.post-body',
        '.article-body',
    ]
    MIN_CONTENT_LENGTH = 200
    MIN_PARAGRAPH_LENGTH = 20
    MAX_CONTENT_LENGTH = 5000

    def __init__(self):
        super().__init__()
        self.content_rules = [SelectorRule(s, accept=lambda text: len(text) > self.MIN_CONTENT_LENGTH,
                                           text=block_text)
                              for s in self.CONTENT_SELECTORS]

    @staticmethod
    def clean_text(text: str) -> str:
        text = re.sub(r'[ \t\r\f\v]+', ' ', text)
        text = re.sub(r'\n\s*\n', '\n\n', text)
        return text.strip()

    def extract(self, content: bytes, url: str) -> ExtractionResult:
        self.log_messages.clear()
        try:
            soup = parse_html(content)
            page_title = node_text(soup.title) if soup.title else ""
            for noise in soup.select(self.NOISE_SELECTOR):
                noise.decompose()

            body, rule = first_match(soup, self.content_rules)
            if body is None:
                paragraphs = [node_text(p) for p in soup.find_all('p')]
                body = '\n\n'.join(text for text in paragraphs if len(text) > self.MIN_PARAGRAPH_LENGTH)
                self._log(f"Reference body from paragraphs ({len(body)} chars)", indent=1)
            else:
                self._log(f"Reference body matched {rule} ({len(body)} chars)", indent=1)

            body = self.clean_text(body)
            if not body:
                return ExtractionResult(url=url, error="No readable content")
            if len(body) > self.MAX_CONTENT_LENGTH:
                body = body[:self.MAX_CONTENT_LENGTH] + '...'

            article = ExtractedArticle(
                title=page_title or title_from_url(url) or url,
                content=body,
                source_url=url,
            )
            return ExtractionResult(url=url, article=article)
        except Exception as e:
            logger.debug(traceback.format_exc())
            return ExtractionResult(url=url, error=f"{type(e).__name__}: {e}")
