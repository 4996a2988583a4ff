#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Publisher Module:
Writes pipeline output to an article store, both freshly acquired articles
and their enhanced rewrites.
"""
import logging
from datetime import date
from typing import Callable, List, Optional, Sequence

from .DateResolver import is_sentinel
from .Extractor import ExtractedArticle
from .LinkClassifier import CandidateLink
from .Persistence import ArticleRecord, IArticleStore, build_draft, slugify, unique_slug


logger = logging.getLogger(__name__)

ENHANCED_MARKER = " (Enhanced)"
REFERENCES_HEADER = "\n\n---\n\n## References\n\n"
MIN_LINK_TITLE_LENGTH = 6


def reference_link_text(reference) -> str:
    title = (getattr(reference, 'title', None) or "").strip()
    if title and title != 'Untitled' and len(title) >= MIN_LINK_TITLE_LENGTH:
        return title
    return reference.url


def format_references(references: Sequence) -> str:
    """'1. [title](url)' lines, in the given order."""
    lines = [f"{index}. [{reference_link_text(reference)}]({reference.url})"
             for index, reference in enumerate(references, start=1)]
    return REFERENCES_HEADER + "\n".join(lines)


class Publisher:
    """
    Creates ArticleRecords in a store.

    Slugs are derived from the title and suffixed (`-1`, `-2`, ...) until
    free. An original is enhanced at most once: publish_enhanced checks the
    store for an existing enhanced child first.
    """

    def __init__(self, store: IArticleStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def next_slug(self, title: str) -> str:
        return unique_slug(slugify(title), self.store.slug_exists)

    def publish_original(self, article: ExtractedArticle, candidate: Optional[CandidateLink] = None) -> ArticleRecord:
        """
        Stores an acquired article. The page's own date wins; when it is
        missing or the sentinel, the date seen on the listing page is used.
        """
        published_date = article.published_date
        if is_sentinel(published_date):
            listing_date = candidate.listing_date if candidate is not None else None
            published_date = None if is_sentinel(listing_date) else listing_date

        draft = build_draft(
            title=article.title,
            content=article.content,
            author=article.author,
            published_date=published_date,
            slug=self.next_slug(article.title),
            original_url=candidate.url if candidate is not None else article.source_url,
            is_enhanced=False,
        )
        record = self.store.create(draft)
        logger.info("Saved %r as %s (published %s)", record.title, record.slug, record.published_date)
        return record

    def has_enhanced_version(self, original: ArticleRecord) -> bool:
        return any(record.parent_id == original.id
                   for record in self.store.list_articles(is_enhanced=True))

    def publish_enhanced(self,
                         original: ArticleRecord,
                         content: str,
                         references: Sequence) -> Optional[ArticleRecord]:
        """
        Stores the enhanced version of `original`.

        Returns:
            The new record, or None when `original` already has an enhanced
            version (nothing is written in that case).
        """
        if self.has_enhanced_version(original):
            logger.info("Skipping %r: already has an enhanced version", original.title)
            return None

        title = original.title[:255 - len(ENHANCED_MARKER)] + ENHANCED_MARKER
        reference_urls: List[str] = [reference.url for reference in references]
        draft = build_draft(
            title=title,
            content=content + format_references(references),
            author=original.author,
            published_date=original.published_date or self.today(),
            slug=self.next_slug(title),
            original_url=original.original_url,
            is_enhanced=True,
            parent_id=original.id,
            reference_urls=reference_urls,
        )
        record = self.store.create(draft)
        logger.info("Published enhanced article %s (%s) for #%s", record.id, record.slug, original.id)
        return record
