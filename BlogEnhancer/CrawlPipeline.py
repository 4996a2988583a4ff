# CrawlPipeline.py

import logging
import traceback
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .Discoverer import IDiscoverer
from .Enhancer import EnhancementError, OpenAIEnhancer
from .Extractor import ExtractionResult, IExtractor, ReferenceExtractor
from .Fetcher import Fetcher
from .LinkClassifier import CandidateLink
from .Persistence import ArticleRecord, IArticleStore, StorageError
from .Publisher import Publisher
from .Searcher import GoogleSearcher, ReferenceArticle, ReferenceLink
from .Throttle import Throttle


logger = logging.getLogger(__name__)


class ReferenceScrapeError(EnhancementError):
    """None of the reference links could be scraped."""


class AcquisitionReport(BaseModel):
    candidates: List[CandidateLink] = Field(default_factory=list)
    saved: List[ArticleRecord] = Field(default_factory=list)
    failures: List[Tuple[str, str]] = Field(default_factory=list)


class EnhancementReport(BaseModel):
    enhanced: List[ArticleRecord] = Field(default_factory=list)
    skipped: List[ArticleRecord] = Field(default_factory=list)
    failures: List[Tuple[int, str]] = Field(default_factory=list)


# ----------------------------------------------------------------------------------------------------------------------

class AcquisitionPipeline:
    """
    Discover -> fetch -> extract -> publish, for the oldest articles of the blog.

    A candidate that cannot be fetched, extracted or stored is recorded in
    the report's failures and the run moves on to the next one.
    """

    def __init__(self,
                 fetcher: Fetcher,
                 discoverer: IDiscoverer,
                 extractor: IExtractor,
                 publisher: Publisher,
                 log_callback: Callable[..., None] = logger.info):
        """
        Args:
            fetcher: Fetcher used for the article pages.
            discoverer: IDiscoverer producing the candidates.
            extractor: IExtractor for article pages.
            publisher: Publisher writing to the article store.
            log_callback: A function to send progress logs to.
        """
        self.fetcher = fetcher
        self.discoverer = discoverer
        self.extractor = extractor
        self.publisher = publisher
        self.log = log_callback

    def fetch_and_extract(self, candidate: CandidateLink) -> ExtractionResult:
        content = self.fetcher.get_content(candidate.url)
        if not content:
            return ExtractionResult(url=candidate.url, error="Fetch failed")
        self.log(f"  -> Fetched {len(content)} bytes. Extracting...")
        return self.extractor.extract(content, candidate.url)

    def run(self, count: int) -> AcquisitionReport:
        self.log(f"--- 1. Discovering the {count} oldest articles ---")
        report = AcquisitionReport(candidates=self.discoverer.discover(count))
        if not report.candidates:
            logger.error("No articles found. The website structure might have changed.")
            return report

        self.log(f"--- 2. Fetching & Extracting {len(report.candidates)} Articles ---")
        for candidate in report.candidates:
            self.log(f"Processing: {candidate.title} ({candidate.listing_date.isoformat()})")
            result = self.fetch_and_extract(candidate)
            if not result.success:
                self.log(f"Skipped {candidate.url}: {result.error}")
                report.failures.append((candidate.url, result.error or "No article"))
                continue

            try:
                record = self.publisher.publish_original(result.article, candidate)
            except StorageError as e:
                logger.warning("Error saving %s: %s", candidate.url, e)
                report.failures.append((candidate.url, str(e)))
                continue
            report.saved.append(record)

        self.log(f"Saved {len(report.saved)} of {len(report.candidates)} articles.")
        return report


# ----------------------------------------------------------------------------------------------------------------------

class ReferenceScraper:
    """Fetches and extracts each reference link, in search rank order."""

    def __init__(self,
                 fetcher: Fetcher,
                 extractor: Optional[ReferenceExtractor] = None,
                 throttle: Optional[Throttle] = None):
        self.fetcher = fetcher
        self.extractor = extractor or ReferenceExtractor()
        self.throttle = throttle or Throttle(2.0)

    def scrape(self, links: List[ReferenceLink]) -> List[ReferenceArticle]:
        """
        Raises:
            ReferenceScrapeError: When not a single link could be scraped.
        """
        articles = []
        for link in links:
            self.throttle.wait()
            logger.info("  Scraping content from: %s", link.url)
            content = self.fetcher.get_content(link.url)
            if not content:
                continue
            result = self.extractor.extract(content, link.url)
            if not result.success:
                logger.info("  Could not use %s: %s", link.url, result.error)
                continue
            articles.append(ReferenceArticle(title=link.title, url=link.url, content=result.article.content))
            logger.info("  Scraped %d characters", len(result.article.content))

        if not articles:
            raise ReferenceScrapeError(f"Could not scrape any of {len(links)} reference(s)")
        return articles


class EnhancementPipeline:
    """
    For every original article without an enhanced version:
    search -> scrape references -> rewrite -> publish.

    An EnhancementError aborts only the current article. Anything else
    propagates and ends the run.
    """

    def __init__(self,
                 store: IArticleStore,
                 searcher: GoogleSearcher,
                 scraper: ReferenceScraper,
                 enhancer: OpenAIEnhancer,
                 publisher: Publisher,
                 throttle: Optional[Throttle] = None,
                 log_callback: Callable[..., None] = logger.info):
        self.store = store
        self.searcher = searcher
        self.scraper = scraper
        self.enhancer = enhancer
        self.publisher = publisher
        self.throttle = throttle or Throttle(5.0)
        self.log = log_callback

    def select_articles(self, latest_only: bool = False) -> Tuple[List[ArticleRecord], List[ArticleRecord]]:
        """
        Returns (to enhance, already enhanced) among the original articles.
        With `latest_only` only the newest original is considered.
        """
        if latest_only:
            latest = self.store.latest_original()
            originals = [latest] if latest is not None else []
        else:
            originals = self.store.list_articles(is_enhanced=False)

        enhanced_parents = {record.parent_id for record in self.store.list_articles(is_enhanced=True)}
        pending = [article for article in originals if article.id not in enhanced_parents]
        done = [article for article in originals if article.id in enhanced_parents]
        return pending, done

    def enhance_article(self, article: ArticleRecord) -> Optional[ArticleRecord]:
        if self.publisher.has_enhanced_version(article):
            self.log(f"Skipping \"{article.title}\" - already has enhanced version")
            return None
        links = self.searcher.find_references(article.title)
        references = self.scraper.scrape(links)
        self.log(f"Scraped {len(references)} reference article(s)")
        content = self.enhancer.enhance(article, references)
        return self.publisher.publish_enhanced(article, content, references)

    def run(self, latest_only: bool = False, limit: Optional[int] = None) -> EnhancementReport:
        pending, done = self.select_articles(latest_only)
        report = EnhancementReport(skipped=done)
        for article in done:
            self.log(f"Skipping \"{article.title}\" - already has enhanced version")
        if limit is not None:
            pending = pending[:limit]
        if not pending:
            self.log("All articles already have enhanced versions.")
            return report

        self.log(f"Processing {len(pending)} article(s)...")
        for index, article in enumerate(pending, start=1):
            self.throttle.wait()
            self.log(f"[{index}/{len(pending)}] Processing: \"{article.title}\"")
            try:
                record = self.enhance_article(article)
            except EnhancementError as e:
                logger.error("Enhancement of #%s failed: %s", article.id, e)
                logger.debug(traceback.format_exc())
                report.failures.append((article.id, str(e)))
                continue

            if record is None:
                report.skipped.append(article)
            else:
                report.enhanced.append(record)
                self.log(f"Enhanced article #{record.id} published for #{article.id}")

        self.log(f"Enhanced {len(report.enhanced)}, skipped {len(report.skipped)}, failed {len(report.failures)}.")
        return report


def shutdown(*fetchers: Optional[Fetcher]):
    """Closes each distinct fetcher once."""
    closed = []
    for fetcher in fetchers:
        if fetcher is None or any(fetcher is other for other in closed):
            continue
        try:
            fetcher.close()
        except Exception as e:
            logger.error("[Error] Failed to close %s: %s", type(fetcher).__name__, e)
        closed.append(fetcher)
