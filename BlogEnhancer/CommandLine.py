#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Command line entry point.

    blog-enhancer acquire --count 5
    blog-enhancer enhance [--latest] [--limit N]
    blog-enhancer list [--enhanced | --original]
"""
import sys
import logging
import argparse
from typing import List, Optional

from .Config import ConfigError, PipelineConfig, load_config
from .CrawlPipeline import AcquisitionPipeline, EnhancementPipeline, ReferenceScraper, shutdown
from .Discoverer import BlogListDiscoverer
from .Enhancer import OpenAIEnhancer
from .Extractor import BlogArticleExtractor, ReferenceExtractor
from .Fetcher import PlaywrightFetcher, RequestsFetcher
from .Persistence import ApiArticleStore, IArticleStore, JsonFileArticleStore, StorageError
from .Publisher import Publisher
from .Searcher import GoogleSearcher
from .Throttle import Throttle


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blog-enhancer",
        description="Acquire the oldest blog articles and publish enhanced rewrites.",
    )
    parser.add_argument("--api-url", help="Article storage API base URL (overrides LARAVEL_API_URL)")
    parser.add_argument("--store-file", help="Use a local JSON file instead of the storage API")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    acquire = subparsers.add_parser("acquire", help="Scrape the oldest articles into the store")
    acquire.add_argument("--count", type=positive_int, default=5, help="Number of oldest articles (default: 5)")

    enhance = subparsers.add_parser("enhance", help="Publish enhanced versions of stored articles")
    enhance.add_argument("--latest", action="store_true", help="Only the latest original article")
    enhance.add_argument("--limit", type=positive_int, help="Enhance at most this many articles")

    listing = subparsers.add_parser("list", help="List stored articles")
    status = listing.add_mutually_exclusive_group()
    status.add_argument("--enhanced", dest="status", action="store_const", const=True)
    status.add_argument("--original", dest="status", action="store_const", const=False)

    return parser


def build_store(config: PipelineConfig) -> IArticleStore:
    if config.store_file:
        logger.info("Using local article store %s", config.store_file)
        return JsonFileArticleStore(config.store_file)
    return ApiArticleStore(config.api_url, timeout_s=config.request_timeout_s)


def run_acquire(config: PipelineConfig, store: IArticleStore, count: int) -> int:
    fetcher = RequestsFetcher(timeout_s=config.request_timeout_s)
    try:
        pipeline = AcquisitionPipeline(
            fetcher=fetcher,
            discoverer=BlogListDiscoverer(fetcher, config.site, max_pages=config.max_listing_pages),
            extractor=BlogArticleExtractor(config.site),
            publisher=Publisher(store),
        )
        report = pipeline.run(count)
    finally:
        shutdown(fetcher)

    for url, error in report.failures:
        logger.warning("Failed: %s (%s)", url, error)
    logger.info("Successfully scraped and saved %d articles", len(report.saved))
    return 0 if report.saved or not report.candidates else 1


def run_enhance(config: PipelineConfig, store: IArticleStore, latest: bool, limit: Optional[int]) -> int:
    api_key = config.require_openai_key()

    page_fetcher = RequestsFetcher(timeout_s=config.request_timeout_s)
    search_fetcher = PlaywrightFetcher(timeout_s=config.render_timeout_s, settle_ms=config.search_settle_ms)
    try:
        pipeline = EnhancementPipeline(
            store=store,
            searcher=GoogleSearcher(search_fetcher, search_url=config.search_engine_url),
            scraper=ReferenceScraper(page_fetcher, ReferenceExtractor(), Throttle(config.reference_delay_s)),
            enhancer=OpenAIEnhancer(
                api_key,
                model=config.openai_model,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
            ),
            publisher=Publisher(store),
            throttle=Throttle(config.article_delay_s),
        )
        report = pipeline.run(latest_only=latest, limit=limit)
    finally:
        shutdown(search_fetcher, page_fetcher)

    return 1 if report.failures else 0


def run_list(store: IArticleStore, status: Optional[bool]) -> int:
    for record in store.list_articles(is_enhanced=status):
        published = record.published_date.isoformat() if record.published_date else "-"
        marker = f" <- #{record.parent_id}" if record.parent_id is not None else ""
        print(f"{record.id:>4}  {published:<10}  {record.slug}  {record.title}{marker}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config()
        if args.api_url:
            config.api_url = args.api_url
        if args.store_file:
            config.store_file = args.store_file
        store = build_store(config)

        if args.command == "acquire":
            return run_acquire(config, store, args.count)
        if args.command == "enhance":
            return run_enhance(config, store, args.latest, args.limit)
        return run_list(store, args.status)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except StorageError as e:
        logger.error("Storage error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
