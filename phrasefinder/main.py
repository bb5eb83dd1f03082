"""
Monitors search engines for phrases used by clusters of fake shops.

    phrasefinder crawl <number of keywords> <number of result pages> <search engine>
    phrasefinder store <start date (YYYY-MM-DD)> <end date (YYYY-MM-DD)> <search engine>

``crawl`` samples keywords and stores every search result found for them.
``store`` promotes domains first seen inside the date range into the
findings table, where later stages classify them.
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from phrasefinder.core.database import create_tables, get_db, get_engine
from phrasefinder.core.exceptions import ConfigurationError, PhraseFinderError, UnsupportedProviderError
from phrasefinder.core.logging import setup_logging
from phrasefinder.core.settings import LOG_LEVELS, Settings, settings
from phrasefinder.core.types import NoNewEntries, PartialFailure, Success
from phrasefinder.services.crawler import CrawlRunController, PaginatedCrawler
from phrasefinder.services.findings import FindingsAggregator
from phrasefinder.services.keyword_pool import KeywordPool
from phrasefinder.services.providers import PROVIDERS, get_provider
from phrasefinder.services.storage import ResultStore

logger = logging.getLogger(__name__)

# accepted by "store" to aggregate over every search engine
ALL_PROVIDERS = "all"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a valid number")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be greater than 0")
    return number


def _iso_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not in the valid format (YYYY-MM-DD)")


def build_arg_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="phrasefinder", description="Search engine phrase monitor")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="Log level")
    sub = p.add_subparsers(dest="action", required=True, parser_class=_ArgumentParser)

    crawl = sub.add_parser("crawl", help="Crawl search results for a sample of keywords")
    crawl.add_argument("keywords", type=_positive_int, help="Number of keywords to crawl")
    crawl.add_argument("pages", type=_positive_int, help="Number of result pages per keyword")
    crawl.add_argument("provider", type=str, help=f"Search engine ({', '.join(sorted(PROVIDERS))})")
    crawl.add_argument("--continue-on-rate-limit", action="store_true",
                       help="Keep crawling the remaining keywords after the API limit was hit")

    store = sub.add_parser("store", help="Promote new domains of a date range into findings")
    store.add_argument("start", type=_iso_date, help="Start date (YYYY-MM-DD)")
    store.add_argument("end", type=_iso_date, help="End date (YYYY-MM-DD)")
    store.add_argument("provider", type=str, help=f"Search engine ({', '.join(sorted(PROVIDERS))}) or '{ALL_PROVIDERS}'")
    return p


@contextmanager
def open_store(cfg: Settings) -> Iterator[ResultStore]:
    # schema is created on first use, like an application startup hook
    create_tables(get_engine(cfg))
    with get_db(cfg) as session:
        yield ResultStore(session)


def run_crawl(args: argparse.Namespace, cfg: Settings) -> int:
    stop_on_rate_limit = cfg.stop_on_rate_limit and not args.continue_on_rate_limit
    provider = get_provider(args.provider, cfg)
    try:
        with open_store(cfg) as store:
            controller = CrawlRunController(
                KeywordPool(store),
                PaginatedCrawler(provider, store),
                category=cfg.keyword_category,
                language=cfg.keyword_language,
                stop_on_rate_limit=stop_on_rate_limit,
            )
            outcomes = controller.run(args.keywords, args.pages)
    finally:
        provider.close()

    stored = sum(o.items_stored for o in outcomes)
    failed = [o for o in outcomes if o.failure is not None]
    logger.info(f"Crawled {len(outcomes)} keyword(s), {stored} results stored, {len(failed)} failed")
    if any(o.rate_limited for o in outcomes):
        logger.error("Search API quota exhausted")
        return 1
    if outcomes and len(failed) == len(outcomes):
        logger.error(f"No keyword could be crawled, last failure: {failed[-1].failure}")
        return 1
    if failed:
        logger.warning(f"{len(failed)} of {len(outcomes)} keyword(s) failed")
    return 0


def run_store(args: argparse.Namespace, cfg: Settings) -> int:
    provider = args.provider.lower()
    if provider == ALL_PROVIDERS:
        provider = None
    elif provider not in PROVIDERS:
        raise UnsupportedProviderError(args.provider, sorted(PROVIDERS))
    if args.start > args.end:
        raise ConfigurationError(f"Start date {args.start} is after end date {args.end}")

    with open_store(cfg) as store:
        outcome = FindingsAggregator(store).aggregate(args.start, args.end, provider)

    if isinstance(outcome, Success):
        logger.info(f"The {outcome.count} new findings were successfully inserted into the database")
        return 0
    if isinstance(outcome, NoNewEntries):
        logger.info("There were no findings within the specified time period")
        return 0
    if isinstance(outcome, PartialFailure):
        logger.error(f"{outcome.failed} of {outcome.attempted} new findings could not be inserted")
    return 1


def main(argv: Optional[List[str]] = None, cfg: Optional[Settings] = None) -> int:
    cfg = cfg or settings
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level or cfg.log_level)

    try:
        if args.action == "crawl":
            return run_crawl(args, cfg)
        return run_store(args, cfg)
    except PhraseFinderError as e:
        logger.error(f"Error: {e}")
        return 1
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
