import logging
from typing import List, Optional

from phrasefinder.core.exceptions import ConfigurationError, StoreWriteError
from phrasefinder.core.types import CrawlOutcome, Keyword, Page, TerminationReason
from phrasefinder.services.keyword_pool import KeywordPool
from phrasefinder.services.providers.base import SearchProvider
from phrasefinder.services.storage import ResultStore

logger = logging.getLogger(__name__)


class PaginatedCrawler:
    """Fetches result pages for one keyword and stores every item."""

    def __init__(self, provider: SearchProvider, store: ResultStore):
        self.provider = provider
        self.store = store

    def crawl(self, keyword: Keyword, max_pages: int) -> CrawlOutcome:
        outcome = CrawlOutcome(phrase=keyword.phrase, keyword_id=keyword.id)
        page_size = self.provider.page_size

        for page_index in range(max_pages):
            start = 1 + page_size * page_index
            result = self.provider.query(keyword.phrase, start)

            if not isinstance(result, Page):
                logger.warning(f"Crawl of '{keyword.phrase}' aborted at result {start}: {result}")
                outcome.reason = TerminationReason.FAILED
                outcome.failure = result
                return outcome

            outcome.pages_fetched += 1
            for position, item in enumerate(result.items, start=start):
                try:
                    rows = self.store.store_item(
                        item.domain,
                        item.url,
                        keyword.phrase,
                        keyword.id,
                        item.title,
                        self.provider.name,
                        position=position,
                    )
                except StoreWriteError:
                    outcome.items_failed += 1
                    continue
                # an update counts once, like an insert
                if rows > 0:
                    outcome.items_stored += 1

            if not result.has_next:
                logger.info(f"No further results for '{keyword.phrase}' after {outcome.pages_fetched} page(s)")
                outcome.reason = TerminationReason.EXHAUSTED
                return outcome

        outcome.reason = TerminationReason.PAGE_LIMIT
        return outcome


class CrawlRunController:
    """
    Samples keywords from the pool and crawls each one. Keywords are
    independent: a failed crawl does not stop the run, unless it was rate
    limited and ``stop_on_rate_limit`` is set.
    """

    def __init__(
        self,
        pool: KeywordPool,
        crawler: PaginatedCrawler,
        category: Optional[str] = None,
        language: Optional[str] = None,
        stop_on_rate_limit: bool = True,
    ):
        self.pool = pool
        self.crawler = crawler
        self.category = category
        self.language = language
        self.stop_on_rate_limit = stop_on_rate_limit

    def run(self, requested: int, pages_per_keyword: int) -> List[CrawlOutcome]:
        available = self.pool.load(self.category, self.language, requested)
        if available == 0:
            raise ConfigurationError("There are no keywords available in the database")
        if available < requested:
            logger.warning(f"Only {available} of {requested} requested keywords available, crawling {available}")

        outcomes: List[CrawlOutcome] = []
        for i in range(available):
            keyword = self.pool.sample()
            if keyword is None:
                break
            outcome = self.crawler.crawl(keyword, pages_per_keyword)
            outcomes.append(outcome)
            logger.info(
                f"For the keyword '{keyword.phrase}', {outcome.items_stored} results were found and stored "
                f"({outcome.pages_fetched} page(s), {outcome.reason.value})"
            )

            if outcome.rate_limited and self.stop_on_rate_limit:
                skipped = available - i - 1
                if skipped:
                    logger.warning(f"Rate limited, skipping the remaining {skipped} keyword(s)")
                break

        return outcomes
