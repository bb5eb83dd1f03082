import logging
import random

from phrasefinder.core.exceptions import StoreWriteError
from phrasefinder.core.types import FailureKind, Keyword, ProviderFailure, TerminationReason
from phrasefinder.services.crawler import CrawlRunController, PaginatedCrawler
from phrasefinder.services.keyword_pool import KeywordPool
from phrasefinder.services.storage import ResultStore

from conftest import FakeProvider, page

RATE_LIMITED = ProviderFailure(FailureKind.RATE_LIMITED, status_code=429)
SERVER_ERROR = ProviderFailure(FailureKind.UNEXPECTED_STATUS, status_code=500)
K1 = Keyword(id=1, phrase="K1")


class FlakyStore(ResultStore):
    def __init__(self, session, failing_domains):
        super().__init__(session)
        self.failing_domains = set(failing_domains)

    def store_item(self, domain, *args, **kwargs):
        if domain in self.failing_domains:
            raise StoreWriteError("wi_search_engine_result", domain)
        return super().store_item(domain, *args, **kwargs)


def test_stops_when_provider_has_no_next_page(store):
    provider = FakeProvider({"K1": [page("a.example", has_next=True), page("b.example", has_next=False)]})

    outcome = PaginatedCrawler(provider, store).crawl(K1, 5)

    assert outcome.pages_fetched == 2
    assert outcome.reason is TerminationReason.EXHAUSTED
    assert outcome.items_stored == 2
    assert provider.calls == [("K1", 1), ("K1", 11)]


def test_stops_at_page_budget(store):
    provider = FakeProvider({"K1": [page(f"{i}.example", has_next=True) for i in range(5)]})

    outcome = PaginatedCrawler(provider, store).crawl(K1, 3)

    assert outcome.pages_fetched == 3
    assert outcome.reason is TerminationReason.PAGE_LIMIT
    assert [start for _, start in provider.calls] == [1, 11, 21]


def test_rate_limit_on_first_page_is_returned_not_raised(store):
    provider = FakeProvider({"K1": [RATE_LIMITED]})

    outcome = PaginatedCrawler(provider, store).crawl(K1, 5)

    assert outcome.reason is TerminationReason.FAILED
    assert outcome.failure is RATE_LIMITED
    assert outcome.rate_limited
    assert outcome.items_stored == 0
    assert outcome.pages_fetched == 0


def test_failure_after_first_page_keeps_partial_count(store):
    provider = FakeProvider({"K1": [page("a.example", "b.example", has_next=True), SERVER_ERROR]})

    outcome = PaginatedCrawler(provider, store).crawl(K1, 5)

    assert outcome.items_stored == 2
    assert outcome.pages_fetched == 1
    assert outcome.reason is TerminationReason.FAILED
    assert not outcome.rate_limited


def test_store_failures_are_counted_and_do_not_stop_the_page(db_session):
    provider = FakeProvider({"K1": [page("a.example", "bad.example", "c.example")]})

    outcome = PaginatedCrawler(provider, FlakyStore(db_session, ["bad.example"])).crawl(K1, 1)

    assert outcome.items_stored == 2
    assert outcome.items_failed == 1
    assert outcome.reason is TerminationReason.EXHAUSTED


def test_repeated_crawl_counts_updates(store):
    provider = FakeProvider({"K1": [page("a.example", "b.example")]})
    crawler = PaginatedCrawler(provider, store)

    crawler.crawl(K1, 1)
    outcome = crawler.crawl(K1, 1)

    assert outcome.items_stored == 2


def test_run_continues_after_failure_of_one_keyword(store, add_keywords):
    add_keywords("K1", "K2", "K3")
    provider = FakeProvider({"K1": [SERVER_ERROR], "K2": [page("b.example")], "K3": [page("c.example")]})
    controller = CrawlRunController(KeywordPool(store, random.Random(7)), PaginatedCrawler(provider, store))

    outcomes = controller.run(3, 2)

    assert sorted(o.phrase for o in outcomes) == ["K1", "K2", "K3"]
    by_phrase = {o.phrase: o for o in outcomes}
    assert by_phrase["K1"].reason is TerminationReason.FAILED
    assert by_phrase["K2"].items_stored == 1


def test_run_reports_outcomes_in_sampling_order(store, add_keywords):
    add_keywords("K1", "K2", "K3", "K4")
    provider = FakeProvider({})
    controller = CrawlRunController(KeywordPool(store, random.Random(42)), PaginatedCrawler(provider, store))

    outcomes = controller.run(4, 1)

    assert [o.phrase for o in outcomes] == [phrase for phrase, _ in provider.calls]


def test_run_stops_after_rate_limit_by_default(store, add_keywords):
    add_keywords("K1", "K2", "K3")
    provider = FakeProvider({"K1": [RATE_LIMITED], "K2": [RATE_LIMITED], "K3": [RATE_LIMITED]})
    controller = CrawlRunController(KeywordPool(store), PaginatedCrawler(provider, store))

    outcomes = controller.run(3, 1)

    assert len(outcomes) == 1
    assert outcomes[0].rate_limited
    assert len(provider.calls) == 1


def test_run_can_continue_after_rate_limit(store, add_keywords):
    add_keywords("K1", "K2", "K3")
    provider = FakeProvider({"K1": [RATE_LIMITED], "K2": [RATE_LIMITED], "K3": [RATE_LIMITED]})
    controller = CrawlRunController(
        KeywordPool(store), PaginatedCrawler(provider, store), stop_on_rate_limit=False
    )

    outcomes = controller.run(3, 1)

    assert len(outcomes) == 3
    assert all(o.rate_limited for o in outcomes)


def test_run_with_fewer_keywords_than_requested(store, add_keywords):
    add_keywords("K1", "K2")
    provider = FakeProvider({})
    controller = CrawlRunController(KeywordPool(store), PaginatedCrawler(provider, store))

    outcomes = controller.run(10, 1)

    assert sorted(o.phrase for o in outcomes) == ["K1", "K2"]


def test_run_uses_category_and_language(store, add_keywords):
    add_keywords("de phrase", language="de")
    add_keywords("en phrase", language="en")
    provider = FakeProvider({})
    controller = CrawlRunController(KeywordPool(store), PaginatedCrawler(provider, store), language="en")

    outcomes = controller.run(5, 1)

    assert [o.phrase for o in outcomes] == ["en phrase"]


def test_log_distinguishes_no_more_results_from_page_budget(store, caplog):
    provider = FakeProvider({"K1": [page("a.example", has_next=False)]})

    with caplog.at_level(logging.INFO, logger="phrasefinder.services.crawler"):
        PaginatedCrawler(provider, store).crawl(K1, 5)

    messages = [r.getMessage() for r in caplog.records]
    assert "No further results for 'K1' after 1 page(s)" in messages
    assert not any("Maximum of pages" in m for m in messages)
