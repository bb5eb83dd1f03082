"""Core data types shared by the crawler, the providers and the aggregator"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


@dataclass(frozen=True)
class Keyword:
    """A monitored phrase as loaded from the keyword table"""

    id: int
    phrase: str
    category: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class SearchItem:
    domain: str
    url: str
    title: str = ""


@dataclass
class Page:
    """One page of provider results"""

    items: List[SearchItem] = field(default_factory=list)
    has_next: bool = False


class FailureKind(Enum):
    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport"
    UNEXPECTED_STATUS = "unexpected_status"


@dataclass
class ProviderFailure:
    """A classified provider error, returned instead of raised"""

    kind: FailureKind
    status_code: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        text = self.kind.value
        if self.status_code is not None:
            text += f" (HTTP {self.status_code})"
        if self.message:
            text += f": {self.message}"
        return text


ProviderResult = Union[Page, ProviderFailure]


class TerminationReason(Enum):
    EXHAUSTED = "exhausted"  # provider has no further page
    PAGE_LIMIT = "page_limit"  # caller's page budget used up
    FAILED = "failed"


@dataclass
class CrawlOutcome:
    phrase: str
    keyword_id: int
    pages_fetched: int = 0
    items_stored: int = 0
    items_failed: int = 0
    reason: TerminationReason = TerminationReason.PAGE_LIMIT
    failure: Optional[ProviderFailure] = None

    @property
    def rate_limited(self) -> bool:
        return self.failure is not None and self.failure.kind is FailureKind.RATE_LIMITED


class AggregationOutcome:
    """Base for the three results of a findings aggregation"""

    pass


@dataclass(frozen=True)
class Success(AggregationOutcome):
    count: int


@dataclass(frozen=True)
class NoNewEntries(AggregationOutcome):
    pass


@dataclass(frozen=True)
class PartialFailure(AggregationOutcome):
    attempted: int
    succeeded: int

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded
