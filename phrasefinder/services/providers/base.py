from typing import Protocol

from phrasefinder.core.types import ProviderResult


class SearchProvider(Protocol):
    """
    A search engine that can be driven page by page.

    ``start`` is the 1-based offset of the first result wanted, not a page
    number. Errors are returned as ``ProviderFailure`` values; a provider
    never raises for HTTP or network problems.
    """

    name: str
    page_size: int

    def query(self, phrase: str, start: int) -> ProviderResult:
        ...

    def close(self) -> None:
        ...
