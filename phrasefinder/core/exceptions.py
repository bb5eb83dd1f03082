"""Exceptions raised by the crawl engine and the findings aggregator"""

from typing import Sequence


class PhraseFinderError(Exception):
    """Base exception for phrasefinder"""

    pass


class ConfigurationError(PhraseFinderError):
    """Invalid run parameters or missing data needed to start a run"""

    pass


class UnsupportedProviderError(ConfigurationError):
    """No search provider is registered under the requested name"""

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        self.available = list(available)
        msg = f"Unsupported search provider: {name}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class StoreWriteError(PhraseFinderError):
    """A single row could not be written to the result store"""

    def __init__(self, table: str, key: str, cause: Exception | None = None):
        self.table = table
        self.key = key
        self.cause = cause
        msg = f"Write to {table} failed for {key}"
        if cause:
            msg += f": {cause}"
        super().__init__(msg)


class DatabaseUnavailableError(PhraseFinderError):
    """None of the configured database hosts accepted a connection"""

    def __init__(self, hosts: Sequence[str], last_error: Exception | None = None):
        self.hosts = list(hosts)
        self.last_error = last_error
        msg = f"Database connection failed. Host(s) tried: {'/'.join(self.hosts)}"
        if last_error:
            msg += f". Last error: {last_error}"
        super().__init__(msg)
