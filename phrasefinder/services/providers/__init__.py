from typing import Callable, Dict

from phrasefinder.core.exceptions import UnsupportedProviderError
from phrasefinder.core.settings import Settings
from phrasefinder.services.providers.base import SearchProvider
from phrasefinder.services.providers.google import GoogleSearchProvider

PROVIDERS: Dict[str, Callable[[Settings], SearchProvider]] = {
    GoogleSearchProvider.name: GoogleSearchProvider.from_settings,
}


def get_provider(name: str, settings: Settings) -> SearchProvider:
    factory = PROVIDERS.get(name.lower())
    if factory is None:
        raise UnsupportedProviderError(name, sorted(PROVIDERS))
    return factory(settings)


__all__ = ["PROVIDERS", "SearchProvider", "GoogleSearchProvider", "get_provider"]
