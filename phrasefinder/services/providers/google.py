import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from phrasefinder.core.settings import Settings
from phrasefinder.core.types import FailureKind, Page, ProviderFailure, ProviderResult, SearchItem

logger = logging.getLogger(__name__)

# Custom Search returns at most 10 results per request
MAX_RESULTS = 10


class GoogleItem(BaseModel):
    displayLink: str
    link: str
    title: str = ""


class GoogleResponse(BaseModel):
    items: List[GoogleItem] = []
    queries: Dict[str, Any] = {}


class GoogleSearchProvider:
    name = "google"
    page_size = MAX_RESULTS

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        api_url: str = "https://www.googleapis.com/customsearch/v1",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.search_engine_id = search_engine_id
        self.api_url = api_url
        self.timeout = timeout
        self.client = client or httpx.Client()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSearchProvider":
        return cls(
            api_key=settings.google_api_key,
            search_engine_id=settings.google_search_engine_id,
            api_url=settings.google_api_url,
            timeout=settings.request_timeout,
        )

    def query(self, phrase: str, start: int) -> ProviderResult:
        params = {
            "key": self.api_key,
            "cx": self.search_engine_id,
            "start": start,
            "num": MAX_RESULTS,
            "q": phrase,
        }
        try:
            r = self.client.get(self.api_url, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Google request failed for '{phrase}' at {start}: {e}")
            return ProviderFailure(FailureKind.TRANSPORT, message=str(e))

        if r.status_code != 200:
            if r.status_code == 429:
                logger.error("Google API limit reached")
                return ProviderFailure(FailureKind.RATE_LIMITED, status_code=429, message="API limit reached")
            logger.error(f"Unexpected Google API response {r.status_code}")
            return ProviderFailure(FailureKind.UNEXPECTED_STATUS, status_code=r.status_code, message=r.text[:200])

        try:
            data = GoogleResponse.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed Google API response for '{phrase}': {e}")
            return ProviderFailure(FailureKind.TRANSPORT, status_code=200, message="malformed response body")

        items = [SearchItem(domain=i.displayLink, url=i.link, title=i.title) for i in data.items]
        return Page(items=items, has_next="nextPage" in data.queries)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "GoogleSearchProvider":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
