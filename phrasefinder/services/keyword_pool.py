import logging
import random
from typing import List, Optional

from phrasefinder.core.types import Keyword
from phrasefinder.services.storage import ResultStore

logger = logging.getLogger(__name__)


class KeywordPool:
    """
    Working set of phrases for one crawl run. Sampling removes the drawn
    keyword, so a phrase is crawled at most once per run.
    """

    def __init__(self, store: ResultStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()
        self._keywords: List[Keyword] = []

    def __len__(self) -> int:
        return len(self._keywords)

    def load(
        self,
        category: Optional[str] = None,
        language: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> int:
        self._keywords = list(self.store.get_keywords(category, language, limit))
        logger.info(f"Loaded {len(self._keywords)} keywords (category={category}, language={language}, limit={limit})")
        return len(self._keywords)

    def sample(self) -> Optional[Keyword]:
        if not self._keywords:
            return None
        index = self.rng.randrange(len(self._keywords))
        # order of the remainder is irrelevant, so swap-remove
        self._keywords[index], self._keywords[-1] = self._keywords[-1], self._keywords[index]
        return self._keywords.pop()
