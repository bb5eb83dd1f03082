import logging
from datetime import date
from typing import Optional

from phrasefinder.core.exceptions import StoreWriteError
from phrasefinder.core.types import AggregationOutcome, NoNewEntries, PartialFailure, Success
from phrasefinder.services.storage import ResultStore

logger = logging.getLogger(__name__)


class FindingsAggregator:
    def __init__(self, store: ResultStore):
        self.store = store

    def aggregate(self, start_date: date, end_date: date, provider: Optional[str] = None) -> AggregationOutcome:
        """
        Promote domains first seen between start_date and end_date (both
        inclusive) into findings.

        An inverted range is not rejected here; it matches nothing and
        reports NoNewEntries.
        """
        entries = self.store.get_new_entries(start_date, end_date, provider)
        if not entries:
            logger.info(f"No new entries between {start_date} and {end_date}")
            return NoNewEntries()

        succeeded = 0
        for domain, keyword_id in entries:
            try:
                rows = self.store.upsert_finding(domain, keyword_id)
            except StoreWriteError:
                continue
            if rows > 0:
                succeeded += 1
            else:
                logger.warning(f"Finding for {domain} was not written")

        if succeeded != len(entries):
            logger.error(f"Only {succeeded} of {len(entries)} new findings were written")
            return PartialFailure(attempted=len(entries), succeeded=succeeded)

        logger.info(f"Promoted {succeeded} new findings")
        return Success(count=succeeded)
