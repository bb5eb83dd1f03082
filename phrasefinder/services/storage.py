import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from phrasefinder.core.exceptions import ConfigurationError, StoreWriteError
from phrasefinder.core.types import Keyword
from phrasefinder.models import Finding, KeywordRecord, SearchEngineResult

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = ("postgresql", "sqlite", "mysql", "mariadb")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def window_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """Half-open UTC interval covering both dates completely."""
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


class ResultStore:
    """
    Keyword reads, search result upserts and findings promotion on top of
    one SQLAlchemy session. Every write commits on its own.
    """

    def __init__(self, session: Session):
        self.session = session
        self.dialect = session.get_bind().dialect.name
        if self.dialect not in UPSERT_DIALECTS:
            raise ConfigurationError(f"Unsupported database dialect: {self.dialect}")

    def get_keywords(
        self,
        category: Optional[str] = None,
        language: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Keyword]:
        stmt = select(KeywordRecord)
        if category is not None:
            stmt = stmt.where(KeywordRecord.category == category)
        if language is not None:
            stmt = stmt.where(KeywordRecord.language == language)
        stmt = stmt.order_by(KeywordRecord.keywordid)
        if limit is not None:
            stmt = stmt.limit(limit)

        rows = self.session.execute(stmt).scalars().all()
        return [
            Keyword(id=row.keywordid, phrase=row.keyword, category=row.category, language=row.language)
            for row in rows
        ]

    def store_item(
        self,
        domain: str,
        url: str,
        phrase: str,
        keyword_id: int,
        title: str,
        provider: str,
        position: int = 0,
    ) -> int:
        now = utcnow()
        values = {
            "domain": domain,
            "url": url,
            "last_keyword": phrase,
            "last_keywordid": keyword_id,
            "last_title": title,
            "last_position": position,
            "search_engine": provider,
            "inserted": now,
        }
        key = f"{domain} {url} [{provider}]"
        return self._upsert(
            SearchEngineResult,
            values,
            conflict=["domain", "url", "last_keyword", "search_engine"],
            touch={"updated": now},
            key=key,
        )

    def get_new_entries(
        self,
        start_date: date,
        end_date: date,
        provider: Optional[str] = None,
    ) -> List[Tuple[str, int]]:
        """
        (domain, keyword id) for every domain first inserted inside the
        window and not yet promoted. The keyword id is the one of the
        domain's most recent observation.
        """
        start, end = window_bounds(start_date, end_date)
        stmt = (
            select(
                SearchEngineResult.domain,
                SearchEngineResult.last_keywordid,
                SearchEngineResult.inserted,
                SearchEngineResult.updated,
            )
            .where(SearchEngineResult.inserted >= start, SearchEngineResult.inserted < end)
            .where(SearchEngineResult.domain.not_in(select(Finding.domain)))
            .order_by(SearchEngineResult.id)
        )
        if provider is not None:
            stmt = stmt.where(SearchEngineResult.search_engine == provider)

        latest = {}
        seen_at = {}
        for domain, keyword_id, inserted, updated in self.session.execute(stmt):
            observed = updated or inserted
            if domain not in seen_at or observed >= seen_at[domain]:
                latest[domain] = keyword_id
                seen_at[domain] = observed
        return list(latest.items())

    def upsert_finding(self, domain: str, keyword_id: int) -> int:
        now = utcnow()
        values = {"domain": domain, "keyword_id": keyword_id, "inserted": now}
        return self._upsert(Finding, values, conflict=["domain"], touch={"updated": now}, key=domain)

    def _upsert(self, model, values: dict, conflict: List[str], touch: dict, key: str) -> int:
        if self.dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(model).values(**values).on_duplicate_key_update(**touch)
        else:
            insert = postgresql.insert if self.dialect == "postgresql" else sqlite.insert
            stmt = insert(model).values(**values).on_conflict_do_update(index_elements=conflict, set_=touch)

        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Write to {model.__tablename__} failed for {key}: {e}")
            raise StoreWriteError(model.__tablename__, key, e) from e
        return result.rowcount
