from typing import Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from phrasefinder.core.database import create_tables
from phrasefinder.core.types import Page, ProviderResult, SearchItem
from phrasefinder.models import KeywordRecord
from phrasefinder.services.storage import ResultStore


class FakeProvider:
    """Replays scripted results per phrase, one entry per requested page."""

    name = "fake"
    page_size = 10

    def __init__(self, script: Dict[str, List[ProviderResult]]):
        self.script = script
        self.calls = []
        self.closed = False

    def query(self, phrase: str, start: int) -> ProviderResult:
        self.calls.append((phrase, start))
        pages = self.script.get(phrase, [])
        index = (start - 1) // self.page_size
        if index < len(pages):
            return pages[index]
        return Page(items=[], has_next=False)

    def close(self) -> None:
        self.closed = True


def page(*domains: str, has_next: bool = False) -> Page:
    return Page(
        items=[SearchItem(domain=d, url=f"https://{d}/", title=d.title()) for d in domains],
        has_next=has_next,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    maker = sessionmaker(engine, class_=Session, expire_on_commit=False)
    with maker() as session:
        yield session


@pytest.fixture
def store(db_session):
    return ResultStore(db_session)


@pytest.fixture
def add_keywords(db_session):
    def _add(*phrases: str, category: str = "shop", language: str = "de") -> None:
        for phrase in phrases:
            db_session.add(KeywordRecord(keyword=phrase, category=category, language=language))
        db_session.commit()

    return _add
