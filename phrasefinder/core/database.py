
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Sequence, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from phrasefinder.core.exceptions import DatabaseUnavailableError
from phrasefinder.core.settings import Settings, settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# one engine per configured URL list
_engines: Dict[Tuple[str, ...], Engine] = {}

def connect_sequential(urls: Sequence[str], echo: bool = False) -> Engine:
    """Return an engine for the first URL that accepts a connection."""
    hosts = []
    last_error: Optional[Exception] = None
    for url in urls:
        hosts.append(make_url(url).host or url)
        engine = create_engine(url, echo=echo)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Database host {hosts[-1]} unavailable: {e}")
            engine.dispose()
            last_error = e
            continue
        logger.info(f"Connected to database host {hosts[-1]}")
        return engine
    raise DatabaseUnavailableError(hosts, last_error)

def get_engine(cfg: Optional[Settings] = None) -> Engine:
    cfg = cfg or settings
    urls = (cfg.database_url, *cfg.database_fallback_urls)

    if urls not in _engines:
        _engines[urls] = connect_sequential(urls, echo=cfg.database_echo)
    return _engines[urls]

def create_tables(engine: Engine) -> None:
    # models must be imported so their tables are registered on Base
    from phrasefinder import models  # noqa: F401

    Base.metadata.create_all(engine)

@contextmanager
def get_db(cfg: Optional[Settings] = None) -> Iterator[Session]:
    session_maker = sessionmaker(get_engine(cfg), class_=Session, expire_on_commit=False)
    with session_maker() as session:
        yield session
