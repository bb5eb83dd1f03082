from sqlalchemy import Column, String, BigInteger, Integer, Text, DateTime, UniqueConstraint
from phrasefinder.core.database import Base

class SearchEngineResult(Base):
    __tablename__ = "wi_search_engine_result"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    domain = Column(String(255), nullable=False, index=True)
    url = Column(String(768), nullable=False)
    last_keyword = Column(String(512), nullable=False)
    last_keywordid = Column(BigInteger, nullable=False)
    last_title = Column(Text, nullable=True)
    last_addendum = Column(Text, nullable=True)
    last_position = Column(Integer, nullable=False, default=0)
    index_date = Column(String(32), nullable=True)
    ranking = Column(Integer, nullable=False, default=0)
    priority = Column(Integer, nullable=False, default=0)
    search_engine = Column(String(64), nullable=False, index=True)
    inserted = Column(DateTime(timezone=True), nullable=False, index=True)
    updated = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('domain', 'url', 'last_keyword', 'search_engine', name='uq_result_observation'),
    )
