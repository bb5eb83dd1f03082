from sqlalchemy import Column, String, BigInteger, Integer
from phrasefinder.core.database import Base

class KeywordRecord(Base):
    __tablename__ = "wi_keywords"

    keywordid = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    keyword = Column(String(512), nullable=False)
    category = Column(String(64), nullable=True, index=True)
    language = Column(String(16), nullable=True, index=True)
