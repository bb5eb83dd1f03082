from sqlalchemy import Column, String, BigInteger, Integer, DateTime
from phrasefinder.core.database import Base

class Finding(Base):
    __tablename__ = "wi_findings"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    domain = Column(String(255), nullable=False, unique=True)
    keyword_id = Column(BigInteger, nullable=False)
    inserted = Column(DateTime(timezone=True), nullable=False)
    updated = Column(DateTime(timezone=True), nullable=True)
