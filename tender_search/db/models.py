from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime, JSON, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CatalogueTender(Base):
    """Tender published in the product's own catalogue (the "internal" source)."""

    __tablename__ = "catalogue_tenders"

    id = Column(Integer, primary_key=True)
    tender_id = Column(String(64), nullable=False, unique=True)
    reference = Column(String(255))
    title = Column(String(500), nullable=False)
    description = Column(Text)
    organization = Column(String(255))
    location = Column(String(255))
    country = Column(String(100), default="France")
    budget = Column(Float)
    currency = Column(String(3), default="EUR")
    deadline = Column(DateTime)
    cpv_codes = Column(JSON, default=list)
    tender_type = Column(String(20), default="service")  # supply | service | works | mixed
    status = Column(String(20), default="open")  # open | closed | awarded
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_catalogue_tenders_deadline", "deadline"),
        Index("ix_catalogue_tenders_status", "status"),
    )


class SavedSearch(Base):
    __tablename__ = "saved_searches"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    query_text = Column(Text)  # Denormalized free text for listing
    filters = Column(JSON, nullable=False)  # Full SearchQuery payload
    notify_new_results = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_used_at = Column(DateTime)

    __table_args__ = (
        Index("ix_saved_searches_created_at", "created_at"),
    )
