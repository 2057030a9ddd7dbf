"""SQLAlchemy ORM model backing the key-value record collections"""

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class StoredRecord(Base):
    """One record (manager, client, transaction or boss config) stored as a JSON document"""

    __tablename__ = "gestornet_record"

    collection = Column(String(32), primary_key=True)
    record_id = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
