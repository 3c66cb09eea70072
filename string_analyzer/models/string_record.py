from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text

from string_analyzer.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StringRecord(Base):
    __tablename__ = "string_records"

    # SHA-256 of value; the primary key doubles as the uniqueness constraint on value
    id = Column(String(64), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    length = Column(Integer, nullable=False, index=True)
    is_palindrome = Column(Boolean, nullable=False, index=True)
    unique_characters = Column(Integer, nullable=False)
    word_count = Column(Integer, nullable=False, index=True)
    sha256_hash = Column(String(64), nullable=False)
    character_frequency_map = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
