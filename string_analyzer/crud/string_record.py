from sqlalchemy.orm import Session
from sqlalchemy import Text, and_, func
from typing import List, Optional, Union

from string_analyzer.models.string_record import StringRecord
from string_analyzer.schemas.string_record import StringProperties
from string_analyzer.services.analyzer import compute_sha256

Number = Union[int, float]


def create_string_record(db: Session, value: str, properties: StringProperties) -> StringRecord:
    """Insert a new record. Raises IntegrityError if the value already exists."""
    db_string = StringRecord(
        id=properties.sha256_hash,
        value=value,
        length=properties.length,
        is_palindrome=properties.is_palindrome,
        unique_characters=properties.unique_characters,
        word_count=properties.word_count,
        sha256_hash=properties.sha256_hash,
        character_frequency_map=dict(properties.character_frequency_map)
    )

    db.add(db_string)
    db.commit()
    db.refresh(db_string)
    return db_string


def get_string_by_value(db: Session, value: str) -> Optional[StringRecord]:
    """Get a record by exact value.

    Matching on the hash keeps the lookup case- and whitespace-sensitive
    regardless of the database collation.
    """
    return db.get(StringRecord, compute_sha256(value))


def _contains_ignoring_case(db: Session, text: str):
    """Case-insensitive literal substring match, wildcards escaped."""
    if db.get_bind().dialect.name == "sqlite":
        # casefold() is registered per connection in database.py
        folded = func.casefold(StringRecord.value, type_=Text)
        return folded.contains(text.casefold(), autoescape=True)
    return StringRecord.value.icontains(text, autoescape=True)


def get_all_strings(
    db: Session,
    is_palindrome: Optional[bool] = None,
    min_length: Optional[Number] = None,
    max_length: Optional[Number] = None,
    word_count: Optional[Number] = None,
    contains_character: Optional[str] = None
) -> List[StringRecord]:
    """Get all strings matching every supplied filter"""
    query = db.query(StringRecord)

    filters = []

    if is_palindrome is not None:
        filters.append(StringRecord.is_palindrome == is_palindrome)

    if min_length is not None:
        filters.append(StringRecord.length >= min_length)

    if max_length is not None:
        filters.append(StringRecord.length <= max_length)

    if word_count is not None:
        filters.append(StringRecord.word_count == word_count)

    if contains_character is not None:
        filters.append(_contains_ignoring_case(db, contains_character))

    if filters:
        query = query.filter(and_(*filters))

    return query.order_by(StringRecord.created_at).all()


def delete_string(db: Session, value: str) -> bool:
    """Delete a record by exact value"""
    db_string = get_string_by_value(db, value)
    if db_string:
        db.delete(db_string)
        db.commit()
        return True
    return False
