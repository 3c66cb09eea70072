"""Tests for the record service against an in-memory database."""

import pytest
from sqlalchemy.exc import OperationalError

from string_analyzer.crud import string_record as crud
from string_analyzer.errors import (
    ConflictError,
    EmptyResultError,
    InternalError,
    InvalidInputError,
    InvalidTypeError,
    NotFoundError,
)
from string_analyzer.services.records import RecordService


def _values(records):
    return sorted(r.value for r in records)


def test_create_record_persists_properties(service):
    record = service.create_record({"value": "madam"})

    assert record.id == record.sha256_hash
    assert record.value == "madam"
    assert record.length == 5
    assert record.is_palindrome is True
    assert record.character_frequency_map == {"m": 2, "a": 2, "d": 1}
    assert record.created_at is not None


def test_create_requires_value(service):
    with pytest.raises(InvalidInputError):
        service.create_record({})


@pytest.mark.parametrize("value", [123, None, ["a"], {"a": 1}, True])
def test_create_requires_string(service, value):
    with pytest.raises(InvalidTypeError):
        service.create_record({"value": value})


def test_create_duplicate_conflicts(service):
    service.create_record({"value": "hello"})
    with pytest.raises(ConflictError):
        service.create_record({"value": "hello"})


def test_values_differing_in_case_or_whitespace_are_distinct(service):
    service.create_record({"value": "hello"})
    service.create_record({"value": "Hello"})
    service.create_record({"value": "hello "})
    assert service.get_record("Hello").value == "Hello"


def test_storage_level_uniqueness_is_a_conflict(database, monkeypatch):
    # Simulate the race: another session inserts between our check and insert
    other = database.session()
    RecordService(other).create_record({"value": "race"})
    other.close()

    monkeypatch.setattr(crud, "get_string_by_value", lambda db, value: None)
    session = database.session()
    try:
        with pytest.raises(ConflictError):
            RecordService(session).create_record({"value": "race"})
    finally:
        session.close()


def test_get_record_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_record("missing")


def test_list_records_applies_all_filters(service):
    for value in ["madam", "racecar", "hello world", "Level", "abc"]:
        service.create_record({"value": value})

    records, filters = service.list_records({"is_palindrome": "true", "word_count": "1"})
    assert _values(records) == ["Level", "madam", "racecar"]
    assert filters == {"is_palindrome": True, "word_count": 1}

    records, _ = service.list_records({"min_length": "5", "max_length": "7"})
    assert _values(records) == ["Level", "madam", "racecar"]

    records, _ = service.list_records({"contains_character": "L"})
    assert _values(records) == ["Level", "hello world"]


def test_list_records_without_filters_returns_everything(service):
    service.create_record({"value": "one"})
    service.create_record({"value": "two"})
    records, filters = service.list_records({})
    assert _values(records) == ["one", "two"]
    assert filters == {}


def test_contains_character_is_literal(service):
    service.create_record({"value": "100% sure"})
    service.create_record({"value": "plain"})
    records, _ = service.list_records({"contains_character": "%"})
    assert _values(records) == ["100% sure"]


def test_list_records_empty_result(service):
    service.create_record({"value": "abc"})
    with pytest.raises(EmptyResultError) as exc_info:
        service.list_records({"min_length": "5", "max_length": "20"})
    assert exc_info.value.status_code == 400
    assert exc_info.value.extra == {"filters_applied": {"min_length": 5, "max_length": 20}}


def test_list_by_phrase(service):
    for value in ["madam", "a santa at nasa", "zebra"]:
        service.create_record({"value": value})

    records, interpreted = service.list_by_phrase("all single word palindromic strings")
    assert _values(records) == ["madam"]
    assert interpreted == {
        "original": "all single word palindromic strings",
        "parsed_filters": {"word_count": 1, "is_palindrome": True},
    }

    records, _ = service.list_by_phrase("strings containing the letter z")
    assert _values(records) == ["zebra"]


def test_list_by_phrase_empty_result_is_unprocessable(service):
    service.create_record({"value": "abc"})
    with pytest.raises(EmptyResultError) as exc_info:
        service.list_by_phrase("strings longer than 10 characters")
    assert exc_info.value.status_code == 422
    assert exc_info.value.extra["interpreted_query"]["parsed_filters"] == {"min_length": 11}


def test_delete_record(service):
    service.create_record({"value": "bye"})
    service.delete_record("bye")
    with pytest.raises(NotFoundError):
        service.get_record("bye")
    with pytest.raises(NotFoundError):
        service.delete_record("bye")


def test_database_failure_is_internal_error(service, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(crud, "get_all_strings", broken)
    with pytest.raises(InternalError) as exc_info:
        service.list_records({})
    assert exc_info.value.to_dict() == {"error": "Internal server error"}


def test_contains_character_folds_non_ascii_case(service):
    service.create_record({"value": "Éclair"})
    service.create_record({"value": "eclair"})

    records, _ = service.list_records({"contains_character": "é"})
    assert _values(records) == ["Éclair"]

    records, _ = service.list_records({"contains_character": "CLAIR"})
    assert _values(records) == ["eclair", "Éclair"]


def test_create_rejects_unencodable_string(service):
    with pytest.raises(InvalidTypeError):
        service.create_record({"value": "a\ud800"})
    with pytest.raises(NotFoundError):
        service.get_record("a\ud800")
