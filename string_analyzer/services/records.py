import logging
from typing import Any, Dict, List, Mapping, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from string_analyzer.crud import string_record as crud
from string_analyzer.errors import (
    ConflictError,
    EmptyResultError,
    InternalError,
    InvalidInputError,
    InvalidTypeError,
    NotFoundError,
)
from string_analyzer.models.string_record import StringRecord
from string_analyzer.services.analyzer import analyze_string
from string_analyzer.services.query_filters import (
    ParamValue,
    parse_natural_language_query,
    parse_query_filters,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "String does not exist in the system"
CONFLICT_MESSAGE = "String already exists in the system"


class RecordService:
    """Create, read, list and delete analyzed strings.

    Validation always happens before the database is touched. Database
    failures surface as InternalError without their details.
    """

    def __init__(self, db: Session):
        self.db = db

    def _internal_error(self, action: str) -> InternalError:
        logger.exception(f"Database error while {action}")
        self.db.rollback()
        return InternalError("Internal server error")

    def create_record(self, payload: Mapping[str, Any]) -> StringRecord:
        if "value" not in payload:
            raise InvalidInputError("Invalid request body or missing 'value' field")

        value = payload["value"]
        if not isinstance(value, str):
            raise InvalidTypeError("Invalid data type for 'value' (must be string)")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates decode from JSON escapes but cannot be stored
            raise InvalidTypeError("Invalid data type for 'value' (must be valid UTF-8 text)")

        try:
            # Best-effort pre-check; the primary key is the real guard
            if crud.get_string_by_value(self.db, value) is not None:
                raise ConflictError(CONFLICT_MESSAGE)

            properties = analyze_string(value)
            record = crud.create_string_record(self.db, value, properties)
        except IntegrityError:
            self.db.rollback()
            logger.warning("Concurrent insert detected for an existing string")
            raise ConflictError(CONFLICT_MESSAGE)
        except SQLAlchemyError:
            raise self._internal_error("creating string")

        logger.info(f"Stored string {record.id}")
        return record

    def get_record(self, value: str) -> StringRecord:
        try:
            record = crud.get_string_by_value(self.db, value)
        except SQLAlchemyError:
            raise self._internal_error("fetching string")

        if record is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return record

    def _find(self, filters: Dict[str, Any]) -> List[StringRecord]:
        try:
            return crud.get_all_strings(self.db, **filters)
        except SQLAlchemyError:
            raise self._internal_error("filtering strings")

    def list_records(
        self, params: Mapping[str, ParamValue]
    ) -> Tuple[List[StringRecord], Dict[str, Any]]:
        """Return records matching structured filters along with the filters."""
        filters = parse_query_filters(params)
        records = self._find(filters)

        if not records:
            raise EmptyResultError(
                "No strings match the supplied filters",
                filters_applied=filters
            )
        return records, filters

    def list_by_phrase(self, query: str) -> Tuple[List[StringRecord], Dict[str, Any]]:
        """Return records matching a natural language phrase along with its interpretation."""
        filters = parse_natural_language_query(query)
        interpreted_query = {"original": query, "parsed_filters": filters}
        records = self._find(filters)

        if not records:
            raise EmptyResultError(
                "Query parsed but resulted in no matching strings",
                status_code=422,
                interpreted_query=interpreted_query
            )
        return records, interpreted_query

    def delete_record(self, value: str) -> None:
        try:
            deleted = crud.delete_string(self.db, value)
        except SQLAlchemyError:
            raise self._internal_error("deleting string")

        if not deleted:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        logger.info("Deleted string")
