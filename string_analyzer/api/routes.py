from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional

from string_analyzer.database import get_db
from string_analyzer.schemas.string_record import (
    NaturalLanguageResponse,
    StringListResponse,
    StringResponse,
)
from string_analyzer.services.records import RecordService

router = APIRouter()


def get_record_service(db: Session = Depends(get_db)) -> RecordService:
    return RecordService(db)


def _query_params(request: Request) -> Dict[str, Any]:
    """Collapse query params, keeping repeated keys as lists."""
    params: Dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key in params:
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


@router.post("/strings", response_model=StringResponse, status_code=status.HTTP_201_CREATED)
def create_string(
    payload: Dict[str, Any] = Body(..., examples=[{"value": "madam"}]),
    service: RecordService = Depends(get_record_service)
):
    """
    Analyze and store a string.
    Returns 409 if string already exists.
    """
    record = service.create_record(payload)
    return StringResponse.from_record(record)


@router.get("/strings/filter-by-natural-language", response_model=NaturalLanguageResponse)
def filter_by_natural_language(
    query: Optional[str] = Query(None, description="Natural language query"),
    service: RecordService = Depends(get_record_service)
):
    """
    Filter strings using natural language queries.
    Example: "all single word palindromic strings"
    """
    records, interpreted_query = service.list_by_phrase(query)
    data = [StringResponse.from_record(r) for r in records]
    return NaturalLanguageResponse(
        data=data,
        count=len(data),
        interpreted_query=interpreted_query
    )


@router.get("/strings/{string_value}", response_model=StringResponse)
def get_string(string_value: str, service: RecordService = Depends(get_record_service)):
    """
    Get analysis for a specific string.
    Returns 404 if string doesn't exist.
    """
    return StringResponse.from_record(service.get_record(string_value))


LIST_FILTER_PARAMETERS = [
    ("is_palindrome", "boolean", "true or false"),
    ("min_length", "number", "Minimum length (inclusive)"),
    ("max_length", "number", "Maximum length (inclusive)"),
    ("word_count", "number", "Exact word count"),
    ("contains_character", "string", "Case-insensitive substring"),
]


@router.get(
    "/strings",
    response_model=StringListResponse,
    openapi_extra={
        "parameters": [
            {"name": name, "in": "query", "required": False,
             "schema": {"type": kind}, "description": description}
            for name, kind, description in LIST_FILTER_PARAMETERS
        ]
    }
)
def get_all_strings(request: Request, service: RecordService = Depends(get_record_service)):
    """
    Get all strings with optional filtering.
    Filters are read from the raw query string so repeated or malformed
    values can be reported by name.
    """
    records, filters = service.list_records(_query_params(request))
    data = [StringResponse.from_record(r) for r in records]
    return StringListResponse(
        data=data,
        count=len(data),
        filters_applied=filters
    )


@router.delete("/strings/{string_value}", status_code=status.HTTP_204_NO_CONTENT)
def delete_string(string_value: str, service: RecordService = Depends(get_record_service)):
    """
    Delete a string from the system.
    Returns 404 if string doesn't exist.
    """
    service.delete_record(string_value)
    return None
