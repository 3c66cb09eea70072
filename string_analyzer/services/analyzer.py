import hashlib
import re
from collections import Counter
from typing import Dict

from string_analyzer.schemas.string_record import StringProperties

_WHITESPACE_RUN = re.compile(r"\s+")


def compute_sha256(text: str) -> str:
    """Compute SHA-256 hash of a string's UTF-8 bytes"""
    # surrogatepass keeps the function total for lone surrogates
    return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


def is_palindrome(text: str) -> bool:
    """Check if string is palindrome (case-insensitive, nothing else stripped)"""
    folded = text.casefold()
    return folded == folded[::-1]


def count_unique_characters(text: str) -> int:
    """Count distinct characters in string (case-sensitive)"""
    return len(set(text))


def count_words(text: str) -> int:
    """Count whitespace separated words.

    An empty or all-whitespace string counts as one word: splitting the empty
    string still yields a single empty token.
    """
    return len(_WHITESPACE_RUN.split(text.strip()))


def get_character_frequency(text: str) -> Dict[str, int]:
    """Get frequency map of each character"""
    return dict(Counter(text))


def analyze_string(value: str) -> StringProperties:
    """Analyze a string and return all computed properties"""
    return StringProperties(
        length=len(value),
        is_palindrome=is_palindrome(value),
        unique_characters=count_unique_characters(value),
        word_count=count_words(value),
        sha256_hash=compute_sha256(value),
        character_frequency_map=get_character_frequency(value)
    )
