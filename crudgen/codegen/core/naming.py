"""
Naming utilities for safe code generation.

Handles pluralization, case conversions, identifier validity and
reserved-word checks shared by every generator component.
"""

import re
from typing import Dict, List, Set
from enum import Enum


VOWELS = set("aeiou")

ENTITY_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")
FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

# Common SQL reserved words that make awkward column names
SQL_RESERVED_WORDS = {
    "all", "and", "as", "asc", "between", "by", "case", "check", "column",
    "constraint", "create", "default", "delete", "desc", "distinct", "drop",
    "else", "end", "exists", "from", "grant", "group", "having", "in",
    "index", "insert", "into", "is", "join", "key", "like", "limit", "not",
    "null", "offset", "on", "or", "order", "primary", "references", "select",
    "set", "table", "then", "to", "union", "unique", "update", "user",
    "values", "when", "where",
}


class NamingCase(Enum):
    """Different naming case styles."""
    PUBLIC = "public"                # PaidBy
    SERIALIZATION = "serialization"  # paidby


def pluralize(word: str) -> str:
    """
    Return the plural form of a singular lowercase word.

    Rules are applied in order and the first match wins:
    consonant + y -> ies; s/x/z/sh/ch -> es; fe -> ves; f -> ves; else s.
    """
    if len(word) > 1 and word.endswith("y") and word[-2] not in VOWELS:
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "sh", "ch")):
        return word + "es"
    if word.endswith("fe"):
        return word[:-2] + "ves"
    if word.endswith("f"):
        return word[:-1] + "ves"
    return word + "s"


def split_words(name: str) -> List[str]:
    """Split a name at underscores and at lower-to-upper case boundaries."""
    words = []
    for chunk in name.split("_"):
        if not chunk:
            continue
        words.extend(
            part for part in re.split(r"(?<=[a-z0-9])(?=[A-Z])", chunk) if part
        )
    return words


def to_public_identifier(name: str) -> str:
    """Convert to the exported identifier form (``paid_by`` -> ``PaidBy``)."""
    return "".join(word[0].upper() + word[1:] for word in split_words(name))


def to_serialization_name(name: str) -> str:
    """Convert to the storage/JSON name form (``PaidBy`` -> ``paidby``)."""
    return name.lower()


class NameSanitizer:
    """Handles identifier checks and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None,
                 storage_reserved_words: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
            storage_reserved_words: Words the storage backend reserves
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self.storage_reserved_words = (
            SQL_RESERVED_WORDS if storage_reserved_words is None else storage_reserved_words
        )
        self._name_cache: Dict[str, str] = {}

    def convert(self, name: str, target_case: NamingCase) -> str:
        """Convert a name to the requested case, caching the result."""
        cache_key = f"{name}_{target_case.value}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        if target_case == NamingCase.PUBLIC:
            converted = to_public_identifier(name)
        else:
            converted = to_serialization_name(name)

        self._name_cache[cache_key] = converted
        return converted

    def is_valid_entity_name(self, name: str) -> bool:
        """Entity names become package names and local variables."""
        return bool(ENTITY_NAME_PATTERN.match(name or "")) and not self.is_reserved(name)

    def is_valid_field_name(self, name: str) -> bool:
        return bool(FIELD_NAME_PATTERN.match(name or "")) and bool(split_words(name))

    def is_reserved(self, name: str) -> bool:
        lowered = name.lower()
        return lowered in self.reserved_words or lowered in self.builtin_types

    def is_storage_reserved(self, name: str) -> bool:
        return name.lower() in self.storage_reserved_words
