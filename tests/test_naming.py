"""Tests for pluralization, case conversion and identifier checks."""

import pytest

from crudgen.codegen.core.naming import (
    NameSanitizer,
    NamingCase,
    pluralize,
    split_words,
    to_public_identifier,
    to_serialization_name,
)
from crudgen.codegen.languages.go.naming import create_go_sanitizer


class TestPluralize:
    """Tests for the ordered pluralization rules."""

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("category", "categories"),
            ("box", "boxes"),
            ("church", "churches"),
            ("knife", "knives"),
            ("book", "books"),
            ("dish", "dishes"),
            ("bus", "buses"),
            ("leaf", "leaves"),
            ("day", "days"),
            ("key", "keys"),
            ("invoice", "invoices"),
        ],
    )
    def test_rules(self, singular, plural):
        assert pluralize(singular) == plural

    def test_consonant_y_wins_over_later_rules(self):
        assert pluralize("policy") == "policies"

    def test_deterministic(self):
        assert pluralize("address") == pluralize("address") == "addresses"


class TestCaseConversion:
    """Tests for public and serialization forms."""

    @pytest.mark.parametrize(
        "name, public",
        [
            ("paid_by", "PaidBy"),
            ("paidBy", "PaidBy"),
            ("PaidBy", "PaidBy"),
            ("createdAt", "CreatedAt"),
            ("amount", "Amount"),
            ("line2", "Line2"),
        ],
    )
    def test_public_identifier(self, name, public):
        assert to_public_identifier(name) == public

    @pytest.mark.parametrize(
        "name, serial",
        [
            ("PaidBy", "paidby"),
            ("paid_by", "paid_by"),
            ("createdAt", "createdat"),
        ],
    )
    def test_serialization_name_keeps_boundaries_verbatim(self, name, serial):
        assert to_serialization_name(name) == serial

    def test_split_words(self):
        assert split_words("paid_byCustomer") == ["paid", "by", "Customer"]

    def test_sanitizer_convert_is_cached(self):
        sanitizer = NameSanitizer()
        first = sanitizer.convert("paid_by", NamingCase.PUBLIC)
        assert sanitizer.convert("paid_by", NamingCase.PUBLIC) is first
        assert sanitizer.convert("PaidBy", NamingCase.SERIALIZATION) == "paidby"


class TestGoSanitizer:
    """Tests for Go-specific identifier rules."""

    @pytest.fixture
    def sanitizer(self):
        return create_go_sanitizer()

    @pytest.mark.parametrize("name", ["invoice", "order2", "product"])
    def test_valid_entity_names(self, sanitizer, name):
        assert sanitizer.is_valid_entity_name(name)

    @pytest.mark.parametrize(
        "name",
        ["Invoice", "2fast", "line_item", "", "type", "string", "handlers", "errors"],
    )
    def test_invalid_entity_names(self, sanitizer, name):
        assert not sanitizer.is_valid_entity_name(name)

    @pytest.mark.parametrize("name", ["PaidBy", "paid_by", "x1"])
    def test_valid_field_names(self, sanitizer, name):
        assert sanitizer.is_valid_field_name(name)

    @pytest.mark.parametrize("name", ["_hidden", "2x", "paid-by", "", "___"])
    def test_invalid_field_names(self, sanitizer, name):
        assert not sanitizer.is_valid_field_name(name)

    def test_storage_reserved_words(self, sanitizer):
        assert sanitizer.is_storage_reserved("order")
        assert sanitizer.is_storage_reserved("ORDER")
        assert not sanitizer.is_storage_reserved("amount")
