"""Tests for loading entity descriptions."""

import json

import pytest
import requests

from crudgen.codegen.core.schema import FieldType, UpdatePolicy
from crudgen.utils import (
    EntityLoaderError,
    load_entity,
    load_entity_from_file,
    load_entity_from_string,
    load_entity_from_url,
    read_go_module,
)

INVOICE = {
    "name": "invoice",
    "update_policy": "replace",
    "fields": [
        {"name": "Amount", "type": "decimal", "required": True},
        {"name": "PaidBy", "type": "text", "required": True, "unique": True},
    ],
}


class FakeResponse:
    def __init__(self, payload=None, status=200, invalid_json=False):
        self.payload = payload
        self.status_code = status
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(response=self)

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class TestFileLoading:
    """Tests for reading entity files."""

    def test_load_file(self, tmp_path):
        path = tmp_path / "invoice.json"
        path.write_text(json.dumps(INVOICE), encoding="utf-8")

        source, entity = load_entity(file_path=path)

        assert source == str(path)
        assert entity.name == "invoice"
        assert entity.update_policy == UpdatePolicy.REPLACE_ONLY
        assert [f.type for f in entity.fields] == [FieldType.DECIMAL, FieldType.TEXT]

    def test_missing_file(self, tmp_path):
        with pytest.raises(EntityLoaderError, match="File not found"):
            load_entity_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(EntityLoaderError, match="Invalid JSON"):
            load_entity_from_file(path)

    def test_other_extension_still_loads(self, tmp_path):
        path = tmp_path / "invoice.txt"
        path.write_text(json.dumps(INVOICE), encoding="utf-8")

        _, data = load_entity_from_file(path)

        assert data["name"] == "invoice"


class TestStringLoading:
    """Tests for parsing JSON text and shape checks."""

    def test_load_text(self):
        source, entity = load_entity(text=json.dumps(INVOICE))

        assert source == "<string>"
        assert entity.public_name == "Invoice"

    @pytest.mark.parametrize(
        "text, message",
        [
            ("[]", "must be a JSON object"),
            ('{"fields": []}', "has no 'name'"),
            ('{"name": "x", "fields": {}}', "must be a list"),
            ('{"name": "x", "fields": ["a"]}', "Field #1"),
            ("not json", "Invalid JSON"),
        ],
    )
    def test_bad_shape(self, text, message):
        with pytest.raises(EntityLoaderError, match=message):
            load_entity_from_string(text)

    @pytest.mark.parametrize(
        "kwargs",
        [{}, {"text": "{}", "url": "https://example.com/e.json"}],
    )
    def test_exactly_one_source(self, kwargs):
        with pytest.raises(EntityLoaderError, match="Exactly one"):
            load_entity(**kwargs)


class TestUrlLoading:
    """Tests for fetching entity descriptions over HTTP."""

    def test_load_url(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(INVOICE)

        monkeypatch.setattr("crudgen.utils.requests.get", fake_get)

        source, entity = load_entity(url="https://example.com/invoice.json", timeout=5)

        assert source == "https://example.com/invoice.json"
        assert entity.name == "invoice"
        assert calls == [("https://example.com/invoice.json", 5)]

    def test_invalid_url(self):
        with pytest.raises(EntityLoaderError, match="Invalid URL"):
            load_entity_from_url("example.com/invoice.json")

    @pytest.mark.parametrize(
        "error, message",
        [
            (requests.exceptions.Timeout(), "timeout"),
            (requests.exceptions.ConnectionError(), "Connection error"),
            (requests.exceptions.TooManyRedirects(), "Request error"),
        ],
    )
    def test_request_errors(self, monkeypatch, error, message):
        def fake_get(url, timeout):
            raise error

        monkeypatch.setattr("crudgen.utils.requests.get", fake_get)

        with pytest.raises(EntityLoaderError, match=message):
            load_entity_from_url("https://example.com/invoice.json")

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(
            "crudgen.utils.requests.get", lambda url, timeout: FakeResponse(status=404)
        )

        with pytest.raises(EntityLoaderError, match="HTTP error 404"):
            load_entity_from_url("https://example.com/invoice.json")

    def test_invalid_json_response(self, monkeypatch):
        monkeypatch.setattr(
            "crudgen.utils.requests.get",
            lambda url, timeout: FakeResponse(invalid_json=True),
        )

        with pytest.raises(EntityLoaderError, match="Invalid JSON response"):
            load_entity_from_url("https://example.com/invoice.json")


class TestGoModule:
    """Tests for reading the module path from go.mod."""

    @pytest.mark.parametrize(
        "body",
        [
            "module github.com/acme/shop\n\ngo 1.21\n",
            "// shop service\nmodule   github.com/acme/shop // main module\n",
            'module "github.com/acme/shop"\n',
        ],
    )
    def test_module_directive(self, tmp_path, body):
        (tmp_path / "go.mod").write_text(body, encoding="utf-8")

        assert read_go_module(tmp_path) == "github.com/acme/shop"

    def test_no_go_mod(self, tmp_path):
        assert read_go_module(tmp_path) is None

    def test_no_module_directive(self, tmp_path):
        (tmp_path / "go.mod").write_text("go 1.21\n\nrequire example.com/x v1.0.0\n",
                                         encoding="utf-8")

        assert read_go_module(tmp_path) is None
