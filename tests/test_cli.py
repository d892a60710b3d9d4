"""Tests for the command line interface."""

import io
import json

import pytest

from crudgen.cli import main

MODULE_ROOT = "github.com/acme/shop"

INVOICE = {
    "name": "invoice",
    "update_policy": "replace",
    "fields": [
        {"name": "Amount", "type": "decimal", "required": True},
        {"name": "PaidBy", "type": "text", "required": True, "unique": True},
    ],
}

PRODUCT = {
    "name": "product",
    "fields": [
        {"name": "name", "type": "text", "required": True},
        {"name": "tags", "type": "text_list"},
    ],
}


@pytest.fixture
def entity_file(tmp_path):
    def _write(data, name="entity.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def out_dir(tmp_path):
    path = tmp_path / "out"
    path.mkdir()
    return path


def written_files(root):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class TestInformationalCommands:
    """Tests for ``backends`` and ``types``."""

    def test_backends(self, capsys):
        assert main(["backends"]) == 0

        output = capsys.readouterr().out
        assert "relational" in output
        assert "mongodb" in output

    def test_types(self, capsys):
        assert main(["types", "mysql"]) == 0

        output = capsys.readouterr().out
        assert "DATETIME" in output
        assert "Not supported here:" in output
        assert "text-list" in output

    def test_types_with_strategy(self, capsys):
        assert main(["types", "mysql", "--text-list-strategy", "comma_joined"]) == 0

        assert "Not supported here:" not in capsys.readouterr().out

    def test_unknown_backend(self, capsys):
        assert main(["types", "graph"]) == 1
        assert "Unknown backend" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestGenerate:
    """Tests for ``generate``."""

    def test_dry_run_writes_nothing(self, entity_file, out_dir, capsys):
        code = main([
            "generate", entity_file(INVOICE), "--module", MODULE_ROOT,
            "-o", str(out_dir), "--dry-run",
        ])

        assert code == 0
        assert written_files(out_dir) == []
        assert "Dry run: nothing written" in capsys.readouterr().out

    def test_write_then_refuse_then_force(self, entity_file, out_dir, capsys):
        args = ["generate", entity_file(INVOICE), "--module", MODULE_ROOT, "-o", str(out_dir)]

        assert main(args) == 0
        files = written_files(out_dir)
        assert "internal/domain/invoice/model.go" in files
        assert "internal/api/handlers/invoice.go" in files
        assert "README_invoice.md" in files
        assert not any(f.startswith("internal/domain/invoice/patch") for f in files)

        assert main(args) == 1
        assert "Refusing to overwrite" in capsys.readouterr().out

        assert main(args + ["--force"]) == 0

    def test_document_backend(self, entity_file, out_dir):
        code = main([
            "generate", entity_file(INVOICE), "--module", MODULE_ROOT,
            "-o", str(out_dir), "--dialect", "mongodb",
        ])

        assert code == 0
        assert "migrations/mongodb_init_invoices.js" in written_files(out_dir)

    def test_missing_module(self, entity_file, out_dir, capsys):
        assert main(["generate", entity_file(INVOICE), "-o", str(out_dir)]) == 1
        assert "Module root is not set" in capsys.readouterr().out
        assert written_files(out_dir) == []

    def test_module_from_environment(self, entity_file, out_dir, monkeypatch):
        monkeypatch.setenv("CRUDGEN_MODULE_ROOT", MODULE_ROOT)

        assert main(["generate", entity_file(INVOICE), "-o", str(out_dir), "--dry-run"]) == 0

    def test_module_from_go_mod(self, entity_file, out_dir, monkeypatch):
        monkeypatch.delenv("CRUDGEN_MODULE_ROOT", raising=False)
        (out_dir / "go.mod").write_text("module example.com/billing\n\ngo 1.21\n",
                                        encoding="utf-8")

        assert main(["generate", entity_file(INVOICE), "-o", str(out_dir)]) == 0

        routes = (out_dir / "internal" / "api" / "routes" / "invoice_routes.go").read_text(
            encoding="utf-8"
        )
        assert '"example.com/billing/internal/api/handlers"' in routes

    def test_module_flag_wins_over_go_mod(self, entity_file, out_dir):
        (out_dir / "go.mod").write_text("module example.com/billing\n", encoding="utf-8")

        assert main(["generate", entity_file(INVOICE), "--module", MODULE_ROOT,
                     "-o", str(out_dir)]) == 0

        routes = (out_dir / "internal" / "api" / "routes" / "invoice_routes.go").read_text(
            encoding="utf-8"
        )
        assert f'"{MODULE_ROOT}/internal/api/handlers"' in routes

    def test_invalid_entity(self, entity_file, out_dir, capsys):
        bad = {"name": "invoice", "fields": [{"name": "id", "type": "integer64"}]}

        assert main(["generate", entity_file(bad), "--module", MODULE_ROOT,
                     "-o", str(out_dir)]) == 1
        assert "Code generation failed" in capsys.readouterr().out
        assert written_files(out_dir) == []

    def test_text_list_on_mysql(self, entity_file, out_dir):
        args = ["generate", entity_file(PRODUCT), "--module", MODULE_ROOT,
                "--dialect", "mysql", "-o", str(out_dir), "--dry-run"]

        assert main(args) == 1
        assert main(args + ["--text-list-strategy", "comma_joined"]) == 0

    def test_missing_input(self, capsys):
        assert main(["generate", "--module", MODULE_ROOT]) == 1
        assert "Input source required" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["generate", str(tmp_path / "nope.json"), "--module", MODULE_ROOT]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_unsupported_language(self, entity_file, capsys):
        assert main(["generate", entity_file(INVOICE), "--module", MODULE_ROOT,
                     "--language", "cobol"]) == 1
        assert "Unsupported language" in capsys.readouterr().out


class TestGenerateOptions:
    """Tests for ``generate`` output and override options."""

    def test_show_model(self, entity_file, capsys):
        assert main(["generate", entity_file(INVOICE), "--module", MODULE_ROOT,
                     "--dry-run", "--show", "model"]) == 0

        assert "Invoice struct" in capsys.readouterr().out

    def test_update_policy_override(self, entity_file, out_dir):
        assert main(["generate", entity_file(INVOICE), "--module", MODULE_ROOT,
                     "-o", str(out_dir), "--update-policy", "patch"]) == 0

        files = written_files(out_dir)
        assert "internal/domain/invoice/patch_request.go" in files
        assert "internal/domain/invoice/update_request.go" not in files

    def test_plural_override(self, entity_file, out_dir):
        person = {"name": "person", "fields": [{"name": "name", "type": "text"}]}

        assert main(["generate", entity_file(person), "--module", MODULE_ROOT,
                     "-o", str(out_dir), "--plural", "people"]) == 0

        assert any(f.endswith("_create_people_table.up.sql") for f in written_files(out_dir))

    def test_stdin(self, out_dir, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(INVOICE)))

        assert main(["generate", "--stdin", "--module", MODULE_ROOT,
                     "-o", str(out_dir), "--dry-run", "--verbose"]) == 0

        output = capsys.readouterr().out
        assert "<stdin>" in output
        assert "Run Metadata" in output

    def test_config_file(self, entity_file, out_dir, tmp_path):
        config = tmp_path / "crudgen.json"
        config.write_text(json.dumps({"module_root": MODULE_ROOT, "api_prefix": "/v1"}),
                          encoding="utf-8")

        assert main(["generate", entity_file(INVOICE), "--config", str(config),
                     "-o", str(out_dir)]) == 0

        routes = (out_dir / "internal/api/routes/invoice_routes.go").read_text(encoding="utf-8")
        assert '"/v1/invoices"' in routes
