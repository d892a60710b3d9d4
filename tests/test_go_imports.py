"""Tests for Go import grouping."""

from crudgen.codegen.languages.go.config import (
    build_import_block,
    format_go_imports,
    group_go_imports,
)

MODULE = "github.com/acme/shop"


class TestGroupImports:
    """Tests for splitting imports into gofmt groups."""

    def test_three_groups(self):
        groups = group_go_imports(
            [
                "net/http",
                f"{MODULE}/internal/api/responses",
                "github.com/gorilla/mux",
                "context",
                "database/sql/driver",
            ],
            MODULE,
        )

        assert groups == [
            ["context", "database/sql/driver", "net/http"],
            ["github.com/gorilla/mux"],
            [f"{MODULE}/internal/api/responses"],
        ]

    def test_duplicates_and_empty_groups(self):
        assert group_go_imports(["time", "time"], MODULE) == [["time"]]
        assert group_go_imports([], MODULE) == []

    def test_prefix_of_module_is_not_local(self):
        groups = group_go_imports(["github.com/acme/shopping"], MODULE)

        assert groups == [["github.com/acme/shopping"]]


class TestFormatImports:
    """Tests for rendering the import declaration."""

    def test_empty(self):
        assert format_go_imports([]) == ""

    def test_single(self):
        assert format_go_imports([["context"]]) == 'import "context"\n'

    def test_grouped(self):
        block = format_go_imports([["context", "fmt"], ["github.com/gorilla/mux"]])

        assert block == 'import (\n\t"context"\n\t"fmt"\n\n\t"github.com/gorilla/mux"\n)\n'

    def test_build_import_block(self):
        block = build_import_block({"strings", f"{MODULE}/internal/api/handlers"}, MODULE)

        assert block == f'import (\n\t"strings"\n\n\t"{MODULE}/internal/api/handlers"\n)\n'
