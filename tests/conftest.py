"""
Shared test fixtures.
"""

import os
from datetime import datetime, timezone

import pytest

from crudgen.codegen.core.orchestrator import GenerationOrchestrator
from crudgen.codegen.core.schema import (
    BackendFamily,
    Dialect,
    EntitySpec,
    FieldSpec,
    FieldType,
    ProjectContext,
    UpdatePolicy,
)
from crudgen.codegen.languages.go import create_go_generator

MODULE_ROOT = "github.com/acme/shop"
FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


# === Entities ===


@pytest.fixture
def invoice_entity() -> EntitySpec:
    """Invoice with a required amount and a required, unique payer."""
    return EntitySpec(
        name="invoice",
        fields=[
            FieldSpec("Amount", FieldType.DECIMAL, required=True),
            FieldSpec("PaidBy", FieldType.TEXT, required=True, unique=True),
        ],
        update_policy=UpdatePolicy.REPLACE_ONLY,
    )


@pytest.fixture
def product_entity() -> EntitySpec:
    """Product using every update path and both timestamp roles."""
    return EntitySpec(
        name="product",
        fields=[
            FieldSpec("name", FieldType.TEXT, required=True, unique=True),
            FieldSpec("price", FieldType.DECIMAL, required=True),
            FieldSpec("inStock", FieldType.BOOLEAN, required=True),
            FieldSpec("tags", FieldType.TEXT_LIST),
            FieldSpec("createdAt", FieldType.TIMESTAMP),
            FieldSpec("updatedAt", FieldType.TIMESTAMP),
        ],
        update_policy=UpdatePolicy.BOTH,
    )


# === Project contexts ===


@pytest.fixture
def postgres_context() -> ProjectContext:
    return ProjectContext(
        module_root=MODULE_ROOT,
        backend_family=BackendFamily.RELATIONAL,
        dialect=Dialect.POSTGRESQL,
        generated_at=FIXED_TIME,
    )


@pytest.fixture
def mysql_context() -> ProjectContext:
    return ProjectContext(
        module_root=MODULE_ROOT,
        backend_family=BackendFamily.RELATIONAL,
        dialect=Dialect.MYSQL,
        text_list_strategy="comma_joined",
        generated_at=FIXED_TIME,
    )


@pytest.fixture
def mongo_context() -> ProjectContext:
    return ProjectContext(
        module_root=MODULE_ROOT,
        backend_family=BackendFamily.DOCUMENT,
        generated_at=FIXED_TIME,
    )


# === Generators ===


@pytest.fixture
def generator():
    return create_go_generator()


@pytest.fixture
def run(generator):
    """Run one generation through the orchestrator, raising on failure."""

    def _run(entity, context, max_workers=4):
        return GenerationOrchestrator(generator, max_workers=max_workers).run(entity, context)

    return _run


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep CRUDGEN_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CRUDGEN_"):
            monkeypatch.delenv(key)
