"""
Go-specific type system for code generation.

Fixed per-backend tables that map every abstract field type to its Go
native type, its storage type and an example literal. A type with no entry
is a TemplateError; there is no silent fallback.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Union

from ...core.errors import TemplateError
from ...core.schema import (
    BACKEND_DIALECTS,
    BackendFamily,
    Dialect,
    FieldSpec,
    FieldType,
)


@dataclass(frozen=True)
class GoType:
    """Go native type with the package paths its name refers to."""

    name: str
    imports_needed: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class TypeMapping:
    """
    Complete mapping of one field type for one backend dialect.

    Attributes:
        field_type: The abstract field type
        go_type: Go native type
        storage_type: Column type (relational) or bsonType (document)
        example_literal: JSON literal used in documentation
        storage_note: Extra handling the storage layer needs, if any
    """

    field_type: FieldType
    go_type: GoType
    storage_type: str
    example_literal: str
    storage_note: Optional[str] = None

    @property
    def native_type(self) -> str:
        return self.go_type.name


TIME_IMPORT = "time"

GO_TYPES: Dict[FieldType, GoType] = {
    FieldType.TEXT: GoType("string"),
    FieldType.INTEGER32: GoType("int32"),
    FieldType.INTEGER64: GoType("int64"),
    FieldType.DECIMAL: GoType("float64"),
    FieldType.BOOLEAN: GoType("bool"),
    FieldType.TIMESTAMP: GoType("time.Time", frozenset({TIME_IMPORT})),
    FieldType.TEXT_LIST: GoType("[]string"),
}

EXAMPLE_LITERALS: Dict[FieldType, str] = {
    FieldType.TEXT: '"example"',
    FieldType.INTEGER32: "123",
    FieldType.INTEGER64: "123",
    FieldType.DECIMAL: "99.99",
    FieldType.BOOLEAN: "true",
    FieldType.TIMESTAMP: '"2023-01-01T00:00:00Z"',
    FieldType.TEXT_LIST: '["item1", "item2"]',
}

STORAGE_TYPES: Dict[Dialect, Dict[FieldType, str]] = {
    Dialect.POSTGRESQL: {
        FieldType.TEXT: "VARCHAR(255)",
        FieldType.INTEGER32: "INTEGER",
        FieldType.INTEGER64: "BIGINT",
        FieldType.DECIMAL: "DECIMAL(10,2)",
        FieldType.BOOLEAN: "BOOLEAN",
        FieldType.TIMESTAMP: "TIMESTAMP",
        FieldType.TEXT_LIST: "TEXT[]",
    },
    Dialect.MYSQL: {
        FieldType.TEXT: "VARCHAR(255)",
        FieldType.INTEGER32: "INT",
        FieldType.INTEGER64: "BIGINT",
        FieldType.DECIMAL: "DECIMAL(10,2)",
        FieldType.BOOLEAN: "BOOLEAN",
        FieldType.TIMESTAMP: "DATETIME",
    },
    Dialect.MONGODB: {
        FieldType.TEXT: "string",
        FieldType.INTEGER32: "int",
        FieldType.INTEGER64: "long",
        FieldType.DECIMAL: "double",
        FieldType.BOOLEAN: "bool",
        FieldType.TIMESTAMP: "date",
        FieldType.TEXT_LIST: "array",
    },
}

# Column type used when a list is stored as one comma-separated string
COMMA_JOINED_STORAGE_TYPE = "TEXT"


def map_type(
    field_type: Union[FieldType, str],
    backend_family: BackendFamily,
    dialect: Optional[Dialect] = None,
    text_list_strategy: str = "native",
) -> TypeMapping:
    """
    Map an abstract field type for a backend.

    Args:
        field_type: Abstract field type (raw strings are unknown types)
        backend_family: Storage backend family
        dialect: Concrete database, defaults to the family's first dialect
        text_list_strategy: ``native`` or ``comma_joined``

    Returns:
        TypeMapping for the field type

    Raises:
        TemplateError: If the type has no mapping for the backend
    """
    if dialect is None:
        dialect = BACKEND_DIALECTS[backend_family][0]

    if not isinstance(field_type, FieldType):
        raise TemplateError(
            f"No type mapping for '{field_type}' on {dialect.value}"
        )

    table = STORAGE_TYPES[dialect]
    note = None

    if field_type == FieldType.TEXT_LIST and text_list_strategy == "comma_joined" \
            and backend_family == BackendFamily.RELATIONAL:
        storage_type = COMMA_JOINED_STORAGE_TYPE
        note = "comma_joined"
    elif field_type in table:
        storage_type = table[field_type]
        if field_type == FieldType.TEXT_LIST and dialect == Dialect.POSTGRESQL:
            note = "pq_array"
    else:
        hint = ""
        if field_type == FieldType.TEXT_LIST:
            hint = " (set text_list_strategy to 'comma_joined' to store it as TEXT)"
        raise TemplateError(
            f"No type mapping for '{field_type.value}' on {dialect.value}{hint}"
        )

    return TypeMapping(
        field_type=field_type,
        go_type=GO_TYPES[field_type],
        storage_type=storage_type,
        example_literal=EXAMPLE_LITERALS[field_type],
        storage_note=note,
    )


class GoTypeMapper:
    """Maps entity fields to Go and storage types for one project context."""

    def __init__(
        self,
        backend_family: BackendFamily,
        dialect: Optional[Dialect] = None,
        text_list_strategy: str = "native",
    ):
        self.backend_family = backend_family
        self.dialect = dialect or BACKEND_DIALECTS[backend_family][0]
        self.text_list_strategy = text_list_strategy

    def map_field(self, field_spec: FieldSpec) -> TypeMapping:
        """Map one field, tagging any TemplateError with the field name."""
        try:
            return map_type(
                field_spec.type,
                self.backend_family,
                self.dialect,
                self.text_list_strategy,
            )
        except TemplateError as e:
            e.field = field_spec.name
            raise

    def type_table(self) -> List[TypeMapping]:
        """Every mapping this backend supports, in field-type order."""
        mappings = []
        for field_type in FieldType:
            try:
                mappings.append(
                    map_type(field_type, self.backend_family, self.dialect,
                             self.text_list_strategy)
                )
            except TemplateError:
                continue
        return mappings
