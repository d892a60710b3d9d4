"""
Core data model for entity code generation.

Describes the entity handed to the generator (EntitySpec/FieldSpec) and the
immutable environment of one generation run (ProjectContext).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from .errors import ValidationError
from .naming import NamingCase, NameSanitizer


class FieldType(Enum):
    """Abstract field types an entity attribute can have."""

    TEXT = "text"
    INTEGER32 = "integer32"
    INTEGER64 = "integer64"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    TEXT_LIST = "text-list"


class UpdatePolicy(Enum):
    """Which update code paths are generated."""

    REPLACE_ONLY = "replace"
    PATCH_ONLY = "patch"
    BOTH = "both"

    @property
    def allows_replace(self) -> bool:
        return self in (UpdatePolicy.REPLACE_ONLY, UpdatePolicy.BOTH)

    @property
    def allows_patch(self) -> bool:
        return self in (UpdatePolicy.PATCH_ONLY, UpdatePolicy.BOTH)


class BackendFamily(Enum):
    """Storage backend families."""

    RELATIONAL = "relational"
    DOCUMENT = "document"


class Dialect(Enum):
    """Concrete databases within a backend family."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"


class TimestampRole(Enum):
    """System-managed timestamp roles."""

    CREATED_AT = "CreatedAt"
    UPDATED_AT = "UpdatedAt"


# Input spellings accepted for field types, including the Go type names
# used by older entity descriptions.
FIELD_TYPE_ALIASES: Dict[str, FieldType] = {
    "text": FieldType.TEXT,
    "string": FieldType.TEXT,
    "integer32": FieldType.INTEGER32,
    "int32": FieldType.INTEGER32,
    "int": FieldType.INTEGER32,
    "integer64": FieldType.INTEGER64,
    "int64": FieldType.INTEGER64,
    "decimal": FieldType.DECIMAL,
    "float": FieldType.DECIMAL,
    "float64": FieldType.DECIMAL,
    "boolean": FieldType.BOOLEAN,
    "bool": FieldType.BOOLEAN,
    "timestamp": FieldType.TIMESTAMP,
    "datetime": FieldType.TIMESTAMP,
    "time.Time": FieldType.TIMESTAMP,
    "text-list": FieldType.TEXT_LIST,
    "text_list": FieldType.TEXT_LIST,
    "list": FieldType.TEXT_LIST,
    "[]string": FieldType.TEXT_LIST,
}

UPDATE_POLICY_ALIASES: Dict[str, UpdatePolicy] = {
    "replace": UpdatePolicy.REPLACE_ONLY,
    "replace_only": UpdatePolicy.REPLACE_ONLY,
    "put": UpdatePolicy.REPLACE_ONLY,
    "patch": UpdatePolicy.PATCH_ONLY,
    "patch_only": UpdatePolicy.PATCH_ONLY,
    "both": UpdatePolicy.BOTH,
}

BACKEND_DIALECTS: Dict[BackendFamily, List[Dialect]] = {
    BackendFamily.RELATIONAL: [Dialect.POSTGRESQL, Dialect.MYSQL],
    BackendFamily.DOCUMENT: [Dialect.MONGODB],
}

TEXT_LIST_STRATEGIES = ("native", "comma_joined")

_sanitizer = NameSanitizer()


def parse_flag(data: Dict[str, Any], key: str) -> bool:
    """Read an optional JSON boolean; strings such as ``"false"`` are rejected."""
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValidationError(
            f"'{key}' must be true or false, got {value!r}",
            field=str(data.get("name", "")) or None,
        )
    return value


def parse_field_type(value: Any) -> Union[FieldType, str]:
    """Resolve a field type spelling; unknown spellings are returned unchanged."""
    if isinstance(value, FieldType):
        return value
    text = str(value).strip()
    return FIELD_TYPE_ALIASES.get(text, FIELD_TYPE_ALIASES.get(text.lower(), text))


def parse_update_policy(value: Any) -> Union[UpdatePolicy, str]:
    """Resolve an update policy spelling; unknown spellings are returned unchanged."""
    if isinstance(value, UpdatePolicy):
        return value
    text = str(value).strip()
    return UPDATE_POLICY_ALIASES.get(text.lower().replace("-", "_"), text)


@dataclass(frozen=True)
class FieldSpec:
    """One attribute of an entity."""

    name: str
    type: Union[FieldType, str]
    required: bool = False
    unique: bool = False
    description: Optional[str] = None

    @property
    def public_name(self) -> str:
        return _sanitizer.convert(self.name, NamingCase.PUBLIC)

    @property
    def serialization_name(self) -> str:
        return _sanitizer.convert(self.name, NamingCase.SERIALIZATION)

    @property
    def timestamp_role(self) -> Optional[TimestampRole]:
        """The system-managed role this field plays, if any."""
        for role in TimestampRole:
            if self.public_name == role.value:
                return role
        return None

    @property
    def is_system_managed(self) -> bool:
        return self.timestamp_role is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldSpec":
        return cls(
            name=str(data.get("name", "")),
            type=parse_field_type(data.get("type", "text")),
            required=parse_flag(data, "required"),
            unique=parse_flag(data, "unique"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class EntitySpec:
    """The unit of generation: one business entity."""

    name: str
    fields: List[FieldSpec] = field(default_factory=list)
    update_policy: Union[UpdatePolicy, str] = UpdatePolicy.BOTH
    plural_name: Optional[str] = None
    description: Optional[str] = None

    @property
    def public_name(self) -> str:
        return _sanitizer.convert(self.name, NamingCase.PUBLIC)

    def writable_fields(self) -> List[FieldSpec]:
        """Fields a client may send; timestamp-role fields are excluded."""
        return [f for f in self.fields if not f.is_system_managed]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntitySpec":
        """
        Build an entity from its JSON description.

        Args:
            data: Mapping with ``name``, ``fields`` and optional
                ``plural_name``/``pluralName``, ``update_policy``/``updatePolicy``

        Returns:
            EntitySpec (not yet validated)
        """
        plural = data.get("plural_name", data.get("pluralName"))
        policy = data.get("update_policy", data.get("updatePolicy", "both"))
        return cls(
            name=str(data.get("name", "")),
            fields=[FieldSpec.from_dict(f) for f in data.get("fields", [])],
            update_policy=parse_update_policy(policy),
            plural_name=plural or None,
            description=data.get("description"),
        )


@dataclass(frozen=True)
class ProjectContext:
    """Generation-time environment, immutable for one run."""

    module_root: str
    backend_family: BackendFamily = BackendFamily.RELATIONAL
    dialect: Optional[Dialect] = None
    project_name: Optional[str] = None
    text_list_strategy: str = "native"
    generated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def resolved_dialect(self) -> Dialect:
        """The dialect in effect, defaulting to the family's first dialect."""
        if self.dialect is not None:
            return self.dialect
        return BACKEND_DIALECTS[self.backend_family][0]

    @property
    def resolved_project_name(self) -> str:
        if self.project_name:
            return self.project_name
        return self.module_root.rstrip("/").split("/")[-1]

    @property
    def id_type(self) -> str:
        """Go type of the primary key for this backend family."""
        if self.backend_family == BackendFamily.DOCUMENT:
            return "string"
        return "int64"

    @property
    def timestamp_token(self) -> str:
        """Monotonic prefix for migration file names."""
        return self.generated_at.strftime("%Y%m%d%H%M%S")
