"""
Entity validation.

Checks an EntitySpec before any artifact is planned. Checks run in a fixed
order and the first failure is raised; a valid entity yields a list of
non-fatal warnings.
"""

from typing import Callable, List, Optional

from .errors import ValidationError
from .naming import NameSanitizer, NamingCase, pluralize
from .schema import (
    EntitySpec,
    FieldType,
    ProjectContext,
    UpdatePolicy,
)
from ...logging_config import get_logger

logger = get_logger(__name__)

RESERVED_FIELD_NAMES = {"id"}

# Methods generated on the request types; Go forbids a field of the same name
GENERATED_METHOD_NAMES = {"Validate", "ToModel"}


class EntityValidator:
    """Validates entities against naming and structural rules."""

    def __init__(self, sanitizer: NameSanitizer):
        self.sanitizer = sanitizer

    def validate(
        self,
        entity: EntitySpec,
        context: Optional[ProjectContext] = None,
        type_mapper: Optional[Callable] = None,
    ) -> List[str]:
        """
        Validate an entity.

        Args:
            entity: Entity to validate
            context: Project context; when given, every field type must map
            type_mapper: Callable ``(field, context)`` that raises
                TemplateError for an unmapped type

        Returns:
            List of warning messages (empty if no issues)

        Raises:
            ValidationError: On the first structural problem found
            TemplateError: If a field type has no mapping for the backend
        """
        self._check_identifiers(entity)
        self._check_uniqueness(entity)
        self._check_fields_present(entity)
        self._check_update_policy(entity)
        self._check_roles(entity)

        if context is not None and type_mapper is not None:
            for f in entity.fields:
                type_mapper(f, context)

        warnings = self._collect_warnings(entity)
        logger.debug("Entity '%s' valid with %d warning(s)", entity.name, len(warnings))
        return warnings

    def _check_identifiers(self, entity: EntitySpec):
        if not self.sanitizer.is_valid_entity_name(entity.name):
            raise ValidationError(
                f"Invalid entity name '{entity.name}': must start with a lowercase "
                "letter, contain only lowercase letters and digits and not be a "
                "reserved word"
            )

        if entity.plural_name is not None:
            if not self.sanitizer.is_valid_entity_name(entity.plural_name):
                raise ValidationError(
                    f"Invalid plural name '{entity.plural_name}'"
                )
            if entity.plural_name == entity.name:
                raise ValidationError(
                    f"Plural name '{entity.plural_name}' must differ from the entity name"
                )

        for f in entity.fields:
            if not self.sanitizer.is_valid_field_name(f.name):
                raise ValidationError(
                    f"Invalid field name '{f.name}': must start with a letter and "
                    "contain only letters, digits and underscores",
                    field=f.name,
                )
            public = self.sanitizer.convert(f.name, NamingCase.PUBLIC)
            if f.name.lower() in RESERVED_FIELD_NAMES or public.lower() in RESERVED_FIELD_NAMES:
                raise ValidationError(
                    f"Field name '{f.name}' is reserved for the primary key",
                    field=f.name,
                )
            if public in GENERATED_METHOD_NAMES:
                raise ValidationError(
                    f"Field name '{f.name}' clashes with the generated method "
                    f"'{public}' on the request types",
                    field=f.name,
                )

    def _check_uniqueness(self, entity: EntitySpec):
        seen_names = {}
        seen_public = {}
        for f in entity.fields:
            lowered = f.name.lower()
            if lowered in seen_names:
                raise ValidationError(
                    f"Duplicate field name '{f.name}' (conflicts with "
                    f"'{seen_names[lowered]}')",
                    field=f.name,
                )
            seen_names[lowered] = f.name

            public = self.sanitizer.convert(f.name, NamingCase.PUBLIC)
            if public in seen_public:
                raise ValidationError(
                    f"Field '{f.name}' and '{seen_public[public]}' both map to "
                    f"the Go identifier '{public}'",
                    field=f.name,
                )
            seen_public[public] = f.name

    def _check_fields_present(self, entity: EntitySpec):
        if not entity.fields:
            raise ValidationError(f"Entity '{entity.name}' has no fields")

    def _check_update_policy(self, entity: EntitySpec):
        if not isinstance(entity.update_policy, UpdatePolicy):
            allowed = ", ".join(p.value for p in UpdatePolicy)
            raise ValidationError(
                f"Unknown update policy '{entity.update_policy}' (expected one of: {allowed})"
            )

    def _check_roles(self, entity: EntitySpec):
        for f in entity.fields:
            role = f.timestamp_role
            if role is not None and f.type != FieldType.TIMESTAMP:
                raise ValidationError(
                    f"Field '{f.name}' holds the system-managed {role.value} "
                    "timestamp and must be of type timestamp",
                    field=f.name,
                )

    def _collect_warnings(self, entity: EntitySpec) -> List[str]:
        warnings = []
        plural = entity.plural_name or pluralize(entity.name)

        if self.sanitizer.is_storage_reserved(plural):
            warnings.append(f"Table/collection name '{plural}' is a SQL reserved word")

        for f in entity.fields:
            serial = self.sanitizer.convert(f.name, NamingCase.SERIALIZATION)
            if self.sanitizer.is_storage_reserved(serial):
                warnings.append(
                    f"Column '{serial}' of {entity.name}.{f.name} is a SQL reserved word"
                )
            if f.is_system_managed and f.required:
                warnings.append(
                    f"{entity.name}.{f.name} is system-managed; 'required' is ignored"
                )
            if f.is_system_managed and f.unique:
                warnings.append(
                    f"{entity.name}.{f.name} is a system-managed timestamp marked unique"
                )

        if not entity.writable_fields():
            warnings.append(
                f"Entity '{entity.name}' has no client-writable fields"
            )

        return warnings
