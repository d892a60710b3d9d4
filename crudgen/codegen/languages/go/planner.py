"""
Artifact planning for Go CRUD generation.

Turns a validated entity and a project context into an ordered list of
ArtifactPlans. Every decision that depends on the backend family, dialect
or update policy is made here: the plan names the template variant to use
and carries precomputed queries, Go expressions, zero-value checks, import
blocks, routes, column definitions and example JSON. Templates only
substitute and loop.
"""

import json
from typing import Any, Dict, List, Optional

from ...core.generator import ArtifactKind, ArtifactPlan
from ...core.naming import NameSanitizer, NamingCase, pluralize
from ...core.schema import (
    BackendFamily,
    Dialect,
    EntitySpec,
    FieldSpec,
    FieldType,
    ProjectContext,
    TimestampRole,
)
from ...core.templates import TemplateEngine
from ....logging_config import get_logger
from .config import MONGO_IMPORTS, MUX_IMPORT, PQ_IMPORT, build_import_block
from .types import GoTypeMapper, TypeMapping

logger = get_logger(__name__)

OPERATIONS = ["create", "get", "list", "update", "patch", "delete"]

NUMERIC_TYPES = {FieldType.INTEGER32, FieldType.INTEGER64, FieldType.DECIMAL}

REPOSITORY_NAMES = {
    Dialect.POSTGRESQL: ("postgresRepository", "NewPostgresRepository", "db *sql.DB"),
    Dialect.MYSQL: ("mysqlRepository", "NewMySQLRepository", "db *sql.DB"),
    Dialect.MONGODB: ("mongoRepository", "NewMongoRepository", "db *mongo.Database"),
}

ID_COLUMNS = {
    Dialect.POSTGRESQL: "id BIGSERIAL PRIMARY KEY",
    Dialect.MYSQL: "id BIGINT AUTO_INCREMENT PRIMARY KEY",
}

TABLE_SUFFIXES = {
    Dialect.POSTGRESQL: ");",
    Dialect.MYSQL: ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;",
}

EXAMPLE_IDS = {"int64": 1, "string": "507f1f77bcf86cd799439011"}

ROUTES = {
    "create": ("POST", "http.MethodPost", False, "Create", 201),
    "list": ("GET", "http.MethodGet", False, "List", 200),
    "get": ("GET", "http.MethodGet", True, "Get", 200),
    "update": ("PUT", "http.MethodPut", True, "Update", 200),
    "patch": ("PATCH", "http.MethodPatch", True, "Patch", 200),
    "delete": ("DELETE", "http.MethodDelete", True, "Delete", 204),
}


def operations_for(entity: EntitySpec) -> List[str]:
    """Operations generated for an entity, in their canonical order."""
    policy = entity.update_policy
    ops = []
    for op in OPERATIONS:
        if op == "update" and not policy.allows_replace:
            continue
        if op == "patch" and not policy.allows_patch:
            continue
        ops.append(op)
    return ops


def zero_check(field_type: FieldType, expr: str) -> Optional[str]:
    """
    Go predicate that is true when ``expr`` holds its type's empty value.

    Booleans have no empty value and return None.
    """
    if field_type == FieldType.TEXT:
        return f'{expr} == ""'
    if field_type in NUMERIC_TYPES:
        return f"{expr} == 0"
    if field_type == FieldType.TIMESTAMP:
        return f"{expr}.IsZero()"
    if field_type == FieldType.TEXT_LIST:
        return f"len({expr}) == 0"
    return None


def _placeholder(dialect: Dialect, n: int) -> str:
    if dialect == Dialect.POSTGRESQL:
        return f"${n}"
    return "?"


class GoArtifactPlanner:
    """Builds artifact plans for one generator configuration."""

    def __init__(
        self,
        sanitizer: NameSanitizer,
        api_prefix: str = "/api",
        default_page_size: int = 10,
        max_page_size: int = 100,
        add_comments: bool = True,
    ):
        self.sanitizer = sanitizer
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.add_comments = add_comments

    def plan(self, entity: EntitySpec, context: ProjectContext) -> List[ArtifactPlan]:
        """
        Plan every artifact for an entity.

        Args:
            entity: Validated entity
            context: Project context of the run

        Returns:
            Artifact plans in output order

        Raises:
            TemplateError: If a field type has no mapping for the backend
        """
        dialect = context.resolved_dialect
        mapper = GoTypeMapper(context.backend_family, dialect, context.text_list_strategy)
        mappings = {f.name: mapper.map_field(f) for f in entity.fields}

        ops = operations_for(entity)
        plural = entity.plural_name or pluralize(entity.name)
        fields = [self._field_context(f, mappings[f.name], context) for f in entity.fields]
        base = self._base_context(entity, context, plural, ops)

        logger.debug(
            "Planning '%s' (plural=%s, backend=%s, dialect=%s, operations=%s)",
            entity.name, plural, context.backend_family.value, dialect.value,
            ",".join(ops),
        )

        domain_dir = f"internal/domain/{entity.name}"
        plans = [
            self._plan_model(base, fields, domain_dir),
        ]
        if "update" in ops:
            plans.append(self._plan_update_request(base, fields, domain_dir))
        if "patch" in ops:
            plans.append(self._plan_patch_request(base, fields, domain_dir))

        plans.append(self._plan_storage_contract(base, domain_dir))
        if context.backend_family == BackendFamily.DOCUMENT:
            plans.append(self._plan_mongo_repository(base, fields, domain_dir))
        else:
            plans.append(self._plan_sql_repository(base, fields, domain_dir, dialect))
        plans.append(self._plan_service(base, fields, domain_dir))
        plans.append(self._plan_handler(base))
        plans.append(self._plan_routes(base))

        if context.backend_family == BackendFamily.DOCUMENT:
            plans.append(self._plan_mongo_init(base, fields))
        else:
            plans.extend(self._plan_migrations(base, fields, dialect, context))

        plans.append(self._plan_docs(base, fields, [p.path for p in plans]))
        return plans

    # Shared context

    def _base_context(self, entity: EntitySpec, context: ProjectContext,
                      plural: str, ops: List[str]) -> Dict[str, Any]:
        public = entity.public_name
        base_path = f"{self.api_prefix}/{plural}"
        routes = []
        for op in ops:
            method, method_const, by_id, handler, status = ROUTES[op]
            routes.append({
                "operation": op,
                "method": method,
                "method_const": method_const,
                "path": base_path + "/{id}" if by_id else base_path,
                "handler": handler,
                "status": status,
            })

        return {
            "module_root": context.module_root,
            "project_name": context.resolved_project_name,
            "backend": context.backend_family.value,
            "dialect": context.resolved_dialect.value,
            "id_type": context.id_type,
            "operations": ops,
            "update_policy": entity.update_policy.value,
            "generated_at": context.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
            "entity": {
                "name": entity.name,
                "public": public,
                "plural": plural,
                "description": entity.description or f"{public} records",
            },
            "types": {
                "model": public,
                "create_request": f"Create{public}Request",
                "update_request": f"Update{public}Request",
                "patch_request": f"Patch{public}Request",
                "handler": f"{public}Handler",
            },
            "base_path": base_path,
            "routes": routes,
        }

    def _field_context(self, f: FieldSpec, mapping: TypeMapping,
                       context: ProjectContext) -> Dict[str, Any]:
        public = self.sanitizer.convert(f.name, NamingCase.PUBLIC)
        serial = self.sanitizer.convert(f.name, NamingCase.SERIALIZATION)
        go_type = mapping.native_type
        storage_tag = "bson" if context.backend_family == BackendFamily.DOCUMENT else "db"
        boxed = f.type == FieldType.BOOLEAN and f.required

        if mapping.storage_note == "pq_array":
            scan_target = f"pq.Array(&m.{public})"
            value_expr = f"pq.Array(m.{public})"
            patch_value_expr = f"pq.Array(*req.{public})"
        elif mapping.storage_note == "comma_joined":
            scan_target = f"(*commaList)(&m.{public})"
            value_expr = f"commaList(m.{public})"
            patch_value_expr = f"commaList(*req.{public})"
        else:
            scan_target = f"&m.{public}"
            value_expr = f"m.{public}"
            patch_value_expr = f"*req.{public}"

        role = f.timestamp_role
        return {
            "name": f.name,
            "public": public,
            "serial": serial,
            "type": f.type,
            "go_type": go_type,
            "imports": sorted(mapping.go_type.imports_needed),
            "storage_type": mapping.storage_type,
            "storage_note": mapping.storage_note,
            "required": f.required and role is None,
            "unique": f.unique,
            "role": role,
            "description": f.description or "",
            "comment_lines": [f.description] if self.add_comments and f.description else [],
            "model_tag": f'`json:"{serial}" {storage_tag}:"{serial}"`',
            "request_go_type": f"*{go_type}" if boxed else go_type,
            "request_tag": f'`json:"{serial}"`',
            "patch_go_type": f"*{go_type}",
            "patch_tag": f'`json:"{serial},omitempty"`',
            "to_model_expr": f"*req.{public}" if boxed else f"req.{public}",
            "scan_target": scan_target,
            "value_expr": value_expr,
            "patch_value_expr": patch_value_expr,
            "example": json.loads(mapping.example_literal),
        }

    @staticmethod
    def _writable(fields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [f for f in fields if f["role"] is None]

    @staticmethod
    def _role_field(fields: List[Dict[str, Any]], role: TimestampRole) -> Optional[Dict[str, Any]]:
        for f in fields:
            if f["role"] == role:
                return f
        return None

    @staticmethod
    def _type_imports(fields: List[Dict[str, Any]]) -> List[str]:
        """Packages the Go types of ``fields`` refer to."""
        return sorted({path for f in fields for path in f["imports"]})

    def _required_checks(self, fields: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Checks on the full-create and full-replace paths."""
        checks = []
        for f in self._writable(fields):
            if not f["required"]:
                continue
            expr = f"req.{f['public']}"
            if f["request_go_type"].startswith("*"):
                condition = f"{expr} == nil"
            else:
                condition = zero_check(f["type"], expr)
            checks.append({
                "condition": condition,
                "field": f["serial"],
                "message": f"{f['serial']} is required",
            })
        return checks

    def _patch_checks(self, fields: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Checks on the partial-update path, applied only to supplied fields."""
        checks = []
        for f in self._writable(fields):
            if not f["required"]:
                continue
            expr = f"req.{f['public']}"
            if f["type"] == FieldType.TIMESTAMP:
                inner = zero_check(f["type"], expr)
            else:
                inner = zero_check(f["type"], f"*{expr}")
            if inner is None:
                continue
            checks.append({
                "condition": f"{expr} != nil && {inner}",
                "field": f["serial"],
                "message": f"{f['serial']} cannot be empty",
            })
        return checks

    def _imports(self, base: Dict[str, Any], paths) -> str:
        return build_import_block(paths, base["module_root"])

    # Domain package

    def _plan_model(self, base, fields, domain_dir) -> ArtifactPlan:
        imports = self._type_imports(fields)
        context = dict(
            base,
            import_block=self._imports(base, imports),
            fields=fields,
            id_tag=(
                '`json:"id" bson:"_id,omitempty"`' if base["id_type"] == "string"
                else '`json:"id" db:"id"`'
            ),
            create_fields=self._writable(fields),
            create_checks=self._required_checks(fields),
        )
        return ArtifactPlan(ArtifactKind.MODEL, f"{domain_dir}/model.go",
                            "model.go.j2", context)

    def _plan_update_request(self, base, fields, domain_dir) -> ArtifactPlan:
        writable = self._writable(fields)
        imports = self._type_imports(writable)
        context = dict(
            base,
            import_block=self._imports(base, imports),
            update_fields=writable,
            update_checks=self._required_checks(fields),
        )
        return ArtifactPlan(ArtifactKind.UPDATE_REQUEST, f"{domain_dir}/update_request.go",
                            "update_request.go.j2", context)

    def _plan_patch_request(self, base, fields, domain_dir) -> ArtifactPlan:
        writable = self._writable(fields)
        imports = self._type_imports(writable)
        context = dict(
            base,
            import_block=self._imports(base, imports),
            patch_fields=writable,
            patch_checks=self._patch_checks(fields),
        )
        return ArtifactPlan(ArtifactKind.PATCH_REQUEST, f"{domain_dir}/patch_request.go",
                            "patch_request.go.j2", context)

    def _plan_storage_contract(self, base, domain_dir) -> ArtifactPlan:
        model = base["types"]["model"]
        id_type = base["id_type"]
        signatures = {
            "create": f"Create(ctx context.Context, m *{model}) error",
            "get": f"GetByID(ctx context.Context, id {id_type}) (*{model}, error)",
            "list": f"List(ctx context.Context, offset, limit int) ([]*{model}, int64, error)",
            "update": f"Update(ctx context.Context, m *{model}) error",
            "patch": (
                f"Patch(ctx context.Context, id {id_type}, "
                f"req *{base['types']['patch_request']}) (*{model}, error)"
            ),
            "delete": f"Delete(ctx context.Context, id {id_type}) error",
        }
        context = dict(
            base,
            import_block=self._imports(base, ["context", "errors"]),
            methods=[signatures[op] for op in base["operations"]],
        )
        return ArtifactPlan(ArtifactKind.STORAGE_CONTRACT, f"{domain_dir}/repository.go",
                            "repository.go.j2", context)

    def _plan_sql_repository(self, base, fields, domain_dir, dialect: Dialect) -> ArtifactPlan:
        table = base["entity"]["plural"]
        ops = base["operations"]
        columns = [f["serial"] for f in fields]

        def ph(n: int) -> str:
            return _placeholder(dialect, n)

        select_columns = ", ".join(["id"] + columns)
        insert_values = ", ".join(ph(i + 1) for i in range(len(columns)))
        insert_query = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({insert_values})"
        if dialect == Dialect.POSTGRESQL:
            insert_query += " RETURNING id"
        assignments = ", ".join(f"{c} = {ph(i + 1)}" for i, c in enumerate(columns))

        queries = {
            "insert": insert_query,
            "select_by_id": f"SELECT {select_columns} FROM {table} WHERE id = {ph(1)}",
            "count": f"SELECT COUNT(*) FROM {table}",
            "select_page": (
                f"SELECT {select_columns} FROM {table} ORDER BY id "
                f"LIMIT {ph(1)} OFFSET {ph(2)}"
            ),
            "update": f"UPDATE {table} SET {assignments} WHERE id = {ph(len(columns) + 1)}",
            "delete": f"DELETE FROM {table} WHERE id = {ph(1)}",
        }

        updated_at = self._role_field(fields, TimestampRole.UPDATED_AT)
        patch_system_columns = []
        if updated_at is not None:
            patch_system_columns.append({"serial": updated_at["serial"], "value_expr": "time.Now()"})

        uses_pq = any(f["storage_note"] == "pq_array" for f in fields)
        uses_comma = any(f["storage_note"] == "comma_joined" for f in fields)

        imports = {"context", "database/sql", "errors"}
        if dialect == Dialect.POSTGRESQL:
            imports.add("strconv")
        if "patch" in ops or uses_comma:
            imports.add("strings")
        if "patch" in ops and patch_system_columns:
            imports.add("time")
        if uses_comma:
            imports.update({"database/sql/driver", "fmt"})
        if uses_pq:
            imports.add(PQ_IMPORT)

        helper_templates = [f"repository/sql/placeholder_{dialect.value}.go.j2"]
        if uses_comma:
            helper_templates.append("repository/sql/comma_list.go.j2")

        operation_templates = []
        for op in ops:
            if op == "create":
                operation_templates.append(f"repository/sql/create_{dialect.value}.go.j2")
            else:
                operation_templates.append(f"repository/sql/{op}.go.j2")

        repo_struct, repo_constructor, repo_param = REPOSITORY_NAMES[dialect]
        context = dict(
            base,
            import_block=self._imports(base, imports),
            repo_struct=repo_struct,
            repo_constructor=repo_constructor,
            repo_param=repo_param,
            queries=queries,
            insert_args=", ".join(f["value_expr"] for f in fields),
            scan_targets=", ".join(["&m.ID"] + [f["scan_target"] for f in fields]),
            update_args=", ".join([f["value_expr"] for f in fields] + ["m.ID"]),
            patch_columns=[
                {"public": f["public"], "serial": f["serial"], "value_expr": f["patch_value_expr"]}
                for f in self._writable(fields)
            ],
            patch_system_columns=patch_system_columns,
            patch_capacity=len(self._writable(fields)) + len(patch_system_columns),
            helper_templates=helper_templates,
            operation_templates=operation_templates,
        )
        return ArtifactPlan(
            ArtifactKind.STORAGE_IMPL, f"{domain_dir}/repository_{dialect.value}.go",
            "repository_sql.go.j2", context,
        )

    def _plan_mongo_repository(self, base, fields, domain_dir) -> ArtifactPlan:
        ops = base["operations"]
        updated_at = self._role_field(fields, TimestampRole.UPDATED_AT)
        patch_system_columns = []
        if updated_at is not None:
            patch_system_columns.append({"serial": updated_at["serial"], "value_expr": "time.Now()"})

        imports = {"context", "errors"} | set(MONGO_IMPORTS.values())
        if "patch" in ops and patch_system_columns:
            imports.add("time")

        repo_struct, repo_constructor, repo_param = REPOSITORY_NAMES[Dialect.MONGODB]
        context = dict(
            base,
            import_block=self._imports(base, imports),
            repo_struct=repo_struct,
            repo_constructor=repo_constructor,
            repo_param=repo_param,
            collection=base["entity"]["plural"],
            patch_columns=[
                {"public": f["public"], "serial": f["serial"], "value_expr": f"*req.{f['public']}"}
                for f in self._writable(fields)
            ],
            patch_system_columns=patch_system_columns,
            operation_templates=[f"repository/mongodb/{op}.go.j2" for op in ops],
        )
        return ArtifactPlan(
            ArtifactKind.STORAGE_IMPL, f"{domain_dir}/repository_{Dialect.MONGODB.value}.go",
            "repository_mongodb.go.j2", context,
        )

    def _plan_service(self, base, fields, domain_dir) -> ArtifactPlan:
        created_at = self._role_field(fields, TimestampRole.CREATED_AT)
        updated_at = self._role_field(fields, TimestampRole.UPDATED_AT)

        create_statements = []
        role_fields = [f for f in (created_at, updated_at) if f is not None]
        if role_fields:
            create_statements.append("now := time.Now()")
            create_statements.extend(f"m.{f['public']} = now" for f in role_fields)

        update_statements = ["m.ID = existing.ID"]
        if created_at is not None:
            update_statements.append(f"m.{created_at['public']} = existing.{created_at['public']}")
        if updated_at is not None:
            update_statements.append(f"m.{updated_at['public']} = time.Now()")

        ops = base["operations"]
        statements = list(create_statements)
        if "update" in ops:
            statements.extend(update_statements)
        imports = ["context"]
        if any("time.Now()" in s for s in statements):
            imports.append("time")

        context = dict(
            base,
            import_block=self._imports(base, imports),
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
            create_statements=create_statements,
            update_statements=update_statements,
            operation_templates=[f"service/{op}.go.j2" for op in ops],
        )
        return ArtifactPlan(ArtifactKind.SERVICE, f"{domain_dir}/service.go",
                            "service.go.j2", context)

    # API layer

    def _plan_handler(self, base) -> ArtifactPlan:
        module_root = base["module_root"]
        imports = [
            "encoding/json", "errors", "net/http", "strconv",
            MUX_IMPORT,
            f"{module_root}/internal/api/responses",
            f"{module_root}/internal/domain/{base['entity']['name']}",
        ]
        context = dict(
            base,
            import_block=self._imports(base, imports),
            parse_id_template=f"handler/parse_id_{base['id_type']}.go.j2",
            operation_templates=[f"handler/{op}.go.j2" for op in base["operations"]],
        )
        return ArtifactPlan(
            ArtifactKind.HANDLER, f"internal/api/handlers/{base['entity']['name']}.go",
            "handler.go.j2", context,
        )

    def _plan_routes(self, base) -> ArtifactPlan:
        imports = ["net/http", MUX_IMPORT, f"{base['module_root']}/internal/api/handlers"]
        context = dict(base, import_block=self._imports(base, imports))
        return ArtifactPlan(
            ArtifactKind.ROUTE_FRAGMENT,
            f"internal/api/routes/{base['entity']['name']}_routes.go",
            "routes.go.j2", context,
        )

    # Schema

    def _plan_migrations(self, base, fields, dialect: Dialect,
                         context: ProjectContext) -> List[ArtifactPlan]:
        table = base["entity"]["plural"]
        column_lines = [ID_COLUMNS[dialect]]
        index_statements = []

        for f in fields:
            line = f"{f['serial']} {f['storage_type']}"
            if f["role"] == TimestampRole.UPDATED_AT and dialect == Dialect.MYSQL:
                line += " NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP"
            elif f["role"] is not None:
                line += " NOT NULL DEFAULT CURRENT_TIMESTAMP"
            elif f["required"]:
                line += " NOT NULL"
            column_lines.append(line)

            if f["unique"]:
                indexed = f["serial"]
                if dialect == Dialect.MYSQL and f["storage_type"] == "TEXT":
                    indexed += "(255)"
                index_statements.append(
                    f"CREATE UNIQUE INDEX idx_{table}_{f['serial']} ON {table} ({indexed});"
                )

        updated_at = self._role_field(fields, TimestampRole.UPDATED_AT)
        trigger_templates = []
        trigger = {
            "function": f"update_{table}_updated_at_column",
            "name": f"update_{table}_updated_at",
            "column": updated_at["serial"] if updated_at else "",
        }
        down_statements = []
        if dialect == Dialect.POSTGRESQL and updated_at is not None:
            trigger_templates.append("migration/postgresql_trigger.sql.j2")
            down_statements.append(f"DROP TRIGGER IF EXISTS {trigger['name']} ON {table};")
            down_statements.append(f"DROP FUNCTION IF EXISTS {trigger['function']}();")
        down_statements.append(f"DROP TABLE IF EXISTS {table};")

        stem = f"migrations/{context.timestamp_token}_create_{table}_table"
        up = ArtifactPlan(
            ArtifactKind.MIGRATION_UP, f"{stem}.up.sql", "migration_up.sql.j2",
            dict(
                base,
                table=table,
                column_lines=column_lines,
                table_suffix=TABLE_SUFFIXES[dialect],
                index_statements=index_statements,
                trigger=trigger,
                trigger_templates=trigger_templates,
            ),
        )
        down = ArtifactPlan(
            ArtifactKind.MIGRATION_DOWN, f"{stem}.down.sql", "migration_down.sql.j2",
            dict(base, table=table, down_statements=down_statements),
        )
        return [up, down]

    def _plan_mongo_init(self, base, fields) -> ArtifactPlan:
        collection = base["entity"]["plural"]
        required = [f["serial"] for f in fields if f["required"]]
        property_lines = [
            f"{f['serial']}: {{ bsonType: '{f['storage_type']}' }}" for f in fields
        ]
        index_statements = [
            f"db.getCollection('{collection}').createIndex({{ {f['serial']}: 1 }}, "
            f"{{ unique: true, name: 'idx_{collection}_{f['serial']}' }});"
            for f in fields if f["unique"]
        ]
        context = dict(
            base,
            collection=collection,
            database=base["project_name"],
            required_lines=[f"required: {json.dumps(required)},"] if required else [],
            property_lines=property_lines,
            index_statements=index_statements,
        )
        return ArtifactPlan(
            ArtifactKind.MIGRATION_INIT, f"migrations/mongodb_init_{collection}.js",
            "mongodb_init.js.j2", context,
        )

    # Documentation

    def _plan_docs(self, base, fields, artifact_paths: List[str]) -> ArtifactPlan:
        writable = self._writable(fields)
        example_request = {f["serial"]: f["example"] for f in writable}
        example_response = {"id": EXAMPLE_IDS[base["id_type"]]}
        example_response.update({f["serial"]: f["example"] for f in fields})
        example_patch = {f["serial"]: f["example"] for f in writable[:1]}
        example_list = {
            "items": [example_response],
            "total": 1,
            "page": 1,
            "page_size": self.default_page_size,
        }

        field_rows = []
        for f in fields:
            notes = []
            if f["role"] is not None:
                notes.append("system-managed")
            if f["unique"]:
                notes.append("unique")
            field_rows.append({
                "serial": f["serial"],
                "go_type": f["go_type"],
                "storage_type": f["storage_type"],
                "required": "yes" if f["required"] else "no",
                "notes": ", ".join(notes) or "-",
                "description": f["description"] or "-",
            })

        storage_notes = {
            Dialect.POSTGRESQL.value: "PostgreSQL via database/sql and github.com/lib/pq",
            Dialect.MYSQL.value: (
                "MySQL via database/sql (the DSN needs parseTime=true "
                "for timestamp columns)"
            ),
            Dialect.MONGODB.value: "MongoDB via go.mongodb.org/mongo-driver",
        }

        context = dict(
            base,
            field_rows=field_rows,
            storage_note=storage_notes[base["dialect"]],
            example_request_json=json.dumps(example_request, indent=2),
            example_patch_json=json.dumps(example_patch, indent=2),
            example_response_json=json.dumps(example_response, indent=2),
            example_list_json=json.dumps(example_list, indent=2),
            example_request_compact=json.dumps(example_request, separators=(",", ":")),
            example_patch_compact=json.dumps(example_patch, separators=(",", ":")),
            example_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
            wiring_lines=self._wiring_lines(base),
            example_id=EXAMPLE_IDS[base["id_type"]],
            artifact_paths=artifact_paths + [f"README_{base['entity']['name']}.md"],
            operation_templates=[f"docs/{op}.md.j2" for op in base["operations"]],
        )
        return ArtifactPlan(
            ArtifactKind.DOCUMENTATION, f"README_{base['entity']['name']}.md",
            "readme.md.j2", context,
        )

    @staticmethod
    def _wiring_lines(base) -> List[str]:
        name = base["entity"]["name"]
        handler = base["types"]["handler"]
        constructor = REPOSITORY_NAMES[Dialect(base["dialect"])][1]
        return [
            f"repo := {name}.{constructor}(db)",
            f"svc := {name}.NewService(repo)",
            f"routes.Register{base['entity']['public']}Routes(router, handlers.New{handler}(svc))",
        ]


def template_names_for(plans: List[ArtifactPlan]) -> List[str]:
    """Every template a set of plans renders, includes first."""
    names = []
    for plan in plans:
        for key in ("helper_templates", "operation_templates", "trigger_templates"):
            names.extend(plan.context.get(key, []))
        if "parse_id_template" in plan.context:
            names.append(plan.context["parse_id_template"])
        names.append(plan.template)
    return names


def check_templates(engine: TemplateEngine, plans: List[ArtifactPlan]) -> List[str]:
    """Names of planned templates the engine cannot find."""
    return [name for name in template_names_for(plans) if not engine.template_exists(name)]
