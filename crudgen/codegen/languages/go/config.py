"""
Go-specific import handling and module constants.

Import sets are computed from what each generated file actually uses, since
Go rejects unused imports.
"""

from typing import Iterable, List

# Third-party Go modules the generated code depends on
MUX_IMPORT = "github.com/gorilla/mux"
PQ_IMPORT = "github.com/lib/pq"
MONGO_IMPORTS = {
    "bson": "go.mongodb.org/mongo-driver/bson",
    "primitive": "go.mongodb.org/mongo-driver/bson/primitive",
    "mongo": "go.mongodb.org/mongo-driver/mongo",
    "options": "go.mongodb.org/mongo-driver/mongo/options",
}


def group_go_imports(paths: Iterable[str], module_root: str) -> List[List[str]]:
    """
    Split import paths into the standard gofmt/goimports groups.

    Groups are standard library, third-party and the project's own module,
    each sorted. Empty groups are dropped.
    """
    stdlib, third_party, local = set(), set(), set()
    for path in paths:
        if path == module_root or path.startswith(module_root + "/"):
            local.add(path)
        elif "." in path.split("/")[0]:
            third_party.add(path)
        else:
            stdlib.add(path)

    return [sorted(group) for group in (stdlib, third_party, local) if group]


def format_go_imports(groups: List[List[str]]) -> str:
    """Format grouped import paths as a Go import declaration."""
    paths = [path for group in groups for path in group]
    if not paths:
        return ""

    if len(paths) == 1:
        return f'import "{paths[0]}"\n'

    lines = ["import ("]
    for index, group in enumerate(groups):
        if index:
            lines.append("")
        for path in group:
            lines.append(f'\t"{path}"')
    lines.append(")\n")

    return "\n".join(lines)


def build_import_block(paths: Iterable[str], module_root: str) -> str:
    return format_go_imports(group_go_imports(paths, module_root))
