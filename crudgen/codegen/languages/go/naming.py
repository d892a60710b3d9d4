"""
Go-specific naming utilities and sanitization.

Handles Go reserved words, predeclared identifiers and package naming rules.
"""

from ...core.naming import NameSanitizer


# Go reserved words
GO_RESERVED_WORDS = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Go predeclared types, constants and functions
GO_BUILTIN_TYPES = {
    "any",
    "bool",
    "byte",
    "comparable",
    "complex64",
    "complex128",
    "error",
    "float32",
    "float64",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "rune",
    "string",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "true",
    "false",
    "iota",
    "nil",
    "append",
    "cap",
    "clear",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "max",
    "min",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
}

# Package names and identifiers the generated files already declare or import
GENERATED_IDENTIFIERS = {
    "handlers", "routes", "responses", "domain", "api",
    "context", "errors", "fmt", "json", "http", "mux", "sql", "driver",
    "strconv", "strings", "time", "pq", "bson", "primitive", "mongo", "options",
    "id", "req", "err", "ctx", "page", "result", "existing", "query", "args",
    "sets", "set", "items", "total", "rows", "cursor", "opts", "res", "now",
    "service", "repo", "router", "raw", "ok", "m", "h", "w", "r", "n",
}


def create_go_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Go."""
    return NameSanitizer(GO_RESERVED_WORDS, GO_BUILTIN_TYPES | GENERATED_IDENTIFIERS)
