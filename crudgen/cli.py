"""
Command line interface for crudgen.

Provides the ``generate``, ``backends`` and ``types`` subcommands.
"""

import argparse
import dataclasses
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from .codegen import get_generator, list_supported_languages
from .codegen.registry import is_language_supported
from .codegen.core.config import (
    BACKEND_ALIASES,
    DIALECT_ALIASES,
    ConfigManager,
    GeneratorConfig,
    resolve_backend,
)
from .codegen.core.errors import ArtifactWriteError, GeneratorError
from .codegen.core.generator import ArtifactKind, GenerationResult, generate_code
from .codegen.core.schema import (
    BACKEND_DIALECTS,
    TEXT_LIST_STRATEGIES,
    BackendFamily,
    EntitySpec,
    FieldType,
    parse_update_policy,
)
from .codegen.languages.go.types import GoTypeMapper
from .logging_config import configure_logging, get_logger
from .utils import EntityLoaderError, load_entity, read_go_module
from .writer import check_targets, materialize

logger = get_logger(__name__)


class CLIError(Exception):
    """Bad command-line usage."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="crudgen",
        description="Generate a layered Go CRUD slice from an entity description",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crudgen generate invoice.json --module github.com/acme/shop
  crudgen generate invoice.json --module github.com/acme/shop --backend document --dry-run
  crudgen generate --stdin --module github.com/acme/shop --show model < invoice.json
  crudgen backends
  crudgen types mysql
        """.strip(),
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command")
    create_generate_subparser(subparsers)

    backends = subparsers.add_parser("backends", help="List backend families and dialects")
    backends.set_defaults(func=_handle_backends)

    types = subparsers.add_parser("types", help="Show the type mapping table of a backend")
    types.add_argument("backend", help="Backend family or dialect (e.g. relational, mysql)")
    types.add_argument(
        "--text-list-strategy",
        choices=list(TEXT_LIST_STRATEGIES),
        default="native",
        help="How text lists are stored (default: native)",
    )
    types.set_defaults(func=_handle_types)

    return parser


def create_generate_subparser(subparsers) -> argparse.ArgumentParser:
    """Create the ``generate`` subcommand parser."""
    parser = subparsers.add_parser(
        "generate",
        help="Generate Go CRUD artifacts for an entity",
        description="Generate model, repository, service, handler, routes, "
        "migrations and docs for one entity",
    )

    # entity source: one of file, url or stdin
    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("file", nargs="?", help="Entity JSON file")
    input_group.add_argument("--url", help="URL to fetch the entity JSON from")
    input_group.add_argument(
        "--stdin", action="store_true", help="Read entity JSON from standard input"
    )

    project_group = parser.add_argument_group("project")
    project_group.add_argument("--module", "-m", dest="module_root", help="Go module path")
    project_group.add_argument(
        "--backend", choices=sorted(BACKEND_ALIASES), help="Storage backend family"
    )
    project_group.add_argument(
        "--dialect", choices=sorted(DIALECT_ALIASES), help="Database dialect"
    )
    project_group.add_argument("--project-name", help="Project (database) name")
    project_group.add_argument("--config", help="Configuration file path (JSON)")
    project_group.add_argument(
        "--language", "-l", default="go", help="Target language (default: go)"
    )

    entity_group = parser.add_argument_group("entity overrides")
    entity_group.add_argument("--plural", help="Plural entity name")
    entity_group.add_argument(
        "--update-policy",
        choices=["replace", "patch", "both"],
        help="Which update endpoints to generate",
    )

    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "--output-dir", "-o", default=".", help="Project root to write into (default: .)"
    )
    output_group.add_argument(
        "--dry-run", action="store_true", help="Render and list artifacts without writing"
    )
    output_group.add_argument(
        "--show",
        metavar="KIND",
        choices=[kind.value for kind in ArtifactKind],
        help="Print one artifact with syntax highlighting",
    )
    output_group.add_argument(
        "--force", action="store_true", help="Overwrite existing files"
    )
    output_group.add_argument(
        "--no-comments", action="store_true", help="Don't add comments to generated code"
    )
    output_group.add_argument(
        "--text-list-strategy",
        choices=list(TEXT_LIST_STRATEGIES),
        help="How text lists are stored in relational backends",
    )
    output_group.add_argument("--workers", type=int, help="Render concurrency")
    output_group.add_argument(
        "--verbose", "-v", action="store_true", help="Show generation metadata"
    )

    parser.set_defaults(func=_handle_generate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code (0 for success, 1 for any error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    configure_logging(args.log_level or "WARNING")

    try:
        return args.func(args)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except (EntityLoaderError, ArtifactWriteError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except GeneratorError as e:
        console.print(f"[red]✗ Error:[/red] {e.describe()}")
        return 1


def _handle_generate(args: argparse.Namespace) -> int:
    if not _validate_language(args.language):
        return 1

    source, entity = _get_entity(args)
    entity = _apply_entity_overrides(entity, args)
    console.print(f"📄 Loaded: {source}")

    manager = ConfigManager()
    config = _build_config(args, manager)
    if args.log_level is None:
        configure_logging(config.log_level)

    for warning in manager.validate_config(config):
        console.print(f"[yellow]⚠️  Config:[/yellow] {warning}")

    context = manager.to_project_context(config)
    generator = get_generator(args.language, config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(
            f"[green]Generating {entity.name or 'entity'} artifacts...", total=None
        )
        result = generate_code(generator, entity, context, max_workers=config.max_workers)
        progress.remove_task(task)

    if not result.success:
        console.print(f"[red]✗ {result.error_message}[/red]")
        return 1

    _print_warnings(result)
    _print_artifacts(result, args)

    if args.show:
        _show_artifact(result, ArtifactKind(args.show))

    if args.verbose and result.metadata:
        _print_metadata(result)

    if args.dry_run:
        existing = check_targets(result, args.output_dir)
        if existing and not args.force:
            console.print(
                f"[yellow]⚠️  {len(existing)} file(s) already exist; "
                "writing would need --force[/yellow]"
            )
        console.print("[dim]Dry run: nothing written[/dim]")
        return 0

    written = materialize(result, args.output_dir, force=args.force)
    console.print(
        f"[green]✓[/green] Wrote {len(written)} file(s) to [cyan]{args.output_dir}[/cyan]"
    )
    return 0


def _validate_language(language: str) -> bool:
    """True if a generator is registered for ``language``."""
    supported = list_supported_languages()
    if not is_language_supported(language):
        console.print(f"[red]✗ Unsupported language '{language}'[/red]")
        console.print(f"[dim]Supported languages: {', '.join(supported)}[/dim]")
        return False
    return True


def _get_entity(args: argparse.Namespace):
    if args.file:
        return load_entity(file_path=args.file)
    if args.url:
        return load_entity(url=args.url)
    if args.stdin:
        return "<stdin>", load_entity(text=sys.stdin.read())[1]
    raise CLIError("Input source required (file, --url, or --stdin)")


def _apply_entity_overrides(entity: EntitySpec, args: argparse.Namespace) -> EntitySpec:
    changes = {}
    if args.plural:
        changes["plural_name"] = args.plural
    if args.update_policy:
        changes["update_policy"] = parse_update_policy(args.update_policy)
    return dataclasses.replace(entity, **changes) if changes else entity


def _build_config(args: argparse.Namespace, manager: ConfigManager) -> GeneratorConfig:
    """Merge defaults, config file, environment and CLI arguments."""
    overrides = {
        "module_root": args.module_root,
        "backend": args.backend,
        "dialect": args.dialect,
        "project_name": args.project_name,
        "text_list_strategy": args.text_list_strategy,
        "max_workers": args.workers,
        "log_level": args.log_level,
    }
    if args.no_comments:
        overrides["add_comments"] = False

    # A dialect alone implies its backend family
    if args.dialect and not args.backend:
        dialect = DIALECT_ALIASES[args.dialect]
        for family, dialects in BACKEND_DIALECTS.items():
            if dialect in dialects:
                overrides["backend"] = family.value

    config = manager.get_config("go", overrides, args.config)

    if not config.module_root:
        module = read_go_module(args.output_dir)
        if module:
            logger.info("Using module path %s from %s/go.mod", module, args.output_dir)
            config = dataclasses.replace(config, module_root=module)
    return config


def _print_warnings(result: GenerationResult):
    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()


def _print_artifacts(result: GenerationResult, args: argparse.Namespace):
    table = Table(
        title="📦 Generated Artifacts", box=box.ROUNDED, title_style="bold cyan"
    )
    table.add_column("Kind", style="bold green", no_wrap=True)
    table.add_column("Path", style="cyan")
    table.add_column("Lines", justify="right", style="dim")

    for artifact in result.artifacts:
        table.add_row(
            artifact.kind.value, artifact.path, str(artifact.content.count("\n"))
        )

    console.print()
    console.print(table)


def _show_artifact(result: GenerationResult, kind: ArtifactKind):
    artifact = result.get(kind)
    if artifact is None:
        console.print(f"[yellow]⚠️  No '{kind.value}' artifact in this run[/yellow]")
        return

    console.print()
    console.print(
        Panel(
            Syntax(artifact.content, artifact.language, theme="monokai", line_numbers=True),
            title=f"📄 {artifact.path}",
            border_style="green",
        )
    )


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="Run Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print()
    console.print(metadata_table)


def _handle_backends(args: argparse.Namespace) -> int:
    table = Table(title="🗄️  Storage Backends", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Backend", style="bold green", no_wrap=True)
    table.add_column("Dialects", style="cyan")
    table.add_column("Identifier", style="blue")
    table.add_column("Schema files", style="dim")

    for family, dialects in BACKEND_DIALECTS.items():
        id_type = "string" if family == BackendFamily.DOCUMENT else "int64"
        schema = "init script" if family == BackendFamily.DOCUMENT else "up/down migrations"
        table.add_row(
            family.value, ", ".join(d.value for d in dialects), id_type, schema
        )

    console.print()
    console.print(table)
    return 0


def _handle_types(args: argparse.Namespace) -> int:
    name = args.backend.strip().lower()
    if name in DIALECT_ALIASES:
        dialect = DIALECT_ALIASES[name]
        family = next(f for f, ds in BACKEND_DIALECTS.items() if dialect in ds)
    else:
        family = resolve_backend(name)
        dialect = BACKEND_DIALECTS[family][0]

    mapper = GoTypeMapper(family, dialect, args.text_list_strategy)

    table = Table(
        title=f"🔤 Type Mapping ({dialect.value})", box=box.ROUNDED, title_style="bold cyan"
    )
    table.add_column("Field type", style="bold green", no_wrap=True)
    table.add_column("Go type", style="cyan")
    table.add_column("Storage type", style="blue")
    table.add_column("Example", style="dim")

    mapped = mapper.type_table()
    for mapping in mapped:
        table.add_row(
            mapping.field_type.value,
            mapping.native_type,
            mapping.storage_type,
            mapping.example_literal,
        )

    console.print()
    console.print(table)

    mapped_types = {m.field_type for m in mapped}
    unmapped = [ft.value for ft in FieldType if ft not in mapped_types]
    if unmapped:
        console.print(f"[yellow]Not supported here:[/yellow] {', '.join(unmapped)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
