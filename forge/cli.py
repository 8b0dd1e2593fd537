"""CLI entrypoints for forge commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .builder import BuildError, BuildResult, RegistryBuilder
from .config import (
    ConfigError,
    config_keys,
    get_config_value,
    load_config,
    parse_config_value,
    update_config,
)
from .git.publisher import PublishError, Publisher
from .library import ComponentLibrary
from .logging import configure_logging
from .reporting import (
    print_build_result,
    print_components,
    print_issues,
    print_json,
    print_search_results,
    print_validation_report,
)
from .scaffold import TEMPLATES, ScaffoldError, Scaffolder
from .validators import SchemaError
from .watch import Watcher

console = Console()


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a machine-readable JSON document instead of formatted output.",
    )


def _add_strict_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Also enforce file extensions, export markers, semver versions and directory names.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forge",
        description="Build, document and publish a registry of UI components.",
    )
    parser.add_argument("--version", action="version", version=f"forge {__version__}")
    _add_verbose_option(parser)
    parser.add_argument(
        "-C",
        "--cwd",
        default=".",
        help="Run as if forge was started in this directory.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialize a new component library.")
    _add_verbose_option(init_parser, suppress_default=True)
    init_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory for the library (defaults to the current directory).",
    )
    init_parser.add_argument("--name", help="Library name (defaults to the directory name).")
    init_parser.add_argument("--description", help="Library description.")
    init_parser.add_argument("--author", help="Library author.")
    init_parser.add_argument("--no-typescript", action="store_true", help="Scaffold JavaScript components.")
    init_parser.add_argument("--no-tailwind", action="store_true", help="Disable Tailwind CSS support.")
    init_parser.add_argument("--no-git", action="store_true", help="Skip `git init`.")
    init_parser.add_argument(
        "--with-examples",
        action="store_true",
        help="Add a starter button component.",
    )

    add_parser = subparsers.add_parser("add", help="Create a new component from a template.")
    _add_verbose_option(add_parser, suppress_default=True)
    add_parser.add_argument("name", nargs="?", help="Component name (kebab-case).")
    add_parser.add_argument("--template", choices=TEMPLATES, default="basic", help="Template to start from.")
    add_parser.add_argument("--category", help="Component category (defaults to defaultCategory).")
    add_parser.add_argument("--description", help="Component description.")

    list_parser = subparsers.add_parser("list", help="List components in the library.")
    _add_verbose_option(list_parser, suppress_default=True)
    list_parser.add_argument("--category", help="Only show components in this category.")
    list_parser.add_argument("--tag", help="Only show components carrying this tag.")
    _add_json_option(list_parser)

    build_parser = subparsers.add_parser("build", help="Validate components and generate the registry.")
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument("--watch", action="store_true", help="Rebuild when component files change.")
    _add_strict_option(build_parser)
    build_parser.add_argument(
        "--exclude-invalid",
        action="store_true",
        help="Publish the valid components and skip invalid ones instead of failing.",
    )
    _add_json_option(build_parser)

    validate_parser = subparsers.add_parser("validate", help="Validate every component.")
    _add_verbose_option(validate_parser, suppress_default=True)
    validate_parser.add_argument("--fix", action="store_true", help="Repair common descriptor problems in place.")
    _add_strict_option(validate_parser)
    _add_json_option(validate_parser)

    publish_parser = subparsers.add_parser("publish", help="Build, commit and push the registry output.")
    _add_verbose_option(publish_parser, suppress_default=True)
    publish_parser.add_argument("-m", "--message", help="Commit message.")
    publish_parser.add_argument("--no-push", action="store_true", help="Commit without pushing.")

    update_parser = subparsers.add_parser("update", help="Bump a component's patch version.")
    _add_verbose_option(update_parser, suppress_default=True)
    update_parser.add_argument("name", help="Component to update.")

    remove_parser = subparsers.add_parser("remove", help="Delete a component.")
    _add_verbose_option(remove_parser, suppress_default=True)
    remove_parser.add_argument("name", help="Component to remove.")
    remove_parser.add_argument("-f", "--force", action="store_true", help="Skip the confirmation prompt.")

    search_parser = subparsers.add_parser("search", help="Search components by keyword.")
    _add_verbose_option(search_parser, suppress_default=True)
    search_parser.add_argument("query", help="Search terms; every term must match.")
    search_parser.add_argument("--category", help="Only search this category.")
    _add_json_option(search_parser)

    config_parser = subparsers.add_parser("config", help="Show or change library configuration.")
    _add_verbose_option(config_parser, suppress_default=True)
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument("--list", action="store_true", help="Show every configuration value.")
    config_group.add_argument("--get", metavar="KEY", help="Print one configuration value.")
    config_group.add_argument("--set", metavar="KEY=VALUE", help="Change one configuration value.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for forge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    root = Path(args.cwd).expanduser().resolve()

    handler = _HANDLERS[args.command]
    try:
        status = handler(args, root)
    except KeyboardInterrupt:
        parser.exit(130, "Interrupted\n")
    except (ConfigError, SchemaError, ScaffoldError, PublishError) as exc:
        parser.exit(1, f"{exc}\n")
    except (FileNotFoundError, FileExistsError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except BuildError as exc:
        parser.exit(1, f"forge {args.command} failed: {exc}\nRun with --verbose for more details.\n")
    if status:
        parser.exit(status)


def _run_init(args: argparse.Namespace, root: Path) -> int:
    target = (root / args.path).resolve()
    result = Scaffolder().init_library(
        target,
        name=args.name,
        description=args.description,
        author=args.author,
        typescript=not args.no_typescript,
        tailwind=not args.no_tailwind,
        git=not args.no_git,
        with_examples=args.with_examples,
    )
    console.print(f"[green]✓[/] Component library [bold]{escape(result.config.name)}[/] initialized")
    console.print(f"  [dim]{escape(_relativize(result.config_path))}[/]")
    if result.git_initialized:
        console.print("[green]✓[/] Git repository initialized")
    if result.starter is not None:
        console.print(f"[green]✓[/] Added starter component {escape(result.starter.descriptor.name)}")
    console.print("\nNext steps:")
    console.print("  1. Add your first component: forge add my-button")
    console.print("  2. Build your library: forge build")
    console.print("  3. Publish your registry: forge publish")
    return 0


def _run_add(args: argparse.Namespace, root: Path) -> int:
    config = load_config(root)
    name = args.name or Prompt.ask("Component name (kebab-case)")
    result = Scaffolder().add_component(
        config,
        name,
        template=args.template,
        category=args.category,
        description=args.description,
    )
    console.print(f"[green]✓[/] Created {escape(result.descriptor.name)} component")
    console.print("\n[blue]Files created:[/]")
    for path in result.files:
        console.print(f"  [dim]{escape(_relativize(path))}[/]")
    console.print("\n[blue]Next steps:[/]")
    console.print("  1. Edit your component files")
    console.print("  2. Build library: forge build")
    return 0


def _run_list(args: argparse.Namespace, root: Path) -> int:
    library = ComponentLibrary(load_config(root))
    components = library.list_components(category=args.category, tag=args.tag)
    if args.json:
        print_json(console, [component.to_dict() for component in components])
        return 0
    print_components(console, components)
    if not components and args.category:
        console.print(f"[dim]Tip: Try without --category={escape(args.category)}[/]")
    if not components and args.tag:
        console.print(f"[dim]Tip: Try without --tag={escape(args.tag)}[/]")
    return 0


def _run_build(args: argparse.Namespace, root: Path) -> int:
    builder = RegistryBuilder()
    policy = "exclude" if args.exclude_invalid else None

    def _build_once() -> BuildResult:
        config = load_config(root)
        result = builder.build(config, strict=args.strict, on_invalid=policy)
        if args.json:
            print_json(console, result.to_dict())
        else:
            print_build_result(console, result, config.output_path)
        return result

    result = _build_once()
    if not args.watch:
        return 0 if result.ok else 1

    config = load_config(root)
    watcher = Watcher(config.components_path, _build_once, ignore=[config.output_path])
    console.print(f"[blue]Watching {escape(_relativize(config.components_path))} for changes...[/] (Ctrl+C to stop)")
    try:
        watcher.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped watching[/]")
    return 0


def _run_validate(args: argparse.Namespace, root: Path) -> int:
    library = ComponentLibrary(load_config(root))
    report = library.validate(fix=args.fix, strict=args.strict)
    if args.json:
        print_json(console, report.to_dict())
    else:
        print_validation_report(console, report)
    return 0 if report.ok else 1


def _run_publish(args: argparse.Namespace, root: Path) -> int:
    config = load_config(root)
    result = RegistryBuilder().build(config)
    if not result.ok or result.issues:
        console.print("[bold red]All components must be valid before publishing[/]")
        print_issues(console, result.issues)
        return 1
    if result.registry is None:
        console.print("[yellow]Nothing to publish: no components found[/]")
        return 1

    published = Publisher().publish(
        config.root,
        config.output_path,
        message=args.message,
        push=not args.no_push,
    )
    if not published:
        console.print("[yellow]Registry output is already up to date; nothing to publish[/]")
        return 0
    if args.no_push:
        console.print("[green]✓[/] Registry committed (not pushed)")
    else:
        console.print("[green]✓[/] Published successfully!")
    return 0


def _run_update(args: argparse.Namespace, root: Path) -> int:
    library = ComponentLibrary(load_config(root))
    outcome = library.update(args.name)
    if outcome.removed_files:
        console.print("[yellow]Some component files are missing:[/]")
        for path in outcome.removed_files:
            console.print(f"  [yellow]- {escape(path)}[/]")
        console.print("[dim]Missing files have been removed from component.json[/]")
    console.print(
        f"[green]✓[/] Component {escape(args.name)} updated to version {escape(outcome.descriptor.version)}"
    )
    console.print("\n[dim]Tip: Run `forge build` to update the component library[/]")
    return 0


def _run_remove(args: argparse.Namespace, root: Path) -> int:
    library = ComponentLibrary(load_config(root))
    if not args.force:
        prompt = f"Are you sure you want to remove {args.name}?"
        descriptor = library.find(args.name)
        if descriptor is not None:
            prompt += f"\n  Display name: {descriptor.display_name}\n  Description: {descriptor.description}\n"
        if not Confirm.ask(escape(prompt), default=False, console=console):
            console.print("[yellow]Operation cancelled[/]")
            return 0
    library.remove(args.name)
    console.print(f"[green]✓[/] Component {escape(args.name)} removed successfully")
    console.print("\n[dim]Tip: Run `forge build` to update the component registry[/]")
    return 0


def _run_search(args: argparse.Namespace, root: Path) -> int:
    library = ComponentLibrary(load_config(root))
    results = library.search(args.query, category=args.category)
    if args.json:
        print_json(console, [component.to_dict() for component in results])
    else:
        print_search_results(console, args.query, results, category=args.category)
    return 0


def _run_config(args: argparse.Namespace, root: Path) -> int:
    config = load_config(root)
    if args.get:
        try:
            value = get_config_value(config, args.get)
        except KeyError:
            raise ConfigError(f"Unknown configuration key: {args.get}") from None
        console.print(_format_value(value), markup=False, highlight=False)
        return 0
    if args.set:
        key, separator, raw = args.set.partition("=")
        if not separator or not key.strip():
            raise ConfigError("Use --set KEY=VALUE")
        key = key.strip()
        updated = update_config(config, {key: parse_config_value(raw)})
        console.print(
            f"[green]✓[/] Set {escape(key)} = {escape(_format_value(get_config_value(updated, key)))}"
        )
        return 0

    table = Table(title=f"Configuration ({_relativize(config.config_path or root)})")
    table.add_column("Key")
    table.add_column("Value")
    for key in config_keys():
        table.add_row(key, escape(_format_value(get_config_value(config, key))))
    console.print(table)
    return 0


def _run_serve(args: argparse.Namespace, root: Path) -> int:  # pragma: no cover - integration path
    from .service.app import run_service

    run_service(host=args.host, port=args.port)
    return 0


_HANDLERS: Dict[str, Callable[[argparse.Namespace, Path], int]] = {
    "init": _run_init,
    "add": _run_add,
    "list": _run_list,
    "build": _run_build,
    "validate": _run_validate,
    "publish": _run_publish,
    "update": _run_update,
    "remove": _run_remove,
    "search": _run_search,
    "config": _run_config,
    "serve": _run_serve,
}


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
