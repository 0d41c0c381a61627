"""Command-line entry point.

Usage::

    nestgen new my-api
    nestgen new my-api --yes --package-manager pnpm --skip-install
    nestgen generate order
    nestgen repository order --type in-memory
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape

from nestgen import __version__
from nestgen.config import PACKAGE_MANAGERS, Config, ProjectConfig
from nestgen.errors import ScaffoldError
from nestgen.prompts import prompt_project_config, prompt_repository_kind
from nestgen.scaffolder import ProjectGenerator, RepositoryGenerator, ResourceGenerator
from nestgen.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nestgen",
        description="nestgen -- scaffold NestJS backends",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nestgen new my-api\n"
            "  nestgen generate order\n"
            "  nestgen repository order --type in-memory\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--templates-dir",
        default=None,
        help="Template root (default: bundled templates, or $NESTGEN_TEMPLATES_DIR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new NestJS project")
    new.add_argument("name", nargs="?", help="Project name (prompted if omitted)")
    new.add_argument("--yes", "-y", action="store_true", help="Accept defaults, no prompts")
    new.add_argument("--package-manager", choices=PACKAGE_MANAGERS, default=None)
    new.add_argument("--description", default="")
    new.add_argument("--author", default="")
    new.add_argument("--no-git", action="store_true", help="Do not run git init")
    new.add_argument("--skip-install", action="store_true", help="Do not install dependencies")
    new.add_argument(
        "--directory", "-d", default=None,
        help="Target directory (default: ./<name>)",
    )

    generate = sub.add_parser(
        "generate", aliases=["g"],
        help="Generate a resource (module, controller, service, DTOs, repository, tests)",
    )
    generate.add_argument("name", help="Resource name (e.g. product, order)")
    generate.add_argument("--project-root", default=".", help="Project root (default: .)")

    repository = sub.add_parser(
        "repository", aliases=["repo"], help="Generate a standalone repository",
    )
    repository.add_argument("name", help="Resource name (e.g. users)")
    repository.add_argument("--type", dest="kind", choices=["prisma", "in-memory"], default=None)
    repository.add_argument("--project-root", default=".", help="Project root (default: .)")

    return parser


def _load_config(args: argparse.Namespace) -> Config:
    config = Config.from_env()
    if args.templates_dir:
        config = config.model_copy(update={"templates_dir": Path(args.templates_dir)})
    return config


async def _cmd_new(args: argparse.Namespace, config: Config) -> int:
    if args.yes:
        if not args.name:
            print_error("A project name is required with --yes")
            return 2
        try:
            project = ProjectConfig(
                name=args.name,
                package_manager=args.package_manager or "npm",
                description=args.description,
                author=args.author,
            )
        except ValidationError as exc:
            print_error(f"Invalid project name: {exc.errors()[0]['msg']}")
            return 2
    else:
        if args.name:
            try:
                ProjectConfig(name=args.name)
            except ValidationError as exc:
                print_error(f"Invalid project name: {exc.errors()[0]['msg']}")
                return 2
        project = prompt_project_config(args.name)
        if project is None:
            print_warning("Project creation cancelled.")
            return 0
        if args.package_manager:
            project = project.model_copy(update={"package_manager": args.package_manager})

    project = project.model_copy(
        update={
            "initialize_git": project.initialize_git and not args.no_git,
            "install_dependencies": not args.skip_install,
        }
    )
    target = Path(args.directory) if args.directory else Path.cwd() / project.name

    start = time.monotonic()
    result = await ProjectGenerator(config).generate(project, target)
    print_summary_table(
        {
            "Project": project.name,
            "Location": str(result.root),
            "Files": str(len(result.files)),
            "Git": "initialized" if result.git_initialized else "skipped",
            "Dependencies": "installed" if result.dependencies_installed else "not installed",
            "Duration": format_duration(time.monotonic() - start),
        },
        title="Project created",
    )
    print_success(f"Next: cd {project.name} && {project.package_manager} run start:dev")
    return 0


async def _cmd_generate(args: argparse.Namespace, config: Config) -> int:
    try:
        result = await ResourceGenerator(config).generate(args.name, args.project_root)
    except ValidationError as exc:
        print_error(f"Invalid resource name: {exc.errors()[0]['msg']}")
        return 2
    name = result.resource.class_name
    print_success(f"\n✓ Resource \"{name}\" created successfully!\n")
    print_warning("Don't forget to:")
    print_warning(f"   1. Add the {name} model to prisma/schema.prisma")
    print_warning("   2. Run: npx prisma generate")
    return 0


async def _cmd_repository(args: argparse.Namespace, config: Config) -> int:
    kind = args.kind or prompt_repository_kind()
    if kind is None:
        print_warning("Repository generation cancelled.")
        return 0
    try:
        await RepositoryGenerator(config).generate(args.name, args.project_root, kind)
    except ValidationError as exc:
        print_error(f"Invalid resource name: {exc.errors()[0]['msg']}")
        return 2
    return 0


_COMMANDS = {
    "new": _cmd_new,
    "generate": _cmd_generate,
    "g": _cmd_generate,
    "repository": _cmd_repository,
    "repo": _cmd_repository,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``nestgen`` and ``python -m nestgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _load_config(args)

    handler = _COMMANDS[args.command]
    try:
        return asyncio.run(handler(args, config))
    except ScaffoldError as exc:
        print_error(f"\nError: {escape(str(exc))}\n")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
