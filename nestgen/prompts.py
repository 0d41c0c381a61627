"""Interactive prompts for ``nestgen new`` and ``nestgen repository``.

Built on ``rich.prompt``.  Cancelling with Ctrl-C or EOF returns ``None`` so
the caller can stop before any file is written.
"""

from __future__ import annotations

from pydantic import ValidationError
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from nestgen.config import PACKAGE_MANAGERS, ProjectConfig
from nestgen.utils import console, print_error


def prompt_project_name() -> str:
    """Ask until the name passes ``ProjectConfig`` validation."""
    while True:
        value = Prompt.ask("What is your project name?", default="my-awesome-api", console=console)
        try:
            return ProjectConfig(name=value).name
        except ValidationError as exc:
            print_error(f"  {exc.errors()[0]['msg']}")


def prompt_project_config(project_name: str | None = None) -> ProjectConfig | None:
    """Collect every choice for a new project.

    Returns:
        The validated ``ProjectConfig``, or ``None`` if the user cancelled.
    """
    console.print(
        Panel("[bold cyan]nestgen[/bold cyan] - create a production-ready NestJS project")
    )
    try:
        name = project_name or prompt_project_name()
        package_manager = Prompt.ask(
            "Which package manager would you like to use?",
            choices=list(PACKAGE_MANAGERS),
            default="npm",
            console=console,
        )
        database = Prompt.ask(
            "Which database would you like to use?",
            choices=["prisma-postgresql"],
            default="prisma-postgresql",
            console=console,
        )
        auth_strategy = Prompt.ask(
            "Which authentication strategy would you like?",
            choices=["jwt"],
            default="jwt",
            console=console,
        )
        description = Prompt.ask("Project description (optional)", default="", console=console)
        author = Prompt.ask("Author (optional)", default="", console=console)
        initialize_git = Confirm.ask("Initialize a git repository?", default=True, console=console)
    except (KeyboardInterrupt, EOFError):
        console.print()
        return None

    return ProjectConfig(
        name=name,
        package_manager=package_manager,
        database=database,
        auth_strategy=auth_strategy,
        description=description,
        author=author,
        initialize_git=initialize_git,
    )


def prompt_repository_kind() -> str | None:
    """Ask which repository implementation to generate."""
    try:
        return Prompt.ask(
            "Which repository type?",
            choices=["prisma", "in-memory"],
            default="prisma",
            console=console,
        )
    except (KeyboardInterrupt, EOFError):
        console.print()
        return None
