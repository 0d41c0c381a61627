"""Scaffolding orchestrators.

``ProjectGenerator`` creates a new NestJS project from the project template
tree; ``ResourceGenerator`` adds a resource (module, controller, service,
DTOs, entity, repository pair, tests) to an existing project and registers
it in ``src/app.module.ts``; ``RepositoryGenerator`` writes a standalone
repository interface and implementation under ``src/database/``.

Steps run strictly in order (plan, then generate, then augment) and every
core failure propagates to the caller, leaving already-written files in
place for inspection.  Shell steps (git, dependency install) are reported
but never fatal.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from nestgen.augmentor import AugmentResult, RegistrationTarget, augment
from nestgen.errors import IOFailureError, TemplateNotFoundError
from nestgen.filesystem import FileSystem
from nestgen.resource import ResourceDescriptor
from nestgen.utils import create_spinner, print_step, print_warning, run_command

from .expander import TreeExpander
from .package_manager import configure_package_manager, install_command
from .planner import plan
from .templates import TemplateRenderer

if TYPE_CHECKING:
    from nestgen.config import Config, ProjectConfig

APP_MODULE_PATH = Path("src") / "app.module.ts"

RepositoryKind = Literal["prisma", "in-memory"]


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class ProjectResult(BaseModel):
    """Outcome of ``ProjectGenerator.generate``."""

    root: Path
    files: list[Path] = Field(default_factory=list)
    git_initialized: bool = False
    dependencies_installed: bool = False


class ResourceResult(BaseModel):
    """Outcome of ``ResourceGenerator.generate``."""

    resource: ResourceDescriptor
    files: list[Path] = Field(default_factory=list)
    registration: AugmentResult | None = None


# ---------------------------------------------------------------------------
# New project
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Expands the project template into a new directory.

    Sequence: expand the template tree, adapt it to the package manager,
    then optionally ``git init`` and install dependencies.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.renderer = TemplateRenderer(config.templates_dir)
        self.expander = TreeExpander(self.renderer, excludes=config.excludes)

    async def generate(self, project: ProjectConfig, target_dir: str | Path) -> ProjectResult:
        """Create the project described by *project* in *target_dir*.

        Raises:
            TemplateNotFoundError: The configured project template is missing.
            IOFailureError: Writing the project tree failed.
        """
        template_root = self.config.project_template_path
        if not template_root.is_dir():
            raise TemplateNotFoundError(
                "Project template directory not found",
                path=template_root,
                expected=self.config.project_template,
            )

        root = Path(target_dir)
        result = ProjectResult(root=root)

        with create_spinner("Copying template files..."):
            result.files = await self.expander.expand(
                template_root, root, project.to_template_context()
            )
        print_step(f"Template files copied ({len(result.files)} files)")

        await asyncio.to_thread(configure_package_manager, root, project.package_manager)
        print_step(f"Configured for {project.package_manager}")

        if project.initialize_git:
            result.git_initialized = await self._init_git(root)

        if project.install_dependencies:
            result.dependencies_installed = await self._install(root, project.package_manager)

        return result

    async def _init_git(self, root: Path) -> bool:
        with create_spinner("Initializing git repository..."):
            code, _, stderr = await run_command(
                ["git", "init"], cwd=root, timeout=self.config.git_timeout
            )
        if code != 0:
            print_warning(f"  Git initialization skipped: {stderr or 'git not available'}")
            return False
        print_step("Git repository initialized")
        return True

    async def _install(self, root: Path, package_manager: str) -> bool:
        with create_spinner(f"Installing dependencies with {package_manager}..."):
            code, _, stderr = await run_command(
                install_command(package_manager),
                cwd=root,
                timeout=self.config.install_timeout,
                env={"NODE_ENV": "production"},
            )
        if code != 0:
            print_warning(
                f"  Installation failed, run manually: {package_manager} install"
            )
            if stderr:
                print_warning(f"  {stderr.splitlines()[-1]}")
            return False
        print_step(f"Dependencies installed with {package_manager}")
        return True


# ---------------------------------------------------------------------------
# New resource
# ---------------------------------------------------------------------------


class ResourceGenerator:
    """Generates a resource and registers it in the app module."""

    def __init__(
        self,
        config: Config,
        target: RegistrationTarget | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        self.config = config
        self.renderer = TemplateRenderer(config.resource_template_dir)
        self.target = target or RegistrationTarget()
        self.fs = filesystem or FileSystem()

    async def generate(self, resource_name: str, project_root: str | Path) -> ResourceResult:
        """Write every planned file for *resource_name*, then update the app module.

        Raises:
            IOFailureError: *project_root* has no ``src/app.module.ts``, or a
                write failed.
            TemplateNotFoundError: A generator template is missing.
            ScaffoldError: Any augmentation failure (see
                :func:`nestgen.augmentor.register`).
        """
        root = Path(project_root)
        app_module = root / APP_MODULE_PATH
        if not self.fs.exists(app_module):
            raise IOFailureError(
                "Not a NestJS project. Run this command from your project root.",
                path=app_module,
            )

        resource = ResourceDescriptor.from_name(resource_name)
        result = ResourceResult(resource=resource)
        context = {"resource": resource}

        for planned in plan(resource):
            path = await self.renderer.render_to_file(
                planned.template, root / planned.path, context
            )
            result.files.append(path)
        print_step(f"Generated {len(result.files)} files for {resource.class_name}")

        result.registration = await asyncio.to_thread(
            augment, app_module, resource, self.target, self.fs
        )
        if result.registration.changed:
            print_step(f"{APP_MODULE_PATH.as_posix()} updated")
        else:
            print_step(f"{resource.module_class} already registered in {APP_MODULE_PATH.as_posix()}")
        return result


# ---------------------------------------------------------------------------
# Standalone repository
# ---------------------------------------------------------------------------


class RepositoryGenerator:
    """Writes a repository interface plus one implementation.

    Files land in ``src/database/<name>/``.  ``prisma`` implementations use
    the project's ``PrismaService``; ``in-memory`` ones keep entities in a
    ``Map`` and need no database.
    """

    _IMPLEMENTATIONS: dict[str, tuple[str, str]] = {
        "prisma": ("prisma.ts.j2", "prisma.{n}.repository.ts"),
        "in-memory": ("in-memory.ts.j2", "in-memory.{n}.repository.ts"),
    }

    def __init__(self, config: Config) -> None:
        self.config = config
        self.renderer = TemplateRenderer(config.repository_template_dir)

    async def generate(
        self,
        name: str,
        project_root: str | Path,
        kind: RepositoryKind = "prisma",
    ) -> list[Path]:
        """Generate the repository pair for *name* and return the written paths."""
        if kind not in self._IMPLEMENTATIONS:
            raise ValueError(f"Unknown repository type: {kind}")

        resource = ResourceDescriptor.from_name(name)
        target_dir = Path(project_root) / "src" / "database" / resource.name
        context = {"resource": resource}

        template, filename = self._IMPLEMENTATIONS[kind]
        outputs = [
            ("interface.ts.j2", f"{resource.name}.repository.interface.ts"),
            (template, filename.format(n=resource.name)),
        ]
        written: list[Path] = []
        for template_name, output_name in outputs:
            path = await self.renderer.render_to_file(
                template_name, target_dir / output_name, context
            )
            print_step(f"Created {output_name}")
            written.append(path)
        return written
