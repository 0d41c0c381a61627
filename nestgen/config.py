"""nestgen configuration.

Typed configuration for the scaffolder.  All settings use Pydantic v2 models
so they are validated at construction time and can be read from
environment variables without boiler-plate.

The template root is resolved exactly once, when the entry point builds a
``Config``; the resolved value is then passed explicitly to every generator.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nestgen.scaffolder.expander import DEFAULT_EXCLUDES
from nestgen.scaffolder.templates import TemplateContext

PackageManager = Literal["npm", "yarn", "pnpm"]
Database = Literal["prisma-postgresql"]
AuthStrategy = Literal["jwt"]

PACKAGE_MANAGERS: tuple[str, ...] = ("npm", "yarn", "pnpm")

_BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"

_PROJECT_NAME_RE = re.compile(r"^[a-z0-9-]+$")


def resolve_templates_dir(override: str | Path | None = None) -> Path:
    """Locate the template root.

    Candidates, in order: *override*, the templates bundled with the
    package, and ``./templates`` under the working directory.  The first
    existing directory wins; if none exists the bundled location is returned
    so the caller reports a meaningful path.
    """
    candidates: list[Path] = []
    if override:
        candidates.append(Path(override))
    candidates.append(_BUNDLED_TEMPLATES_DIR)
    candidates.append(Path.cwd() / "templates")

    for candidate in candidates:
        if candidate.is_dir():
            return candidate.resolve()
    return _BUNDLED_TEMPLATES_DIR


class Config(BaseModel):
    """Global nestgen configuration.

    Instances are created once by the CLI entry point and then passed
    through the rest of the system.
    """

    templates_dir: Path = Field(default_factory=resolve_templates_dir)
    project_template: str = Field(
        default="nest-starter",
        description="Subdirectory of templates_dir holding the project tree",
    )
    install_timeout: int = Field(
        default=600, ge=10, description="Dependency install timeout in seconds"
    )
    git_timeout: int = Field(default=60, ge=5, description="git init timeout in seconds")
    excludes: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_EXCLUDES),
        description="Entry names never copied out of the project template",
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def project_template_path(self) -> Path:
        """Root of the project template tree expanded by ``nestgen new``."""
        return self.templates_dir / self.project_template

    @property
    def resource_template_dir(self) -> Path:
        """Directory holding the per-resource generator templates."""
        return self.templates_dir / "resource"

    @property
    def repository_template_dir(self) -> Path:
        """Directory holding the standalone repository templates."""
        return self.templates_dir / "repository"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            NESTGEN_TEMPLATES_DIR, NESTGEN_PROJECT_TEMPLATE,
            NESTGEN_INSTALL_TIMEOUT.
        """
        kwargs: dict[str, object] = {
            "templates_dir": resolve_templates_dir(os.environ.get("NESTGEN_TEMPLATES_DIR")),
        }
        if os.environ.get("NESTGEN_PROJECT_TEMPLATE"):
            kwargs["project_template"] = os.environ["NESTGEN_PROJECT_TEMPLATE"]
        if os.environ.get("NESTGEN_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["NESTGEN_INSTALL_TIMEOUT"])
        return cls(**kwargs)


class ProjectConfig(BaseModel):
    """Choices collected for ``nestgen new``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Project name (lowercase, digits and hyphens)")
    package_manager: PackageManager = "npm"
    database: Database = "prisma-postgresql"
    auth_strategy: AuthStrategy = "jwt"
    description: str = ""
    author: str = ""
    initialize_git: bool = True
    install_dependencies: bool = True

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project name is required")
        if not _PROJECT_NAME_RE.match(value):
            raise ValueError(
                "Project name must be lowercase, alphanumeric with hyphens only"
            )
        return value

    def to_template_context(self) -> TemplateContext:
        """Return the rendering context for the project template tree."""
        return TemplateContext(
            project_name=self.name,
            description=self.description,
            author=self.author,
            package_manager=self.package_manager,
            database=self.database,
            auth_strategy=self.auth_strategy,
        )
