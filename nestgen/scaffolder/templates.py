"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``nestgen/templates/`` directory and renders them with project-specific
context data, and the ``TemplateContext`` model holding the recognised
substitution variables with their defaults.  Supports named-template
rendering, string-based rendering for template leaves read from a project
tree, and async render-to-file.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from pydantic import BaseModel, ConfigDict

from nestgen.errors import IOFailureError, TemplateNotFoundError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


# ---------------------------------------------------------------------------
# Rendering context
# ---------------------------------------------------------------------------


class TemplateContext(BaseModel):
    """Substitution variables available to project templates.

    Every key except ``project_name`` has a documented default, so a template
    referencing any recognised variable always renders.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    description: str = ""
    author: str = ""
    license: str = "UNLICENSED"
    package_manager: Literal["npm", "yarn", "pnpm"] = "npm"
    database: str = "prisma-postgresql"
    auth_strategy: str = "jwt"

    def as_template_vars(self) -> dict[str, Any]:
        """Return the variables passed to Jinja2 (``name`` aliases ``project_name``)."""
        variables = self.model_dump()
        variables["name"] = self.project_name
        return variables


ContextLike = TemplateContext | Mapping[str, Any]


def _as_vars(context: ContextLike) -> dict[str, Any]:
    if isinstance(context, TemplateContext):
        return context.as_template_vars()
    # Plain mappings get the same defaults a TemplateContext would carry.
    variables: dict[str, Any] = {
        field_name: field.default
        for field_name, field in TemplateContext.model_fields.items()
        if not field.is_required()
    }
    variables.update(context)
    if "project_name" in variables:
        variables.setdefault("name", variables["project_name"])
    return variables


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Rendering is deterministic: equal template text and
    equal context always produce equal output.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["snake_case"] = _snake_case_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: ContextLike) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"service.ts.j2"``).
            context: ``TemplateContext`` or mapping of template variables.

        Returns:
            The rendered template content as a string.

        Raises:
            TemplateNotFoundError: If *template_path* does not exist.
        """
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(
                f"Template '{template_path}' not found",
                path=self.template_dir,
                expected=template_path,
            ) from exc
        return template.render(**_as_vars(context))

    def render_string(self, template_string: str, context: ContextLike) -> str:
        """Render an inline template string with the provided context.

        Used for template leaves of a project tree, which live outside the
        loader's search path.  Placeholders that are not in the context
        render as empty text.
        """
        template = self.env.from_string(template_string)
        return template.render(**_as_vars(context))

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: ContextLike,
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output
        path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise IOFailureError(f"Cannot write file: {exc}", path=path) from exc
