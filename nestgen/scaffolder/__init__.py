"""nestgen scaffolder -- generates NestJS projects and resources.

Renders Jinja2 templates into a new project tree (``ProjectGenerator``) or
into an existing project (``ResourceGenerator``, ``RepositoryGenerator``).

Quick usage::

    from nestgen.config import Config
    from nestgen.scaffolder import ResourceGenerator

    generator = ResourceGenerator(Config.from_env())
    result = await generator.generate("order", "/path/to/project")
"""

from nestgen.scaffolder.expander import DEFAULT_EXCLUDES, TreeExpander
from nestgen.scaffolder.generator import (
    ProjectGenerator,
    ProjectResult,
    RepositoryGenerator,
    ResourceGenerator,
    ResourceResult,
)
from nestgen.scaffolder.planner import GeneratorId, PlannedFile, plan
from nestgen.scaffolder.templates import TemplateContext, TemplateRenderer

__all__ = [
    "DEFAULT_EXCLUDES",
    "GeneratorId",
    "PlannedFile",
    "ProjectGenerator",
    "ProjectResult",
    "RepositoryGenerator",
    "ResourceGenerator",
    "ResourceResult",
    "TemplateContext",
    "TemplateRenderer",
    "TreeExpander",
    "plan",
]
