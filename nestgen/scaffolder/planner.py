"""Resource scaffold planning.

Turns a resource name into the ordered list of files ``nestgen generate``
writes.  Planning is pure: the same name always yields the same plan.

Dependency shape of the generated files::

    Controller --> Service --inject(<NAME>_REPOSITORY)--> I<Name>Repository
                                                              ^
    Module: { provide: <NAME>_REPOSITORY, useClass: Prisma<Name>Repository }
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from nestgen.resource import ResourceDescriptor


class GeneratorId(str, Enum):
    """The fixed set of per-resource file generators."""
    MODULE = "module"
    CONTROLLER = "controller"
    SERVICE = "service"
    CREATE_DTO = "create-dto"
    UPDATE_DTO = "update-dto"
    ENTITY = "entity"
    REPOSITORY_INTERFACE = "repository-interface"
    REPOSITORY_IMPL = "repository-impl"
    UNIT_TEST_SERVICE = "unit-test-service"
    UNIT_TEST_CONTROLLER = "unit-test-controller"
    E2E_TEST = "e2e-test"

    @property
    def template(self) -> str:
        """Template file name inside the resource template directory."""
        return f"{self.value}.ts.j2"


class PlannedFile(BaseModel):
    """One file of a resource scaffold."""

    model_config = ConfigDict(frozen=True)

    path: str
    generator: GeneratorId

    @property
    def template(self) -> str:
        return self.generator.template


# Relative output path per generator; ``{n}`` is the lower-case name.
_LAYOUT: tuple[tuple[GeneratorId, str], ...] = (
    (GeneratorId.MODULE, "src/{n}/{n}.module.ts"),
    (GeneratorId.CONTROLLER, "src/{n}/{n}.controller.ts"),
    (GeneratorId.SERVICE, "src/{n}/{n}.service.ts"),
    (GeneratorId.CREATE_DTO, "src/{n}/dto/create-{n}.dto.ts"),
    (GeneratorId.UPDATE_DTO, "src/{n}/dto/update-{n}.dto.ts"),
    (GeneratorId.ENTITY, "src/{n}/entities/{n}.entity.ts"),
    (GeneratorId.REPOSITORY_INTERFACE, "src/{n}/{n}.repository.interface.ts"),
    (GeneratorId.REPOSITORY_IMPL, "src/{n}/{n}.repository.ts"),
    (GeneratorId.UNIT_TEST_SERVICE, "src/{n}/{n}.service.spec.ts"),
    (GeneratorId.UNIT_TEST_CONTROLLER, "src/{n}/{n}.controller.spec.ts"),
    (GeneratorId.E2E_TEST, "test/{n}/{n}.e2e-spec.ts"),
)


def plan(resource: str | ResourceDescriptor) -> list[PlannedFile]:
    """Return the ordered files to generate for *resource*.

    Exactly one entry per :class:`GeneratorId`; paths are relative to the
    project root, use forward slashes, and are unique.
    """
    if not isinstance(resource, ResourceDescriptor):
        resource = ResourceDescriptor.from_name(resource)
    return [
        PlannedFile(path=pattern.format(n=resource.name), generator=generator)
        for generator, pattern in _LAYOUT
    ]
