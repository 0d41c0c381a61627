"""Resource naming.

A ``ResourceDescriptor`` is derived once from the user-supplied name and
carries every casing variant the generated files and the app-module
registration need.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

_RESOURCE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def capitalize_first(value: str) -> str:
    """Upper-case the first character only: ``order`` -> ``Order``."""
    return value[:1].upper() + value[1:]


class ResourceDescriptor(BaseModel):
    """Casing variants of a resource name.

    ``name`` is the lower-case form used in paths and routes, ``class_name``
    the capitalised form used in TypeScript identifiers.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    class_name: str

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not _RESOURCE_NAME_RE.match(value):
            raise ValueError(
                f"Invalid resource name {value!r}: use letters, digits and underscores, "
                "starting with a letter"
            )
        return value

    @classmethod
    def from_name(cls, raw: str) -> "ResourceDescriptor":
        """Build a descriptor: ``Order`` -> name ``order``, class ``Order``."""
        name = raw.strip().lower()
        return cls(name=name, class_name=capitalize_first(name))

    @property
    def token(self) -> str:
        """Injection token binding the repository interface to its implementation."""
        return f"{self.class_name.upper()}_REPOSITORY"

    @property
    def module_class(self) -> str:
        return f"{self.class_name}Module"

    @property
    def module_path(self) -> str:
        """Import specifier of the resource module, relative to ``src/``."""
        return f"./{self.name}/{self.name}.module"
