"""Idempotent registration of a resource module in the composition root.

``augment(path, "order")`` turns::

    import { PrismaModule } from './prisma/prisma.module';

    @Module({ imports: [PrismaModule] })
    export class AppModule {}

into::

    import { PrismaModule } from './prisma/prisma.module';
    import { OrderModule } from './order/order.module';

    @Module({ imports: [PrismaModule, OrderModule] })
    export class AppModule {}

Policy: append-only, exact-match idempotence.  The import is considered
present when any import uses the same module specifier; the element is
considered present when an existing element's source text equals the new
element exactly (differently-cased or formatted duplicates count as
distinct).  Every structural check runs before anything is written, so a
failure leaves the file untouched, and a file that needs no change is not
rewritten.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from nestgen.errors import (
    InvalidMarkerShapeError,
    MarkerNotFoundError,
    PropertyNotArrayError,
    TargetConstructNotFoundError,
)
from nestgen.filesystem import FileSystem
from nestgen.resource import ResourceDescriptor

from .document import SourceDocument


class RegistrationTarget(BaseModel):
    """Where a new element goes: ``@<marker>({ <property>: [...] }) class <class_name>``."""

    model_config = ConfigDict(frozen=True)

    class_name: str = "AppModule"
    marker: str = "Module"
    property: str = "imports"


class AugmentResult(BaseModel):
    """What an augmentation changed."""

    path: Path
    import_added: bool = False
    element_added: bool = False

    @property
    def changed(self) -> bool:
        return self.import_added or self.element_added


def register(
    path: str | Path,
    symbol: str,
    specifier: str,
    target: RegistrationTarget | None = None,
    filesystem: FileSystem | None = None,
) -> AugmentResult:
    """Import *symbol* from *specifier* and append it to the target collection.

    Raises:
        UnparsableTargetError: The file could not be scanned.
        TargetConstructNotFoundError: No class named ``target.class_name``.
        MarkerNotFoundError: The class lacks the ``@target.marker`` decorator.
        InvalidMarkerShapeError: The decorator argument is not an object literal.
        PropertyNotArrayError: ``target.property`` is missing or not an array literal.
        IOFailureError: Reading or writing the file failed.
    """
    target = target or RegistrationTarget()
    fs = filesystem or FileSystem()
    path = Path(path)

    document = SourceDocument.load(path, fs)
    result = AugmentResult(path=path)

    # Resolve the collection first: any structural mismatch aborts before
    # an edit is recorded.
    declaration = document.find_class(target.class_name)
    if declaration is None:
        raise TargetConstructNotFoundError(
            f"Class '{target.class_name}' not found",
            path=path,
            expected=target.class_name,
        )

    marker = declaration.get_decorator(target.marker)
    if marker is None:
        raise MarkerNotFoundError(
            f"@{target.marker} decorator not found on class '{target.class_name}'",
            path=path,
            expected=target.marker,
        )

    config = marker.config_object()
    if config is None:
        raise InvalidMarkerShapeError(
            f"@{target.marker} must be called with an object literal",
            path=path,
            expected=target.marker,
        )

    prop = config.get_property(target.property)
    collection = prop.array_value() if prop is not None else None
    if collection is None:
        raise PropertyNotArrayError(
            f"Property '{target.property}' of @{target.marker} is missing or not an array literal",
            path=path,
            expected=target.property,
        )

    if not document.has_import(specifier):
        document.add_import([symbol], specifier)
        result.import_added = True

    if not collection.contains(symbol):
        document.append_element(collection, symbol)
        result.element_added = True

    if document.modified:
        fs.write_text(path, document.text)
    return result


def augment(
    path: str | Path,
    resource_name: str | ResourceDescriptor,
    target: RegistrationTarget | None = None,
    filesystem: FileSystem | None = None,
) -> AugmentResult:
    """Register the module of *resource_name* in the file at *path*.

    The symbol is ``<Name>Module`` imported from ``./<name>/<name>.module``.
    """
    resource = (
        resource_name
        if isinstance(resource_name, ResourceDescriptor)
        else ResourceDescriptor.from_name(resource_name)
    )
    return register(
        path,
        resource.module_class,
        resource.module_path,
        target=target,
        filesystem=filesystem,
    )
