"""nestgen augmentor -- idempotent edits of existing TypeScript sources.

Registers a freshly generated resource module in ``src/app.module.ts`` by
adding an import declaration and appending the module class to the
``imports`` array of the ``@Module`` decorator.

Quick usage::

    from nestgen.augmentor import augment

    result = augment("src/app.module.ts", "order")
    result.changed  # False on every run after the first
"""

from nestgen.augmentor.document import SourceDocument, tokenize
from nestgen.augmentor.registration import (
    AugmentResult,
    RegistrationTarget,
    augment,
    register,
)

__all__ = [
    "AugmentResult",
    "RegistrationTarget",
    "SourceDocument",
    "augment",
    "register",
    "tokenize",
]
