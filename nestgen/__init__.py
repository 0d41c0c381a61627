"""nestgen -- scaffold NestJS backends from Jinja2 templates.

Subpackages:

* ``nestgen.scaffolder`` -- template rendering, tree expansion, resource
  planning, and the project/resource/repository generators.
* ``nestgen.augmentor`` -- idempotent registration of generated modules in
  an existing ``app.module.ts``.
"""

__version__ = "0.1.0"
