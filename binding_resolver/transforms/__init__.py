"""Built-in transforms.

Each module in this package defines transforms using the
@register_transform decorator:

- arrays: flatten, first, last, count
- objects: pick, extractProperties

Import this module to register all built-ins with the catalog.
"""

from binding_resolver.transforms import arrays, objects  # noqa: F401
