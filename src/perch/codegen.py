"""Generated lookup data for a RoutingTable.

Two serialized forms:

- ``render_module()`` — a self-contained Python module defining
  ``EXACT_FRAMES``, ``PREFIX_FRAMES`` and ``resolve(frame_id)``.  It has
  no dependency on perch at runtime.
- ``dumps()`` / ``loads()`` — JSON for tooling and non-Python consumers.

Both are deterministic: exact ids are sorted, prefixes keep their
registration order (the order ``resolve`` scans them in), and every
string is emitted as an escaped literal.  Building twice from the same
templates produces byte-identical output.
"""

import json

from perch import __version__
from perch.routing.table import RoutingTable
from perch.templating import create_environment, render_source

_MODULE_TEMPLATE = '''\
# Generated by perch {{ version }}. Do not edit.
"""{{ module_name }}: {{ exact_count }} exact frame ids, {{ prefix_count }} prefixes."""

from types import MappingProxyType

EXACT_FRAMES = MappingProxyType({
{% for entry in exact %}
    {{ entry }},
{% end %}
})

PREFIX_FRAMES = (
{% for entry in prefixes %}
    {{ entry }},
{% end %}
)


def resolve(frame_id):
    """Return the template for *frame_id*, or None if no frame matches."""
    template = EXACT_FRAMES.get(frame_id)
    if template is not None:
        return template
    for prefix, template in PREFIX_FRAMES:
        if frame_id.startswith(prefix):
            return template
    return None
'''


def render_module(table: RoutingTable, *, module_name: str = "frame_routes") -> str:
    """Render *table* as Python source for a standalone lookup module."""
    exact = [f"{key!r}: {table.exact[key]!r}" for key in sorted(table.exact)]
    prefixes = [f"({prefix!r}, {reference!r})" for prefix, reference in table.prefixes]
    source = render_source(
        create_environment(),
        _MODULE_TEMPLATE,
        {
            "version": __version__,
            "module_name": module_name,
            "exact": exact,
            "prefixes": prefixes,
            "exact_count": len(exact),
            "prefix_count": len(prefixes),
        },
    )
    if not source.endswith("\n"):
        source += "\n"
    return source


def dumps(table: RoutingTable) -> str:
    """Serialize *table* to JSON."""
    return json.dumps(table.to_dict(), indent=2, ensure_ascii=False) + "\n"


def loads(text: str) -> RoutingTable:
    """Deserialize a table produced by :func:`dumps`."""
    return RoutingTable.from_dict(json.loads(text))
