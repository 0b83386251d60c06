"""Command template expansion.

Placeholders:
- ``{}``        package name
- ``{version}`` package version
- ``{path}``    package directory (empty when unknown)

Expansion is a single left-to-right pass, so text substituted for one
placeholder is never expanded again. Unknown ``{...}`` sequences are
left untouched.
"""

from __future__ import annotations

import re

from deps_order.domain.packages import PackageNode

_PLACEHOLDER = re.compile(r"\{(|version|path)\}")


def expand_template(template: str, node: PackageNode) -> str:
    """Return *template* with every placeholder replaced for *node*.

    Examples:
        >>> from deps_order.domain.packages import PackageId
        >>> expand_template("echo {} v{version}", PackageNode(PackageId("core", "1.2.0")))
        'echo core v1.2.0'
    """
    values = {
        "": node.name,
        "version": node.version,
        "path": str(node.source_path) if node.source_path else "",
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
