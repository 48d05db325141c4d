"""
Filename templates.

Variables go inside curly braces and may use dot-notation for nested values:

    ./output-cards/{pack.code}/{faction.code}/{code} - {title}.png

Text can be included conditionally on the truthiness of a variable, with the
variable and text separated by a question mark:

    {type.is_subtype ? "hard-coded text"}
    {is_variant ? variant_position}

Rendered values never introduce new directories: slashes inside a component
are replaced with dashes.
"""

import re
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

from pnp_card_extractor.models.catalog import lookup_path

VARIABLE = re.compile(r"\{\s*([^}]+?)\s*\}")
CONDITIONAL = re.compile(r'^(.+?)\?\s*("[^"]*"|\w+(?:\.\w+)*)$')
SEPARATORS = re.compile(r"[\\/]")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


class TemplateComponent:
    """One path component of a template (a directory or file name)."""

    def __init__(self, template: str) -> None:
        self.template = template

    def render(self, metadata: Mapping[str, Any]) -> str:
        compiled = VARIABLE.sub(lambda m: self._expression(m.group(1), metadata), self.template)
        return SEPARATORS.sub("-", compiled)

    def _expression(self, expr: str, metadata: Mapping[str, Any]) -> str:
        match = CONDITIONAL.match(expr)
        if not match:
            return _to_text(lookup_path(metadata, expr.strip()))

        predicate, result = match.group(1).strip(), match.group(2)
        if not lookup_path(metadata, predicate):
            return ""
        if result.startswith('"'):
            return result[1:-1]
        return _to_text(lookup_path(metadata, result))


class FilenameTemplate:
    """Compiles a path from a template and a metadata mapping."""

    def __init__(self, template: str) -> None:
        self.template = str(template)
        parts = self.template.split("/")
        self.absolute = parts[0] == "" and len(parts) > 1
        if self.absolute:
            parts = parts[1:]
        self.components = [TemplateComponent(part) for part in parts if part]

    def render(self, metadata: Mapping[str, Any]) -> PurePath:
        parts = [component.render(metadata) for component in self.components]
        path = PurePath(*parts)
        return PurePath("/") / path if self.absolute else path
