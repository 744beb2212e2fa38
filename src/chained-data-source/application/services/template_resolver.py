"""Template resolution for chain link URLs.

Substitutes `{{path}}` placeholders with values looked up in the results
accumulated by earlier chain links. Paths are dotted and/or bracketed
(`0.userId`, `1.value[0].id`, `0["display name"]`) and are walked
explicitly over the decoded JSON tree.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{[^{]*?\}\}")
PATH_SEGMENT_PATTERN = re.compile(r"""\[\s*(?:"([^"]*)"|'([^']*)'|([^\]]*?))\s*\]|([^.\[\]]+)""")


class _Missing:
    """Sentinel type for a path that does not resolve."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def parse_path(path: str) -> list[str]:
    """Split a property path into its segments.

    >>> parse_path('0.items[1]["display name"]')
    ['0', 'items', '1', 'display name']
    """
    segments: list[str] = []
    for double_quoted, single_quoted, bare_bracket, dotted in PATH_SEGMENT_PATTERN.findall(path):
        if dotted:
            segments.append(dotted.strip())
        elif double_quoted or single_quoted:
            segments.append(double_quoted or single_quoted)
        else:
            segments.append(bare_bracket)
    return segments


def lookup_path(value: Any, path: str) -> Any:
    """Resolve `path` against a JSON value.

    Returns:
        The resolved value, or MISSING when any segment does not resolve
    """
    segments = parse_path(path)
    if not segments:
        return MISSING
    return _walk(value, segments)


def _walk(value: Any, segments: list[str]) -> Any:
    if not segments:
        return value

    head, rest = segments[0], segments[1:]
    if isinstance(value, dict):
        if head not in value:
            return MISSING
        return _walk(value[head], rest)

    if isinstance(value, (list, tuple)):
        if not head.isdigit():
            return MISSING
        index = int(head)
        if index >= len(value):
            return MISSING
        return _walk(value[index], rest)

    return MISSING


def _is_absent(value: Any) -> bool:
    return value is MISSING or value is None or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


@dataclass(frozen=True)
class TemplateResolution:
    """Outcome of resolving one template.

    Attributes:
        value: The resolved string
        complete: False when a placeholder had no value and resolution stopped
    """

    value: str
    complete: bool = True


class TemplateResolver:
    """Resolves `{{path}}` placeholders against an accumulator.

    By default only the leading placeholder is substituted (every later
    placeholder is left as written), matching the observed behavior of
    the chained data source. With `multi_placeholder=True` every
    placeholder is substituted in order. In both modes the first
    placeholder without a value is replaced by an empty string and
    resolution stops.
    """

    def __init__(self, multi_placeholder: bool = False):
        self._multi_placeholder = multi_placeholder

    def resolve(self, template: str, accumulator: Any) -> str:
        return self.resolve_with_status(template, accumulator).value

    def resolve_with_status(self, template: str, accumulator: Any) -> TemplateResolution:
        matches = PLACEHOLDER_PATTERN.findall(template)
        if not matches:
            return TemplateResolution(value=template)

        # Observed behavior re-reads the first match on every pass
        tokens = matches if self._multi_placeholder else [matches[0]] * len(matches)

        value = template
        for token in tokens:
            path = token[2:-2].strip()
            found = lookup_path(accumulator, path)
            if _is_absent(found):
                logger.debug(f"Template placeholder {token} has no value, stopping resolution")
                return TemplateResolution(value=value.replace(token, "", 1), complete=False)

            previous = value
            value = value.replace(token, _stringify(found), 1)
            logger.debug(f"Template resolved: {previous} -> {value}")

        return TemplateResolution(value=value)
