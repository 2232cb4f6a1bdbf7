"""Tool-call protocol parser.

Recovers ``<tool name="X" k="v">BODY</tool>`` and ``<tool name="X" k="v"/>``
invocations from free-form model output. Parsing is best-effort: fragments
that do not form a complete tag are skipped, and nothing here raises on
arbitrary input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from deckhand.config import get_config
from deckhand.logging import get_logger

log = get_logger(__name__)

# Attribute values are double-quoted and may hold anything but '"'.
_OPEN_TAG = r'<tool\s+name="[^"]+"(?:\s+[\w-]+="[^"]*")*\s*/?>'
# A paired body may not contain another complete opening tag; an
# unterminated tag must not swallow the next well-formed invocation.
_TOOL_RE = re.compile(
    r'<tool\s+name="([^"]+)"((?:\s+[\w-]+="[^"]*")*)\s*'
    r"(?:/>|>((?:(?!" + _OPEN_TAG + r")[\s\S])*?)</tool\s*>)",
    re.IGNORECASE,
)
_OPEN_TAG_RE = re.compile(_OPEN_TAG, re.IGNORECASE)
_ATTR_RE = re.compile(r'([\w-]+)="([^"]*)"')


@dataclass(frozen=True)
class ToolInvocation:
    """A single tool call decoded from model output."""

    name: str
    parameters: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def get(self, *keys: str, default: str = "") -> str:
        """Return the first present parameter among ``keys``."""
        for key in keys:
            if key in self.parameters:
                return self.parameters[key]
        return default


def _parse_attributes(raw: str) -> dict[str, str]:
    return {key: value for key, value in _ATTR_RE.findall(raw)}


def parse_tool_calls(
    text: str,
    content_tools: Iterable[str] | None = None,
) -> list[ToolInvocation]:
    """Extract tool invocations in order of appearance.

    Args:
        text: Raw model response
        content_tools: Tool names whose body carries file content; an empty
            body for one of them is logged as a likely truncated generation.
            Defaults to the configured ``protocol.content_tools``.

    Returns:
        Invocations in source order (empty when no tag is present)
    """
    if not isinstance(text, str) or "<tool" not in text.lower():
        return []

    if content_tools is None:
        content_tools = get_config().protocol.content_tools
    content_tool_names = {str(name).strip().lower() for name in content_tools}

    invocations: list[ToolInvocation] = []
    spans: list[tuple[int, int]] = []
    for match in _TOOL_RE.finditer(text):
        spans.append(match.span())
        name, raw_attrs, body = match.group(1), match.group(2), match.group(3)
        name = name.strip()
        if not name:
            continue

        body = (body or "").strip()
        if not body and name.lower() in content_tool_names:
            log.warning(
                "Content tool invocation has empty body; output may be truncated",
                tool=name,
                fragment=match.group(0)[:200],
            )

        invocations.append(
            ToolInvocation(
                name=name,
                parameters=_parse_attributes(raw_attrs or ""),
                body=body,
            )
        )

    for tag in _OPEN_TAG_RE.finditer(text):
        if not any(start <= tag.start() < end for start, end in spans):
            log.warning("Skipping unterminated tool tag", fragment=tag.group(0)[:200])
    return invocations
