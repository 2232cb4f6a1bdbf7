"""Pluggable post-edit syntax checks keyed by file suffix."""

from __future__ import annotations

import ast
import json
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Callable

import yaml

from deckhand.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SyntaxCheckResult:
    """Outcome of a syntax check."""

    valid: bool
    errors: list[str] = field(default_factory=list)


SyntaxChecker = Callable[[str], SyntaxCheckResult]

VALID = SyntaxCheckResult(valid=True)


def _check_python(content: str) -> SyntaxCheckResult:
    try:
        ast.parse(content)
    except SyntaxError as e:
        line = e.lineno or 0
        column = e.offset or 0
        return SyntaxCheckResult(valid=False, errors=[f"Line {line}:{column} - {e.msg}"])
    return VALID


def _check_json(content: str) -> SyntaxCheckResult:
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        return SyntaxCheckResult(valid=False, errors=[f"Line {e.lineno}:{e.colno} - {e.msg}"])
    return VALID


def _check_yaml(content: str) -> SyntaxCheckResult:
    try:
        list(yaml.safe_load_all(content))
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        problem = getattr(e, "problem", None) or str(e)
        if mark is not None:
            return SyntaxCheckResult(
                valid=False,
                errors=[f"Line {mark.line + 1}:{mark.column + 1} - {problem}"],
            )
        return SyntaxCheckResult(valid=False, errors=[problem])
    return VALID


_CHECKERS: dict[str, SyntaxChecker] = {
    ".py": _check_python,
    ".pyi": _check_python,
    ".json": _check_json,
    ".yaml": _check_yaml,
    ".yml": _check_yaml,
}


def register_checker(suffix: str, checker: SyntaxChecker) -> None:
    """Register (or replace) the checker used for a file suffix such as ``.toml``."""
    key = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
    _CHECKERS[key] = checker


def unregister_checker(suffix: str) -> None:
    """Remove the checker for a suffix; the suffix falls back to permissive."""
    key = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
    _CHECKERS.pop(key, None)


def is_checkable(path: str) -> bool:
    """Return whether a syntax checker is registered for ``path``."""
    return PurePath(path).suffix.lower() in _CHECKERS


def check_syntax(path: str, content: str) -> SyntaxCheckResult:
    """Check ``content`` as the language implied by ``path``.

    Unsupported languages are reported valid.
    """
    checker = _CHECKERS.get(PurePath(path).suffix.lower())
    if checker is None:
        return VALID
    result = checker(content)
    if not result.valid:
        log.debug("Syntax check failed", path=path, errors=result.errors)
    return result
