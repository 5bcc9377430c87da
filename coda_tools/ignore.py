"""Ignore rules for directory enumeration.

Rules come from two places:
- BUILTIN_PATTERNS, which are always active
- an optional ignore file at the root of the walked directory

Only a subset of gitignore syntax is understood: segment-wise ``*`` and ``?``
wildcards, and a trailing ``/`` for directory-only rules. Negated rules
(``!pattern``) are parsed but never re-include a path.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

SEPARATOR = "/"

DEFAULT_IGNORE_FILE = ".gitignore"

BUILTIN_PATTERNS: tuple[str, ...] = (
    # version control
    ".git/",
    ".hg/",
    ".svn/",
    # dependencies
    "node_modules/",
    ".venv/",
    "__pycache__/",
    # OS metadata
    ".DS_Store",
    "Thumbs.db",
    # environment files
    ".env",
    ".env.*",
)


def _translate_segment(segment: str) -> str:
    out = []
    for char in segment:
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(char))
    return "".join(out)


def _compile(pattern: str) -> re.Pattern[str]:
    segments = [s for s in pattern.split(SEPARATOR) if s]
    return re.compile(SEPARATOR.join(_translate_segment(s) for s in segments))


@dataclass(frozen=True)
class IgnoreRule:
    """A single compiled ignore pattern."""

    pattern: str
    directory_only: bool
    negated: bool = False
    stem: str = ""
    _regex: re.Pattern[str] = field(default=None, repr=False, compare=False)  # type: ignore[assignment]

    @classmethod
    def compile(cls, raw: str) -> "IgnoreRule":
        pattern = raw.strip()
        negated = pattern.startswith("!")
        body = pattern[1:] if negated else pattern
        directory_only = body.endswith(SEPARATOR)
        stem = body.strip(SEPARATOR)
        return cls(
            pattern=pattern,
            directory_only=directory_only,
            negated=negated,
            stem=stem,
            _regex=_compile(stem),
        )

    @property
    def segment_count(self) -> int:
        return len([s for s in self.stem.split(SEPARATOR) if s])

    def matches(self, relative_path: str) -> bool:
        """Return True if this rule matches ``relative_path``.

        Directory-only rules match the stem itself and everything below it.
        Plain rules match the whole relative path only.
        """
        path = relative_path.strip(SEPARATOR)
        if not path or not self.stem:
            return False
        if self._regex.fullmatch(path):
            return True
        if not self.directory_only:
            return False
        parts = path.split(SEPARATOR)
        count = self.segment_count
        if len(parts) <= count:
            return False
        return self._regex.fullmatch(SEPARATOR.join(parts[:count])) is not None


def compile_rules(patterns: Iterable[str]) -> list[IgnoreRule]:
    """Compile raw patterns, skipping blank lines and ``#`` comments."""
    rules: list[IgnoreRule] = []
    for line in patterns:
        text = line.rstrip()
        if not text.strip() or text.lstrip().startswith("#"):
            continue
        rules.append(IgnoreRule.compile(text))
    return rules


BUILTIN_RULES: tuple[IgnoreRule, ...] = tuple(compile_rules(BUILTIN_PATTERNS))


def load_ignore_rules(
    root: Path | str,
    filename: Optional[str] = DEFAULT_IGNORE_FILE,
    extra_patterns: Sequence[str] = (),
) -> list[IgnoreRule]:
    """Return built-in rules plus rules from ``root/filename`` if it exists.

    Args:
        root: Directory whose ignore file should be read
        filename: Ignore file name, or None to use built-ins only
        extra_patterns: Additional patterns from configuration

    Raises:
        OSError: If the ignore file exists but cannot be read
    """
    rules = list(BUILTIN_RULES)
    rules.extend(compile_rules(extra_patterns))
    if filename:
        ignore_path = Path(root) / filename
        if ignore_path.is_file():
            file_rules = compile_rules(ignore_path.read_text(encoding="utf-8").splitlines())
            logger.debug("Loaded %d ignore rules from %s", len(file_rules), ignore_path)
            rules.extend(file_rules)
    return rules


def should_ignore(relative_path: str, rules: Sequence[IgnoreRule]) -> bool:
    """Check whether any non-negated rule matches ``relative_path``.

    Negated rules never re-include a path; a path excluded by any rule stays
    excluded.
    """
    for rule in rules:
        if rule.negated:
            if rule.matches(relative_path):
                logger.debug("Negated rule %r not honoured for %s", rule.pattern, relative_path)
            continue
        if rule.matches(relative_path):
            return True
    return False
