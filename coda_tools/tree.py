"""Directory tree rendering for the `read_directory_tree` tool."""
from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .confinement import normalize
from .ignore import (
    DEFAULT_IGNORE_FILE,
    SEPARATOR,
    IgnoreRule,
    load_ignore_rules,
    should_ignore,
)

logger = logging.getLogger(__name__)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "


@dataclass(frozen=True)
class DirectoryEntry:
    """One node of a rendered directory tree."""

    name: str
    is_directory: bool
    children: tuple["DirectoryEntry", ...] = ()


def _sort_key(entry: DirectoryEntry) -> tuple[int, str]:
    return (0 if entry.is_directory else 1, entry.name)


def build_tree(
    path: Path, rules: Sequence[IgnoreRule], relative_to: str = ""
) -> tuple[DirectoryEntry, ...]:
    """Enumerate ``path`` recursively, skipping ignored entries.

    Bare patterns (no ``/`` inside them) are matched against each entry's
    name, so they apply at every depth. Patterns spanning several segments
    are matched against the entry's path relative to the walk root.

    Args:
        path: Directory to list
        rules: Compiled ignore rules
        relative_to: Path of ``path`` relative to the walk root, with a
            trailing separator (empty at the root)

    Raises:
        OSError: If ``path`` (or a subdirectory) cannot be listed
    """
    bare = [rule for rule in rules if rule.segment_count <= 1]
    anchored = [rule for rule in rules if rule.segment_count > 1]
    entries: list[DirectoryEntry] = []
    for child in path.iterdir():
        is_directory = child.is_dir()
        relative = relative_to + child.name
        if should_ignore(child.name, bare) or should_ignore(relative, anchored):
            continue
        # Symlinked directories are listed but not entered, to avoid cycles.
        descend = is_directory and not child.is_symlink()
        children = build_tree(child, rules, relative + SEPARATOR) if descend else ()
        entries.append(DirectoryEntry(child.name, is_directory, children))
    return tuple(sorted(entries, key=_sort_key))


def format_entries(entries: Sequence[DirectoryEntry], prefix: str = "") -> str:
    lines: list[str] = []
    for index, entry in enumerate(entries):
        is_last = index == len(entries) - 1
        marker = LAST_BRANCH if is_last else BRANCH
        suffix = "/" if entry.is_directory else ""
        lines.append(f"{prefix}{marker}{entry.name}{suffix}\n")
        if entry.is_directory:
            child_prefix = prefix + (SPACE_INDENT if is_last else PIPE_INDENT)
            lines.append(format_entries(entry.children, child_prefix))
    return "".join(lines)


def render_tree(
    path: str,
    ignore_file: Optional[str] = DEFAULT_IGNORE_FILE,
    extra_ignore: Sequence[str] = (),
    base: Optional[Path] = None,
) -> str:
    """Render the directory tree rooted at ``path``.

    Never raises for filesystem errors; they are returned as
    ``"Error reading directory: <reason>"`` so the agent always gets text.
    Relative paths resolve against ``base`` when given; the header always
    shows ``path`` as passed.
    """
    root = normalize(path, base) if base is not None else Path(path)
    try:
        if not root.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if not root.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        rules = load_ignore_rules(root, ignore_file, extra_ignore)
        tree = format_entries(build_tree(root, rules))
    except OSError as e:
        logger.warning("Failed to read directory %s: %s", path, e)
        return f"Error reading directory: {e.strerror or e}"
    except UnicodeDecodeError:
        return f"Error reading directory: {ignore_file} is not a UTF-8 text file"
    return f"Directory tree for {path}:\n{tree}"
