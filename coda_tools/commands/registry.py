"""Approved-command registry.

The registry is a markdown document maintained by the agent layer at
``<project>/.coda/commands.md``. Execution only relies on lines containing
``Command: `<literal>` ``; everything else in the file is documentation.
The file is re-read on every lookup so edits take effect immediately.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

from .types import AmbiguousCommand, CommandEntry, CommandNotFound, RegistryNotFound

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_DIR = ".coda"
DEFAULT_REGISTRY_FILE = "commands.md"

COMMAND_PATTERN = re.compile(r"Command: `([^`]+)`")

_SECTION_PATTERN = re.compile(r"^##\s+(?:\d+\.\s*)?(.*)$", re.MULTILINE)
_FIELD_PATTERNS = {
    "date_added": re.compile(r"^\*\*\s*Date Added:\s*(.*?)\s*\*\*\s*$", re.MULTILINE),
    "category": re.compile(r"^\*\*\s*Category:\s*(.*?)\s*\*\*\s*$", re.MULTILINE),
    "description": re.compile(r"^>\s*Description:\s*(.*?)\s*$", re.MULTILINE),
    "usage": re.compile(r"^>\s*Usage:\s*(.*?)\s*$", re.MULTILINE),
    "example": re.compile(r"^>\s*Example:\s*(.*?)\s*$", re.MULTILINE),
}


def registry_path(
    project_root: Path | str,
    registry_dir: str = DEFAULT_REGISTRY_DIR,
    registry_file: str = DEFAULT_REGISTRY_FILE,
) -> Path:
    return Path(project_root) / registry_dir / registry_file


def parse_commands(text: str) -> List[str]:
    """Extract command strings in order of appearance, first occurrence wins."""
    return list(dict.fromkeys(COMMAND_PATTERN.findall(text)))


def parse_entries(text: str) -> List[CommandEntry]:
    """Parse the documented ``## N. Name`` sections of a registry file.

    Sections without a ``Command:`` line are skipped.
    """
    entries: List[CommandEntry] = []
    headers = list(_SECTION_PATTERN.finditer(text))
    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        body = text[header.end():end]
        command = COMMAND_PATTERN.search(body)
        if command is None:
            continue
        fields = {}
        for key, pattern in _FIELD_PATTERNS.items():
            match = pattern.search(body)
            if match:
                fields[key] = match.group(1)
        entries.append(
            CommandEntry(name=header.group(1).strip(), command=command.group(1), **fields)
        )
    return entries


def read_registry(path: Path) -> str:
    """Read the registry file.

    Raises:
        RegistryNotFound: If the file does not exist
    """
    if not path.is_file():
        raise RegistryNotFound(path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RegistryNotFound(path)


def load_commands(path: Path) -> List[str]:
    """Load the ordered set of approved command strings from ``path``."""
    commands = parse_commands(read_registry(path))
    logger.debug("Loaded %d approved commands from %s", len(commands), path)
    return commands


def find_candidates(commands: List[str], identifier: str) -> List[str]:
    """Return every command containing ``identifier``, in registry order."""
    return [cmd for cmd in commands if identifier in cmd]


def resolve_command(
    commands: List[str],
    identifier: str,
    registry: Optional[Path] = None,
) -> str:
    """Resolve an identifier to exactly one registered command.

    A command equal to the identifier wins outright. Otherwise the
    identifier must be a substring of exactly one command.

    Raises:
        CommandNotFound: If no command contains the identifier
        AmbiguousCommand: If several commands contain it and none equals it
    """
    if identifier in commands:
        return identifier

    candidates = find_candidates(commands, identifier) if identifier else []
    if not candidates:
        raise CommandNotFound(identifier, registry or Path(DEFAULT_REGISTRY_FILE))
    if len(candidates) > 1:
        raise AmbiguousCommand(identifier, candidates)
    return candidates[0]


def format_entries(entries: List[CommandEntry]) -> str:
    """Render entries as a plain-text listing grouped by category."""
    groups: dict[str, List[CommandEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.category or "Uncategorized", []).append(entry)

    lines: List[str] = []
    for category, members in groups.items():
        lines.append(f"{category}:")
        for entry in members:
            label = entry.name or entry.command
            line = f"  - {label}: `{entry.command}`"
            if entry.description:
                line += f" - {entry.description}"
            lines.append(line)
    return "\n".join(lines)


def list_commands(path: Path) -> str:
    """Describe the registry at ``path`` as text; never raises."""
    try:
        text = read_registry(path)
    except RegistryNotFound:
        return f"No commands registered: {path} does not exist"
    except OSError as e:
        return f"Error reading commands file: {e.strerror or e}"

    entries = parse_entries(text)
    # Commands outside documented sections still count as approved.
    documented = {e.command for e in entries}
    entries.extend(CommandEntry(command=cmd) for cmd in parse_commands(text) if cmd not in documented)
    if not entries:
        return f"No commands registered in {path}"
    return format_entries(entries)
