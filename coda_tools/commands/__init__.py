"""Approved-command registry and execution.

Allow-list model:
- Only commands recorded in the project's registry file can run
- An identifier must resolve to exactly one recorded command
- Commands run as literal words, without shell expansion, with a deadline

For kernel-level isolation, run the agent in a container.
"""
from __future__ import annotations

from .execution import (
    DEFAULT_TIMEOUT,
    execute_command,
    run_registered_command,
    split_command,
)
from .registry import (
    COMMAND_PATTERN,
    DEFAULT_REGISTRY_DIR,
    DEFAULT_REGISTRY_FILE,
    find_candidates,
    list_commands,
    load_commands,
    parse_commands,
    parse_entries,
    registry_path,
    resolve_command,
)
from .types import (
    AmbiguousCommand,
    CommandEntry,
    CommandError,
    CommandFailed,
    CommandNotFound,
    CommandTimedOut,
    RegistryNotFound,
)

__all__ = [
    # Constants
    "COMMAND_PATTERN",
    "DEFAULT_REGISTRY_DIR",
    "DEFAULT_REGISTRY_FILE",
    "DEFAULT_TIMEOUT",
    # Types
    "CommandEntry",
    # Errors
    "AmbiguousCommand",
    "CommandError",
    "CommandFailed",
    "CommandNotFound",
    "CommandTimedOut",
    "RegistryNotFound",
    # Registry
    "find_candidates",
    "list_commands",
    "load_commands",
    "parse_commands",
    "parse_entries",
    "registry_path",
    "resolve_command",
    # Execution
    "execute_command",
    "run_registered_command",
    "split_command",
]
