"""coda-tools: sandboxed project tools for LLM agents.

This package provides the local tools an agent uses to work on a project:
- read_directory_tree: ignore-aware directory listing
- read_file / write_file: file access, with writes confined to the project root
- run_command: execution of commands a human has approved in the registry

Security model: confinement is a path-prefix check and commands are
allow-listed. Neither is an OS-level sandbox; run agents inside a container
for kernel-level isolation.
"""
from __future__ import annotations

from .commands import (
    AmbiguousCommand,
    CommandError,
    CommandFailed,
    CommandNotFound,
    CommandTimedOut,
    RegistryNotFound,
    run_registered_command,
)
from .config import CodaConfig, ConfigError, load_config
from .confinement import WriteRefused, authorize_write, write_file
from .files import read_file
from .ignore import IgnoreRule, load_ignore_rules, should_ignore
from .tree import DirectoryEntry, render_tree

__all__ = [
    # Command errors
    "AmbiguousCommand",
    "CommandError",
    "CommandFailed",
    "CommandNotFound",
    "CommandTimedOut",
    "RegistryNotFound",
    # Configuration
    "CodaConfig",
    "ConfigError",
    "load_config",
    # Operations
    "authorize_write",
    "read_file",
    "render_tree",
    "run_registered_command",
    "should_ignore",
    "write_file",
    "load_ignore_rules",
    # Types
    "DirectoryEntry",
    "IgnoreRule",
    "WriteRefused",
    # Version
    "__version__",
]

__version__ = "0.1.0"
