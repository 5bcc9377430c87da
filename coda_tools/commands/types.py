"""Command registry types and errors.

This module contains:
- CommandEntry: one documented entry of the registry file
- CommandError and its subclasses: the hard failures raised by resolution
  and execution
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, Field


class CommandEntry(BaseModel):
    """A documented command from the registry file.

    Only `command` matters for execution; the other fields are for humans
    and for `list_commands`.
    """

    name: str = Field(default="", description="Display name of the command")
    command: str = Field(description="Literal command string that is executed")
    description: str = Field(default="")
    category: str = Field(default="")
    usage: str = Field(default="")
    example: str = Field(default="")
    date_added: str = Field(default="", description="Date the command was approved")


class CommandError(Exception):
    """Base error for command resolution and execution."""
    pass


class RegistryNotFound(CommandError):
    """Raised when the project has no command registry file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Commands file not found at {path}")


class CommandNotFound(CommandError):
    """Raised when no registered command contains the identifier."""

    def __init__(self, identifier: str, registry_path: Path):
        self.identifier = identifier
        self.registry_path = registry_path
        super().__init__(
            f'Command "{identifier}" not found in commands file. '
            f"Only commands listed in {registry_path} can be executed."
        )


class AmbiguousCommand(CommandError):
    """Raised when an identifier matches more than one registered command."""

    def __init__(self, identifier: str, candidates: Sequence[str]):
        self.identifier = identifier
        self.candidates = list(candidates)
        listed = "\n".join(f"  - {c}" for c in self.candidates)
        super().__init__(
            f'Command "{identifier}" matches {len(self.candidates)} registered commands:\n'
            f"{listed}\n"
            f"Use a more specific identifier."
        )


class CommandFailed(CommandError):
    """Raised when a command exits nonzero or cannot be started.

    `exit_code` is None when the process never ran (e.g. binary not found).
    """

    def __init__(
        self,
        command: str,
        exit_code: Optional[int],
        stdout: str = "",
        stderr: str = "",
        reason: Optional[str] = None,
    ):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.reason = reason
        if exit_code is None:
            message = f"Command failed: {command}: {reason}"
        else:
            message = (
                f"Command failed with exit code {exit_code}:\n"
                f"stdout: {stdout}\n"
                f"stderr: {stderr}"
            )
        super().__init__(message)


class CommandTimedOut(CommandError):
    """Raised when a command is killed after exceeding its deadline."""

    def __init__(self, command: str, timeout: float, stdout: str = "", stderr: str = ""):
        self.command = command
        self.timeout = timeout
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command timed out after {timeout:g} seconds: {command}")
