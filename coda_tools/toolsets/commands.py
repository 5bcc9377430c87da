"""Approved-command execution as a PydanticAI toolset.

CommandToolset exposes:
- run_command: resolve an identifier against the project's registry and run it
- list_commands: describe the registered commands

Allow-list model:
- Only commands recorded in the registry file can run
- Recording a command is the human approval, so `run_command` is
  pre-approved unless `approval_required` is set

Unlike the project file tools, `run_command` raises typed errors
(RegistryNotFound, CommandNotFound, AmbiguousCommand, CommandFailed,
CommandTimedOut) so callers can branch on the outcome.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, cast

from pydantic import BaseModel, Field, TypeAdapter
from pydantic_ai.tools import ToolDefinition
from pydantic_ai.toolsets import AbstractToolset, ToolsetTool
from pydantic_ai.toolsets.abstract import SchemaValidatorProt
from pydantic_ai_blocking_approval import (
    ApprovalConfig,
    ApprovalResult,
    needs_approval_from_config,
)

from ..commands import (
    DEFAULT_REGISTRY_DIR,
    DEFAULT_REGISTRY_FILE,
    DEFAULT_TIMEOUT,
    list_commands,
    registry_path,
    run_registered_command,
)
from ..config import CodaConfig
from .dispatch import run_logged


class RunCommandArgs(BaseModel):
    """Arguments for run_command."""

    command_identifier: str = Field(
        description="Part of an approved command that identifies it uniquely"
    )
    project_path: Optional[str] = Field(
        default=None,
        description="Project directory holding the commands file (default: configured project)",
    )


class ListCommandsArgs(BaseModel):
    """Arguments for list_commands."""

    project_path: Optional[str] = Field(
        default=None,
        description="Project directory holding the commands file (default: configured project)",
    )


class CommandToolset(AbstractToolset[Any]):
    """Run commands a human has previously approved for the project."""

    def __init__(
        self,
        config: dict,
        id: Optional[str] = None,
        max_retries: int = 1,
    ):
        """Initialize the command toolset.

        Args:
            config: Configuration dict. Supports:
                - project_root: Default project directory (default: current directory)
                - registry_dir / registry_file: Location of the commands file
                - timeout: Deadline in seconds, None for no deadline
                - approval_required: Ask before running approved commands (default: False)
            id: Optional toolset ID for durable execution.
            max_retries: Maximum retries for tool calls.
        """
        self._config = config
        self._project_root = Path(config.get("project_root") or Path.cwd())
        self._registry_dir = config.get("registry_dir", DEFAULT_REGISTRY_DIR)
        self._registry_file = config.get("registry_file", DEFAULT_REGISTRY_FILE)
        self._timeout = config.get("timeout", DEFAULT_TIMEOUT)
        self._approval_required = config.get("approval_required", False)
        self._id = id
        self._max_retries = max_retries

    @classmethod
    def from_config(cls, config: CodaConfig, id: Optional[str] = None) -> "CommandToolset":
        return cls(
            config={
                "project_root": str(config.sandbox.root),
                "registry_dir": config.commands.registry_dir,
                "registry_file": config.commands.registry_file,
                "timeout": config.commands.timeout,
                "approval_required": config.commands.approval_required,
            },
            id=id,
        )

    @property
    def id(self) -> str | None:
        """Return toolset ID for durable execution."""
        return self._id

    @property
    def config(self) -> dict:
        """Return the toolset configuration."""
        return self._config

    def _project(self, project_path: Optional[str]) -> Path:
        if not project_path:
            return self._project_root
        path = Path(project_path)
        return path if path.is_absolute() else self._project_root / path

    def needs_approval(
        self,
        name: str,
        tool_args: dict,
        ctx: Any,
        config: ApprovalConfig | None = None,
    ) -> ApprovalResult:
        """Determine if a command tool call needs approval."""
        base = needs_approval_from_config(name, config)
        if base.is_blocked:
            return base
        if base.is_pre_approved:
            return base

        if name == "list_commands":
            return ApprovalResult.pre_approved()

        if name == "run_command":
            if not tool_args.get("command_identifier"):
                return ApprovalResult.blocked("Empty command identifier")
            if self._approval_required:
                return ApprovalResult.needs_approval()
            return ApprovalResult.pre_approved()

        # Unknown tool - require approval
        return ApprovalResult.needs_approval()

    def get_approval_description(self, name: str, tool_args: dict, ctx: Any) -> str:
        """Return human-readable description for approval prompt."""
        if name == "run_command":
            identifier = tool_args.get("command_identifier", "")
            return f"Run approved command matching: {identifier}"
        if name == "list_commands":
            return "List approved commands"
        return f"{name}({tool_args})"

    def run_command(self, command_identifier: str, project_path: Optional[str] = None) -> str:
        return run_registered_command(
            self._project(project_path),
            command_identifier,
            timeout=self._timeout,
            registry_dir=self._registry_dir,
            registry_file=self._registry_file,
        )

    def list_commands(self, project_path: Optional[str] = None) -> str:
        path = registry_path(self._project(project_path), self._registry_dir, self._registry_file)
        return list_commands(path)

    async def get_tools(self, ctx: Any) -> dict[str, ToolsetTool]:
        """Return the command tool definitions."""
        validator = cast(SchemaValidatorProt, TypeAdapter(dict[str, Any]).validator)
        return {
            "run_command": ToolsetTool(
                toolset=self,
                tool_def=ToolDefinition(
                    name="run_command",
                    description=(
                        "Run a command that has been previously stored in the commands file. "
                        "The identifier must match exactly one approved command."
                    ),
                    parameters_json_schema=RunCommandArgs.model_json_schema(),
                ),
                max_retries=self._max_retries,
                args_validator=validator,
            ),
            "list_commands": ToolsetTool(
                toolset=self,
                tool_def=ToolDefinition(
                    name="list_commands",
                    description="List the approved commands in the commands file.",
                    parameters_json_schema=ListCommandsArgs.model_json_schema(),
                ),
                max_retries=self._max_retries,
                args_validator=validator,
            ),
        }

    async def call_tool(
        self,
        name: str,
        tool_args: dict[str, Any],
        ctx: Any,
        tool: ToolsetTool[Any],
    ) -> str:
        """Run or list approved commands.

        Raises:
            CommandError: run_command failures propagate unchanged
        """
        if name == "run_command":
            args = RunCommandArgs.model_validate(tool_args)
            return run_logged(
                name,
                tool_args,
                lambda: self.run_command(args.command_identifier, args.project_path),
            )

        if name == "list_commands":
            list_args = ListCommandsArgs.model_validate(tool_args)
            return run_logged(name, tool_args, lambda: self.list_commands(list_args.project_path))

        raise ValueError(f"Unknown tool: {name}")
