"""Project file tools as a PydanticAI toolset.

ProjectToolset exposes three tools:
- read_directory_tree: ignore-aware tree of a directory
- read_file: file contents
- write_file: confined write beneath the project root

Every tool returns text, including on failure, so the agent can reason over
errors instead of aborting the run.
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

from ..config import CodaConfig
from ..confinement import is_within, normalize, write_file
from ..files import read_file
from ..ignore import DEFAULT_IGNORE_FILE
from ..tree import render_tree
from .dispatch import run_logged


class ReadDirectoryTreeArgs(BaseModel):
    """Arguments for read_directory_tree."""

    path: str = Field(description="Directory whose hierarchy should be shown")


class ReadFileArgs(BaseModel):
    """Arguments for read_file."""

    path: str = Field(description="Path to the file to read")


class WriteFileArgs(BaseModel):
    """Arguments for write_file."""

    path: str = Field(description="Path to the file to write, inside the project")
    content: str = Field(description="Full content to write to the file")


_READ_TOOLS = ("read_directory_tree", "read_file")


class ProjectToolset(AbstractToolset[Any]):
    """Read and write project files from an agent.

    Writes are confined to `root`; reads are not. Relative paths resolve
    against `root`.

    Example:
        toolset = ProjectToolset(config={"root": "/path/to/project"})
        agent = Agent(..., toolsets=[toolset])
    """

    def __init__(
        self,
        config: dict,
        id: Optional[str] = None,
        max_retries: int = 1,
    ):
        """Initialize the project toolset.

        Args:
            config: Configuration dict. Supports:
                - root: Confinement root (default: current directory)
                - ignore_file: Ignore file name read by read_directory_tree
                - extra_ignore: Additional ignore patterns
                - read_approval: Whether reads require approval (default: False)
                - write_approval: Whether writes require approval (default: True)
            id: Optional toolset ID for durable execution
            max_retries: Maximum number of retries for tool calls (default: 1)
        """
        self._config = config
        self._root = normalize(config.get("root") or Path.cwd())
        self._ignore_file = config.get("ignore_file", DEFAULT_IGNORE_FILE)
        self._extra_ignore = list(config.get("extra_ignore", []))
        self._read_approval = config.get("read_approval", False)
        self._write_approval = config.get("write_approval", True)
        self._toolset_id = id
        self._max_retries = max_retries

    @classmethod
    def from_config(cls, config: CodaConfig, id: Optional[str] = None) -> "ProjectToolset":
        return cls(
            config={
                "root": str(config.sandbox.root),
                "ignore_file": config.sandbox.ignore_file,
                "extra_ignore": list(config.sandbox.extra_ignore),
                "read_approval": config.files.read_approval,
                "write_approval": config.files.write_approval,
            },
            id=id,
        )

    @property
    def id(self) -> str | None:
        """Unique identifier for this toolset."""
        return self._toolset_id

    @property
    def config(self) -> dict:
        """Return the toolset configuration."""
        return self._config

    @property
    def root(self) -> Path:
        """Confinement root for writes."""
        return self._root

    def needs_approval(
        self,
        name: str,
        tool_args: dict[str, Any],
        ctx: Any,
        config: ApprovalConfig | None = None,
    ) -> ApprovalResult:
        """Check if the tool call requires approval.

        Writes that would escape the root are blocked here already, so the
        user is never asked to approve something the guard will refuse.
        """
        base = needs_approval_from_config(name, config)
        if base.is_blocked:
            return base
        if base.is_pre_approved:
            return base

        if name in _READ_TOOLS:
            if self._read_approval:
                return ApprovalResult.needs_approval()
            return ApprovalResult.pre_approved()

        if name == "write_file":
            target = normalize(tool_args.get("path", ""), base=self._root)
            if not is_within(target, self._root):
                return ApprovalResult.blocked(
                    f"Cannot write outside configured directory {self._root}"
                )
            if self._write_approval:
                return ApprovalResult.needs_approval()
            return ApprovalResult.pre_approved()

        # Unknown tool - require approval
        return ApprovalResult.needs_approval()

    def get_approval_description(
        self, name: str, tool_args: dict[str, Any], ctx: Any
    ) -> str:
        """Return human-readable description for approval prompt."""
        path = tool_args.get("path", "")

        if name == "write_file":
            content = tool_args.get("content", "")
            return f"Write {len(content)} chars to {path}"
        elif name == "read_file":
            return f"Read from {path}"
        elif name == "read_directory_tree":
            return f"Show directory tree of {path}"

        return f"{name}({path})"

    def read_directory_tree(self, path: str) -> str:
        return render_tree(
            path,
            base=self._root,
            ignore_file=self._ignore_file,
            extra_ignore=self._extra_ignore,
        )

    def read_file(self, path: str) -> str:
        return read_file(path, root=self._root)

    def write_file(self, path: str, content: str) -> str:
        return write_file(path, content, self._root)

    def _tool(self, name: str, description: str, schema: type[BaseModel]) -> ToolsetTool[Any]:
        return ToolsetTool(
            toolset=self,
            tool_def=ToolDefinition(
                name=name,
                description=description,
                parameters_json_schema=schema.model_json_schema(),
            ),
            max_retries=self._max_retries,
            args_validator=cast(SchemaValidatorProt, TypeAdapter(dict[str, Any]).validator),
        )

    async def get_tools(self, ctx: Any) -> dict[str, ToolsetTool[Any]]:
        """Return the tools provided by this toolset."""
        return {
            "read_directory_tree": self._tool(
                "read_directory_tree",
                "Read the contents of a directory and show its hierarchy. "
                "Ignored files (.gitignore, VCS and dependency directories) are hidden.",
                ReadDirectoryTreeArgs,
            ),
            "read_file": self._tool(
                "read_file",
                "Read the contents of a file.",
                ReadFileArgs,
            ),
            "write_file": self._tool(
                "write_file",
                "Write the contents of a file inside the project directory. "
                "The parent directory must already exist.",
                WriteFileArgs,
            ),
        }

    async def call_tool(
        self,
        name: str,
        tool_args: dict[str, Any],
        ctx: Any,
        tool: ToolsetTool[Any],
    ) -> str:
        """Call a tool with the given arguments."""
        if name == "read_directory_tree":
            args = ReadDirectoryTreeArgs.model_validate(tool_args)
            return run_logged(name, tool_args, lambda: self.read_directory_tree(args.path))

        elif name == "read_file":
            read_args = ReadFileArgs.model_validate(tool_args)
            return run_logged(name, tool_args, lambda: self.read_file(read_args.path))

        elif name == "write_file":
            write_args = WriteFileArgs.model_validate(tool_args)
            return run_logged(
                name,
                {"path": write_args.path, "chars": len(write_args.content)},
                lambda: self.write_file(write_args.path, write_args.content),
            )

        else:
            raise ValueError(f"Unknown tool: {name}")
