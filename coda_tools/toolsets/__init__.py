"""Toolsets shipped with coda-tools.

Toolsets live in this package to support plugin-style loading by class path.
"""

from .builtins import build_toolsets
from .commands import CommandToolset
from .project import ProjectToolset

__all__ = [
    "CommandToolset",
    "ProjectToolset",
    "build_toolsets",
]
