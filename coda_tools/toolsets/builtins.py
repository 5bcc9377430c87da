"""Toolset instances built from a project's configuration."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic_ai.toolsets import AbstractToolset

from ..config import CodaConfig, load_config
from .commands import CommandToolset
from .project import ProjectToolset


def build_toolsets(
    base_dir: Path,
    config: Optional[CodaConfig] = None,
) -> dict[str, AbstractToolset[Any]]:
    """Return the project and command toolsets keyed by registry name.

    Config is read from ``base_dir`` unless given explicitly, so each agent
    receives its own toolsets rather than sharing process-wide state.
    """
    cfg = config if config is not None else load_config(base_dir)
    return {
        "project": ProjectToolset.from_config(cfg, id="project"),
        "commands": CommandToolset.from_config(cfg, id="commands"),
    }
