"""Read access for the `read_file` tool.

Reads are not confined; only writes go through the confinement guard.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .confinement import normalize

logger = logging.getLogger(__name__)


def read_file(path: str, root: Optional[str | Path] = None) -> str:
    """Return a file's contents wrapped in a fenced block.

    Relative paths resolve against ``root`` when given. Errors come back as
    ``"Error reading file: <reason>"``.
    """
    target = normalize(path, base=root) if root is not None else Path(path)
    try:
        content = target.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to read %s: %s", path, e)
        return f"Error reading file: {e.strerror or e}"
    except UnicodeDecodeError:
        return f"Error reading file: {path} is not a UTF-8 text file"
    return f"File contents for {path}:\n\n```\n{content}\n```"
