"""Write confinement for the `write_file` tool.

A write is authorized only if its target, once made absolute and normalized,
is the confinement root or lies beneath it. Symlinks are not followed: the
check is a string-prefix comparison on normalized absolute paths, not an
OS-level sandbox.
"""
from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def _creation_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# Mode for newly created files, as open() would give them under the umask
NEW_FILE_MODE = _creation_mode()


class WriteRefused(ValueError):
    """Raised when a write target fails confinement or precondition checks."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


def normalize(path: str | Path, base: str | Path | None = None) -> Path:
    """Return ``path`` as an absolute path with ``.`` and ``..`` collapsed.

    Relative paths are joined onto ``base`` (or the working directory).
    """
    raw = os.fspath(path)
    if base is not None and not os.path.isabs(raw):
        raw = os.path.join(os.fspath(base), raw)
    return Path(os.path.normpath(os.path.abspath(raw)))


def is_within(target: Path, root: Path) -> bool:
    target_str = str(target)
    root_str = str(root)
    if target_str == root_str:
        return True
    prefix = root_str if root_str.endswith(os.sep) else root_str + os.sep
    return target_str.startswith(prefix)


def authorize_write(target: str | Path, root: str | Path) -> Path:
    """Validate a write target against the confinement root.

    Args:
        target: Requested write path (relative paths resolve against ``root``)
        root: Confinement root

    Returns:
        The normalized absolute target path

    Raises:
        WriteRefused: If the target escapes ``root`` or its parent directory
            does not exist
    """
    root_path = normalize(root)
    target_path = normalize(target, base=root_path)

    if not is_within(target_path, root_path):
        raise WriteRefused(
            str(target),
            f"Cannot write outside configured directory {root_path}",
        )

    parent = target_path.parent
    if not parent.is_dir():
        raise WriteRefused(str(target), f"Directory does not exist: {parent}")

    return target_path


def _atomic_write(target: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        mode = stat.S_IMODE(target.stat().st_mode) if target.is_file() else NEW_FILE_MODE
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def write_file(path: str, content: str, root: str | Path) -> str:
    """Write ``content`` to ``path`` if it is confined to ``root``.

    Returns a success or ``"Error writing file: ..."`` message; never raises
    for refusals or I/O errors.
    """
    try:
        target = authorize_write(path, root)
        _atomic_write(target, content)
    except WriteRefused as e:
        logger.warning("Refused write to %s: %s", path, e.reason)
        return f"Error writing file: {e.reason}"
    except OSError as e:
        logger.warning("Failed to write %s: %s", path, e)
        return f"Error writing file: {e.strerror or e}"

    logger.debug("Wrote %d characters to %s", len(content), target)
    return f"File written successfully to {path}"
