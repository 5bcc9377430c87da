"""Execution of approved commands.

Commands are split on whitespace and every argument is single-quoted before
being handed to a POSIX shell, so builtins such as `exit` work but there is
no globbing, variable expansion, assignment, reserved word or metacharacter
handling. A program that cannot be found surfaces as exit code 127. Only
commands present in the project's registry can be resolved and run.
"""
from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import List, Optional

from .registry import (
    DEFAULT_REGISTRY_DIR,
    DEFAULT_REGISTRY_FILE,
    load_commands,
    registry_path,
    resolve_command,
)
from .types import CommandFailed, CommandTimedOut

logger = logging.getLogger(__name__)

# Default deadline in seconds
DEFAULT_TIMEOUT = 120.0

SHELL = "/bin/sh"


def split_command(command: str) -> List[str]:
    """Split a command on whitespace into an argument vector."""
    return command.split()


def _quote(arg: str) -> str:
    # Always single-quoted: the shell sees literal words, never assignments
    # or reserved words.
    return "'" + arg.replace("'", "'\\''") + "'"


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def execute_command(
    command: str,
    working_dir: Optional[Path] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> str:
    """Run ``command`` and return its stdout followed by its stderr.

    Args:
        command: Registered command string
        working_dir: Working directory for the child (defaults to cwd)
        timeout: Deadline in seconds, or None for no deadline

    Raises:
        CommandFailed: If the command exits nonzero or cannot be started
        CommandTimedOut: If the deadline expires; the child is killed
    """
    args = split_command(command)
    if not args:
        raise CommandFailed(command, None, reason="Empty command")

    logger.info("Executing approved command: %s", args)

    try:
        proc = subprocess.Popen(
            [SHELL, "-c", " ".join(_quote(arg) for arg in args)],
            cwd=working_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise CommandFailed(command, None, reason=e.strerror or str(e))

    with proc:
        try:
            out, err = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_process_group(proc)
            out, err = proc.communicate()
            logger.warning("Command timed out after %s seconds: %s", timeout, command)
            raise CommandTimedOut(command, timeout or 0, stdout=_decode(out), stderr=_decode(err))

    stdout = _decode(out)
    stderr = _decode(err)
    if proc.returncode != 0:
        logger.info("Command exited with %d: %s", proc.returncode, command)
        raise CommandFailed(command, proc.returncode, stdout=stdout, stderr=stderr)
    return stdout + stderr


def _kill_process_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_registered_command(
    project_root: Path | str,
    identifier: str,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    registry_dir: str = DEFAULT_REGISTRY_DIR,
    registry_file: str = DEFAULT_REGISTRY_FILE,
) -> str:
    """Resolve ``identifier`` against the project's registry and run it.

    The registry is re-read on every call. The command runs with the
    project root as its working directory.

    Raises:
        RegistryNotFound: If the registry file does not exist
        CommandNotFound: If no approved command matches
        AmbiguousCommand: If more than one approved command matches
        CommandFailed: If the command exits nonzero or cannot be started
        CommandTimedOut: If the deadline expires
    """
    path = registry_path(project_root, registry_dir, registry_file)
    command = resolve_command(load_commands(path), identifier, registry=path)
    working_dir = Path(project_root)
    return execute_command(
        command,
        working_dir=working_dir if working_dir.is_dir() else None,
        timeout=timeout,
    )
