"""Configuration loading for coda-tools.

Reads an optional ``coda.toml`` from the working directory to set the
confinement root, ignore rules, command registry location, command deadline
and approval policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib

from .commands.execution import DEFAULT_TIMEOUT
from .commands.registry import DEFAULT_REGISTRY_DIR, DEFAULT_REGISTRY_FILE
from .ignore import DEFAULT_IGNORE_FILE


CONFIG_FILENAMES = ("coda.toml",)


class ConfigError(ValueError):
    """Raised when a config file is malformed."""
    pass


@dataclass
class SandboxSettings:
    root: Path = field(default_factory=Path.cwd)
    ignore_file: Optional[str] = DEFAULT_IGNORE_FILE
    extra_ignore: List[str] = field(default_factory=list)


@dataclass
class CommandSettings:
    registry_dir: str = DEFAULT_REGISTRY_DIR
    registry_file: str = DEFAULT_REGISTRY_FILE
    timeout: Optional[float] = DEFAULT_TIMEOUT
    approval_required: bool = False


@dataclass
class FileSettings:
    read_approval: bool = False
    write_approval: bool = True


@dataclass
class CodaConfig:
    sandbox: SandboxSettings = field(default_factory=SandboxSettings)
    commands: CommandSettings = field(default_factory=CommandSettings)
    files: FileSettings = field(default_factory=FileSettings)
    path: Optional[Path] = None


def load_config(base_dir: Path) -> CodaConfig:
    """Load config from the first matching file in ``base_dir``.

    Without a config file the confinement root is ``base_dir``.
    """

    for filename in CONFIG_FILENAMES:
        candidate = base_dir / filename
        if not candidate.exists():
            continue
        with candidate.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {candidate}: {e}") from e
        return CodaConfig(
            sandbox=_parse_sandbox(data.get("sandbox", {}), base_dir),
            commands=_parse_commands(data.get("commands", {})),
            files=_parse_files(data.get("files", {})),
            path=candidate,
        )

    return CodaConfig(sandbox=SandboxSettings(root=base_dir.resolve()))


def _expect(raw: dict, key: str, kind: type | tuple[type, ...], section: str) -> Any:
    value = raw.get(key)
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass; only accept it where asked for
    if value is not None and (
        not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds)
    ):
        raise ConfigError(f"[{section}] {key} has invalid type {type(value).__name__}")
    return value


def _parse_sandbox(raw: dict, base_dir: Path) -> SandboxSettings:
    root = _expect(raw, "root", str, "sandbox") or "."
    ignore_file = raw.get("ignore_file", DEFAULT_IGNORE_FILE)
    if ignore_file is not None and not isinstance(ignore_file, (str, bool)):
        raise ConfigError("[sandbox] ignore_file must be a string or false")
    if ignore_file is True:
        ignore_file = DEFAULT_IGNORE_FILE
    extra = _expect(raw, "extra_ignore", list, "sandbox") or []
    return SandboxSettings(
        root=(base_dir / Path(root).expanduser()).resolve(),
        ignore_file=ignore_file or None,
        extra_ignore=[str(p) for p in extra],
    )


def _parse_commands(raw: dict) -> CommandSettings:
    timeout = _expect(raw, "timeout", (int, float), "commands")
    approval = _expect(raw, "approval_required", bool, "commands")
    return CommandSettings(
        registry_dir=_expect(raw, "registry_dir", str, "commands") or DEFAULT_REGISTRY_DIR,
        registry_file=_expect(raw, "registry_file", str, "commands") or DEFAULT_REGISTRY_FILE,
        timeout=DEFAULT_TIMEOUT if timeout is None else (float(timeout) or None),
        approval_required=bool(approval) if approval is not None else False,
    )


def _parse_files(raw: dict) -> FileSettings:
    read_approval = _expect(raw, "read_approval", bool, "files")
    write_approval = _expect(raw, "write_approval", bool, "files")
    return FileSettings(
        read_approval=False if read_approval is None else read_approval,
        write_approval=True if write_approval is None else write_approval,
    )
