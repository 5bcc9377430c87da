import textwrap

import pytest

from coda_tools.commands import DEFAULT_TIMEOUT
from coda_tools.config import ConfigError, load_config


def test_load_config_defaults_when_missing(tmp_path):
    config = load_config(tmp_path)

    assert config.path is None
    assert config.sandbox.root == tmp_path.resolve()
    assert config.sandbox.ignore_file == ".gitignore"
    assert config.sandbox.extra_ignore == []
    assert config.commands.registry_dir == ".coda"
    assert config.commands.registry_file == "commands.md"
    assert config.commands.timeout == DEFAULT_TIMEOUT
    assert config.commands.approval_required is False
    assert config.files.write_approval is True
    assert config.files.read_approval is False


def test_load_config_reads_fields(tmp_path):
    (tmp_path / "project").mkdir()
    config_file = tmp_path / "coda.toml"
    config_file.write_text(
        textwrap.dedent(
            """
            [sandbox]
            root = "project"
            ignore_file = ".codaignore"
            extra_ignore = ["dist/", "*.log"]

            [commands]
            registry_dir = "ops"
            registry_file = "approved.md"
            timeout = 15
            approval_required = true

            [files]
            read_approval = true
            write_approval = false
            """
        ).strip()
    )

    config = load_config(tmp_path)

    assert config.path == config_file
    assert config.sandbox.root == (tmp_path / "project").resolve()
    assert config.sandbox.ignore_file == ".codaignore"
    assert config.sandbox.extra_ignore == ["dist/", "*.log"]
    assert config.commands.registry_dir == "ops"
    assert config.commands.registry_file == "approved.md"
    assert config.commands.timeout == 15.0
    assert config.commands.approval_required is True
    assert config.files.read_approval is True
    assert config.files.write_approval is False


def test_zero_timeout_disables_deadline(tmp_path):
    (tmp_path / "coda.toml").write_text("[commands]\ntimeout = 0\n")
    assert load_config(tmp_path).commands.timeout is None


def test_ignore_file_can_be_disabled(tmp_path):
    (tmp_path / "coda.toml").write_text("[sandbox]\nignore_file = false\n")
    assert load_config(tmp_path).sandbox.ignore_file is None


def test_partial_file_keeps_defaults(tmp_path):
    (tmp_path / "coda.toml").write_text("[files]\nwrite_approval = false\n")
    config = load_config(tmp_path)
    assert config.sandbox.root == tmp_path.resolve()
    assert config.commands.timeout == DEFAULT_TIMEOUT
    assert config.files.write_approval is False


def test_wrong_type_raises(tmp_path):
    (tmp_path / "coda.toml").write_text('[commands]\ntimeout = "soon"\n')
    with pytest.raises(ConfigError, match="timeout"):
        load_config(tmp_path)


def test_invalid_toml_raises(tmp_path):
    (tmp_path / "coda.toml").write_text("[sandbox\nroot = ")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_boolean_timeout_raises(tmp_path):
    (tmp_path / "coda.toml").write_text("[commands]\ntimeout = true\n")
    with pytest.raises(ConfigError, match="timeout has invalid type bool"):
        load_config(tmp_path)
