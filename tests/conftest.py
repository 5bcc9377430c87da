"""Shared test fixtures for the coda-tools test suite."""
import textwrap

import pytest

REGISTRY_TEXT = textwrap.dedent(
    """\
    # COMMANDS

    ## 1. Echo Test
    ** Date Added: 2024-03-20 **
    ** Category: Test **
    > Command: `echo Hello, World!`
    > Description: A simple echo command for testing
    > Usage: Used in tests
    > Example: echo Hello, World!

    ## 2. Failing Command
    ** Date Added: 2024-03-20 **
    ** Category: Test **
    > Command: `exit 1`
    > Description: A command that always fails
    > Usage: Used in tests
    > Example: exit 1
    """
)


@pytest.fixture
def registry_text():
    return REGISTRY_TEXT


@pytest.fixture
def project(tmp_path):
    """A project directory with a `.coda/commands.md` registry."""
    coda_dir = tmp_path / ".coda"
    coda_dir.mkdir()
    (coda_dir / "commands.md").write_text(REGISTRY_TEXT, encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_tree(tmp_path):
    """Directory with nested/deep subdirectories and a few files."""
    root = tmp_path / "tree"
    deep = root / "nested" / "deep"
    deep.mkdir(parents=True)
    (root / "file1.txt").write_text("test content")
    (root / "file2.js").write_text("console.log('test')")
    (root / "nested" / "nested-file.txt").write_text("nested content")
    (deep / "deep-file.txt").write_text("deep content")
    return root
