"""Shared fixtures for CLI tests."""

from argparse import Namespace

import pytest

from tests.conftest import BOARD_MD


@pytest.fixture
def board_file(tmp_path):
    """A board file with three lanes, an archive and a done list."""
    path = tmp_path / "Board.md"
    path.write_text(BOARD_MD)
    return path


def _args(board_file, **kwargs):
    """Namespace as the parser would build it, with no global settings file."""
    defaults = {
        "file": str(board_file),
        "settings": str(board_file.parent / "no-settings.yaml"),
        "json": False,
    }
    defaults.update(kwargs)
    return Namespace(**defaults)
