import os

import pytest

from deckhand.paths import resolve_path


@pytest.mark.parametrize("raw", ["", ".", "  ", None])
def test_empty_and_dot_resolve_to_cwd(raw):
    assert resolve_path(raw, "/work/project") == "/work/project"


def test_relative_path_joined_to_cwd():
    assert resolve_path("src/app.py", "/work/project") == "/work/project/src/app.py"


def test_absolute_path_unchanged():
    assert resolve_path("/etc/hosts", "/work/project") == "/etc/hosts"


def test_home_expansion(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")

    assert resolve_path("~/notes.txt", "/work/project") == os.path.join("/home/tester", "notes.txt")
    assert resolve_path("~", "/work/project") == "/home/tester"


def test_resolution_is_purely_syntactic(tmp_path):
    resolved = resolve_path("missing/dir/file.txt", str(tmp_path))

    assert resolved == os.path.join(str(tmp_path), "missing/dir/file.txt")
    assert not os.path.exists(resolved)
