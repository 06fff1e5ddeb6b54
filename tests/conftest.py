from pathlib import Path

import pytest


def write(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small project with text files, a binary and an ignored folder."""
    ws = tmp_path / "ws"
    write(ws / "src" / "a.py", "print('a')\n")
    write(ws / "src" / "B.py", "print('b')\n")
    write(ws / "src" / "logo.png", b"\x89PNG\x00\x01")
    write(ws / "docs" / "readme.md", "# Readme\n")
    write(ws / "node_modules" / "pkg" / "index.js", "module.exports = 1;\n")
    write(ws / ".gitignore", "# deps\nnode_modules\n\n")
    return ws
