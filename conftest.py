"""
Pytest configuration file for the static file server project.
This file ensures that the staticserve package can be imported during tests
and provides a populated document root.
"""

import sys
from pathlib import Path

import pytest

# Add the project root directory to the Python path
project_root = Path(__file__).parent.absolute()
sys.path.insert(0, str(project_root))

INDEX_HTML = b"<html><body><h1>It works</h1></body></html>\n"
HELLO_TXT = b"hello, world\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256))
SUBDIR_INDEX = b"<html>subdir</html>\n"
PLAIN_A = b"just a file named a"


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with a handful of files of different types."""
    root = tmp_path / "htdocs"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "hello.txt").write_bytes(HELLO_TXT)
    (root / "image.png").write_bytes(PNG_BYTES)
    (root / "a").write_bytes(PLAIN_A)
    (root / "subdir").mkdir()
    (root / "subdir" / "index.html").write_bytes(SUBDIR_INDEX)
    (root / "empty").mkdir()
    # Sits next to the root, reachable only by escaping it
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root
