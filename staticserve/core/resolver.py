"""
Maps request targets onto files under the document root.
"""

import os
import stat
from pathlib import Path
from typing import NamedTuple, Optional, Union

INDEX_FILE = "index.html"


class Resolution(NamedTuple):
    """Outcome of resolving a request target.

    ``stat`` is only set when the target was found.
    """
    path: Path
    found: bool
    stat: Optional[os.stat_result] = None


def resolve(doc_root: Union[str, Path], url: str) -> Resolution:
    """Resolve ``url`` against ``doc_root``.

    A target ending in ``/`` is served from its ``index.html``. The joined
    path is normalized and must stay inside the document root; anything
    that escapes it, cannot be stat'ed, or is a directory counts as not
    found.
    """
    if url.endswith("/"):
        url += INDEX_FILE

    root = os.path.normpath(os.path.abspath(doc_root))
    # Strip the leading slash so join cannot discard the root
    target = os.path.normpath(os.path.join(root, url.lstrip("/")))
    path = Path(target)

    if target != root and not target.startswith(root.rstrip(os.sep) + os.sep):
        return Resolution(path, False)

    try:
        st = os.stat(target)
    except (OSError, ValueError):
        return Resolution(path, False)

    if stat.S_ISDIR(st.st_mode):
        return Resolution(path, False)
    return Resolution(path, True, st)
