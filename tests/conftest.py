from __future__ import annotations

import sys
from pathlib import Path


def _ensure_paths_on_syspath() -> None:
    # Some pytest import modes do not put the repo root (for `import yolo_detector`)
    # or this directory (for `import _helpers`) on sys.path.
    tests_dir = Path(__file__).resolve().parent
    for path in (tests_dir.parent, tests_dir):
        path_str = str(path)
        if path_str not in sys.path:
            sys.path.insert(0, path_str)


_ensure_paths_on_syspath()
