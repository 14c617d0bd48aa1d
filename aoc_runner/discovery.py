"""
Finding solution files and checking directory trust.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional

SKIP_DIRS = {"__pycache__", "venv", "site-packages"}


def _skipped(path: Path, root: Path) -> bool:
    for part in path.relative_to(root).parts[:-1]:
        if part.startswith(".") or part in SKIP_DIRS:
            return True
    return False


def discover_solutions(root: Path | str) -> List[Path]:
    """All ``*.py`` files under ``root``, sorted, ignoring hidden and cache dirs."""
    root = Path(root)
    return sorted(p for p in root.rglob("*.py") if p.is_file() and not _skipped(p, root))


def find_trusted_root(cwd: Path | str, trusted_dirs: Iterable[Path]) -> Optional[Path]:
    """The trusted directory containing ``cwd``, if any."""
    cwd = Path(cwd).resolve()
    for trusted in trusted_dirs:
        trusted = Path(trusted).resolve()
        if cwd == trusted or trusted in cwd.parents:
            return trusted
    return None
