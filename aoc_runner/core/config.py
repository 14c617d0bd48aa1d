"""
Persisted configuration and progress.

Everything lives in one JSON file:

    {
      "token": "...",
      "trusted_dirs": ["/home/me/aoc"],
      "days": {"2023": {"1": {"input": "...", "part1": {...}, "part2": {...}}}}
    }
"""

from __future__ import annotations
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import orjson
import typer

from ..progress import ProgressStore, PuzzlePart, part_from_dict, part_to_dict

APP_NAME = "aoc-runner"
CONFIG_FILE = "config.json"


def config_path() -> Path:
    """Location of the config file (AOC_CONFIG_DIR overrides the app dir)."""
    base = os.getenv("AOC_CONFIG_DIR") or typer.get_app_dir(APP_NAME)
    return Path(base) / CONFIG_FILE


@dataclass
class Config:
    token: Optional[str] = None
    trusted_dirs: List[Path] = field(default_factory=list)
    inputs: Dict[Tuple[int, int], str] = field(default_factory=dict)
    progress: ProgressStore = field(default_factory=ProgressStore)

    def add_inputs(self, new_inputs: Dict[Tuple[int, int], str]) -> None:
        for key, text in new_inputs.items():
            self.inputs.setdefault(key, text)

    def to_dict(self) -> Dict[str, Any]:
        days: Dict[str, Dict[str, Dict[str, Any]]] = {}

        def day_entry(year: int, day: int) -> Dict[str, Any]:
            return days.setdefault(str(year), {}).setdefault(str(day), {"input": None})

        for (year, day), text in self.inputs.items():
            day_entry(year, day)["input"] = text
        for key, progress in self.progress:
            day_entry(key.year, key.day)[f"part{key.part}"] = part_to_dict(progress)

        return {
            "token": self.token,
            "trusted_dirs": [str(p) for p in self.trusted_dirs],
            "days": days,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        inputs: Dict[Tuple[int, int], str] = {}
        parts = {}
        for year, days in data.get("days", {}).items():
            for day, entry in days.items():
                if entry.get("input") is not None:
                    inputs[(int(year), int(day))] = entry["input"]
                for part in (1, 2):
                    if f"part{part}" in entry:
                        key = PuzzlePart(int(year), int(day), part)
                        parts[key] = part_from_dict(entry[f"part{part}"])
        return cls(
            token=data.get("token"),
            trusted_dirs=[Path(p) for p in data.get("trusted_dirs", [])],
            inputs=inputs,
            progress=ProgressStore(parts),
        )


def load_config(path: Path | None = None) -> Config:
    """Load the config file, or a fresh config if there is none yet."""
    path = path or config_path()
    try:
        with open(path, "rb") as f:
            return Config.from_dict(orjson.loads(f.read()))
    except FileNotFoundError:
        return Config()


def save_config(config: Config, path: Path | None = None) -> None:
    """Write the config file atomically."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = orjson.dumps(config.to_dict(), option=orjson.OPT_INDENT_2)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".json")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
