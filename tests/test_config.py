"""
Unit Tests for config persistence.
"""

from datetime import datetime, timezone
from pathlib import Path

import orjson

from aoc_runner.classifier import Direction, SubmissionRecord, WrongAnswer
from aoc_runner.core.config import Config, config_path, load_config, save_config
from aoc_runner.core.env import load_env, session_token
from aoc_runner.progress import Active, PuzzlePart, Solved

NOW = datetime(2023, 12, 1, 5, 0, tzinfo=timezone.utc)


class TestConfig:
    """Tests for load_config / save_config."""

    def test_load_when_missing_then_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nope.json")
        assert config.token is None
        assert config.trusted_dirs == []
        assert config.inputs == {}
        assert len(config.progress) == 0

    def test_save_then_load_keeps_everything(self, tmp_path: Path):
        path = tmp_path / "sub" / "config.json"
        config = Config(token="abc123", trusted_dirs=[tmp_path])
        config.add_inputs({(2023, 1): "1\n2\n3\n"})
        config.progress.record(
            PuzzlePart(2023, 1, 1),
            SubmissionRecord(NOW, "100", WrongAnswer(Direction.TOO_HIGH)),
        )
        config.progress.set_solution(PuzzlePart(2023, 1, 2), "7", now=NOW)
        save_config(config, path)

        loaded = load_config(path)
        assert loaded.token == "abc123"
        assert loaded.trusted_dirs == [tmp_path]
        assert loaded.inputs == {(2023, 1): "1\n2\n3\n"}
        assert loaded.progress.state(PuzzlePart(2023, 1, 1)) == Active(None, 100, frozenset({"100"}))
        assert loaded.progress.state(PuzzlePart(2023, 1, 2)) == Solved("7", NOW)
        assert len(loaded.progress.submissions(PuzzlePart(2023, 1, 1))) == 1

    def test_save_writes_nested_year_day_layout(self, tmp_path: Path):
        path = tmp_path / "config.json"
        config = Config()
        config.add_inputs({(2022, 25): "x"})
        save_config(config, path)
        data = orjson.loads(path.read_bytes())
        assert data["days"]["2022"]["25"]["input"] == "x"
        assert list(tmp_path.iterdir()) == [path]

    def test_add_inputs_never_overwrites(self):
        config = Config(inputs={(2023, 1): "old"})
        config.add_inputs({(2023, 1): "new", (2023, 2): "two"})
        assert config.inputs == {(2023, 1): "old", (2023, 2): "two"}

    def test_config_path_when_env_set_then_used(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("AOC_CONFIG_DIR", str(tmp_path))
        assert config_path() == tmp_path / "config.json"


class TestEnv:
    """Tests for .env loading and token lookup."""

    def test_load_env_when_dotenv_has_session_then_masked(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("AOC_SESSION", raising=False)
        monkeypatch.delenv("AOC_CONFIG_DIR", raising=False)
        monkeypatch.delenv("AOC_BASE_URL", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("AOC_SESSION=53616c7465645f5f\n")

        found = load_env(str(dotenv))

        assert found == {"AOC_SESSION": "5361…"}

    def test_load_env_when_already_set_then_not_overridden(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("AOC_SESSION", "from-shell")
        dotenv = tmp_path / ".env"
        dotenv.write_text("AOC_SESSION=from-file\n")

        load_env(str(dotenv))

        assert session_token() == "from-shell"

    def test_session_token_when_env_missing_then_stored(self, monkeypatch):
        monkeypatch.delenv("AOC_SESSION", raising=False)
        assert session_token("stored") == "stored"
        assert session_token() is None

    def test_session_token_when_env_set_then_wins(self, monkeypatch):
        monkeypatch.setenv("AOC_SESSION", "env")
        assert session_token("stored") == "env"
