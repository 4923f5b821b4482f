"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from contentgraph.config import Settings, load_settings


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("CONTENTGRAPH_ENV_FILE", "CONTENTGRAPH_CHAPTER_HEADING_LEVEL", "CONTENTGRAPH_MAX_CONCURRENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    """It should fall back to defaults without env or .env file."""

    settings = load_settings()

    assert settings.chapter_heading_level == 1
    assert settings.default_effort == 1.0
    assert settings.record_events is False


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    """It should read CONTENTGRAPH_-prefixed variables."""

    monkeypatch.setenv("CONTENTGRAPH_CHAPTER_HEADING_LEVEL", "2")

    assert load_settings().chapter_heading_level == 2


def test_dotenv_in_working_directory(tmp_path: Path) -> None:
    """It should pick up a .env file in the current directory."""

    (tmp_path / ".env").write_text("CONTENTGRAPH_MAX_CONCURRENT=8\n", encoding="utf-8")

    assert load_settings().max_concurrent == 8


def test_explicit_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """It should prefer the file named by CONTENTGRAPH_ENV_FILE."""

    (tmp_path / ".env").write_text("CONTENTGRAPH_MAX_CONCURRENT=8\n", encoding="utf-8")
    other = tmp_path / "ci.env"
    other.write_text("CONTENTGRAPH_MAX_CONCURRENT=2\n", encoding="utf-8")
    monkeypatch.setenv("CONTENTGRAPH_ENV_FILE", str(other))

    assert load_settings().max_concurrent == 2


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """It should apply explicit overrides on top of env and skip unset ones."""

    monkeypatch.setenv("CONTENTGRAPH_CHAPTER_HEADING_LEVEL", "2")

    assert load_settings(chapter_heading_level=3).chapter_heading_level == 3
    assert load_settings(chapter_heading_level=None).chapter_heading_level == 2


def test_out_of_range_chapter_level_is_rejected() -> None:
    """It should validate ranges."""

    with pytest.raises(ValidationError):
        Settings(chapter_heading_level=9)
    with pytest.raises(ValidationError):
        load_settings(chapter_heading_level=0)
