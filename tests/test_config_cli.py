"""CLI tests for configuration commands."""

from pathlib import Path
from typing import Any

from click.testing import CliRunner
from conftest import env_with_home

from vaultlens.cli import cli
from vaultlens.config import ConfigManager


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".vaultlens" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "smart_dedup:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "smart_dedup.threshold", "--value", "75"], env=env
    )

    assert result.exit_code == 0
    assert "75" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    config = manager.load(include_env=False)
    assert config.smart_dedup.threshold == 75


def test_config_set_rejects_out_of_range_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "smart_dedup.threshold", "--value", "50"], env=env
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("mode: modified", "mode: indexed")

    monkeypatch.setattr("vaultlens.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.timeline.mode == "indexed"
