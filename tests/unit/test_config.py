from pathlib import Path

import pytest

from automator.core.config import AutomatorConfig


def test_missing_config_file_returns_defaults(tmp_path):
    cfg = AutomatorConfig.from_yaml(tmp_path / "nope.yaml")

    assert cfg.project.automation_dir == "playwright-automation"
    assert cfg.prompt.terminator == "END"
    assert cfg.env_path(Path("/repo")) == Path("/repo/playwright-automation/.env")


def test_yaml_values_override_defaults(tmp_path):
    cfg_path = tmp_path / "automator.yaml"
    cfg_path.write_text(
        "project:\n  automation_dir: e2e\nprompt:\n  terminator: DONE\nlogging:\n  level: debug\n",
        encoding="utf-8",
    )

    cfg = AutomatorConfig.from_yaml(cfg_path)

    assert cfg.project.automation_dir == "e2e"
    assert cfg.project.env_file == ".env"
    assert cfg.prompt.terminator == "DONE"
    assert cfg.logging.level == "DEBUG"


def test_empty_config_file_returns_defaults(tmp_path):
    cfg_path = tmp_path / "automator.yaml"
    cfg_path.write_text("", encoding="utf-8")

    assert AutomatorConfig.from_yaml(cfg_path) == AutomatorConfig()


def test_invalid_section_is_dropped_with_warning(tmp_path):
    cfg_path = tmp_path / "automator.yaml"
    cfg_path.write_text(
        "prompt:\n  terminator: ''\nterminal:\n  shell: zsh\n",
        encoding="utf-8",
    )

    with pytest.warns(UserWarning, match="Config validation failed"):
        cfg = AutomatorConfig.from_yaml(cfg_path)

    assert cfg.prompt.terminator == "END"
    assert cfg.terminal.shell == "zsh"


def test_unparseable_yaml_falls_back_to_defaults(tmp_path):
    cfg_path = tmp_path / "automator.yaml"
    cfg_path.write_text("project: [unclosed\n", encoding="utf-8")

    with pytest.warns(UserWarning, match="Failed to load config file"):
        cfg = AutomatorConfig.from_yaml(cfg_path)

    assert cfg == AutomatorConfig()


def test_shipped_config_matches_defaults():
    shipped = Path(__file__).resolve().parents[2] / "configs" / "automator.yaml"

    assert AutomatorConfig.from_yaml(shipped) == AutomatorConfig()
