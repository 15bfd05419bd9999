from pathlib import Path

import pytest
from pydantic import ValidationError

import studio_console.config as config_module
from studio_console.config import Config, get_config, set_config


def test_load_prefers_local_config_yaml(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)

    home_cfg = tmp_path / "home_config.yaml"
    home_cfg.write_text("console:\n  width: 32\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", home_cfg)

    local_cfg = tmp_path / "config.yaml"
    local_cfg.write_text(
        (
            "console:\n"
            "  width: 48\n"
            "  prompt: \"$\"\n"
            "storage:\n"
            "  public_dir: shared\n"
        ),
        encoding="utf-8",
    )

    cfg = Config.load()

    assert cfg.console.width == 48
    assert cfg.console.prompt == "$"
    assert cfg.console.height == 17
    assert cfg.storage.public_dir == "shared"


def test_load_falls_back_to_default_path_when_no_local(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)

    home_cfg = tmp_path / "home_config.yaml"
    home_cfg.write_text("net:\n  base_url: https://carts.example.test\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", home_cfg)

    cfg = Config.load()

    assert cfg.net.base_url == "https://carts.example.test"


def test_load_without_any_file_gives_defaults(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")

    cfg = Config.load()

    assert cfg.console.width == 40
    assert cfg.colors.error == 2
    assert cfg.storage.config_cart == "config.tic"
    assert cfg.net.check_new_version is False


def test_nested_env_vars_are_read(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    monkeypatch.setenv("STUDIO_CONSOLE__PROMPT", "#")
    monkeypatch.setenv("STUDIO_LOGGING__LEVEL", "DEBUG")

    cfg = Config.load()

    assert cfg.console.prompt == "#"
    assert cfg.logging.level == "DEBUG"


def test_dotenv_in_working_directory_is_read(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    (tmp_path / ".env").write_text("STUDIO_NET__TIMEOUT=5\n", encoding="utf-8")

    cfg = Config.load()

    assert cfg.net.timeout == 5.0


def test_from_yaml_explicit_path(tmp_path: Path):
    path = tmp_path / "custom.yaml"
    path.write_text("colors:\n  front: 4\n", encoding="utf-8")

    assert Config.from_yaml(path).colors.front == 4


def test_save_then_load_round_trip(tmp_path: Path):
    cfg = Config()
    cfg.console.screens = 8
    cfg.storage.path = str(tmp_path / "carts")
    path = tmp_path / "out" / "config.yaml"

    cfg.save(path)
    loaded = Config.from_yaml(path)

    assert loaded.console.screens == 8
    assert loaded.storage.path == str(tmp_path / "carts")


def test_console_geometry_is_validated():
    with pytest.raises(ValidationError):
        Config(console={"width": 2})


def test_set_config_replaces_the_global():
    previous = get_config()
    replacement = Config(console={"prompt": "%"})
    try:
        set_config(replacement)
        assert get_config() is replacement
    finally:
        set_config(previous)
