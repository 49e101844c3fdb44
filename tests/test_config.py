from __future__ import annotations

import json
from pathlib import Path

import pytest

from vstlib.config import (
    DEFAULT_API_BASE_URL,
    Config,
    ConfigError,
    load_config,
    resolve_config_path,
)


def test_defaults_when_no_file_exists():
    assert resolve_config_path() is None
    cfg = load_config()
    assert cfg == Config()
    assert cfg.api_base_url == DEFAULT_API_BASE_URL
    assert cfg.root_path == "published"
    assert cfg.column_count == 6


def test_xdg_config_home_is_discovered(tmp_path):
    cfg_path = tmp_path / "xdg-home" / "vstctl" / "config.yaml"
    cfg_path.parent.mkdir(parents=True)
    cfg_path.write_text("column_count: 3\n")

    assert resolve_config_path() == cfg_path
    assert load_config().column_count == 3


def test_env_expansion_and_trailing_slash(tmp_path, monkeypatch):
    monkeypatch.setenv("VST_HOST", "node.example")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("api_base_url: https://${VST_HOST}/agoric/vstorage/\ntimeout: 2.5\nconnect_timeout: 1\n")

    cfg = load_config(cfg_path)
    assert cfg.api_base_url == "https://node.example/agoric/vstorage"
    assert cfg.timeout == 2.5
    assert cfg.connect_timeout == 1.0
    assert cfg.source_path == cfg_path


@pytest.mark.parametrize(
    "body",
    [
        "root_path: published..a\n",
        "root_path: .published\n",
        "column_count: 0\n",
        "column_count: many\n",
        "timeout: -1\n",
        "connect_timeout: 0\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_values_raise(tmp_path, body):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(body)
    with pytest.raises(ConfigError):
        load_config(cfg_path)


def test_missing_override_path_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("VSTCTL_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(ConfigError):
        resolve_config_path()


def test_with_overrides_validates():
    cfg = Config().with_overrides(root_path="published.wallet")
    assert cfg.root_path == "published.wallet"
    with pytest.raises(ConfigError):
        Config().with_overrides(root_path="published.")


def test_to_json_renders_paths():
    cfg = Config(source_path=Path("/etc/xdg/vstctl/config.yaml"))
    data = json.loads(cfg.to_json())
    assert data["source_path"] == "/etc/xdg/vstctl/config.yaml"
