from __future__ import annotations

import pytest

from wsl_installer.config import DEFAULT_FEATURES, InstallerConfig, load_config
from wsl_installer.errors import ConfigError


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg.required_features == DEFAULT_FEATURES
    assert cfg.distribution == "Ubuntu"
    assert cfg.poll_interval_s == 5.0
    assert cfg.max_wait_s == 300.0
    assert cfg.namespace == "WslInstaller"
    assert cfg.update_kernel is True
    assert cfg.download_retries == 3


def test_missing_file_means_defaults(tmp_path):
    assert load_config(str(tmp_path / "nope.yaml")).raw == {}


def test_yaml_overrides(tmp_path):
    p = tmp_path / "installer.yaml"
    p.write_text(
        "namespace: Acme\n"
        "distribution:\n  name: Debian\n  max_wait_s: 60\n"
        "app:\n  package: eslint\n  command: eslint\n  node_major: 22\n"
        "runtime:\n  update_kernel: false\n"
        "download:\n  retries: 0\n",
        encoding="utf-8",
    )
    cfg = load_config(str(p))
    assert cfg.namespace == "Acme"
    assert cfg.distribution == "Debian"
    assert cfg.max_wait_s == 60.0
    assert cfg.app_package == "eslint"
    assert cfg.node_major == 22
    assert cfg.update_kernel is False
    assert cfg.download_retries == 0


def test_non_yaml_rejected(tmp_path):
    p = tmp_path / "installer.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_non_mapping_rejected(tmp_path):
    p = tmp_path / "installer.yml"
    p.write_text("just a string\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_invalid_yaml_rejected(tmp_path):
    p = tmp_path / "installer.yaml"
    p.write_text("a: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_empty_sections_fall_back():
    cfg = InstallerConfig(raw={"distribution": None, "app": {}})
    assert cfg.distribution == "Ubuntu"
    assert cfg.app_command == "tsc"


def test_explicit_zero_wait_is_kept():
    cfg = InstallerConfig(raw={"distribution": {"poll_interval_s": 0, "max_wait_s": 0}})
    assert cfg.poll_interval_s == 0.0
    assert cfg.max_wait_s == 0.0
