"""Unified configuration loading helpers for magetools.

Installer settings come from a YAML file, Salt Pillar, a JSON environment
variable and finally CLI flags. Each layer overrides the previous one so the
same command works on a Salt minion, in CI and on a developer laptop.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

try:
    from salt.client import Caller  # type: ignore
except Exception:  # pragma: no cover - salt is optional
    Caller = None  # type: ignore

DEFAULT_CONFIG_FILE = Path.home() / ".magetools.yaml"
CONFIG_ENV = "MAGETOOLS_CONFIG"
ARGS_ENV = "MAGETOOLS_INSTALLATION_ARGS"
PILLAR_ROOT = "magetools"

_CALLER: Caller | None = None


class ConfigError(RuntimeError):
    """Raised when installer configuration is missing or invalid."""


def _get_caller() -> Caller | None:
    global _CALLER
    if Caller is None:  # type: ignore
        return None
    if _CALLER is None:
        try:
            _CALLER = Caller()
        except Exception:
            return None
    return _CALLER


def pillar_get(path: str, default: Any = None) -> Any:
    caller = _get_caller()
    if caller is None:
        return default
    try:
        value = caller.cmd("pillar.get", path, default)
    except Exception:
        return default
    return default if value is None else value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def load_config_file(explicit: Optional[str] = None) -> Dict[str, Any]:
    if explicit:
        return load_yaml_file(Path(explicit))
    candidates = []
    env_hint = os.environ.get(CONFIG_ENV)
    if env_hint:
        candidates.append(Path(env_hint))
    candidates.append(DEFAULT_CONFIG_FILE)
    for candidate in candidates:
        if not candidate.is_file():
            continue
        try:
            return load_yaml_file(candidate)
        except ConfigError:
            continue
    return {}


def load_json_env(name: str) -> Dict[str, Any]:
    raw = os.environ.get(name)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


class InstallerConfig:
    """Key/value view over the merged installer settings."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(data or {})

    def get_array(self, key: str) -> Dict[str, Any]:
        value = self.data.get(key)
        if value is None:
            raise ConfigError(f"Missing config section: {key}")
        if not isinstance(value, dict):
            raise ConfigError(f"Config section {key} must be a mapping")
        return value

    def get_string(self, key: str) -> str:
        value = self.data.get(key)
        if value is None or value == "":
            raise ConfigError(f"Missing config value: {key}")
        return str(value)


def build_installer_config(
    config_file: Optional[str] = None,
    base_url: Optional[str] = None,
    installation_folder: Optional[str] = None,
) -> InstallerConfig:
    data = load_config_file(config_file)
    args = data.get("installation_args")
    installation_args: Dict[str, Any] = dict(args) if isinstance(args, dict) else {}

    pillar_args = pillar_get(f"{PILLAR_ROOT}:installation_args", {})
    if isinstance(pillar_args, dict):
        installation_args.update(pillar_args)
    pillar_folder = pillar_get(f"{PILLAR_ROOT}:installationFolder", "")
    if pillar_folder:
        data["installationFolder"] = pillar_folder

    installation_args.update(load_json_env(ARGS_ENV))
    if base_url:
        installation_args["base_url"] = base_url
    if installation_folder:
        data["installationFolder"] = installation_folder

    data["installation_args"] = installation_args
    return InstallerConfig(data)
