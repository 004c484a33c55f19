"""3-layer configuration system for nerovaagent.

Loads and merges configuration from:
1. Default settings (built-in)
2. User config (<home>/config.yaml)
3. Environment variables (override)

The environment is read exactly once, here. Everything downstream receives
the resolved dict.
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

DEFAULT_HOME = "~/.nerovaagent"

DEFAULT_CONFIG: dict = {
    "runtime": {
        "origin": "http://127.0.0.1:3333",
        "timeout_seconds": 600,
    },
    "daemon": {
        "home": DEFAULT_HOME,
        "boot_timeout_seconds": 15,
        "runtime": None,
    },
    "keys": {
        "critic_key": None,
        "assistant_key": None,
        "assistant_id": None,
    },
    "debug": False,
}

# env var -> (section, key); section None means top level
ENV_OVERRIDES: dict[str, tuple[Optional[str], str]] = {
    "NEROVA_AGENT_ORIGIN": ("runtime", "origin"),
    "NEROVA_AGENT_RUNTIME": ("daemon", "runtime"),
    "NEROVA_AGENT_CRITIC_KEY": ("keys", "critic_key"),
    "NEROVA_AGENT_ASSISTANT_KEY": ("keys", "assistant_key"),
    "NEROVA_AGENT_ASSISTANT_ID": ("keys", "assistant_id"),
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def _to_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


def resolve_home(environ: Mapping[str, str]) -> Path:
    """Directory holding config.yaml, the daemon pid file and its log."""
    return Path(environ.get("NEROVA_AGENT_HOME") or DEFAULT_HOME).expanduser()


def load_user_config(home: Path) -> dict:
    """Load user configuration from <home>/config.yaml."""
    config_path = home / "config.yaml"
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")
        loaded = yaml.safe_load(content)
    except (OSError, yaml.YAMLError):
        return {}
    return loaded if isinstance(loaded, dict) else {}


def env_overrides(environ: Mapping[str, str]) -> dict:
    """Translate NEROVA_AGENT_* variables into a config overlay."""
    overlay: dict = {}
    for name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(name)
        if not value:
            continue
        overlay.setdefault(section, {})[key] = value

    debug = _to_bool(environ.get("NEROVA_AGENT_DEBUG"))
    if debug is not None:
        overlay["debug"] = debug
    return overlay


def get_effective_config(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Get the fully resolved configuration for one invocation."""
    if environ is None:
        environ = os.environ

    home = resolve_home(environ)
    config = copy.deepcopy(DEFAULT_CONFIG)

    user_config = load_user_config(home)
    if user_config:
        config = deep_merge(config, user_config)

    config = deep_merge(config, env_overrides(environ))
    for section in ("runtime", "daemon", "keys"):
        if not isinstance(config.get(section), dict):
            config[section] = copy.deepcopy(DEFAULT_CONFIG[section])
    config["daemon"]["home"] = str(home)

    return config
