"""
Client settings.

Sources (later wins):
    1. Built-in defaults
    2. TOML file: $ZKPASTE_CONFIG or ~/.config/zkpaste/config.toml
    3. Environment: ZKPASTE_URL, ZKPASTE_EXPIRE, ZKPASTE_FORMATTER,
       ZKPASTE_MAX_RETRIES, ZKPASTE_TIMEOUT

Example config.toml:
    url = "https://paste.example.org/"
    expire = "1week"
    burn = true
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from zkpaste import (
    DEFAULT_API_PATH,
    DEFAULT_EXPIRE,
    DEFAULT_FORMATTER,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PASTE_URL,
    DEFAULT_TIMEOUT,
)
from zkpaste.errors import InvalidOptions

log = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path.home() / ".config" / "zkpaste" / "config.toml"

# env var -> (setting, converter)
_ENV_VARS = {
    "ZKPASTE_URL": ("url", str),
    "ZKPASTE_EXPIRE": ("expire", str),
    "ZKPASTE_FORMATTER": ("formatter", str),
    "ZKPASTE_MAX_RETRIES": ("max_retries", int),
    "ZKPASTE_TIMEOUT": ("timeout", float),
}


@dataclass(frozen=True)
class PasteSettings:
    url: str = DEFAULT_PASTE_URL
    api_path: str = DEFAULT_API_PATH
    expire: str = DEFAULT_EXPIRE
    formatter: str = DEFAULT_FORMATTER
    compress: bool = True
    burn: bool = False
    opendiscussion: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    timeout: float = DEFAULT_TIMEOUT


def _config_path(path: Path | None) -> Path:
    if path is not None:
        return path
    env_path = os.environ.get("ZKPASTE_CONFIG", "")
    return Path(env_path).expanduser() if env_path else _DEFAULT_CONFIG_PATH


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML config file. Unreadable files are logged and ignored."""
    try:
        import tomllib
    except ImportError:
        try:
            import tomli as tomllib
        except ImportError:
            log.warning("tomllib/tomli not available, ignoring %s", path)
            return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Failed to load config from %s: %s", path, e)
        return {}


def _checked(name: str, value: Any, expected: type) -> Any:
    """Coerce a config file value to the type of its setting, or raise InvalidOptions."""
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, expected) and (expected is bool or not isinstance(value, bool)):
        return value
    raise InvalidOptions(
        f"Config value {name} must be {expected.__name__}, got {type(value).__name__} {value!r}",
        field=name,
    )


def load_settings(path: str | Path | None = None) -> PasteSettings:
    """Build PasteSettings from defaults, the config file and the environment."""
    settings = PasteSettings()
    # setting name -> type of its default
    known = {f.name: type(f.default) for f in fields(PasteSettings)}

    config_path = _config_path(Path(path) if path else None)
    if config_path.is_file():
        file_config = _read_toml(config_path)
        unknown = sorted(set(file_config) - set(known))
        if unknown:
            log.warning("Ignoring unknown config keys in %s: %s", config_path, ", ".join(unknown))
        settings = replace(settings, **{
            k: _checked(k, v, known[k]) for k, v in file_config.items() if k in known
        })
        log.debug("Loaded config from %s", config_path)

    overrides: dict[str, Any] = {}
    for var, (name, convert) in _ENV_VARS.items():
        raw = os.environ.get(var, "").strip()
        if not raw:
            continue
        try:
            overrides[name] = convert(raw)
        except ValueError:
            raise InvalidOptions(f"{var} must be a number, got {raw!r}", field=name) from None

    return replace(settings, **overrides)
