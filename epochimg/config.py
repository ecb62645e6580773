# epochimg/config.py
import copy
import os
from pathlib import Path

import yaml

CONFIG_PATH = Path(os.path.expanduser(os.environ.get("EPOCHIMG_CONFIG", "~/.epochimg/config.yaml")))

DEV_ENVS = ("dev", "development")
DEV_HOST, DEV_PORT = "localhost", 8055

DEFAULTS = {
    "server": {"host": None, "port": None},
    "image": {"default_width": 320, "min_width": 10, "max_width": 10000, "jpeg_quality": 90},
    "http": {"cache_control": "max-age=2592000", "render_cache_size": 256},
    "logging": {"level": "INFO"},
}


class ConfigError(RuntimeError):
    pass


def _merge(base, override):
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load(path=None):
    """Defaults overlaid with the YAML file, if there is one."""
    path = Path(path) if path else CONFIG_PATH
    if not path.exists():
        return copy.deepcopy(DEFAULTS)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"bad config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"bad config file {path}: expected a mapping")
    return _merge(DEFAULTS, data)


def save_default(path=None):
    path = Path(path) if path else CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(DEFAULTS, f)
    return path


def is_dev(environ=None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("APP_ENV", "production") in DEV_ENVS


def resolve_bind(cfg, environ=None):
    """(host, port) from HOST/PORT, then the config file, then dev defaults.

    Outside dev/development there are no defaults: a missing host or port
    is a ConfigError.
    """
    environ = os.environ if environ is None else environ
    dev = is_dev(environ)
    server = cfg.get("server") or {}

    host = environ.get("HOST") or server.get("host")
    port = environ.get("PORT") or server.get("port")
    if dev:
        host = host or DEV_HOST
        port = port or DEV_PORT
    if not host:
        raise ConfigError("Host not set")
    if not port:
        raise ConfigError("Port not set")
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ConfigError(f"Port is not a number: {port!r}")
    return host, port
