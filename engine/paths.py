import os
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _env_path(name, default):
    value = os.environ.get(name)
    if value:
        return os.path.abspath(value)
    return os.path.abspath(default)


# Run logs land beside the script unless overridden.
LOG_DIR = _env_path("YTGRAB_LOG_DIR", PROJECT_ROOT)
CONFIG_DIR = _env_path("YTGRAB_CONFIG_DIR", PROJECT_ROOT / "config")


def ensure_dir(path):
    if path:
        os.makedirs(path, exist_ok=True)


def resolve_config_path(path):
    """Return the config file to load, or None when no config applies."""
    if not path:
        resolved = os.path.join(CONFIG_DIR, "config.json")
        return resolved if os.path.exists(resolved) else None
    if os.path.isabs(path):
        return os.path.abspath(path)
    if os.path.exists(path):
        return os.path.abspath(path)
    return os.path.abspath(os.path.join(CONFIG_DIR, path))


def is_writable_dir(path):
    return os.path.isdir(path) and os.access(path, os.W_OK)
