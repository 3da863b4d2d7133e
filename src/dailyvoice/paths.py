"""XDG-compliant directory paths for dailyvoice."""

import os
from pathlib import Path


def get_runtime_dir() -> Path:
    """Get XDG-compliant runtime directory for session-scoped data.

    Priority:
    1. $XDG_RUNTIME_DIR/dailyvoice/ (best - auto-cleaned on logout)
    2. /tmp/dailyvoice-{uid}/ (fallback with proper permissions)

    Returns:
        Path to runtime directory
    """
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        path = Path(runtime_dir) / "dailyvoice"
        path.mkdir(parents=True, exist_ok=True, mode=0o700)
        return path

    path = Path(f"/tmp/dailyvoice-{os.getuid()}")
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def get_cache_dir() -> Path:
    """Get XDG-compliant cache directory for persistent cache data.

    Priority:
    1. $XDG_CACHE_HOME/dailyvoice/
    2. ~/.cache/dailyvoice/

    Returns:
        Path to cache directory
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    if cache_home:
        path = Path(cache_home) / "dailyvoice"
    else:
        path = Path.home() / ".cache" / "dailyvoice"

    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Get XDG-compliant configuration directory.

    Priority:
    1. $XDG_CONFIG_HOME/dailyvoice/
    2. ~/.config/dailyvoice/

    Returns:
        Path to configuration directory
    """
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "dailyvoice"
    return Path.home() / ".config" / "dailyvoice"
