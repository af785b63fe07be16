"""Configuration management with XDG paths and atomic writes.

This module handles persistent configuration for regauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.regauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~regauth.models.RegauthConfig`
  JSON file holding HTTP transport settings. See :func:`load_config` and
  :func:`save_config`.
* **HTTP client factory** -- :func:`create_http_client` builds the
  :class:`httpx.AsyncClient` used whenever a caller does not inject one.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from regauth import __version__
from regauth.exceptions import ConfigError
from regauth.models import RegauthConfig

_APP_NAME = "regauth"
_CONFIG_FILENAME = "config.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/regauth/`` (default ``~/.config/regauth/``).
    On macOS/Windows: ``~/.regauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (stored usernames and secrets), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/regauth/`` (default ``~/.local/share/regauth/``).
    On macOS/Windows: ``~/.regauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given, permissions are applied to the temp file before any content is
    written. On any failure the temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> RegauthConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~regauth.models.RegauthConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _config_path()
    if not path.is_file():
        return RegauthConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return RegauthConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: RegauthConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_config_path(), json.dumps(data, indent=2) + "\n")


# --- HTTP client factory ---


def create_http_client(config: Optional[RegauthConfig] = None) -> httpx.AsyncClient:
    """Build an :class:`httpx.AsyncClient` from the request settings.

    Args:
        config: Configuration to use. Loaded via :func:`load_config` when
            omitted.

    Returns:
        A new client. The caller owns it and must close it.
    """
    if config is None:
        config = load_config()
    request = config.request
    user_agent = request.user_agent or f"{_APP_NAME}/{__version__}"
    return httpx.AsyncClient(
        timeout=request.timeout,
        verify=request.verify_ssl,
        follow_redirects=request.follow_redirects,
        headers={"User-Agent": user_agent},
    )
