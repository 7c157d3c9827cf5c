"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for eveonline:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.eveonline/`` on macOS and Windows.  See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Client config** -- a single :class:`~eveonline.models.ClientConfig`
  JSON file storing the server URL, default parameters (API key), cache
  and request settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the config file into the effective
  configuration.
* **Cache construction** -- :func:`create_cache` builds the configured
  :class:`~eveonline.cache.Cache` backend.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`); the file cache relies on it so that concurrent
writers of the same entry never leave a torn file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from eveonline.exceptions import ConfigError
from eveonline.models import CacheBackend, ClientConfig

if TYPE_CHECKING:
    from eveonline.cache import Cache

_APP_NAME = "eveonline"
_CONFIG_FILENAME = "config.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/eveonline/`` (default ``~/.config/eveonline/``).
    On macOS/Windows: ``~/.eveonline/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the response cache directory, creating it if necessary.

    Cached API results can be safely deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/eveonline/`` (default ``~/.cache/eveonline/``).
    On macOS/Windows: ``~/.eveonline/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/eveonline/`` (default ``~/.local/share/eveonline/``).
    On macOS/Windows: ``~/.eveonline/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: Union[str, bytes]) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On success the
    temp file is renamed over *path*; on any failure the temp file is
    cleaned up.  The parent directory must already exist.
    """
    payload = data.encode("utf-8") if isinstance(data, str) else data

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(payload)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in except
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


# --- Client config ---


def _config_path() -> Path:
    """Path to the client config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> ClientConfig:
    """Load the client configuration from the config directory.

    Returns:
        The deserialised :class:`~eveonline.models.ClientConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _config_path()
    if not path.is_file():
        return ClientConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig) -> None:
    """Persist the client configuration atomically to disk."""
    data = config.model_dump(mode="json")
    path = _config_path()
    atomic_write(path, json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_url: Optional[str] = None,
    cli_cache: Optional[str] = None,
) -> ClientConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_url``, ``cli_cache``)
        2. Environment variables (``EVEONLINE_URL``, ``EVEONLINE_CACHE``,
           ``EVEONLINE_KEY_ID``, ``EVEONLINE_VCODE``)
        3. User config (``~/.config/eveonline/config.json``)
        4. Defaults
    """
    config = load_config()

    env_url = os.environ.get("EVEONLINE_URL")
    if cli_url is not None:
        config.url = cli_url
    elif env_url:
        config.url = env_url

    env_cache = os.environ.get("EVEONLINE_CACHE")
    backend = cli_cache if cli_cache is not None else env_cache
    if backend:
        try:
            config.cache.backend = CacheBackend(backend)
        except ValueError as exc:
            choices = ", ".join(b.value for b in CacheBackend)
            raise ConfigError(f"Unknown cache backend {backend!r} (choose from {choices})") from exc

    for env_var, param in (("EVEONLINE_KEY_ID", "keyID"), ("EVEONLINE_VCODE", "vCode")):
        value = os.environ.get(env_var)
        if value:
            config.params[param] = value

    return config


def create_cache(config: ClientConfig) -> Cache:
    """Instantiate the cache backend selected in ``config.cache``."""
    from eveonline.cache import DiskCache, FileCache, MemoryCache

    cache_config = config.cache
    if cache_config.backend == CacheBackend.MEMORY:
        return MemoryCache()

    root = Path(cache_config.path) if cache_config.path else get_cache_dir()
    if cache_config.backend == CacheBackend.FILE:
        return FileCache(root / "files", prefix=cache_config.prefix)
    return DiskCache(root / "disk")
