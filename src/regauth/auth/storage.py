"""Storage collaborators for credentials.

Two kinds of store back a :class:`~regauth.auth.basic_oauth.BasicOAuthProvider`:

- :class:`Memento` -- a durable, synchronous key-value mapping holding
  non-secret values such as usernames and the list of tracked registries.
- :class:`SecretStorage` -- an asynchronous mapping reserved for secrets.

Each has an in-memory implementation (handy for tests and short-lived
processes) and a file-backed one. The file-backed stores live under
:func:`~regauth.config.get_data_dir` and are written atomically; the secret
file is created with ``0o600`` permissions so that secrets are never
world-readable, even momentarily.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from regauth.config import atomic_write, get_data_dir
from regauth.exceptions import ConfigError


@runtime_checkable
class Memento(Protocol):
    """Durable key-value store."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def update(self, key: str, value: Any) -> None: ...


@runtime_checkable
class SecretStorage(Protocol):
    """Asynchronous store for secret values."""

    async def get(self, key: str) -> Optional[str]: ...

    async def store(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryMemento:
    """A :class:`Memento` backed by a plain dict.

    Setting a key to ``None`` removes it.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def update(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value


class InMemorySecretStorage:
    """A :class:`SecretStorage` backed by a plain dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def store(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


def _read_json_object(path: Path) -> dict[str, Any]:
    """Load a JSON object from *path*, returning ``{}`` when the file is missing.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid store file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid store file at {path}: expected a JSON object")
    return data


class JsonFileMemento:
    """A :class:`Memento` persisted as a single JSON file.

    The file is re-read on every :meth:`get` so that changes made by other
    processes are observed.

    Args:
        path: File to use. Defaults to ``<data_dir>/memento.json``.

    Example::

        memento = JsonFileMemento()
        memento.update("my-registry.username", "alice")
        assert memento.get("my-registry.username") == "alice"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or get_data_dir() / "memento.json"

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return _read_json_object(self._path).get(key, default)

    def update(self, key: str, value: Any) -> None:
        data = _read_json_object(self._path)
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        atomic_write(self._path, json.dumps(data, indent=2) + "\n")


class FileSecretStorage:
    """A :class:`SecretStorage` persisted as a ``0o600`` JSON file.

    Args:
        path: File to use. Defaults to ``<data_dir>/secrets.json``.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or get_data_dir() / "secrets.json"

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> Optional[str]:
        value = _read_json_object(self._path).get(key)
        return value if value is None else str(value)

    async def store(self, key: str, value: str) -> None:
        data = _read_json_object(self._path)
        data[key] = value
        self._write(data)

    async def delete(self, key: str) -> None:
        data = _read_json_object(self._path)
        if data.pop(key, None) is not None:
            self._write(data)

    def _write(self, data: dict[str, Any]) -> None:
        atomic_write(self._path, json.dumps(data, indent=2) + "\n", mode=0o600)
