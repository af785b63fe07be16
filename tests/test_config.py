"""Tests for regauth.config -- XDG paths, atomic writes, config file, client factory."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from regauth import __version__
from regauth.config import (
    atomic_write,
    create_http_client,
    get_config_dir,
    get_data_dir,
    load_config,
    save_config,
)
from regauth.exceptions import ConfigError
from regauth.models import RegauthConfig, RequestConfig


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("regauth.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "regauth"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "regauth"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("regauth.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "regauth"
        assert result.is_dir()

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("regauth.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".regauth"
        assert get_data_dir() == tmp_path / ".regauth" / "data"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "out.json"
        atomic_write(target, '{"a": 1}')
        assert target.read_text() == '{"a": 1}'

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "out.json"
        atomic_write(target, "x")
        assert target.read_text() == "x"

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "out.json"
        with patch("regauth.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                atomic_write(target, "x")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


class TestConfigFile:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_config()
        assert config == RegauthConfig()
        assert config.request.timeout == 30.0
        assert config.request.verify_ssl is True

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        config = RegauthConfig(request=RequestConfig(timeout=5, verify_ssl=False, user_agent="ua/1"))
        save_config(config)
        assert load_config() == config

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text(
            json.dumps({"request": {"timeout": "soon"}}), encoding="utf-8"
        )
        with pytest.raises(ConfigError):
            load_config()


# ---------------------------------------------------------------------------
# HTTP client factory
# ---------------------------------------------------------------------------


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_applies_request_settings(self) -> None:
        config = RegauthConfig(request=RequestConfig(timeout=7, follow_redirects=False))
        async with create_http_client(config) as client:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout == httpx.Timeout(7)
            assert client.follow_redirects is False
            assert client.headers["User-Agent"] == f"regauth/{__version__}"

    @pytest.mark.asyncio
    async def test_custom_user_agent(self) -> None:
        config = RegauthConfig(request=RequestConfig(user_agent="my-tool/2.0"))
        async with create_http_client(config) as client:
            assert client.headers["User-Agent"] == "my-tool/2.0"

    @pytest.mark.asyncio
    async def test_loads_config_when_none_given(self, isolated_config: Path) -> None:
        save_config(RegauthConfig(request=RequestConfig(timeout=3)))
        async with create_http_client() as client:
            assert client.timeout == httpx.Timeout(3)
