"""Unit tests covering collector settings defaults and environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fieldconf.settings import EnvConfig, FilesConfig, FlagsConfig, load_collector_settings

_OVERRIDE_NAMES = (
    "FIELDCONF_FILES__LOCATIONS",
    "FIELDCONF_FILES__BASE_NAME",
    "FIELDCONF_FILES__REQUIRED",
    "FIELDCONF_ENV__PREFIX",
    "FIELDCONF_ENV__SEPARATOR",
    "FIELDCONF_FLAGS__DISABLED",
)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OVERRIDE_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every source is enabled with the conventional separators."""

    _clear_env(monkeypatch)

    settings = load_collector_settings()

    assert settings.files.locations == ["."]
    assert settings.files.base_name == "config"
    assert settings.files.separator == "."
    assert settings.files.required is False
    assert settings.env.prefix == ""
    assert settings.env.separator == "_"
    assert settings.flags.separator == "-"
    assert not (settings.files.disabled or settings.env.disabled or settings.flags.disabled)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Nested sections follow ``FIELDCONF_<SECTION>__<KEY>`` variables."""

    _clear_env(monkeypatch)
    monkeypatch.setenv("FIELDCONF_FILES__LOCATIONS", '["/etc/app", "."]')
    monkeypatch.setenv("FIELDCONF_FILES__REQUIRED", "true")
    monkeypatch.setenv("FIELDCONF_ENV__PREFIX", "app")
    monkeypatch.setenv("fieldconf_flags__disabled", "1")

    settings = load_collector_settings()

    assert settings.files.locations == ["/etc/app", "."]
    assert settings.files.required is True
    assert settings.env.prefix == "app"
    assert settings.flags.disabled is True


def test_explicit_overrides_beat_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("FIELDCONF_ENV__PREFIX", "from-env")

    settings = load_collector_settings(env=EnvConfig(prefix="explicit"))

    assert settings.env.prefix == "explicit"


def test_each_load_returns_a_fresh_instance(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)

    first = load_collector_settings()
    first.env.prefix = "mutated"

    assert load_collector_settings().env.prefix == ""


def test_locations_expand_user_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    files = FilesConfig(locations=["~/.config/app"])

    assert files.locations == [str(tmp_path / ".config" / "app")]


@pytest.mark.parametrize("factory", [FilesConfig, EnvConfig, FlagsConfig])
def test_empty_separator_is_rejected(factory: type) -> None:
    with pytest.raises(ValidationError):
        factory(separator="")


def test_empty_base_name_is_rejected() -> None:
    with pytest.raises(ValidationError):
        FilesConfig(base_name="")
