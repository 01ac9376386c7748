"""Unit tests for parsing per-field ``config`` annotations."""

from __future__ import annotations

import pytest

from fieldconf.annotations import FlagSpec, ParameterConfig, parse_flag_spec, parse_parameter_config
from fieldconf.errors import MalformedAnnotationError, MalformedFlagConfigError


def test_empty_annotation_yields_empty_config() -> None:
    """No annotation means purely positional naming."""

    assert parse_parameter_config("") == ParameterConfig()


def test_all_keys_are_parsed() -> None:
    """env, file and flag entries populate their respective slots."""

    config = parse_parameter_config("env=PORT,file=server.port,flag=p port")

    assert config.default_env_name == "PORT"
    assert config.default_file_field == "server.port"
    assert config.flag == FlagSpec(default_name="port", short_name="p")


def test_value_may_contain_equals_sign() -> None:
    """Only the first ``=`` separates key and value."""

    config = parse_parameter_config("file=a=b")
    assert config.default_file_field == "a=b"


@pytest.mark.parametrize(
    "spec,expected",
    [
        ("p", FlagSpec(short_name="p")),
        ("port", FlagSpec(default_name="port")),
        ("p port", FlagSpec(default_name="port", short_name="p")),
        ("port p", FlagSpec(default_name="port", short_name="p")),
    ],
)
def test_flag_spec_is_order_independent(spec: str, expected: FlagSpec) -> None:
    """Short and long tokens may come in either order."""

    assert parse_flag_spec(spec) == expected


@pytest.mark.parametrize("spec", ["a b c", "p q", "port verbose", "p  port"])
def test_malformed_flag_specs_are_rejected(spec: str) -> None:
    """Three tokens, duplicate categories and empty tokens are authoring errors."""

    with pytest.raises(MalformedFlagConfigError):
        parse_flag_spec(spec)


def test_three_token_flag_is_rejected_through_annotation() -> None:
    """The flag error surfaces from the full annotation parser as well."""

    with pytest.raises(MalformedAnnotationError):
        parse_parameter_config("flag=a b c")


@pytest.mark.parametrize(
    "annotation",
    [
        "env",
        "env=",
        "=PORT",
        "env=PORT,",
        "name=PORT",
        "env=PORT,unknown=1",
    ],
)
def test_malformed_annotations_are_rejected(annotation: str) -> None:
    """Missing separators, empty keys or values and unknown keys raise."""

    with pytest.raises(MalformedAnnotationError):
        parse_parameter_config(annotation)


def test_later_duplicate_key_wins() -> None:
    """Repeating a key keeps the last value."""

    config = parse_parameter_config("env=FIRST,env=SECOND")
    assert config.default_env_name == "SECOND"
