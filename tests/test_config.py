"""Tests for CLI configuration loading and dot-path engine options."""

from __future__ import annotations

import typing as typ

import pytest

from redoc_cli._constants import DEBOUNCE_SECONDS, DEFAULT_ENCODINGS, DEFAULT_TITLE
from redoc_cli.config import (
    CliConfig,
    RenderOptions,
    coerce_option_value,
    get_dot_path,
    load_cli_config,
    merge_options,
    parse_option_assignments,
    set_dot_path,
)
from redoc_cli.errors import ConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("False", False),
        ("42", 42),
        ("-3", -3),
        ("1.5", 1.5),
        ("#dd5522", "#dd5522"),
        ("", ""),
    ],
)
def test_coerce_option_value(raw: str, expected: object) -> None:
    value = coerce_option_value(raw)
    assert value == expected
    assert type(value) is type(expected)


def test_set_dot_path_builds_nested_mappings() -> None:
    target: dict[str, typ.Any] = {"theme": "flat"}

    set_dot_path(target, "theme.colors.primary.main", "#dd5522")

    assert target == {"theme": {"colors": {"primary": {"main": "#dd5522"}}}}
    assert get_dot_path(target, "theme.colors.primary.main") == "#dd5522"
    assert get_dot_path(target, "theme.spacing", "missing") == "missing"


@pytest.mark.parametrize("path", ["", "a..b", ".a", "a."])
def test_set_dot_path_rejects_empty_segments(path: str) -> None:
    with pytest.raises(ConfigError):
        set_dot_path({}, path, 1)


def test_parse_option_assignments() -> None:
    options = parse_option_assignments(
        ["theme.colors.primary.main=#dd5522", "hideDownloadButton", "a.b=2"]
    )

    assert options == {
        "theme": {"colors": {"primary": {"main": "#dd5522"}}},
        "hideDownloadButton": True,
        "a": {"b": 2},
    }


def test_merge_options_is_deep_and_non_mutating() -> None:
    base = {"theme": {"colors": {"primary": {"main": "#000"}}, "spacing": 4}}
    override = {"theme": {"colors": {"primary": {"main": "#fff"}}}, "x": 1}

    merged = merge_options(base, override)

    assert merged == {
        "theme": {"colors": {"primary": {"main": "#fff"}}, "spacing": 4},
        "x": 1,
    }
    assert base["theme"]["colors"]["primary"]["main"] == "#000"


def test_missing_default_file_uses_builtin_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_cli_config()

    assert config == CliConfig()
    assert config.defaults.page_title == DEFAULT_TITLE
    assert config.serve.debounce_seconds == DEBOUNCE_SECONDS
    assert config.serve.encodings == DEFAULT_ENCODINGS


def test_missing_explicit_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_cli_config(tmp_path / "redoc.yaml")


def test_loads_all_sections(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "redoc.yaml"
    path.parent.mkdir()
    path.write_text(
        """\
defaults:
  ssr: true
  cdn: true
  title: Pet docs
  template: templates/page.html
  options:
    theme:
      colors:
        primary:
          main: "#dd5522"
serve:
  host: 0.0.0.0
  port: 9000
  watch: true
  debounce_seconds: 0.5
  encodings: [GZIP]
bundle:
  output: site/index.html
""",
        encoding="utf-8",
    )

    config = load_cli_config(path)

    assert config.defaults == RenderOptions(
        server_side_render=True,
        use_cdn=True,
        page_title="Pet docs",
        template_path=path.parent / "templates" / "page.html",
        engine_options={"theme": {"colors": {"primary": {"main": "#dd5522"}}}},
    )
    assert config.serve.host == "0.0.0.0"
    assert config.serve.port == 9000
    assert config.serve.watch is True
    assert config.serve.debounce_seconds == 0.5
    assert config.serve.encodings == ("gzip",)
    assert config.bundle.output == path.parent / "site" / "index.html"


def test_default_file_is_found_in_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "redoc.yaml").write_text("serve:\n  port: 3000\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert load_cli_config().serve.port == 3000


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("serve:\n  encodings: [br]\n", "Unsupported encodings"),
        ("defaults:\n  ssr: 'yes'\n", "must be a boolean"),
        ("serve:\n  port: eighty\n", "must be a number"),
        ("serve: [1, 2]\n", "must be a mapping"),
        ("- just\n- a list\n", "must be a mapping"),
        ("defaults: {ssr: [\n", "not valid YAML"),
    ],
)
def test_invalid_configuration(tmp_path: Path, text: str, message: str) -> None:
    path = tmp_path / "redoc.yaml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_cli_config(path)


def test_undecodable_configuration(tmp_path: Path) -> None:
    path = tmp_path / "redoc.yaml"
    path.write_bytes(b"defaults:\n  title: Caf\xe9\n")

    with pytest.raises(ConfigError, match="not valid"):
        load_cli_config(path)
