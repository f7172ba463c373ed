"""Load the optional ``redoc.yaml`` CLI configuration into typed dataclasses."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from redoc_cli._constants import (
    DEBOUNCE_SECONDS,
    DEFAULT_CONFIG_FILE,
    DEFAULT_ENCODINGS,
    DEFAULT_HOST,
    DEFAULT_OUTPUT,
    DEFAULT_PORT,
    DEFAULT_TITLE,
    POLL_INTERVAL_SECONDS,
)
from redoc_cli.errors import ConfigError

from .models import BundleSettings, CliConfig, RenderOptions, ServeSettings

SUPPORTED_ENCODINGS = frozenset(DEFAULT_ENCODINGS)


def load_cli_config(path: Path | None = None) -> CliConfig:
    """Load CLI defaults from a YAML file.

    Parameters
    ----------
    path : Path or None, optional
        Explicit configuration file. When ``None`` the loader looks for
        ``redoc.yaml`` in the working directory and silently falls back to
        built-in defaults if it does not exist.

    Returns
    -------
    CliConfig
        Render defaults plus ``serve`` and ``bundle`` settings.

    Raises
    ------
    ConfigError
        If an explicitly requested file is missing, the YAML cannot be parsed,
        a section is not a mapping, or a value has the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_cli_config(Path("redoc.yaml"))  # doctest: +SKIP
    >>> config.serve.port  # doctest: +SKIP
    8080
    """
    if path is None:
        path = Path(DEFAULT_CONFIG_FILE)
        if not path.exists():
            return CliConfig()
    elif not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise ConfigError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Configuration file '{path}' is not valid YAML: {exc}"
        raise ConfigError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Configuration file '{path}' is not valid UTF-8: {exc.reason}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)

    raw: dict[str, typ.Any] = dict(loaded)
    base_dir = path.parent
    return CliConfig(
        defaults=_build_render_defaults(_section(raw, "defaults"), base_dir),
        serve=_build_serve_settings(_section(raw, "serve")),
        bundle=_build_bundle_settings(_section(raw, "bundle"), base_dir),
    )


def _section(raw: cabc.Mapping[str, typ.Any], key: str) -> cabc.Mapping[str, typ.Any]:
    """Return the mapping stored under ``key`` or an empty mapping."""
    value = raw.get(key) or {}
    if not isinstance(value, cabc.Mapping):
        msg = f"Section '{key}' must be a mapping."
        raise ConfigError(msg)
    return value


def _build_render_defaults(
    payload: cabc.Mapping[str, typ.Any], base_dir: Path
) -> RenderOptions:
    template = payload.get("template")
    options = payload.get("options") or {}
    if not isinstance(options, cabc.Mapping):
        msg = "'defaults.options' must be a mapping."
        raise ConfigError(msg)
    return RenderOptions(
        server_side_render=_as_bool(payload.get("ssr", False), "defaults.ssr"),
        use_cdn=_as_bool(payload.get("cdn", False), "defaults.cdn"),
        page_title=str(payload.get("title", DEFAULT_TITLE)),
        template_path=_resolve_path(template, base_dir) if template else None,
        engine_options=dict(options),
    )


def _build_serve_settings(payload: cabc.Mapping[str, typ.Any]) -> ServeSettings:
    encodings = payload.get("encodings", list(DEFAULT_ENCODINGS))
    if isinstance(encodings, str):
        encodings = [encodings]
    normalized = tuple(str(name).strip().lower() for name in encodings)
    unknown = [name for name in normalized if name not in SUPPORTED_ENCODINGS]
    if unknown:
        msg = f"Unsupported encodings in 'serve.encodings': {', '.join(unknown)}"
        raise ConfigError(msg)
    return ServeSettings(
        host=str(payload.get("host", DEFAULT_HOST)),
        port=_as_number(payload.get("port", DEFAULT_PORT), "serve.port", int),
        watch=_as_bool(payload.get("watch", False), "serve.watch"),
        debounce_seconds=_as_number(
            payload.get("debounce_seconds", DEBOUNCE_SECONDS),
            "serve.debounce_seconds",
            float,
        ),
        poll_interval=_as_number(
            payload.get("poll_interval", POLL_INTERVAL_SECONDS),
            "serve.poll_interval",
            float,
        ),
        encodings=normalized,
    )


def _build_bundle_settings(
    payload: cabc.Mapping[str, typ.Any], base_dir: Path
) -> BundleSettings:
    output = payload.get("output", DEFAULT_OUTPUT)
    return BundleSettings(output=_resolve_path(output, base_dir))


def _resolve_path(value: object, base_dir: Path) -> Path:
    """Resolve ``value`` relative to the directory holding the config file."""
    candidate = Path(str(value)).expanduser()
    if candidate.is_absolute():
        return candidate
    return base_dir / candidate


def _as_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    msg = f"'{field}' must be a boolean, got {value!r}."
    raise ConfigError(msg)


_NumberT = typ.TypeVar("_NumberT", int, float)


def _as_number(value: object, field: str, kind: type[_NumberT]) -> _NumberT:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"'{field}' must be a number, got {value!r}."
        raise ConfigError(msg)
    return kind(value)


__all__ = ["load_cli_config"]
