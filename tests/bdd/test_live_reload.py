"""Behaviour tests for live reloading in ``redoc-cli serve`` using pytest-bdd.

The scenarios start a real :class:`~redoc_cli.server.LiveServer` on a free
port with a short debounce and poll interval, edit the watched spec file on
disk, and observe the page served over HTTP.

Usage
-----
Run ``pytest tests/bdd/test_live_reload.py -v``.
"""

from __future__ import annotations

import copy
import json
import logging
import time
import typing as typ
from pathlib import Path

import pytest
import requests
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from redoc_cli.config import RenderOptions, ServeSettings
from redoc_cli.server import LiveServer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "live_reload.feature"
scenarios(FEATURE_FILE)

TIMEOUT = 10
ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@pytest.fixture
def watching_server(spec_file: Path, bundles_dir: Path) -> cabc.Iterator[LiveServer]:
    """Serve ``spec_file`` pre-rendered with a fast watcher; stop it afterwards."""
    server = LiveServer(
        str(spec_file),
        RenderOptions(server_side_render=True),
        ServeSettings(port=0, watch=True, debounce_seconds=0.1, poll_interval=0.02),
        bundles_dir=bundles_dir,
    )
    server.start()
    try:
        yield server
    finally:
        server.stop()


def _served_title(server: LiveServer) -> str:
    resp = requests.get(f"{server.url}/", timeout=TIMEOUT)
    soup = BeautifulSoup(resp.text, "html.parser")
    heading = soup.select_one(".api-info h1")
    assert heading is not None, "pre-rendered page should carry the API title"
    return next(heading.stripped_strings)


@given("a watched petstore spec served with server-side rendering")
def given_watched_server(
    watching_server: LiveServer,
    spec_file: Path,
    scenario_state: ScenarioState,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="redoc_cli")
    assert watching_server.watching, "local spec files should be watched"
    scenario_state["server"] = watching_server
    scenario_state["spec_file"] = spec_file


@when(parsers.parse('the spec title is changed to "{title}"'))
def when_title_changed(
    title: str, petstore_spec: dict[str, typ.Any], scenario_state: ScenarioState
) -> None:
    spec = copy.deepcopy(petstore_spec)
    spec["info"]["title"] = title
    path = typ.cast("Path", scenario_state["spec_file"])
    path.write_text(json.dumps(spec), encoding="utf-8")


@when("the spec file is overwritten with invalid YAML")
def when_spec_broken(scenario_state: ScenarioState) -> None:
    path = typ.cast("Path", scenario_state["spec_file"])
    path.write_text("openapi: [broken\n", encoding="utf-8")


@then(parsers.parse('the served page eventually shows "{title}"'))
def then_page_eventually_shows(title: str, scenario_state: ScenarioState) -> None:
    server = typ.cast("LiveServer", scenario_state["server"])
    deadline = time.monotonic() + TIMEOUT
    seen = _served_title(server)
    while seen != title and time.monotonic() < deadline:
        time.sleep(0.05)
        seen = _served_title(server)
    assert seen == title, f"expected {title!r}, page still shows {seen!r}"


@then("the update failure is logged")
def then_failure_logged(caplog: pytest.LogCaptureFixture) -> None:
    deadline = time.monotonic() + TIMEOUT
    while "Error while updating" not in caplog.text:
        assert time.monotonic() < deadline, "reload failure was never logged"
        time.sleep(0.05)


@then(parsers.parse('the served page still shows "{title}"'))
def then_page_still_shows(title: str, scenario_state: ScenarioState) -> None:
    server = typ.cast("LiveServer", scenario_state["server"])
    assert _served_title(server) == title
