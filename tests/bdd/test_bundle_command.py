"""Behaviour tests for ``redoc-cli bundle`` using pytest-bdd.

The scenario calls the ``bundle`` command function directly inside a
temporary working directory and inspects the written page with
BeautifulSoup.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from redoc_cli import cli

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "bundle.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@given("a petstore spec file")
def given_spec_file(
    spec_file: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    scenario_state: ScenarioState,
) -> None:
    monkeypatch.chdir(tmp_path)
    scenario_state["spec_file"] = spec_file


@when(parsers.parse('I bundle it to "{output}" with the title "{title}"'))
def when_bundle(
    output: str,
    title: str,
    scenario_state: ScenarioState,
    capsys: pytest.CaptureFixture[str],
) -> None:
    spec_file = typ.cast("Path", scenario_state["spec_file"])
    cli.bundle(str(spec_file), output=Path(output), title=title)
    scenario_state["stdout"] = capsys.readouterr().out


@then(parsers.parse('"{output}" is a pre-rendered page titled "{title}"'))
def then_page_written(output: str, title: str) -> None:
    path = Path(output)
    assert path.is_file(), f"{output} should have been written"
    soup = BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")
    assert soup.title is not None
    assert soup.title.string == title
    assert soup.select_one("#redoc .api-info") is not None
    assert "Redoc.hydrate(__redoc_state, container);" in str(soup)


@then("the bundle summary reports the output path")
def then_summary(scenario_state: ScenarioState) -> None:
    stdout = typ.cast("str", scenario_state["stdout"])
    assert stdout.startswith("bundled successfully in: site/index.html (")
