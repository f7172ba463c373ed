"""Tests for writing self-contained documentation bundles."""

from __future__ import annotations

import math
import typing as typ

import pytest
from bs4 import BeautifulSoup

from redoc_cli._constants import CDN_BUNDLE_URL
from redoc_cli.bundler import bundle
from redoc_cli.config import RenderOptions
from redoc_cli.errors import BundleError, BundleWriteError, SpecLoadError

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_bundle_inlines_packaged_runtime(spec_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "redoc-static.html"

    result = bundle(str(spec_file), RenderOptions(page_title="Pets"), output)

    html = output.read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "html.parser")
    assert result.path == output
    assert soup.title is not None
    assert soup.title.string == "Pets"
    assert "global.Redoc =" in html, "packaged runtime should be inlined"
    assert CDN_BUNDLE_URL not in html
    assert "const __redoc_state = " in html
    assert "Redoc.hydrate(__redoc_state, container);" in html


def test_bundle_references_cdn(
    spec_file: Path, tmp_path: Path, runtime_marker: str, bundles_dir: Path
) -> None:
    output = tmp_path / "out.html"

    bundle(
        str(spec_file), RenderOptions(use_cdn=True), output, bundles_dir=bundles_dir
    )

    html = output.read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "html.parser")
    sources = [tag.get("src") for tag in soup.find_all("script")]
    assert CDN_BUNDLE_URL in sources
    assert runtime_marker not in html


def test_bundle_always_prerenders(
    spec_file: Path, tmp_path: Path, bundles_dir: Path
) -> None:
    output = tmp_path / "out.html"

    bundle(
        str(spec_file),
        RenderOptions(server_side_render=False),
        output,
        bundles_dir=bundles_dir,
    )

    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    assert soup.select_one("#redoc .menu-content") is not None
    assert 'Redoc.init("spec.json"' not in str(soup)


def test_bundle_creates_missing_directories(
    spec_file: Path, tmp_path: Path, bundles_dir: Path
) -> None:
    output = tmp_path / "site" / "docs" / "index.html"

    bundle(str(spec_file), RenderOptions(), output, bundles_dir=bundles_dir)

    assert output.is_file()


def test_bundle_reports_size_in_kib(
    spec_file: Path, tmp_path: Path, bundles_dir: Path
) -> None:
    output = tmp_path / "out.html"

    result = bundle(str(spec_file), RenderOptions(), output, bundles_dir=bundles_dir)

    assert result.size_kib == math.ceil(output.stat().st_size / 1024)
    assert result.elapsed_seconds >= 0


def test_unwritable_output_raises(
    spec_file: Path, tmp_path: Path, bundles_dir: Path
) -> None:
    output = tmp_path / "taken"
    output.mkdir()

    with pytest.raises(BundleWriteError):
        bundle(str(spec_file), RenderOptions(), output, bundles_dir=bundles_dir)


def test_load_failure_is_wrapped(tmp_path: Path) -> None:
    output = tmp_path / "out.html"

    with pytest.raises(BundleError) as excinfo:
        bundle(str(tmp_path / "missing.yaml"), RenderOptions(), output)

    assert isinstance(excinfo.value.__cause__, SpecLoadError)
    assert not output.exists()


def test_undecodable_spec_is_wrapped(tmp_path: Path) -> None:
    source = tmp_path / "openapi.yaml"
    source.write_bytes(b"openapi: 3.0.0\ninfo:\n  title: \xff\xfe\npaths: {}\n")

    with pytest.raises(BundleError) as excinfo:
        bundle(str(source), RenderOptions(), tmp_path / "out.html")

    assert isinstance(excinfo.value.__cause__, SpecLoadError)


def test_cdn_bundle_keeps_readable_static_markup(
    spec_file: Path, tmp_path: Path
) -> None:
    output = tmp_path / "out.html"

    bundle(str(spec_file), RenderOptions(use_cdn=True), output)

    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    operation = soup.select_one('#redoc [id="operation/listPets"]')
    assert operation is not None, "CDN pages must stay readable without scripts"
    assert "List all pets" in operation.get_text()
