"""Shared fixtures for the redoc_cli test-suite.

* ``petstore_spec`` returns a small OpenAPI 3 document with tags, parameters,
  responses and an ``x-codeSamples`` entry.
* ``spec_file`` writes that document as JSON into ``tmp_path``.
* ``bundles_dir`` provides a stand-in ``redoc.standalone.js`` whose contents
  carry ``RUNTIME_MARKER`` so tests can tell inlined scripts apart.
"""

from __future__ import annotations

import copy
import json
import typing as typ

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path

RUNTIME_MARKER = "/* redoc-runtime-under-test */"

PETSTORE: dict[str, typ.Any] = {
    "openapi": "3.0.0",
    "info": {
        "title": "Swagger Petstore",
        "version": "1.0.0",
        "description": "A sample API that uses a **petstore** as an example.",
    },
    "tags": [{"name": "pets", "description": "Everything about your pets"}],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List all pets",
                "tags": ["pets"],
                "parameters": [
                    {
                        "name": "limit",
                        "in": "query",
                        "description": "How many items to return",
                        "schema": {"type": "integer"},
                    }
                ],
                "responses": {
                    "200": {
                        "description": "A paged array of pets",
                        "content": {"application/json": {}},
                    },
                    "default": {"description": "unexpected error"},
                },
                "x-codeSamples": [
                    {"lang": "python", "source": "import requests\nrequests.get('/pets')"}
                ],
            },
            "post": {
                "summary": "Create a pet",
                "tags": ["pets"],
                "requestBody": {"content": {"application/json": {}}},
                "responses": {"201": {"description": "Null response"}},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "schema": {"type": "string"}}
            ],
            "get": {
                "operationId": "showPetById",
                "summary": "Info for a specific pet",
                "deprecated": True,
                "responses": {"200": {"description": "Expected response"}},
            },
        },
    },
}


@pytest.fixture()
def petstore_spec() -> dict[str, typ.Any]:
    """Return a fresh copy of the Petstore document."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture()
def spec_file(tmp_path: Path, petstore_spec: dict[str, typ.Any]) -> Path:
    """Write the Petstore document to ``tmp_path/openapi.json``."""
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(petstore_spec), encoding="utf-8")
    return path


@pytest.fixture()
def bundles_dir(tmp_path: Path) -> Path:
    """Return a directory holding a marker ``redoc.standalone.js``."""
    directory = tmp_path / "bundles"
    directory.mkdir()
    (directory / "redoc.standalone.js").write_text(
        f"{RUNTIME_MARKER}\nwindow.Redoc = {{}};\n", encoding="utf-8"
    )
    return directory


@pytest.fixture()
def runtime_marker() -> str:
    """Return the text written into the ``bundles_dir`` runtime script."""
    return RUNTIME_MARKER
