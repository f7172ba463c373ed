"""Shared dataclasses used by the documentation rendering engine."""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(frozen=True, slots=True)
class ParameterModel:
    """A single operation parameter as shown in the parameters table."""

    name: str
    location: str
    required: bool
    type_label: str
    description: str


@dc.dataclass(frozen=True, slots=True)
class ResponseModel:
    """A documented response status for an operation."""

    status: str
    description: str
    content_types: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class CodeSampleModel:
    """An ``x-codeSamples`` entry attached to an operation."""

    label: str
    language: str
    source: str


@dc.dataclass(frozen=True, slots=True)
class OperationModel:
    """Structured data for one HTTP operation.

    Attributes
    ----------
    anchor : str
        Fragment identifier, ``operation/<operationId>`` when the operation
        declares an id, ``tag/<tag>/paths/<path>/<method>`` otherwise.
    method : str
        Lower-case HTTP verb.
    path : str
        Path template as written in the description.
    summary : str
        Short title; falls back to ``"<METHOD> <path>"``.
    description : str
        Markdown description.
    deprecated : bool
        Whether the operation is flagged as deprecated.
    parameters : tuple[ParameterModel, ...]
        Path-level and operation-level parameters, operation level winning.
    request_content_types : tuple[str, ...]
        Media types accepted by the request body.
    responses : tuple[ResponseModel, ...]
        Responses sorted by status code.
    code_samples : tuple[CodeSampleModel, ...]
        Vendor-extension code samples.
    """

    anchor: str
    method: str
    path: str
    summary: str
    description: str
    deprecated: bool
    parameters: tuple[ParameterModel, ...]
    request_content_types: tuple[str, ...]
    responses: tuple[ResponseModel, ...]
    code_samples: tuple[CodeSampleModel, ...]


@dc.dataclass(frozen=True, slots=True)
class TagGroupModel:
    """Operations grouped under one tag in navigation order."""

    name: str
    anchor: str
    description: str
    operations: tuple[OperationModel, ...]


@dc.dataclass(frozen=True, slots=True)
class RenderStore:
    """Immutable input for one render: the spec plus its derived menu model."""

    spec: typ.Mapping[str, typ.Any]
    spec_url: str | None
    options: typ.Mapping[str, typ.Any]
    title: str
    version: str
    description: str
    groups: tuple[TagGroupModel, ...]


@dc.dataclass(frozen=True, slots=True)
class RenderedMarkup:
    """Markup and stylesheet text produced by :func:`render_markup`."""

    markup: str
    styles: str


__all__ = [
    "CodeSampleModel",
    "OperationModel",
    "ParameterModel",
    "RenderStore",
    "RenderedMarkup",
    "ResponseModel",
    "TagGroupModel",
]
