"""Build the render store and its serialized client state.

The store is the engine's view of one specification: menu groups derived from
tags and paths, plus the spec itself and the options the client runtime will
receive. :func:`serialize_state` turns it into the JSON-compatible blob that a
pre-rendered page embeds for hydration.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from .models import (
    CodeSampleModel,
    OperationModel,
    ParameterModel,
    RenderStore,
    ResponseModel,
    TagGroupModel,
)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
UNTAGGED = "default"


def create_render_store(
    spec: cabc.Mapping[str, typ.Any],
    spec_url: str | None,
    engine_options: cabc.Mapping[str, typ.Any],
) -> RenderStore:
    """Derive the navigation model for ``spec``.

    Parameters
    ----------
    spec : Mapping[str, Any]
        Bundled OpenAPI / Swagger document.
    spec_url : str or None
        URL the client may download the document from; recorded in the state.
    engine_options : Mapping[str, Any]
        Engine options forwarded verbatim to the client.

    Returns
    -------
    RenderStore
        Immutable store consumed by :func:`render_markup` and
        :func:`serialize_state`.
    """
    info = _mapping(spec.get("info"))
    operations = list(_iter_operations(spec))
    return RenderStore(
        spec=spec,
        spec_url=spec_url,
        options=dict(engine_options),
        title=str(info.get("title") or "API documentation"),
        version=str(info.get("version") or ""),
        description=str(info.get("description") or ""),
        groups=_group_by_tag(spec, operations),
    )


def serialize_state(store: RenderStore) -> dict[str, typ.Any]:
    """Return the JSON-compatible application state for ``store``.

    Examples
    --------
    >>> store = create_render_store({"openapi": "3.0.0", "paths": {}}, None, {})
    >>> sorted(serialize_state(store))
    ['menu', 'options', 'searchIndex', 'spec']
    """
    search_index = [
        {"id": operation.anchor, "title": operation.summary, "path": operation.path}
        for group in store.groups
        for operation in group.operations
    ]
    return {
        "menu": {"activeItemIdx": -1},
        "spec": {"url": store.spec_url, "data": store.spec},
        "searchIndex": search_index,
        "options": dict(store.options),
    }


def _mapping(value: object) -> cabc.Mapping[str, typ.Any]:
    return value if isinstance(value, cabc.Mapping) else {}


def _iter_operations(
    spec: cabc.Mapping[str, typ.Any],
) -> cabc.Iterator[tuple[tuple[str, ...], OperationModel]]:
    """Yield ``(tags, operation)`` pairs in document order."""
    for path, raw_item in _mapping(spec.get("paths")).items():
        path_item = _mapping(raw_item)
        shared_params = path_item.get("parameters") or []
        for method in HTTP_METHODS:
            raw_operation = path_item.get(method)
            if not isinstance(raw_operation, cabc.Mapping):
                continue
            raw_tags = raw_operation.get("tags") or [UNTAGGED]
            if not isinstance(raw_tags, list):
                raw_tags = [raw_tags]
            tags = tuple(str(tag) for tag in raw_tags)
            yield tags, _build_operation(
                str(path), method, raw_operation, shared_params, tags[0]
            )


def _build_operation(
    path: str,
    method: str,
    raw: cabc.Mapping[str, typ.Any],
    shared_params: list[typ.Any],
    first_tag: str,
) -> OperationModel:
    operation_id = raw.get("operationId")
    if operation_id:
        anchor = f"operation/{operation_id}"
    else:
        anchor = f"tag/{first_tag}/paths/{path}/{method}"
    return OperationModel(
        anchor=anchor,
        method=method,
        path=path,
        summary=str(raw.get("summary") or f"{method.upper()} {path}"),
        description=str(raw.get("description") or ""),
        deprecated=bool(raw.get("deprecated", False)),
        parameters=_merge_parameters(shared_params, raw.get("parameters") or []),
        request_content_types=_request_content_types(raw),
        responses=_build_responses(_mapping(raw.get("responses"))),
        code_samples=_build_code_samples(raw),
    )


def _merge_parameters(
    shared: list[typ.Any], own: list[typ.Any]
) -> tuple[ParameterModel, ...]:
    """Merge path-level and operation-level parameters keyed by name+location."""
    merged: dict[tuple[str, str], ParameterModel] = {}
    for raw in [*shared, *own]:
        if not isinstance(raw, cabc.Mapping) or "name" not in raw:
            continue
        schema = _mapping(raw.get("schema"))
        type_label = str(schema.get("type") or raw.get("type") or "any")
        if type_label == "array":
            items = _mapping(schema.get("items") or raw.get("items"))
            type_label = f"array of {items.get('type') or 'any'}"
        location = str(raw.get("in") or "query")
        merged[(str(raw["name"]), location)] = ParameterModel(
            name=str(raw["name"]),
            location=location,
            required=bool(raw.get("required", location == "path")),
            type_label=type_label,
            description=str(raw.get("description") or ""),
        )
    return tuple(merged.values())


def _request_content_types(raw: cabc.Mapping[str, typ.Any]) -> tuple[str, ...]:
    body = _mapping(raw.get("requestBody"))
    content = _mapping(body.get("content"))
    if content:
        return tuple(str(media) for media in content)
    return tuple(str(media) for media in raw.get("consumes") or [])


def _build_responses(
    responses: cabc.Mapping[typ.Any, typ.Any],
) -> tuple[ResponseModel, ...]:
    models = []
    for status, payload in responses.items():
        response = _mapping(payload)
        content = _mapping(response.get("content"))
        models.append(
            ResponseModel(
                status=str(status),
                description=str(response.get("description") or ""),
                content_types=tuple(str(media) for media in content),
            )
        )
    return tuple(sorted(models, key=lambda response: response.status))


def _build_code_samples(raw: cabc.Mapping[str, typ.Any]) -> tuple[CodeSampleModel, ...]:
    samples = raw.get("x-codeSamples") or raw.get("x-code-samples") or []
    models: list[CodeSampleModel] = []
    for sample in samples:
        if not isinstance(sample, cabc.Mapping) or "source" not in sample:
            continue
        language = str(sample.get("lang") or "text")
        models.append(
            CodeSampleModel(
                label=str(sample.get("label") or language),
                language=language,
                source=str(sample["source"]),
            )
        )
    return tuple(models)


def _group_by_tag(
    spec: cabc.Mapping[str, typ.Any],
    operations: list[tuple[tuple[str, ...], OperationModel]],
) -> tuple[TagGroupModel, ...]:
    """Group operations by tag, declared tags first, then in first-seen order."""
    descriptions: dict[str, str] = {}
    order: list[str] = []
    for raw_tag in spec.get("tags") or []:
        tag = _mapping(raw_tag)
        if "name" in tag:
            name = str(tag["name"])
            descriptions[name] = str(tag.get("description") or "")
            order.append(name)

    buckets: dict[str, list[OperationModel]] = {}
    for tags, operation in operations:
        for tag in tags:
            buckets.setdefault(tag, []).append(operation)
            if tag not in order:
                order.append(tag)

    return tuple(
        TagGroupModel(
            name=tag,
            anchor=f"tag/{tag}",
            description=descriptions.get(tag, ""),
            operations=tuple(buckets[tag]),
        )
        for tag in order
        if tag in buckets
    )


__all__ = ["create_render_store", "serialize_state"]
