"""Boundary validation: decoded JSON -> typed, immutable models.

Required fields are checked exhaustively so a single error message is
enough to see how a response drifted from the expected shape. Optional
fields depend on task status and are kept only when present and well typed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from fusionbrain.errors import ResponseValidationError
from fusionbrain.models import Availability, ModelInfo, StyleInfo, Task

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but JSON true/false are not numbers
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check(data: Any, required: dict[str, tuple[str, Callable[[Any], bool]]]) -> dict[str, tuple[str, bool]]:
    """Run every required-field check and report each result."""
    mapping = data if isinstance(data, dict) else {}
    return {
        key: (expected, key in mapping and predicate(mapping[key]))
        for key, (expected, predicate) in required.items()
    }


def _require(entity: str, data: Any, required: dict[str, tuple[str, Callable[[Any], bool]]]) -> None:
    fields = _check(data, required)
    if not all(ok for _, ok in fields.values()):
        raise ResponseValidationError(entity, fields, data=data)


_TASK_FIELDS = {
    "uuid": ("string", lambda v: _is_string(v) and v != ""),
    "status": ("string", lambda v: _is_string(v) and v != ""),
}

_MODEL_FIELDS = {
    "id": ("number", _is_number),
    "name": ("string", _is_string),
    "version": ("number", _is_number),
    "type": ("string", _is_string),
}

_STYLE_FIELDS = {
    "name": ("string", _is_string),
    "title": ("string", _is_string),
    "titleEn": ("string", _is_string),
    "image": ("string", _is_string),
}


def parse_task(data: Any) -> Task:
    """Build a :class:`Task` from a generation or status response.

    Only ``uuid`` and ``status`` are required; they are the only fields a
    freshly accepted generation carries. ``images`` and ``generationTime``
    arrive with DONE, ``errorDescription`` with FAIL, ``censored`` on
    status checks.

    Raises:
        ResponseValidationError: If ``uuid`` or ``status`` is missing,
            empty or not a string.
    """
    _require("Task", data, _TASK_FIELDS)

    images = data.get("images")
    if images is not None and not (
        isinstance(images, list) and images and all(_is_string(img) for img in images)
    ):
        logger.debug("Task %s: dropping malformed images field", data["uuid"])
        images = None

    error_description = data.get("errorDescription")
    if error_description is not None and not _is_string(error_description):
        logger.debug("Task %s: dropping malformed errorDescription", data["uuid"])
        error_description = None

    censored = data.get("censored")
    if censored is not None and not isinstance(censored, bool):
        logger.debug("Task %s: dropping malformed censored flag", data["uuid"])
        censored = None

    generation_time = data.get("generationTime")
    if generation_time is not None and not _is_number(generation_time):
        logger.debug("Task %s: dropping malformed generationTime", data["uuid"])
        generation_time = None

    return Task(
        id=data["uuid"],
        status=data["status"],
        images=tuple(images) if images is not None else None,
        error_description=error_description,
        censored=censored,
        generation_time=generation_time,
    )


def parse_model(data: Any) -> ModelInfo:
    """Build a :class:`ModelInfo`; all four fields are required."""
    _require("ModelInfo", data, _MODEL_FIELDS)
    return ModelInfo(
        id=data["id"],
        name=data["name"],
        version=data["version"],
        type=data["type"],
    )


def parse_style(data: Any) -> StyleInfo:
    """Build a :class:`StyleInfo`; all four fields are required."""
    _require("StyleInfo", data, _STYLE_FIELDS)
    return StyleInfo(
        name=data["name"],
        title=data["title"],
        title_en=data["titleEn"],
        image=data["image"],
    )


def parse_availability(data: Any) -> Availability:
    """Build an :class:`Availability`. Never raises: unknown shapes are not ready."""
    mapping = data if isinstance(data, dict) else {}
    status = mapping.get("status")
    model_status = mapping.get("model_status")
    return Availability(
        status=status if _is_string(status) else None,
        model_status=model_status if _is_string(model_status) else None,
    )


def _parse_listing(entity: str, data: Any, parse_item: Callable[[Any], T]) -> list[T]:
    if not isinstance(data, list):
        raise ResponseValidationError(
            entity,
            {},
            data=data,
            detail=f"{entity}: response expected to be an array of objects, got {type(data).__name__}",
        )
    items = []
    for index, item in enumerate(data):
        try:
            items.append(parse_item(item))
        except ResponseValidationError as exc:
            raise ResponseValidationError(
                exc.entity,
                exc.fields,
                data=item,
                detail=f"{entity} element {index}: passed object doesn't match required structure:",
                index=index,
            ) from exc
    return items


def parse_models(data: Any) -> list[ModelInfo]:
    """Validate a models listing. One malformed entry fails the whole listing."""
    return _parse_listing("ModelInfo[]", data, parse_model)


def parse_styles(data: Any) -> list[StyleInfo]:
    """Validate a styles listing. One malformed entry fails the whole listing."""
    return _parse_listing("StyleInfo[]", data, parse_style)
