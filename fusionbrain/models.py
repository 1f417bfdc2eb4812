"""Data models for the FusionBrain API client.

All models are frozen snapshots built by :mod:`fusionbrain.validation`.
A task is never updated in place: poll again to get a fresh one.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

# Task statuses reported by the service
INITIAL = "INITIAL"
PROCESSING = "PROCESSING"
DONE = "DONE"
FAIL = "FAIL"

# Availability statuses
ACTIVE = "ACTIVE"
DISABLED_BY_QUEUE = "DISABLED_BY_QUEUE"


@dataclass(frozen=True)
class Task:
    """Snapshot of a FusionBrain generation job.

    Attributes:
        id: Job handle (the ``uuid`` field of the response).
        status: One of INITIAL, PROCESSING, DONE, FAIL.
        images: Base64 payloads without a data-URI prefix, once DONE.
        error_description: Failure description, once FAIL.
        censored: Content-policy flag; None when not reported.
        generation_time: Time spent on generation, once DONE.
    """
    INITIAL: ClassVar[str] = INITIAL
    PROCESSING: ClassVar[str] = PROCESSING
    DONE: ClassVar[str] = DONE
    FAIL: ClassVar[str] = FAIL

    id: str
    status: str
    images: tuple[str, ...] | None = None
    error_description: str | None = None
    censored: bool | None = None
    generation_time: float | None = None

    @property
    def is_finished(self) -> bool:
        return self.status in (DONE, FAIL)

    @property
    def is_censored(self) -> bool:
        # the censored flag is unreliable before the job finishes
        return self.is_finished and self.censored is True

    @property
    def is_success(self) -> bool:
        """DONE, not censored and carrying at least one image.

        A censored job still comes back DONE with a placeholder image,
        so the status alone is not enough.
        """
        return self.status == DONE and not self.is_censored and bool(self.images)

    def decode_images(self) -> list[bytes]:
        """Return the images as raw bytes (empty if none were reported)."""
        return [base64.b64decode(img) for img in self.images or ()]


@dataclass(frozen=True)
class ModelInfo:
    """Catalogue entry for a generation model.

    Attributes:
        id: Numeric id required by generation requests.
        name: Model name.
        version: Model version (a float in practice).
        type: Model type, e.g. "TEXT2IMAGE".
    """
    id: int
    name: str
    version: float
    type: str


@dataclass(frozen=True)
class StyleInfo:
    """Catalogue entry for a generation style.

    Attributes:
        name: Value to pass as ``style`` in a generation request.
        title: Localized (Russian) title.
        title_en: English title.
        image: URL of a preview image.
    """
    name: str
    title: str
    title_en: str
    image: str


@dataclass(frozen=True)
class Availability:
    """Model availability as reported by the service.

    The service has used two shapes for the same answer, ``{"status": ...}``
    and ``{"model_status": ...}``; either one being ACTIVE means ready.
    """
    status: str | None = None
    model_status: str | None = None

    @property
    def is_ready(self) -> bool:
        return ACTIVE in (self.status, self.model_status)


@dataclass(frozen=True)
class GenerationAccepted:
    """The service queued the request."""
    task: Task
    accepted: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class GenerationRejected:
    """The service answered with something other than a task."""
    reason: str
    accepted: Literal[False] = field(default=False, init=False)


GenerationOutcome = Union[GenerationAccepted, GenerationRejected]
