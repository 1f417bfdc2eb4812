"""Async HTTP client for the FusionBrain API.

Covers model readiness checks, text-to-image generation, task polling,
and the model/style catalogues. Every method is a single request; the
caller owns any polling loop, timeout or retry policy.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from fusionbrain.config import FusionBrainConfig
from fusionbrain.errors import (
    OP_CHECK_TASK,
    OP_GENERATE,
    OP_GET_MODELS,
    OP_GET_STYLES,
    OP_IS_READY,
    FusionBrainApiError,
    ResponseValidationError,
)
from fusionbrain.models import (
    GenerationAccepted,
    GenerationOutcome,
    GenerationRejected,
    ModelInfo,
    StyleInfo,
    Task,
)
from fusionbrain.validation import (
    parse_availability,
    parse_models,
    parse_styles,
    parse_task,
)

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 60.0
_API_PREFIX = "/key/api/v1"

DEFAULT_STYLE = "DEFAULT"
DEFAULT_SIZE = 768


def _serialize(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, ensure_ascii=False)


class FusionBrainClient:
    """Async client for the FusionBrain text-to-image API.

    Usage::

        config = FusionBrainConfig(api_key="...", secret_key="...")
        async with FusionBrainClient(config) as client:
            model = (await client.get_models())[0]
            outcome = await client.generate(model.id, "A cat on Mars")
            if outcome.accepted:
                task = await client.check_task(outcome.task.id)
                if task.is_success:
                    images = task.decode_images()
            else:
                print(outcome.reason)
    """

    def __init__(
        self,
        config: FusionBrainConfig,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.endpoint.rstrip("/"),
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> FusionBrainClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Run one exchange and return the decoded body.

        Non-JSON bodies are returned as text and left to the validators.
        """
        headers = dict(self.config.auth_headers) if authenticated else {}
        logger.debug("%s: %s %s", operation, method, url)
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = FusionBrainApiError.from_http_error(operation, exc)
            logger.warning("%s failed: %s (%s)", operation, error.kind.value, exc)
            raise error from exc

        try:
            return response.json()
        except ValueError:
            logger.debug("%s: non-JSON response body", operation)
            return response.text

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def is_ready(self, model_id: int, strict: bool = False) -> bool:
        """Check whether a model currently accepts generation requests.

        Args:
            model_id: Numeric model id, see :meth:`get_models`.
            strict: Raise MODEL_NOT_READY instead of returning False.

        Raises:
            FusionBrainApiError: MODEL_NOT_READY (strict only), UNAUTHORIZED
                or UNEXPECTED.
        """
        data = await self._request(
            OP_IS_READY,
            "GET",
            f"{_API_PREFIX}/text2image/availability",
            params={"model_id": model_id},
        )
        availability = parse_availability(data)
        if availability.is_ready:
            return True
        logger.info("Model %s is not ready: %s", model_id, _serialize(data))
        if strict:
            raise FusionBrainApiError.model_not_ready(OP_IS_READY, _serialize(data))
        return False

    async def generate(
        self,
        model_id: int,
        prompt: str,
        *,
        style: str = DEFAULT_STYLE,
        negative_prompt: str = "",
        width: int = DEFAULT_SIZE,
        height: int = DEFAULT_SIZE,
        num_images: int = 1,
    ) -> GenerationOutcome:
        """Submit a text-to-image generation request.

        Args:
            model_id: Numeric model id, see :meth:`get_models`.
            prompt: Describe what you want to see.
            style: Style ``name`` from :meth:`get_styles`.
            negative_prompt: Things to avoid.
            width: Image width; multiples of 64 give better results.
            height: Image height; multiples of 64 give better results.
            num_images: Accepted for forward compatibility. The service only
                supports one image per request, so 1 is always sent.

        Returns:
            GenerationAccepted with the queued task, or GenerationRejected
            with the serialized response when the service answered with
            something other than a task (e.g. a full queue).

        Raises:
            FusionBrainApiError: LONG_PROMPT_OR_BAD_REQUEST, UNAUTHORIZED,
                UNSUPPORTED_MEDIA or UNEXPECTED.
        """
        if num_images != 1:
            logger.debug("num_images=%d requested, sending 1", num_images)

        params = {
            "type": "GENERATE",
            "style": style,
            "numImages": 1,
            "width": width,
            "height": height,
            "negativePromptUnclip": negative_prompt,
            "generateParams": {
                "query": prompt,
            },
        }

        logger.info("Submitting generation: model=%s, prompt=%r", model_id, prompt[:80])
        data = await self._request(
            OP_GENERATE,
            "POST",
            f"{_API_PREFIX}/text2image/run",
            files={"params": ("params.json", json.dumps(params), "application/json")},
            data={"model_id": str(model_id)},
        )

        try:
            task = parse_task(data)
        except ResponseValidationError:
            reason = _serialize(data)
            logger.info("Generation rejected: %s", reason)
            return GenerationRejected(reason=reason)

        logger.info("Generation accepted: %s (%s)", task.id, task.status)
        return GenerationAccepted(task=task)

    async def check_task(self, task_id: str) -> Task:
        """Fetch a fresh snapshot of a generation task.

        A finished task is removed by the service once it has been fetched,
        so later polls fail with EXPIRED.

        Raises:
            FusionBrainApiError: EXPIRED, UNAUTHORIZED or UNEXPECTED.
            ResponseValidationError: If the response is not a task.
        """
        data = await self._request(OP_CHECK_TASK, "GET", f"{_API_PREFIX}/text2image/status/{task_id}")
        task = parse_task(data)
        logger.debug("Task %s: status=%s", task.id, task.status)
        return task

    async def get_models(self) -> list[ModelInfo]:
        """Fetch available models; ``id`` is what :meth:`generate` needs.

        Raises:
            FusionBrainApiError: UNAUTHORIZED or UNEXPECTED.
            ResponseValidationError: If the listing or any entry is malformed.
        """
        data = await self._request(OP_GET_MODELS, "GET", f"{_API_PREFIX}/models")
        return parse_models(data)

    async def get_styles(self) -> list[StyleInfo]:
        """Fetch available styles from the public (unauthenticated) listing.

        Raises:
            FusionBrainApiError: UNEXPECTED.
            ResponseValidationError: If the listing or any entry is malformed.
        """
        data = await self._request(OP_GET_STYLES, "GET", self.config.styles_url, authenticated=False)
        return parse_styles(data)
