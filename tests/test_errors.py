"""Error classification tests."""

from __future__ import annotations

from unittest import mock

import httpx
import pytest

from fusionbrain.errors import (
    OP_CHECK_TASK,
    OP_GENERATE,
    OP_GET_MODELS,
    OP_GET_STYLES,
    OP_IS_READY,
    ErrorKind,
    FusionBrainApiError,
    classify,
)

AUTHENTICATED = [OP_IS_READY, OP_GENERATE, OP_CHECK_TASK, OP_GET_MODELS]


def _status_error(status_code: int, body: str = "oops") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://fb.test/x")
    response = httpx.Response(status_code, text=body, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


class TestClassify:

    @pytest.mark.parametrize("operation", AUTHENTICATED)
    def test_unauthorized(self, operation: str):
        assert classify(operation, 401) is ErrorKind.UNAUTHORIZED

    def test_styles_endpoint_has_no_auth(self):
        assert classify(OP_GET_STYLES, 401) is ErrorKind.UNEXPECTED

    def test_generate(self):
        assert classify(OP_GENERATE, 400) is ErrorKind.LONG_PROMPT_OR_BAD_REQUEST
        assert classify(OP_GENERATE, 415) is ErrorKind.UNSUPPORTED_MEDIA
        assert classify(OP_GENERATE, 404) is ErrorKind.UNEXPECTED

    def test_check_task(self):
        assert classify(OP_CHECK_TASK, 404) is ErrorKind.EXPIRED
        assert classify(OP_CHECK_TASK, 400) is ErrorKind.UNEXPECTED

    @pytest.mark.parametrize("operation", [OP_IS_READY, OP_GET_MODELS, OP_GET_STYLES])
    @pytest.mark.parametrize("status_code", [400, 404, 415])
    def test_operation_scoped(self, operation: str, status_code: int):
        assert classify(operation, status_code) is ErrorKind.UNEXPECTED

    @pytest.mark.parametrize("operation", AUTHENTICATED + [OP_GET_STYLES])
    @pytest.mark.parametrize("status_code", [None, 500, 503])
    def test_server_and_transport_failures(self, operation: str, status_code):
        assert classify(operation, status_code) is ErrorKind.UNEXPECTED

    def test_unknown_operation(self):
        assert classify("something_else", 401) is ErrorKind.UNEXPECTED


class TestFusionBrainApiError:

    def test_fixed_kinds_carry_no_body(self):
        err = FusionBrainApiError.from_http_error(OP_CHECK_TASK, _status_error(404, "gone"))
        assert err.kind is ErrorKind.EXPIRED
        assert err.operation == OP_CHECK_TASK
        assert err.status_code == 404
        assert err.body is None
        assert str(err).startswith("check_task: ")

    def test_unexpected_carries_body(self):
        exc = _status_error(500, '{"error": "internal"}')
        err = FusionBrainApiError.from_http_error(OP_GET_MODELS, exc)
        assert err.kind is ErrorKind.UNEXPECTED
        assert err.status_code == 500
        assert err.body == '{"error": "internal"}'
        assert "HTTP 500" in str(err)

    def test_unexpected_transport_error(self):
        exc = httpx.ConnectError("connection refused")
        err = FusionBrainApiError.from_http_error(OP_GET_STYLES, exc)
        assert err.kind is ErrorKind.UNEXPECTED
        assert err.status_code is None
        assert err.body is None
        assert "connection refused" in str(err)

    def test_model_not_ready(self):
        err = FusionBrainApiError.model_not_ready(OP_IS_READY, '{"status": "DISABLED_BY_QUEUE"}')
        assert err.kind is ErrorKind.MODEL_NOT_READY
        assert err.body == '{"status": "DISABLED_BY_QUEUE"}'

    @pytest.mark.parametrize(
        "factory, kind",
        [
            (FusionBrainApiError.unauthorized, ErrorKind.UNAUTHORIZED),
            (FusionBrainApiError.expired, ErrorKind.EXPIRED),
            (FusionBrainApiError.bad_request, ErrorKind.LONG_PROMPT_OR_BAD_REQUEST),
            (FusionBrainApiError.unsupported_media, ErrorKind.UNSUPPORTED_MEDIA),
        ],
    )
    def test_factories(self, factory, kind: ErrorKind):
        err = factory(OP_GENERATE)
        assert err.kind is kind
        assert err.body is None

    @pytest.mark.parametrize(
        "operation, status_code, factory",
        [
            (OP_CHECK_TASK, 401, "unauthorized"),
            (OP_CHECK_TASK, 404, "expired"),
            (OP_GENERATE, 400, "bad_request"),
            (OP_GENERATE, 415, "unsupported_media"),
        ],
    )
    def test_from_http_error_uses_factories(self, operation: str, status_code: int, factory: str):
        original = getattr(FusionBrainApiError, factory)
        with mock.patch.object(FusionBrainApiError, factory, wraps=original) as spy:
            err = FusionBrainApiError.from_http_error(operation, _status_error(status_code))
        spy.assert_called_once_with(operation)
        expected = original(operation)
        assert (err.kind, err.status_code, str(err)) == (expected.kind, expected.status_code, str(expected))
