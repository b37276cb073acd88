"""Unit tests for the error taxonomy."""

from __future__ import annotations

import logging

import pytest

from design_system_mcp.errors import (
    DesignSystemError,
    ErrorKind,
    configuration_error,
    data_error,
    internal_error,
    invalid_query,
    is_retryable,
    normalize_error,
    not_found,
    run_guarded,
    service_unavailable,
    severity,
    timeout_error,
)


class TestKinds:
    """Tests for per-kind defaults."""

    @pytest.mark.parametrize(
        ("err", "code", "status", "retryable", "level"),
        [
            (data_error("bad"), "INVALID_DATA", 400, False, "medium"),
            (invalid_query("bad"), "INVALID_QUERY", 400, False, "low"),
            (not_found("Token", "x"), "RESOURCE_NOT_FOUND", 404, False, "low"),
            (service_unavailable("tokens"), "SERVICE_UNAVAILABLE", 503, True, "high"),
            (timeout_error("load", 1.0), "SERVICE_TIMEOUT", 408, True, "high"),
            (configuration_error("port", "bad"), "CONFIGURATION_ERROR", 500, False, "critical"),
            (internal_error("bad"), "INTERNAL_ERROR", 500, False, "critical"),
        ],
    )
    def test_defaults(
        self, err: DesignSystemError, code: str, status: int, retryable: bool, level: str
    ) -> None:
        assert err.code == code
        assert err.status_code == status
        assert err.retryable is retryable
        assert is_retryable(err) is retryable
        assert severity(err) == level

    def test_explicit_overrides(self) -> None:
        err = DesignSystemError(ErrorKind.DATA, "bad", retryable=True, status_code=422)
        assert err.retryable is True
        assert err.status_code == 422

    def test_plain_exceptions_are_not_retryable(self) -> None:
        assert is_retryable(TimeoutError()) is False


class TestMessages:
    """Tests for constructor messages and serialization."""

    def test_constructor_messages(self) -> None:
        assert not_found("Design token", "primary-red").message == 'Design token "primary-red" not found'
        assert service_unavailable("tokens", "circuit open").message == (
            "Service tokens is unavailable: circuit open"
        )
        assert timeout_error("tokens", 0.05).message == 'Operation "tokens" timed out after 50ms'
        assert configuration_error("server.port", "must be 1..65535").message == (
            'Configuration error for "server.port": must be 1..65535'
        )

    def test_user_message_lists_suggestions(self) -> None:
        err = invalid_query("query must be a non-empty string", suggestions=["Pass a name"])
        assert err.user_message() == (
            "query must be a non-empty string\n\nSuggestions:\n• Pass a name"
        )
        assert internal_error("oops").user_message() == "oops"

    def test_to_dict(self) -> None:
        body = not_found("Component", "Modal", suggestions=["Check spelling"]).to_dict()
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert body["error"]["message"] == 'Component "Modal" not found'
        assert body["error"]["suggestions"] == ["Check spelling"]
        assert body["error"]["retryable"] is False
        assert body["error"]["timestamp"].endswith("+00:00")

    def test_cause_is_chained(self) -> None:
        cause = ValueError("bad json")
        err = data_error("Invalid JSON", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause


class TestNormalize:
    """Tests for normalize_error()."""

    def test_passes_through_design_system_errors(self) -> None:
        err = not_found("Token", "x", context={"service": "A"})
        result = normalize_error(err, {"service": "B", "method": "m"})
        assert result is err
        assert err.context["service"] == "A"
        assert err.context["method"] == "m"

    def test_wraps_other_exceptions_as_internal(self) -> None:
        cause = KeyError("missing")
        err = normalize_error(cause, {"service": "tokens"})
        assert err.kind is ErrorKind.INTERNAL
        assert err.cause is cause
        assert err.context == {"service": "tokens"}

    def test_empty_message_uses_type_name(self) -> None:
        assert normalize_error(RuntimeError()).message == "RuntimeError"


class TestRunGuarded:
    """Tests for run_guarded()."""

    @pytest.mark.asyncio
    async def test_returns_result(self) -> None:
        async def op() -> int:
            return 42

        assert await run_guarded("tokens", "get_token", op) == 42

    @pytest.mark.asyncio
    async def test_reraises_design_system_errors(self) -> None:
        original = not_found("Token", "x")

        async def op() -> None:
            raise original

        with pytest.raises(DesignSystemError) as exc_info:
            await run_guarded("tokens", "get_token", op)
        assert exc_info.value is original
        assert original.context["method"] == "get_token"
        assert "duration_ms" in original.context

    @pytest.mark.asyncio
    async def test_wraps_and_logs_unexpected_errors(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def op() -> None:
            1 / 0

        with caplog.at_level(logging.ERROR, logger="design_system_mcp.errors"):
            with pytest.raises(DesignSystemError) as exc_info:
                await run_guarded("tokens", "get_token", op)
        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)
        assert "INTERNAL_ERROR [critical] division by zero" in caplog.text
