"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import pytest

from realmctl.domain.errors import NotFound, TransportFailure, ValidationError
from realmctl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_minimal_success(self) -> None:
        result = ServiceResult(ok=True, op="list_chambers")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="view_chamber")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult(
            ok=False,
            op="create_chamber",
            error=ServiceError(code="VALIDATION_ERROR", message="bad", detail={"name": ".."}),
        )
        restored = ServiceResult.model_validate_json(result.model_dump_json())
        assert restored == result


class TestServiceErrorFromException:
    def test_keeps_code_and_message(self) -> None:
        error = ServiceError.from_exception(ValidationError("Invalid chamber name: '.'"), name=".")
        assert error.code == "VALIDATION_ERROR"
        assert error.message == "Invalid chamber name: '.'"
        assert error.detail == {"name": "."}

    def test_adds_status_code(self) -> None:
        error = ServiceError.from_exception(TransportFailure("down", status_code=502))
        assert error.detail == {"status_code": 502}

    def test_no_status_code_when_absent(self) -> None:
        error = ServiceError.from_exception(NotFound("/x/"))
        assert error.code == "NOT_FOUND"
        assert error.detail == {}
