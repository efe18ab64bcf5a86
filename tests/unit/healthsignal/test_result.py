"""Tests for the Result type used by the async service layer."""

import pytest

from healthsignal.services.result import Result


class TestResult:
    """Explicit error handling without exceptions."""

    def test_result_ok_creates_successful_result(self) -> None:
        result: Result[str, Exception] = Result.ok("success")
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == "success"

    def test_result_error_creates_failed_result(self) -> None:
        error = ValueError("test error")
        result: Result[str, ValueError] = Result.err(error)
        assert not result.is_ok()
        assert result.is_err()
        assert result.unwrap_or("default") == "default"
        assert result.unwrap_err() is error

    def test_unwrap_raises_on_error_result(self) -> None:
        result: Result[str, ValueError] = Result.err(ValueError("test error"))

        with pytest.raises(ValueError, match="test error"):
            result.unwrap()

    def test_unwrap_err_raises_on_ok_result(self) -> None:
        with pytest.raises(ValueError, match="Ok value"):
            Result.ok(1).unwrap_err()

    def test_empty_collections_are_valid_ok_values(self) -> None:
        result: Result[list[int], Exception] = Result.ok([])
        assert result.is_ok()
        assert result.unwrap() == []

    def test_value_and_error_are_mutually_exclusive(self) -> None:
        with pytest.raises(ValueError, match="both"):
            Result(value=1, error=RuntimeError("boom"))
        with pytest.raises(ValueError, match="either"):
            Result()

    def test_repr_names_the_variant(self) -> None:
        assert repr(Result.ok(3)) == "Result.ok(3)"
        assert repr(Result.err(KeyError("k"))).startswith("Result.err(KeyError")
