"""Tests for reltrain.core.result module."""

import pytest

from reltrain.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_create_ok(self) -> None:
        result = Ok(42)
        assert result.value == 42

    def test_ok_flags(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or(self) -> None:
        """Ok.unwrap_or() returns the value, ignoring default."""
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err(self) -> None:
        """Ok.map_err() returns self unchanged."""
        result = Ok(42)
        assert result.map_err(lambda e: f"error: {e}") == Ok(42)

    def test_ok_repr(self) -> None:
        assert repr(Ok("main")) == "Ok('main')"


class TestErr:
    """Tests for Err type."""

    def test_create_err(self) -> None:
        result = Err("boom")
        assert result.error == "boom"

    def test_err_flags(self) -> None:
        result = Err("boom")
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err: boom"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map(self) -> None:
        """Err.map() returns self unchanged."""
        result = Err("boom")
        assert result.map(lambda x: x * 2) == Err("boom")

    def test_err_map_err(self) -> None:
        assert Err(404).map_err(lambda code: f"status {code}") == Err("status 404")

    def test_err_repr(self) -> None:
        assert repr(Err("boom")) == "Err('boom')"


class TestTypeGuards:
    def test_is_ok(self) -> None:
        result: Result[int, str] = Ok(1)
        assert is_ok(result)
        assert not is_err(result)

    def test_is_err(self) -> None:
        result: Result[int, str] = Err("x")
        assert is_err(result)
        assert not is_ok(result)


class TestPatternMatching:
    def test_match_ok(self) -> None:
        result: Result[int, str] = Ok(3)
        match result:
            case Ok(value):
                assert value == 3
            case Err(_):
                pytest.fail("expected Ok")

    def test_match_err(self) -> None:
        result: Result[int, str] = Err("bad")
        match result:
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert error == "bad"
