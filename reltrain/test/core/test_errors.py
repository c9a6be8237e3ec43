"""Tests for reltrain.core.errors module."""

from reltrain.core.errors import ErrorCode


def test_exit_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.CONFIG_ERROR) == 2
    assert int(ErrorCode.PHASE_FAILED) == 3
    assert int(ErrorCode.NETWORK_ERROR) == 4


def test_str_is_readable() -> None:
    assert str(ErrorCode.PHASE_FAILED) == "phase failed"


def test_is_success() -> None:
    assert ErrorCode.OK.is_success
    assert not ErrorCode.CONFIG_ERROR.is_success
