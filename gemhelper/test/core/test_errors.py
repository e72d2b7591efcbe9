"""Tests for gemhelper.core.errors."""

from __future__ import annotations

import pytest

from gemhelper.core.errors import ErrorCode, HelperError, exit_code_for


class TestErrorCode:
    """Tests for ErrorCode values."""

    def test_values_are_stable(self) -> None:
        """Test that exit codes never change between releases."""
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.BUILD_ERROR == 3
        assert ErrorCode.NETWORK_ERROR == 4


class TestHelperError:
    """Tests for HelperError."""

    def test_hint_defaults_to_none(self) -> None:
        assert HelperError(kind="setup", message="no gemspec").hint is None

    def test_frozen(self) -> None:
        """Test that errors cannot be mutated after creation."""
        error = HelperError(kind="setup", message="no gemspec")
        with pytest.raises(AttributeError):
            error.message = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("setup", ErrorCode.ENV_ERROR),
        ("config", ErrorCode.ENV_ERROR),
        ("toolchain", ErrorCode.BUILD_ERROR),
        ("subprocess", ErrorCode.BUILD_ERROR),
        ("precondition", ErrorCode.USER_ERROR),
        ("unknown_task", ErrorCode.USER_ERROR),
        ("remote_config", ErrorCode.NETWORK_ERROR),
    ],
)
def test_exit_code_for(kind: str, code: ErrorCode) -> None:
    """Test the exit code chosen for each error kind."""
    assert exit_code_for(HelperError(kind=kind, message="x")) == code  # type: ignore[arg-type]
