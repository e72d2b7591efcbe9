"""Tests for gemhelper.core.result."""

from __future__ import annotations

import pytest

from gemhelper.core.result import Err, Ok, Result


class TestOk:
    """Tests for the Ok variant."""

    def test_equality(self) -> None:
        """Test that Ok compares by value."""
        assert Ok(3) == Ok(3)
        assert Ok(3) != Ok(4)
        assert Ok(3) != Err(3)

    def test_frozen(self) -> None:
        """Test that Ok cannot be mutated."""
        ok = Ok(1)
        with pytest.raises(AttributeError):
            ok.value = 2  # type: ignore[misc]

    def test_repr(self) -> None:
        assert repr(Ok([1])) == "Ok([1])"


class TestErr:
    """Tests for the Err variant."""

    def test_carries_error(self) -> None:
        """Test that the error value is kept as given."""
        assert Err("boom").error == "boom"

    def test_repr(self) -> None:
        assert repr(Err("x")) == "Err('x')"


def test_pattern_matching() -> None:
    """Test that both variants destructure in match statements."""

    def describe(r: Result[int, str]) -> str:
        match r:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok(1)) == "ok 1"
    assert describe(Err("x")) == "err x"
