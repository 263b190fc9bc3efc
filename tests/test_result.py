"""Tests for Ok / Error and bind."""

from __future__ import annotations

import pytest

from entangle import Error, Ok, ResultTypeError, UnwrapError, bind, unwrap


@pytest.mark.unit
class TestResult:
    def test_equality(self):
        assert Ok(1) == Ok(1)
        assert Ok(1) != Ok(2)
        assert Ok(1) != Error(1)
        assert Error("x") == Error("x")

    def test_flags(self):
        assert Ok(1).is_ok and not Ok(1).is_error
        assert Error("x").is_error and not Error("x").is_ok


@pytest.mark.unit
class TestBind:
    def test_ok_feeds_the_function(self):
        assert bind(Ok(2), lambda v: Ok(v * 3)) == Ok(6)

    def test_error_short_circuits(self):
        called = []

        def fn(value):
            called.append(value)
            return Ok(value)

        assert bind(Error("nope"), fn) == Error("nope")
        assert called == []

    @pytest.mark.parametrize("value", [None, 1, ("ok", 1), {"ok": 1}])
    def test_rejects_non_results(self, value):
        with pytest.raises(ResultTypeError):
            bind(value, Ok)


@pytest.mark.unit
class TestUnwrap:
    def test_ok(self):
        assert unwrap(Ok("state")) == "state"

    def test_error(self):
        with pytest.raises(UnwrapError) as exc_info:
            unwrap(Error("null division error"))
        assert exc_info.value.reason == "null division error"

    def test_non_result(self):
        with pytest.raises(TypeError):
            unwrap(42)
