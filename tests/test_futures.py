"""Tests for the lazily transforming future."""

from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from unittest.mock import MagicMock

import pytest

from cloud_api_client.exceptions import ResponseParseError, TransportError
from cloud_api_client.rest.futures import TransformingFuture


@pytest.fixture
def inner():
    return Future()


@pytest.fixture
def transform():
    return MagicMock(side_effect=lambda value: value * 2)


class TestTransformingFuture:
    def test_transform_runs_on_result(self, inner, transform):
        future = TransformingFuture(inner, transform)
        inner.set_result(21)
        transform.assert_not_called()
        assert future.result() == 42

    def test_transform_runs_once(self, inner, transform):
        future = TransformingFuture(inner, transform)
        inner.set_result(1)
        assert future.result() == 2
        assert future.result() == 2
        assert future.exception() is None
        assert transform.call_count == 1

    def test_cancel_before_result_skips_transform(self, inner, transform):
        future = TransformingFuture(inner, transform)
        assert future.cancel() is True
        assert future.cancelled()
        assert future.done()
        with pytest.raises(CancelledError):
            future.result()
        transform.assert_not_called()

    def test_timed_out_wait_does_not_transform(self, inner, transform):
        future = TransformingFuture(inner, transform)
        with pytest.raises(FutureTimeoutError):
            future.result(timeout=0.01)
        transform.assert_not_called()

        inner.set_result(5)
        assert future.result(timeout=0.01) == 10

    def test_inner_failure_surfaces_without_transform(self, inner, transform):
        future = TransformingFuture(inner, transform)
        error = TransportError("connection refused")
        inner.set_exception(error)
        with pytest.raises(TransportError):
            future.result()
        assert future.exception() is error
        transform.assert_not_called()

    def test_transform_failure_memoized(self, inner):
        transform = MagicMock(side_effect=ResponseParseError("bad body"))
        future = TransformingFuture(inner, transform)
        inner.set_result(b"{")
        with pytest.raises(ResponseParseError):
            future.result()
        assert isinstance(future.exception(), ResponseParseError)
        assert transform.call_count == 1

    def test_status_delegates_to_inner(self, inner, transform):
        future = TransformingFuture(inner, transform)
        assert not future.done()
        assert not future.running()
        inner.set_running_or_notify_cancel()
        assert future.running()
        inner.set_result(1)
        assert future.done()
        assert not future.cancelled()
        transform.assert_not_called()

    def test_done_callback_receives_wrapper(self, inner, transform):
        future = TransformingFuture(inner, transform)
        seen = []
        future.add_done_callback(seen.append)
        inner.set_result(3)
        assert seen == [future]
        assert seen[0].result() == 6
