import pytest

from meridian.core import retry
from meridian.core.retry import with_retries


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(retry.time, "sleep", recorded.append)
    return recorded


def flaky(failures, exc_type=ConnectionError):
    calls = []

    def call():
        calls.append(1)
        if len(calls) <= failures:
            raise exc_type("down")
        return "ok"

    return call, calls


def test_succeeds_after_transient_failures(sleeps):
    call, calls = flaky(2)
    assert with_retries(max_retries=3, initial_delay=1)(call)() == "ok"
    assert len(calls) == 3
    assert sleeps == [1, 2]


def test_gives_up_after_max_retries(sleeps):
    call, calls = flaky(5)
    with pytest.raises(ConnectionError):
        with_retries(max_retries=2, initial_delay=1)(call)()
    assert len(calls) == 3
    assert sleeps == [1, 2]


def test_rejected_exception_is_not_retried(sleeps):
    call, calls = flaky(1, exc_type=PermissionError)
    wrapped = with_retries(max_retries=3, retry_if=lambda e: not isinstance(e, PermissionError))(call)
    with pytest.raises(PermissionError):
        wrapped()
    assert len(calls) == 1
    assert sleeps == []


def test_zero_retries_calls_once(sleeps):
    call, calls = flaky(1)
    with pytest.raises(ConnectionError):
        with_retries(max_retries=0)(call)()
    assert len(calls) == 1
