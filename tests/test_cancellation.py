import pytest

from mediasearch.autocomplete.cancellation import CancellationToken
from mediasearch.autocomplete.exceptions import LookupCancelledError


def test_cancel_is_idempotent_and_runs_callbacks_once() -> None:
    token = CancellationToken()
    calls = []
    token.on_cancel(lambda: calls.append("first"))
    token.on_cancel(lambda: calls.append("second"))

    token.cancel("superseded")
    token.cancel("again")

    assert token.cancelled is True
    assert token.reason == "superseded"
    assert calls == ["first", "second"]


def test_callback_registered_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls = []

    token.on_cancel(lambda: calls.append(True))

    assert calls == [True]


def test_child_tokens_follow_parent_only() -> None:
    parent = CancellationToken()
    first = parent.child()
    second = parent.child()

    first.cancel()
    assert parent.cancelled is False
    assert second.cancelled is False

    parent.cancel("superseded")
    assert second.cancelled is True
    assert second.reason == "superseded"


def test_raise_if_cancelled() -> None:
    token = CancellationToken()
    token.raise_if_cancelled()

    token.cancel("cleared")

    with pytest.raises(LookupCancelledError, match="cleared"):
        token.raise_if_cancelled()
