import asyncio

import pytest

from mediasearch.autocomplete.exceptions import LookupTransportError
from mediasearch.autocomplete.handler import AutocompleteLookupHandler
from mediasearch.core.config import Settings
from tests.helpers.stubs import StubEntityLookup, drain


pytestmark = pytest.mark.asyncio


def _handler(backend: StubEntityLookup, **kwargs) -> AutocompleteLookupHandler:
    kwargs.setdefault("settings", Settings())
    return AutocompleteLookupHandler(backend, **kwargs)


async def test_empty_input_clears_results_without_lookups() -> None:
    backend = StubEntityLookup({"cat": ["cat"]})
    handler = _handler(backend)
    published = []
    handler.subscribe(published.append)
    await handler.get_lookup_results("cat")

    result = await handler.get_lookup_results("   ")

    assert result == []
    assert handler.lookup_results == []
    assert backend.terms == ["cat"]
    assert published == [["cat"], []]


async def test_blue_ca_prefers_full_phrase_completions() -> None:
    backend = StubEntityLookup({"blue ca": ["blue cat", "Blue Cat"], "ca": ["car", "cat"]})
    handler = _handler(backend, language="fr")

    result = await handler.get_lookup_results("blue ca")

    assert result == ["cat", "car"]
    assert handler.lookup_results == ["cat", "car"]
    assert sorted(backend.calls) == [("blue ca", "fr"), ("ca", "fr")]


async def test_single_word_input_issues_one_lookup() -> None:
    backend = StubEntityLookup({"cat": ["cat", "Cat", "catamaran", "Catalonia"]})
    handler = _handler(backend)

    result = await handler.get_lookup_results("cat")

    assert backend.terms == ["cat"]
    assert result == ["cat", "catamaran", "Catalonia"]


async def test_results_never_exceed_limit() -> None:
    backend = StubEntityLookup({"te": [f"term{index}" for index in range(50)]})
    handler = _handler(backend)

    result = await handler.get_lookup_results("te")

    assert handler.lookup_results_limit == 7
    assert result == [f"term{index}" for index in range(7)]


async def test_limit_comes_from_settings_or_argument() -> None:
    backend = StubEntityLookup({"te": ["tea", "ten", "tent", "test"]})
    configured = _handler(backend, settings=Settings(autocomplete={"lookup_results_limit": 2}))
    explicit = _handler(backend, lookup_results_limit=3)

    assert await configured.get_lookup_results("te") == ["tea", "ten"]
    assert await explicit.get_lookup_results("te") == ["tea", "ten", "tent"]


async def test_superseded_lookup_never_updates_results() -> None:
    backend = StubEntityLookup({"blue": ["blue"], "blue c": ["blue cat"], "c": ["car"]})
    gate = backend.hold("blue")
    handler = _handler(backend)
    published = []
    handler.subscribe(published.append)

    stale = asyncio.create_task(handler.get_lookup_results("blue"))
    await drain()
    fresh = await handler.get_lookup_results("blue c")
    gate.set()

    assert await stale is None
    assert fresh == ["cat", "car"]
    assert handler.lookup_results == ["cat", "car"]
    assert published == [["cat", "car"]]


async def test_late_response_after_supersede_is_discarded() -> None:
    backend = StubEntityLookup({"blue": ["blue"], "blue c": ["blue cat"], "c": []}, ignore_cancellation=True)
    gate = backend.hold("blue")
    handler = _handler(backend)

    stale = asyncio.create_task(handler.get_lookup_results("blue"))
    await drain()
    await handler.get_lookup_results("blue c")
    gate.set()

    assert await stale is None
    assert "blue" in backend.completed_terms
    assert handler.lookup_results == ["cat"]


async def test_keystrokes_scheduled_back_to_back_commit_latest_only() -> None:
    backend = StubEntityLookup({"c": ["cat"], "ca": ["car"], "cat": ["catalog"]})
    handler = _handler(backend)

    tasks = [asyncio.create_task(handler.get_lookup_results(text)) for text in ("c", "ca", "cat")]
    results = await asyncio.gather(*tasks)

    assert results == [None, None, ["catalog"]]
    assert handler.lookup_results == ["catalog"]


async def test_transport_failure_propagates_and_keeps_previous_results() -> None:
    backend = StubEntityLookup(
        {"cat": ["cat"]},
        failures={"dog": LookupTransportError("backend down", term="dog")},
    )
    handler = _handler(backend)
    await handler.get_lookup_results("cat")

    with pytest.raises(LookupTransportError):
        await handler.get_lookup_results("dog")

    assert handler.lookup_results == ["cat"]


async def test_clear_lookup_results_cancels_pending_cycle() -> None:
    backend = StubEntityLookup({"cat": ["cat"]})
    gate = backend.hold("cat")
    handler = _handler(backend)

    pending = asyncio.create_task(handler.get_lookup_results("cat"))
    await drain()
    handler.clear_lookup_results()
    gate.set()

    assert handler.lookup_results == []
    assert await pending is None
    assert handler.lookup_results == []


async def test_unsubscribe_stops_notifications() -> None:
    backend = StubEntityLookup({"cat": ["cat"]})
    handler = _handler(backend)
    published = []
    unsubscribe = handler.subscribe(published.append)

    handler.clear_lookup_results()
    unsubscribe()
    unsubscribe()
    await handler.get_lookup_results("cat")

    assert published == [[]]
    assert handler.lookup_results == ["cat"]


async def test_lookup_results_is_a_copy() -> None:
    backend = StubEntityLookup({"cat": ["cat"]})
    handler = _handler(backend)
    await handler.get_lookup_results("cat")

    handler.lookup_results.append("mutated")

    assert handler.lookup_results == ["cat"]


async def test_independent_handlers_do_not_interfere() -> None:
    backend = StubEntityLookup({"cat": ["cat"], "dog": ["dog"]})
    first = _handler(backend)
    second = _handler(backend)

    results = await asyncio.gather(first.get_lookup_results("cat"), second.get_lookup_results("dog"))

    assert results == [["cat"], ["dog"]]


async def test_cancelled_request_discards_cycle_without_cancelling_caller() -> None:
    backend = StubEntityLookup({"cat": ["cat"], "blue ca": ["blue cat"], "ca": ["car"]})
    backend.hold("ca")
    handler = _handler(backend)
    await handler.get_lookup_results("cat")

    pending = asyncio.create_task(handler.get_lookup_results("blue ca"))
    await drain()
    handler.coordinator.current_cycle.requests[1].cancel()

    assert await pending is None
    assert not pending.cancelled()
    assert handler.lookup_results == ["cat"]
