"""Issue, join and cancel the remote lookups for one keystroke."""

from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..core import metrics
from ..core.logging import get_logger
from .cancellation import CancellationToken
from .exceptions import LookupCancelledError, LookupTransportError
from .segmenter import InputSegments

if TYPE_CHECKING:
    from ..services.entity_search import EntityLookup

logger = get_logger(name=__name__)

_cycle_ids = itertools.count(1)


def _retrieve_outcome(task: asyncio.Task[list[str]]) -> None:
    # Failures surface through LookupCycle.join; sibling failures are not re-raised.
    if not task.cancelled():
        task.exception()


class LookupStrategy(str, Enum):
    FULL_PHRASE = "full_phrase"
    LAST_WORD = "last_word"


@dataclass
class LookupRequest:
    """One outstanding remote query belonging to a cycle."""

    term: str
    strategy: LookupStrategy
    token: CancellationToken
    task: asyncio.Task[list[str]]

    def cancel(self) -> None:
        self.token.cancel("request cancelled")


@dataclass
class LookupCycle:
    """All requests issued for one input event, joined as a single operation."""

    cycle_id: int
    segments: InputSegments
    token: CancellationToken
    requests: list[LookupRequest] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    @property
    def done(self) -> bool:
        return all(request.task.done() for request in self.requests)

    def cancel(self, reason: str = "superseded") -> None:
        self.token.cancel(reason)

    def _raise_if_cancelled(self) -> None:
        # A single cancelled request voids the whole cycle; no partial results.
        for request in self.requests:
            if request.token.cancelled and not self.cancelled:
                self.cancel(request.token.reason or "request cancelled")
        self.token.raise_if_cancelled()

    async def join(self) -> list[str]:
        """Return candidate phrases, full-phrase results ahead of last-word ones.

        Raises :class:`LookupCancelledError` if the cycle was cancelled, even
        when every response already arrived.
        """
        self._raise_if_cancelled()
        try:
            results = await asyncio.gather(*(request.task for request in self.requests))
        except asyncio.CancelledError:
            if self.cancelled or any(request.token.cancelled for request in self.requests):
                self._raise_if_cancelled()
            self.cancel("caller cancelled")
            raise
        except LookupCancelledError:
            self._raise_if_cancelled()
            raise
        except Exception as exc:
            if self.cancelled:
                raise LookupCancelledError(self.token.reason or "lookup cancelled") from exc
            # No partial results: stop whatever is still running.
            self.cancel("sibling request failed")
            if isinstance(exc, LookupTransportError):
                raise
            raise LookupTransportError(f"lookup failed: {exc}") from exc
        self._raise_if_cancelled()
        return [candidate for result in results for candidate in result]


class LookupCoordinator:
    """Owns the current lookup cycle of one search box.

    :meth:`start_lookup` is synchronous: the previous cycle is cancelled and
    the new one installed before control returns to the event loop.
    """

    def __init__(
        self,
        backend: EntityLookup,
        *,
        language: str,
        last_word_lookup: bool = True,
    ) -> None:
        self._backend = backend
        self.language = language
        self.last_word_lookup = last_word_lookup
        self._current: LookupCycle | None = None

    @property
    def current_cycle(self) -> LookupCycle | None:
        return self._current

    def cancel_current(self, reason: str = "superseded") -> None:
        cycle = self._current
        if cycle is None:
            return
        if not cycle.cancelled and not cycle.done:
            metrics.increment_lookup_cycle(status="superseded")
            logger.debug("lookup_cycle_cancelled", cycle_id=cycle.cycle_id, reason=reason)
        cycle.cancel(reason)

    def start_lookup(self, segments: InputSegments) -> LookupCycle:
        self.cancel_current()

        cycle = LookupCycle(cycle_id=next(_cycle_ids), segments=segments, token=CancellationToken())
        cycle.requests.append(self._issue(cycle, segments.full_phrase, LookupStrategy.FULL_PHRASE))
        if self.last_word_lookup and segments.needs_last_word_lookup and segments.last_word:
            cycle.requests.append(self._issue(cycle, segments.last_word, LookupStrategy.LAST_WORD))
        self._current = cycle

        logger.debug(
            "lookup_cycle_started",
            cycle_id=cycle.cycle_id,
            terms=[request.term for request in cycle.requests],
        )
        return cycle

    def _issue(self, cycle: LookupCycle, term: str, strategy: LookupStrategy) -> LookupRequest:
        token = cycle.token.child()
        task = asyncio.create_task(self._run_request(cycle.segments, term, strategy, token))
        task.add_done_callback(_retrieve_outcome)
        token.on_cancel(task.cancel)
        return LookupRequest(term=term, strategy=strategy, token=token, task=task)

    async def _run_request(
        self,
        segments: InputSegments,
        term: str,
        strategy: LookupStrategy,
        token: CancellationToken,
    ) -> list[str]:
        start = time.perf_counter()
        try:
            response = await self._backend.lookup(term, self.language, token=token)
        except (asyncio.CancelledError, LookupCancelledError):
            metrics.observe_lookup_request(strategy=strategy.value, outcome="cancelled")
            raise
        except Exception:
            metrics.observe_lookup_request(
                strategy=strategy.value,
                outcome="failed",
                latency=time.perf_counter() - start,
            )
            raise
        metrics.observe_lookup_request(
            strategy=strategy.value,
            outcome="succeeded",
            latency=time.perf_counter() - start,
        )

        texts = list(response.matched_texts())
        if strategy is LookupStrategy.LAST_WORD:
            texts = [segments.substitute_last_word(text) for text in texts]
        return texts


__all__ = ["LookupCoordinator", "LookupCycle", "LookupRequest", "LookupStrategy"]
