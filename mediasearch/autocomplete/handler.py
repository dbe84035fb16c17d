"""Search-box autocomplete: turns keystrokes into a bounded suggestion list.

The handler:
- takes the current search input
- looks up potential completions for the whole input and, for multi-word
  input, for the last word alone
- keeps only the completion of the word being typed
- drops case-insensitive duplicates
- trims the list to ``lookup_results_limit``
- publishes the list to subscribers
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..core import metrics
from ..core.config import Settings, get_settings
from ..core.logging import configure_logging, get_logger
from ..services.entity_search import EntitySearchClient
from .coordinator import LookupCoordinator
from .exceptions import LookupCancelledError, LookupTransportError
from .ranking import rank_suggestions
from .segmenter import segment_input

if TYPE_CHECKING:
    from ..services.entity_search import EntityLookup

logger = get_logger(name=__name__)

ResultsListener = Callable[[list[str]], None]


class AutocompleteLookupHandler:
    def __init__(
        self,
        backend: EntityLookup,
        *,
        language: str | None = None,
        lookup_results_limit: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        resolved = settings or get_settings()
        self.lookup_results_limit = (
            lookup_results_limit
            if lookup_results_limit is not None
            else resolved.autocomplete.lookup_results_limit
        )
        self._coordinator = LookupCoordinator(
            backend,
            language=language or resolved.entity_search.user_language,
            last_word_lookup=resolved.autocomplete.last_word_lookup_enabled,
        )
        self._lookup_results: list[str] = []
        self._listeners: list[ResultsListener] = []
        self._owned_client: EntitySearchClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> AutocompleteLookupHandler:
        """Build a handler backed by an entity search client, with logging configured."""
        resolved = settings or get_settings()
        configure_logging(resolved)
        client = EntitySearchClient.from_settings(resolved.entity_search)
        handler = cls(client, settings=resolved)
        handler._owned_client = client
        logger.info(
            "autocomplete_handler_created",
            api_url=client.config.api_url,
            language=handler.coordinator.language,
            lookup_results_limit=handler.lookup_results_limit,
        )
        return handler

    async def aclose(self) -> None:
        self._coordinator.cancel_current("closed")
        if self._owned_client is not None:
            await self._owned_client.aclose()

    @property
    def lookup_results(self) -> list[str]:
        return list(self._lookup_results)

    @property
    def coordinator(self) -> LookupCoordinator:
        return self._coordinator

    def subscribe(self, listener: ResultsListener) -> Callable[[], None]:
        """Call ``listener`` with the new list whenever results change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear_lookup_results(self) -> None:
        self._coordinator.cancel_current("cleared")
        self._commit([])

    async def get_lookup_results(self, search_input: str) -> list[str] | None:
        """Look up suggestions for ``search_input`` and publish them.

        Returns the committed suggestions, or ``None`` when a newer input
        superseded this one. Transport failures propagate as
        :class:`LookupTransportError` and leave the current results in place.
        """
        segments = segment_input(search_input)
        if segments is None:
            self._coordinator.cancel_current("empty input")
            metrics.increment_lookup_cycle(status="empty")
            self._commit([])
            return []

        cycle = self._coordinator.start_lookup(segments)
        try:
            candidates = await cycle.join()
        except LookupCancelledError:
            return None
        except LookupTransportError as exc:
            metrics.increment_lookup_cycle(status="failed")
            logger.warning("lookup_cycle_failed", cycle_id=cycle.cycle_id, term=exc.term, error=str(exc))
            raise

        suggestions = rank_suggestions(candidates, segments.word_boundary_pattern, self.lookup_results_limit)
        metrics.increment_lookup_cycle(status="committed")
        metrics.observe_suggestions(count=len(suggestions))
        logger.debug(
            "lookup_cycle_committed",
            cycle_id=cycle.cycle_id,
            candidates=len(candidates),
            suggestions=len(suggestions),
        )
        self._commit(suggestions)
        return suggestions

    def _commit(self, results: list[str]) -> None:
        self._lookup_results = list(results)
        for listener in list(self._listeners):
            listener(self.lookup_results)


__all__ = ["AutocompleteLookupHandler", "ResultsListener"]
