"""Incremental search suggestions for MediaSearch backed by Wikibase entity search."""

from .autocomplete.cancellation import CancellationToken
from .autocomplete.coordinator import LookupCoordinator, LookupCycle, LookupRequest, LookupStrategy
from .autocomplete.exceptions import AutocompleteError, LookupCancelledError, LookupTransportError
from .autocomplete.handler import AutocompleteLookupHandler
from .autocomplete.ranking import dedupe_case_insensitive, extract_current_word, rank_suggestions
from .autocomplete.segmenter import InputSegments, build_word_boundary_pattern, segment_input
from .services.entity_search import EntityLookup, EntitySearchClient, EntitySearchClientConfig

__version__ = "0.1.0"

__all__ = [
    "AutocompleteError",
    "AutocompleteLookupHandler",
    "CancellationToken",
    "EntityLookup",
    "EntitySearchClient",
    "EntitySearchClientConfig",
    "InputSegments",
    "LookupCancelledError",
    "LookupCoordinator",
    "LookupCycle",
    "LookupRequest",
    "LookupStrategy",
    "LookupTransportError",
    "build_word_boundary_pattern",
    "dedupe_case_insensitive",
    "extract_current_word",
    "rank_suggestions",
    "segment_input",
]
