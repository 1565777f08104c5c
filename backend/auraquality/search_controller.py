"""Location search autocomplete.

A small state machine driven by text changes from the search box:

    IDLE -> DEBOUNCING -> FETCHING -> SUGGESTED
                 ^            |
                 +------------+-- (empty result / failure) -> IDLE

Every superseding transition cancels the pending debounce timer and bumps a
generation counter. A lookup whose generation is no longer current has its
result dropped, so the last transition wins regardless of the order in which
responses arrive.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Coroutine, List, Optional, Set, Tuple

from .geocoding import GeocodingError, LocationNotFoundError
from .models import LocationSuggestion

logger = logging.getLogger(__name__)


SearchFn = Callable[[str, int], Awaitable[List[LocationSuggestion]]]
SelectFn = Callable[[LocationSuggestion], Awaitable[None]]


class SearchState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    SUGGESTED = "suggested"


class SearchSuggestionController:
    def __init__(
        self,
        search: SearchFn,
        *,
        on_select: Optional[SelectFn] = None,
        debounce_seconds: float = 0.3,
        blur_grace_seconds: float = 0.15,
        min_query_length: int = 3,
        max_suggestions: int = 5,
    ):
        self._search = search
        self._on_select = on_select
        self.debounce_seconds = debounce_seconds
        self.blur_grace_seconds = blur_grace_seconds
        self.min_query_length = min_query_length
        self.max_suggestions = max_suggestions

        self.query = ""
        self.suggestions: Tuple[LocationSuggestion, ...] = ()
        self.state = SearchState.IDLE

        # One-shot: set by a programmatic text update, consumed by the very
        # next reaction to a text change.
        self._suppress_next_lookup = False
        self._generation = 0

        self._debounce_task: Optional[asyncio.Task] = None
        self._blur_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Text changes
    # ------------------------------------------------------------------

    def on_user_input(self, text: str):
        """Text typed into the search box."""
        self._set_query(text)

    def set_query_programmatically(self, text: str):
        """Replace the box text without starting a lookup (map click, accepted suggestion)."""
        self._suppress_next_lookup = True
        self._set_query(text)

    def _set_query(self, text: str):
        self.query = text
        self._on_query_changed()

    def _on_query_changed(self):
        self._invalidate()

        if self._suppress_next_lookup:
            self._suppress_next_lookup = False
            self._clear_suggestions()
            return

        text = self.query.strip()
        if len(text) < self.min_query_length:
            self._clear_suggestions()
            return

        self.suggestions = ()
        self.state = SearchState.DEBOUNCING
        self._debounce_task = self._spawn(
            self._debounced_lookup(text, self._generation),
            name="aura-search-debounce",
        )

    async def _debounced_lookup(self, text: str, generation: int):
        await asyncio.sleep(self.debounce_seconds)
        if generation != self._generation:
            return

        # The timer has elapsed: from here on the lookup is only ever
        # superseded, never cancelled.
        self._debounce_task = None
        self.state = SearchState.FETCHING

        try:
            results = await self._search(text, self.max_suggestions)
        except asyncio.CancelledError:
            raise
        except GeocodingError as e:
            logger.warning("[search] suggestion lookup for %r failed: %s", text, e)
            results = []
        except Exception as e:
            # Any lookup failure ends in an empty list.
            logger.exception("[search] suggestion lookup for %r raised: %s", text, e)
            results = []

        if generation != self._generation:
            logger.debug("[search] dropping stale suggestions for %r", text)
            return

        results = list(results)[: self.max_suggestions]
        if results:
            self.suggestions = tuple(results)
            self.state = SearchState.SUGGESTED
        else:
            self._clear_suggestions()

    # ------------------------------------------------------------------
    # Selection, submission, focus
    # ------------------------------------------------------------------

    async def select(self, suggestion: LocationSuggestion):
        """Accept a suggestion: update the box and hand the location on."""
        self._cancel_blur()
        self.set_query_programmatically(suggestion.name)
        if self._on_select is not None:
            await self._on_select(suggestion)

    async def submit(self) -> Optional[LocationSuggestion]:
        """Form submission.

        With suggestions showing, the first one is accepted. Otherwise the
        query is resolved with a single-result lookup.

        Raises:
            LocationNotFoundError: the lookup matched nothing.
            GeocodingError: the lookup itself failed.
        """
        query = self.query.strip()
        if not query:
            return None

        if self.suggestions:
            first = self.suggestions[0]
            await self.select(first)
            return first

        self._invalidate()
        self._clear_suggestions()
        generation = self._generation

        results = await self._search(query, 1)
        if generation != self._generation:
            # The box changed while we were resolving; the newer input wins.
            return None
        if not results:
            raise LocationNotFoundError(query)

        match = results[0]
        await self.select(match)
        return match

    def on_blur(self):
        """Clear suggestions after a short grace so a click-selection can land first."""
        self._cancel_blur()
        self._blur_task = self._spawn(self._clear_after_grace(), name="aura-search-blur")

    def on_focus(self):
        self._cancel_blur()

    async def _clear_after_grace(self):
        await asyncio.sleep(self.blur_grace_seconds)
        self._blur_task = None
        self._invalidate()
        self._clear_suggestions()

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine, *, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _invalidate(self):
        self._generation += 1
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    def _cancel_blur(self):
        if self._blur_task is not None and not self._blur_task.done():
            self._blur_task.cancel()
        self._blur_task = None

    def _clear_suggestions(self):
        self.suggestions = ()
        self.state = SearchState.IDLE

    async def close(self):
        """Cancel every pending timer and in-flight lookup."""
        self._generation += 1
        self._debounce_task = None
        self._blur_task = None

        current = asyncio.current_task()
        tasks = [t for t in self._tasks if t is not current]
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._clear_suggestions()
