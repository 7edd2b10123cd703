"""Debounced, generation-guarded AI enrichment for search text and selected records."""
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, Protocol, Set, TypeVar

from formulary.ai.llm import ConfigurationError, EnrichmentError, LLMClient, MalformedResponse
from formulary.ai.prompts import PromptSpec, detail_explanation_prompt, search_summary_prompt
from formulary.config import get_settings
from formulary.ingest.models import MedicineRecord

logger = logging.getLogger(__name__)

P = TypeVar("P")

# Search terms this short clear the summary instead of requesting one.
MAX_CLEARING_LENGTH = 2
SEARCH_FAILURE_MESSAGE = "Could not generate summary."
DETAIL_FAILURE_MESSAGE = (
    "**Error:** Could not connect to the AI Assistant. Please check your API key and connection."
)
DETAIL_MALFORMED_MESSAGE = "Sorry, I couldn't generate an explanation."


class SlotState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class EnrichmentRequest:
    subject_key: str
    generation: int


@dataclass(frozen=True)
class SlotSnapshot:
    slot: str
    state: SlotState
    text: str
    generation: int
    subject_key: Optional[str] = None


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Source of delayed callbacks used for debouncing."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio event loop."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay_s, callback)


@dataclass(order=True)
class _VirtualTimer:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Deterministic clock: timers fire only when ``advance`` moves time past them."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._timers: List[_VirtualTimer] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(due=self.now + delay_s, seq=next(self._seq), callback=callback)
        heapq.heappush(self._timers, timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now = timer.due
            timer.callback()
        self.now = target


class EnrichmentSlot(Generic[P]):
    """One independent enrichment state machine.

    Every subject change bumps the generation; a completion is applied only if
    it still belongs to the current generation, so an older response can never
    overwrite a newer one. Superseded requests are left to finish and ignored.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[P], Awaitable[str]],
        failure_message: str,
        malformed_message: Optional[str] = None,
        debounce_s: float = 0.0,
        scheduler: Optional[Scheduler] = None,
        listener: Optional[Callable[[SlotSnapshot], None]] = None,
    ) -> None:
        self.name = name
        self.failure_message = failure_message
        self.malformed_message = malformed_message or failure_message
        self.debounce_s = debounce_s
        self.scheduler = scheduler or LoopScheduler()
        self.listener = listener
        self._fetch = fetch
        self._state = SlotState.IDLE
        self._text = ""
        self._generation = 0
        self._subject_key: Optional[str] = None
        self._timer: Optional[TimerHandle] = None
        self._tasks: Set["asyncio.Task[None]"] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> SlotSnapshot:
        return SlotSnapshot(
            slot=self.name,
            state=self._state,
            text=self._text,
            generation=self._generation,
            subject_key=self._subject_key,
        )

    def submit(self, subject_key: str, payload: P) -> EnrichmentRequest:
        """Start enrichment for a new subject, superseding whatever came before."""
        self._cancel_timer()
        self._generation += 1
        request = EnrichmentRequest(subject_key=subject_key, generation=self._generation)
        self._subject_key = subject_key
        self._set(SlotState.PENDING, "")

        if self.debounce_s > 0:
            self._timer = self.scheduler.call_later(self.debounce_s, lambda: self._dispatch(request, payload))
        else:
            self._dispatch(request, payload)
        return request

    def clear(self) -> None:
        """Drop the current subject; any in-flight result will be ignored."""
        self._cancel_timer()
        self._generation += 1
        self._subject_key = None
        self._set(SlotState.IDLE, "")

    async def drain(self) -> None:
        """Wait for every outstanding request, current or superseded."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _dispatch(self, request: EnrichmentRequest, payload: P) -> None:
        self._timer = None
        if request.generation != self._generation:
            return
        logger.debug("%s slot fetching generation %d for %r", self.name, request.generation, request.subject_key)
        task = asyncio.get_running_loop().create_task(self._run(request, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, request: EnrichmentRequest, payload: P) -> None:
        try:
            text = await self._fetch(payload)
        except ConfigurationError as exc:
            logger.error("%s enrichment misconfigured: %s", self.name, exc)
            self._apply(request, SlotState.FAILED, str(exc))
        except MalformedResponse as exc:
            logger.warning("%s enrichment got an unusable response for %r: %s", self.name, request.subject_key, exc)
            self._apply(request, SlotState.FAILED, self.malformed_message)
        except EnrichmentError as exc:
            logger.warning("%s enrichment failed for %r: %s", self.name, request.subject_key, exc)
            self._apply(request, SlotState.FAILED, self.failure_message)
        except Exception:
            logger.exception("%s enrichment crashed for %r", self.name, request.subject_key)
            self._apply(request, SlotState.FAILED, self.failure_message)
        else:
            self._apply(request, SlotState.RESOLVED, text)

    def _apply(self, request: EnrichmentRequest, state: SlotState, text: str) -> None:
        if request.generation != self._generation:
            logger.debug(
                "%s slot discarded stale generation %d (current %d)",
                self.name,
                request.generation,
                self._generation,
            )
            return
        self._set(state, text)

    def _set(self, state: SlotState, text: str) -> None:
        self._state = state
        self._text = text
        if self.listener is not None:
            self.listener(self.snapshot())


class EnrichmentController:
    """Drives the search-summary and detail-explanation slots from UI events."""

    def __init__(
        self,
        llm: LLMClient,
        scheduler: Optional[Scheduler] = None,
        debounce_s: Optional[float] = None,
        listener: Optional[Callable[[SlotSnapshot], None]] = None,
    ) -> None:
        self.llm = llm
        debounce_s = get_settings().search_debounce_s if debounce_s is None else debounce_s
        self.search_slot: EnrichmentSlot[str] = EnrichmentSlot(
            "search",
            lambda term: self._generate(search_summary_prompt(term)),
            failure_message=SEARCH_FAILURE_MESSAGE,
            debounce_s=debounce_s,
            scheduler=scheduler,
            listener=listener,
        )
        self.detail_slot: EnrichmentSlot[MedicineRecord] = EnrichmentSlot(
            "detail",
            lambda record: self._generate(detail_explanation_prompt(record)),
            failure_message=DETAIL_FAILURE_MESSAGE,
            malformed_message=DETAIL_MALFORMED_MESSAGE,
            scheduler=scheduler,
            listener=listener,
        )

    async def _generate(self, spec: PromptSpec) -> str:
        content = await self.llm.complete(spec.messages, temperature=spec.temperature, max_tokens=spec.max_tokens)
        return content or spec.empty_fallback

    def on_search_changed(self, search_term: str) -> None:
        if len(search_term) <= MAX_CLEARING_LENGTH:
            self.search_slot.clear()
        else:
            self.search_slot.submit(search_term, search_term)

    def on_selection_changed(self, record: Optional[MedicineRecord]) -> None:
        if record is None:
            self.detail_slot.clear()
        else:
            self.detail_slot.submit(record.id, record)

    async def drain(self) -> None:
        await self.search_slot.drain()
        await self.detail_slot.drain()
