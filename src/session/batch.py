"""
Batch greeting generation.

The job is split in two:

- ``step(state, event) -> (state, effect)`` is pure. It decides what happens
  next (generate an item, wait, or finish) and keeps the counters.
- ``run_batch`` is the driver. It performs each effect, feeds the outcome back
  and reports every intermediate state to an observer.

Items are processed strictly one after another in target order. Every attempt
counts towards progress whether it succeeded or not, and is followed by a fixed
delay to stay under backend rate limits. A failed item is logged and recorded;
it never stops the batch.

File: session/batch.py
Created: 2026-01-17
Last Modified: 2026-01-22
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from ..models import Contact
from .store import ContactStore

log = logging.getLogger(__name__)

DEFAULT_DELAY = 1.0  # seconds between items


@dataclass(frozen=True)
class BatchPlan:
    """Ordered target set for one batch run."""

    targets: Tuple[Contact, ...] = ()
    regenerate_all: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.targets

    @property
    def confirmation_message(self) -> str:
        count = len(self.targets)
        if self.regenerate_all:
            return (
                f"Every contact already has greetings. "
                f"Regenerate greetings for all {count} contacts?"
            )
        return f"{count} contacts have no greetings yet. Generate them now?"


def plan_batch(store: ContactStore) -> BatchPlan:
    """
    Select the target set.

    Pending contacts (no bundle) when there are any, otherwise every contact
    as a full regeneration pass.
    """
    pending = store.pending()
    if pending:
        return BatchPlan(tuple(pending), regenerate_all=False)
    return BatchPlan(tuple(store), regenerate_all=len(store) > 0)


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class ItemOutcome:
    contact_id: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class BatchState:
    targets: Tuple[str, ...] = ()
    cursor: int = 0
    processed: int = 0
    failures: Tuple[ItemOutcome, ...] = ()
    processing_id: Optional[str] = None
    running: bool = False

    @property
    def progress(self) -> Progress:
        return Progress(current=self.processed, total=len(self.targets))

    @property
    def succeeded(self) -> int:
        return self.processed - len(self.failures)


def start_batch(plan: BatchPlan) -> BatchState:
    return BatchState(targets=tuple(c.id for c in plan.targets), running=True)


# Events fed to step()


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class ItemFinished:
    outcome: ItemOutcome


BatchEvent = Union[Advance, ItemFinished]


# Effects returned by step()


@dataclass(frozen=True)
class GenerateItem:
    contact_id: str


@dataclass(frozen=True)
class Wait:
    seconds: float


@dataclass(frozen=True)
class Complete:
    announce: bool


Effect = Union[GenerateItem, Wait, Complete]


def step(state: BatchState, event: BatchEvent, delay: float = DEFAULT_DELAY) -> Tuple[BatchState, Effect]:
    """
    Advance the batch by one event.

    Args:
        state: Current batch state
        event: Advance (pick the next item) or ItemFinished (record an attempt)
        delay: Pause after each attempt, in seconds

    Returns:
        Tuple of (new state, effect the driver must perform)
    """
    if isinstance(event, ItemFinished):
        outcome = event.outcome
        failures = state.failures if outcome.ok else state.failures + (outcome,)
        return replace(state, processed=state.processed + 1, failures=failures), Wait(delay)

    if isinstance(event, Advance):
        if state.cursor < len(state.targets):
            contact_id = state.targets[state.cursor]
            return (
                replace(state, cursor=state.cursor + 1, processing_id=contact_id),
                GenerateItem(contact_id),
            )
        return (
            replace(state, processing_id=None, running=False),
            Complete(announce=state.processed > 0),
        )

    raise TypeError(f"Unknown batch event: {event!r}")


Attempt = Callable[[str], Awaitable[None]]


async def run_batch(
    plan: BatchPlan,
    attempt: Attempt,
    delay: float = DEFAULT_DELAY,
    on_change: Optional[Callable[[BatchState], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Tuple[BatchState, bool]:
    """
    Drive a batch to completion.

    Args:
        plan: Target set (already confirmed by the user)
        attempt: Generates one contact by id; raises on failure
        delay: Pause after each attempt, in seconds
        on_change: Observer called with every intermediate state
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        Tuple of (final state, whether completion should be announced)
    """
    state = start_batch(plan)
    notify = on_change or (lambda _state: None)
    notify(state)

    state, effect = step(state, Advance(), delay)
    while True:
        notify(state)

        if isinstance(effect, GenerateItem):
            outcome = await _attempt_one(attempt, effect.contact_id)
            state, effect = step(state, ItemFinished(outcome), delay)
        elif isinstance(effect, Wait):
            if effect.seconds > 0:
                await sleep(effect.seconds)
            state, effect = step(state, Advance(), delay)
        else:
            break

    failed: List[str] = [f.contact_id for f in state.failures]
    log.info(
        f"Batch finished: {state.processed}/{len(state.targets)} attempted, "
        f"{state.succeeded} ok, {len(failed)} failed"
    )
    if failed:
        log.warning(f"Batch failures: {', '.join(failed)}")
    return state, effect.announce


async def _attempt_one(attempt: Attempt, contact_id: str) -> ItemOutcome:
    """Run one attempt, turning any failure into a recorded outcome."""
    try:
        await attempt(contact_id)
    except Exception as e:
        log.warning(f"Batch item {contact_id} failed: {e}")
        return ItemOutcome(contact_id, ok=False, error=str(e))
    return ItemOutcome(contact_id, ok=True)
