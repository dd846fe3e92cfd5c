"""Poll the report endpoint until the analysis is ready or time runs out."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vtscan.models import PENDING_CODES, RESPONSE_READY

logger = logging.getLogger("vtscan.poller")

DEFAULT_DELAY = 60
DEFAULT_MAX_WAIT = 3600


class PollOutcome(str, Enum):
    """How a poll loop finished."""

    READY = "ready"
    TIMEOUT = "timeout"


@dataclass
class PollResult:
    """Outcome of ``wait_for_report``. ``report`` is None unless READY."""

    outcome: PollOutcome
    report: dict[str, Any] | None = None
    attempts: int = 0
    elapsed: float = 0.0
    last_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_ready(self) -> bool:
        return self.outcome == PollOutcome.READY

    @property
    def timed_out(self) -> bool:
        return self.outcome == PollOutcome.TIMEOUT


async def wait_for_report(
    fetch: Callable[[], Awaitable[dict[str, Any]]],
    delay: float = DEFAULT_DELAY,
    max_wait: float = DEFAULT_MAX_WAIT,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_pending: Callable[[int | None], None] | None = None,
) -> PollResult:
    """Call ``fetch`` until it returns ``response_code == 1``.

    Any other code, or an empty response, counts as still pending: the loop
    sleeps ``delay`` seconds and tries again. Once ``max_wait`` seconds have
    passed the loop stops and returns a TIMEOUT result instead of raising.

    Args:
        fetch: Coroutine function returning the decoded report JSON.
        delay: Seconds to wait between attempts.
        max_wait: Upper bound on the whole loop, in seconds.
        sleep: Awaitable sleep, replaceable in tests.
        clock: Monotonic clock, replaceable in tests.
        on_pending: Called with the response code before each wait.

    Raises:
        RateLimitError, UnauthorizedError: Propagated from ``fetch``.
    """
    start = clock()
    state = PollResult(outcome=PollOutcome.TIMEOUT)

    async def _poll() -> PollResult:
        while True:
            if clock() - start >= max_wait:
                return _timeout(state, clock() - start)

            res = await fetch()
            state.attempts += 1
            state.last_response = res

            code = res.get("response_code")
            if code == RESPONSE_READY:
                state.outcome = PollOutcome.READY
                state.report = res
                state.elapsed = clock() - start
                logger.info(
                    "Report ready after %d attempt(s) (%.1fs)", state.attempts, state.elapsed
                )
                return state

            _log_pending(code, res)
            if on_pending is not None:
                on_pending(code)

            remaining = max_wait - (clock() - start)
            if remaining <= 0:
                return _timeout(state, clock() - start)
            await sleep(min(delay, remaining))

    try:
        return await asyncio.wait_for(_poll(), timeout=max_wait)
    except asyncio.TimeoutError:
        return _timeout(state, clock() - start)


def _timeout(state: PollResult, elapsed: float) -> PollResult:
    state.outcome = PollOutcome.TIMEOUT
    state.report = None
    state.elapsed = elapsed
    logger.warning(
        "No report after %d attempt(s) in %.0fs, giving up", state.attempts, elapsed
    )
    return state


def _log_pending(code: Any, res: dict[str, Any]) -> None:
    if not res:
        logger.info("No data in report response, will retry")
    elif code in PENDING_CODES:
        logger.debug("Report pending (code=%s): %s", code, res.get("verbose_msg", ""))
    else:
        logger.warning(
            "Unexpected report response code %r: %s", code, res.get("verbose_msg", "")
        )
