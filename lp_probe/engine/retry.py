"""Bounded polling retry with injectable clock and sleep."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from lp_common.errors import ConfigRetrievalTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_until(
    action: Callable[[], Optional[T]],
    *,
    interval: float,
    deadline: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    log: logging.Logger | None = None,
) -> T:
    """Call ``action`` until it returns a value other than None.

    Attempts are spaced by ``interval`` seconds. Once ``deadline`` seconds
    have elapsed since the first attempt a final attempt is made and, if it
    still yields None, ``ConfigRetrievalTimeoutError`` is raised. The abort
    therefore happens no earlier than ``deadline`` and no later than
    ``deadline + interval`` (plus the duration of one attempt).

    Exceptions raised by ``action`` propagate; per-attempt failures are
    expected to be folded into a None result by the caller.
    """
    log = log or logger
    started = clock()
    attempts = 0
    while True:
        attempts += 1
        result = action()
        if result is not None:
            log.debug("Attempt %d succeeded after %.1fs", attempts, clock() - started)
            return result

        elapsed = clock() - started
        if elapsed >= deadline:
            raise ConfigRetrievalTimeoutError(attempts, elapsed, deadline)

        sleep(min(interval, deadline - elapsed))
