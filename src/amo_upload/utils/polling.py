"""Bounded polling with a fixed interval."""

import logging
import time
from typing import Callable, Optional, TypeVar

from ..exceptions import FatalError, PollingSkippedError
from .logging import get_logger

T = TypeVar("T")

_logger = get_logger("utils.polling")


def poll(
    check: Callable[[int], T],
    interval: float,
    max_attempts: int,
    immediate: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> T:
    """Call ``check`` until it returns, at most ``max_attempts`` times.

    Every attempt is preceded by a sleep of ``interval`` seconds, except the
    first one when ``immediate`` is set. A FatalError stops polling at once;
    any other exception consumes an attempt.

    Args:
        check: Callable receiving the zero-based attempt number.
        interval: Delay between attempts in seconds.
        max_attempts: Maximum number of calls to ``check``.
        immediate: Skip the delay before the first attempt.
        sleep: Sleep function, replaceable in tests.
        logger: Optional logger (default: module logger).

    Returns:
        The first value returned by ``check``.

    Raises:
        FatalError: As soon as ``check`` raises one.
        Exception: The last error raised by ``check`` once attempts run out.
        PollingSkippedError: If ``max_attempts`` is not positive.
    """
    log = logger or _logger
    last_error: Exception = PollingSkippedError("Polling skipped")

    for attempt in range(max_attempts):
        if not immediate or attempt > 0:
            sleep(interval)
        log.debug(f"Polling attempt {attempt + 1}/{max_attempts}")
        try:
            return check(attempt)
        except FatalError:
            raise
        except Exception as e:
            log.debug(f"Attempt {attempt + 1} failed: {e}")
            last_error = e

    raise last_error
