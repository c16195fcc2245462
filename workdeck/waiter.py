"""Block until a work record reaches a condition.

Used by the one-shot ``workdeck wait`` command. The loop fetches the named
record, evaluates the condition expression against it, reports each poll to
an optional callback, and stops when the condition holds or the deadline
passes.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .conditions import Expression, parse_expression
from .config import DEFAULT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from .exceptions import WaitTimeoutError
from .models import WorkDetail, bundle_to_detail

logger = logging.getLogger(__name__)

PollCallback = Callable[[WorkDetail, bool], None]


def wait_for_condition(
    client,
    consumer: str,
    name: str,
    expression: str | Expression,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    on_each_poll: Optional[PollCallback] = None,
    timeout: float = DEFAULT_WAIT_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WorkDetail:
    """Poll a work record until ``expression`` holds.

    Args:
        client: WorkdeckClient (anything with ``bundles.get_by_name``)
        consumer: Consumer the record is addressed to
        name: Work record name
        expression: Condition expression, e.g. "Job:Complete OR Job:Failed"
        poll_interval: Seconds between polls
        on_each_poll: Called with (detail, condition_met) after every poll;
            exceptions it raises abort the wait
        timeout: Absolute deadline in seconds from the first poll
        clock: Monotonic clock, injectable for tests
        sleep: Sleep function, injectable for tests

    Returns:
        The detail from the poll that satisfied the condition.

    Raises:
        WaitTimeoutError: The deadline passed before the condition held.
        NotFoundError: The record (or consumer) does not exist.
        APIError: Any other backend failure.
    """
    parsed = parse_expression(expression) if isinstance(expression, str) else expression
    deadline = clock() + timeout
    polls = 0

    while True:
        wire = client.bundles.get_by_name(consumer, name)
        detail = bundle_to_detail(wire, consumer)
        met = parsed.evaluate(detail)
        polls += 1
        logger.debug("poll %d for %s/%s: condition %r met=%s", polls, consumer, name, str(parsed), met)

        if on_each_poll is not None:
            on_each_poll(detail, met)
        if met:
            return detail

        remaining = deadline - clock()
        if remaining <= 0:
            break
        sleep(min(poll_interval, remaining))
        if clock() >= deadline:
            break

    raise WaitTimeoutError(
        f"timed out after {timeout:g}s waiting for {str(parsed)!r} on {consumer}/{name}",
        polls=polls,
    )
