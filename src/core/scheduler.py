"""Fixed-interval runner for the inbox and feed tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

LOGGER = logging.getLogger(__name__)


async def run_periodic(
    name: str,
    interval: float,
    job: Callable[[], Awaitable[object]],
    iterations: Optional[int] = None,
) -> None:
    """Await ``job`` then sleep ``interval`` seconds, forever or ``iterations`` times.

    The job is awaited before the next sleep, so one task never overlaps
    itself. A failing cycle is logged and the loop carries on.
    """

    count = 0
    while iterations is None or count < iterations:
        try:
            await job()
        except Exception:
            LOGGER.exception("Error in %s task", name)
        count += 1
        if iterations is not None and count >= iterations:
            break
        await asyncio.sleep(interval)
