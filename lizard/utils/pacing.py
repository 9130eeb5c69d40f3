"""Pacing hooks awaited between simulation steps."""

import asyncio
from ..domain.types import Pacer


async def no_delay() -> None:
    """Yield to the event loop without waiting."""
    await asyncio.sleep(0)


def fixed_delay(delay_ms: int) -> Pacer:
    """
    Build a pacer that sleeps ``delay_ms`` milliseconds per step.

    A delay of zero or less gives a plain yield, for headless training.
    """
    if delay_ms <= 0:
        return no_delay

    seconds = delay_ms / 1000.0

    async def pace() -> None:
        await asyncio.sleep(seconds)

    return pace
