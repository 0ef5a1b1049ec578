"""Politeness delays between requests and between probes."""

import asyncio
import time
from typing import List


class FixedDelay:
    """Real wall-clock pauses."""

    def pause(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)

    async def apause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)


class NoDelay:
    """Skips every pause but remembers what was asked for."""

    def __init__(self):
        self.pauses: List[float] = []

    def pause(self, seconds: float) -> None:
        self.pauses.append(seconds)

    async def apause(self, seconds: float) -> None:
        self.pauses.append(seconds)
