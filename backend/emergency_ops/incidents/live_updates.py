"""
Periodic community-upvote refresh running as a cancellable asyncio task.
"""

import asyncio
import logging
import random
from typing import Dict, Optional

from .authority import TransitionAuthority

logger = logging.getLogger(__name__)


class LiveUpdateTask:
    """
    Simulates incoming community confirmations.

    Each tick draws an increment in ``[0, max_increment]`` per incident and
    hands it to the transition authority, which applies it under the same
    lock as every command. Only ``upvotes`` of non-terminal incidents move.
    """

    def __init__(
        self,
        authority: TransitionAuthority,
        interval: float = 10.0,
        max_increment: int = 1,
        rng: Optional[random.Random] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.authority = authority
        self.interval = interval
        self.max_increment = max_increment
        self.rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start ticking on the running event loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="live_updates")
        logger.info(f"Live updates started (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Live updates stopped")

    async def toggle(self) -> bool:
        """Flip between running and stopped; returns the new state."""
        if self.is_running:
            await self.stop()
        else:
            self.start()
        return self.is_running

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self) -> int:
        """Apply one round of upvotes. Returns the number of incidents changed."""
        increments: Dict[str, int] = {}
        for incident in self.authority.repository.snapshot():
            if incident.is_terminal:
                continue
            increment = self.rng.randint(0, self.max_increment) if self.max_increment > 0 else 0
            if increment:
                increments[incident.id] = increment
        self.ticks += 1
        return self.authority.apply_upvotes(increments)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Live update tick failed")
