"""
Sprocket - Announcement Sweeper
===============================

Background task that removes expired announcement drafts.

DESIGN:
    Runs once at start (after the store is loaded) and then every half
    lifespan, so no record outlives its lifespan by more than half again.
    The sweep only deletes; handlers already treat old records as absent.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from typing import Optional

from sprocket.core.logger import logger
from sprocket.services.announcements.store import AnnouncementStore


# =============================================================================
# Announcement Sweeper
# =============================================================================

class AnnouncementSweeper:
    """
    Periodic expiry sweep.

    Attributes:
        store: Registry to sweep.
        interval: Seconds between sweeps (lifespan / 2).
        task: Background task reference.
        running: Whether the sweeper is active.
    """

    def __init__(self, store: AnnouncementStore, interval: Optional[float] = None) -> None:
        self.store = store
        self.interval = interval if interval is not None else store.lifespan_seconds / 2
        self.task: Optional[asyncio.Task] = None
        self.running: bool = False

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Sweep once, then start the periodic loop."""
        if self.task and not self.task.done():
            self.task.cancel()

        self.store.sweep_expired()

        self.running = True
        self.task = asyncio.create_task(self._sweep_loop())

        logger.tree("Announcement Sweeper Started", [
            ("Interval", f"{int(self.interval)}s"),
            ("Pending", str(self.store.count())),
        ], emoji="⏰")

    async def stop(self) -> None:
        self.running = False

        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        logger.info("Announcement Sweeper Stopped")

    # =========================================================================
    # Sweep Loop
    # =========================================================================

    async def _sweep_loop(self) -> None:
        while self.running:
            try:
                await asyncio.sleep(self.interval)
                self.store.sweep_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Announcement Sweeper Error", [
                    ("Error", str(e)[:100]),
                ])


__all__ = ["AnnouncementSweeper"]
