"""
Sprocket - Logger Module
========================

Tree-style console and file logging in the club timezone.

DESIGN:
    Every event is a title line followed by indented key/value branches,
    so a whole send attempt or archive sweep reads as one block:

        [02:30:45 PM PDT] 📢 Announcement Created
          ├─ ID: 1234-1700000000000
          └─ Topic: Meeting

    Blocks are written in one go to stdout, the day's log file and, for
    errors, the day's error file. The file paths are resolved per write,
    so a bot that runs past midnight rolls over to a new dated folder.

    Errors with details can also be mirrored to a Discord webhook. Alerts
    with the same title are throttled so a failing loop does not flood
    the channel.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
import os
import shutil
import time
import uuid
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

import aiohttp


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("LOGS_DIR", "logs"))
"""Root folder; one sub-folder per day."""

LOG_RETENTION_DAYS = 7

LOCAL_TZ = ZoneInfo(os.getenv("TIMEZONE", "America/Vancouver"))
"""Club timezone for timestamps and day boundaries."""

WEBHOOK_COOLDOWN_SECONDS = 60
WEBHOOK_COLOR = 0xC73E1D

Details = Sequence[Tuple[str, str]]


def format_tree(title: str, items: Details) -> List[str]:
    """Render a title and its branches as separate lines, title unindented."""
    lines = [title]
    last = len(items) - 1
    for i, (key, value) in enumerate(items):
        branch = "└─" if i == last else "├─"
        lines.append(f"  {branch} {key}: {value}")
    return lines


# =============================================================================
# Tree Logger
# =============================================================================

class TreeLogger:
    """
    Process-wide logger.

    Attributes:
        run_id: Short id stamped on the session header and webhook alerts.
    """

    def __init__(self, root: Path = LOGS_DIR) -> None:
        self.run_id = uuid.uuid4().hex[:8]
        self.root = root
        self._webhook_url: Optional[str] = None
        self._last_alert: Dict[str, float] = {}

        self.root.mkdir(parents=True, exist_ok=True)
        self._prune_old_days()

        started = datetime.now(LOCAL_TZ).strftime("%Y-%m-%d %I:%M:%S %p %Z")
        self._emit([
            "=" * 60,
            f"SPROCKET SESSION {self.run_id} STARTED {started}",
            "=" * 60,
        ], stamp=False)

    def set_webhook(self, url: Optional[str]) -> None:
        self._webhook_url = url or None

    # =========================================================================
    # Files
    # =========================================================================

    def _paths_for(self, day: date) -> Tuple[Path, Path]:
        folder = self.root / day.isoformat()
        folder.mkdir(parents=True, exist_ok=True)
        return folder / "sprocket.log", folder / "errors.log"

    def _prune_old_days(self) -> None:
        cutoff = datetime.now(LOCAL_TZ).date() - timedelta(days=LOG_RETENTION_DAYS)
        for folder in self.root.iterdir():
            if not folder.is_dir():
                continue
            try:
                day = date.fromisoformat(folder.name)
            except ValueError:
                continue
            if day < cutoff:
                shutil.rmtree(folder, ignore_errors=True)

    def _emit(self, lines: List[str], emoji: str = "", stamp: bool = True, is_error: bool = False) -> None:
        now = datetime.now(LOCAL_TZ)
        head = lines[0]
        if emoji:
            head = f"{emoji} {head}"
        if stamp:
            head = f"[{now.strftime('%I:%M:%S %p %Z')}] {head}"
        block = "\n".join([head, *lines[1:]])

        print(block, flush=True)

        log_path, error_path = self._paths_for(now.date())
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(block + "\n")
        if is_error:
            with open(error_path, "a", encoding="utf-8") as f:
                f.write(block + "\n")

    # =========================================================================
    # Public API
    # =========================================================================

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """Log a titled block of key/value pairs."""
        self._emit(format_tree(title, items), emoji=emoji)

    def debug(self, msg: str, details: Optional[Details] = None) -> None:
        if os.getenv("DEBUG"):
            self._emit(format_tree(msg, details or []), emoji="🔍")

    def info(self, msg: str) -> None:
        self._emit([msg], emoji="ℹ️")

    def success(self, msg: str) -> None:
        self._emit([msg], emoji="✅")

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        self._emit(format_tree(msg, details or []), emoji="⚠️")

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        """
        Log an error to the main and error files.

        With details, the block is also sent to the webhook when one is set
        and an event loop is running.
        """
        self._emit(format_tree(msg, details or []), emoji="❌", is_error=True)
        if details and self._should_alert(msg):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return
            loop.create_task(self._post_alert(msg, details))

    def critical(self, msg: str) -> None:
        self._emit([msg], emoji="🚨", is_error=True)

    # =========================================================================
    # Webhook Alerts
    # =========================================================================

    def _should_alert(self, title: str) -> bool:
        if not self._webhook_url:
            return False
        now = time.monotonic()
        last = self._last_alert.get(title)
        if last is not None and now - last < WEBHOOK_COOLDOWN_SECONDS:
            return False
        self._last_alert[title] = now
        return True

    async def _post_alert(self, title: str, details: Details) -> None:
        payload = {
            "embeds": [{
                "title": f"❌ {title}"[:256],
                "description": "\n".join(f"**{k}:** {v}" for k, v in details)[:4000],
                "color": WEBHOOK_COLOR,
                "timestamp": datetime.now(LOCAL_TZ).isoformat(),
                "footer": {"text": f"Sprocket run {self.run_id}"},
            }]
        }
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status >= 300:
                        self._emit([f"Webhook alert rejected with HTTP {resp.status}"], emoji="⚠️")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._emit([f"Webhook alert failed: {type(e).__name__}"], emoji="⚠️")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()


__all__ = [
    "logger",
    "TreeLogger",
    "LOCAL_TZ",
    "format_tree",
]
