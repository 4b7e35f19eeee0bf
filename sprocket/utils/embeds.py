"""
Sprocket - Embed Helpers
========================

Shared status embed builder for command replies.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

import discord

from sprocket.core.config import EmbedColors


STATUS_STYLES = {
    "success": ("✅", EmbedColors.SUCCESS),
    "error": ("❌", EmbedColors.ERROR),
    "warning": ("⚠️", EmbedColors.WARNING),
    "info": ("ℹ️", EmbedColors.INFO),
}

FOOTER_TEXT = "McRoberts Engineering Club"


def status_embed(
    title: str,
    description: str,
    kind: str = "info",
    fields: Optional[List[Tuple[str, str, bool]]] = None,
) -> discord.Embed:
    """
    Build a colored status embed.

    Args:
        title: Embed title, prefixed with the kind's emoji.
        description: Body text.
        kind: One of success, error, warning, info.
        fields: Optional (name, value, inline) tuples.
    """
    emoji, color = STATUS_STYLES.get(kind, STATUS_STYLES["info"])
    embed = discord.Embed(
        title=f"{emoji} {title}",
        description=description,
        color=color,
        timestamp=datetime.now(timezone.utc),
    )
    for name, value, inline in fields or []:
        embed.add_field(name=name, value=value, inline=inline)
    embed.set_footer(text=FOOTER_TEXT)
    return embed


__all__ = ["status_embed", "STATUS_STYLES"]
