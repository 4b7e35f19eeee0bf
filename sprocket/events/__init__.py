"""
Sprocket - Events Package
=========================

Event handler Cogs.

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener
    decorators. Cogs are loaded by the bot using load_extension().

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

EVENT_COGS = [
    "sprocket.events.messages",
]
"""Event cog module paths loaded at startup."""


__all__ = [
    "EVENT_COGS",
]
