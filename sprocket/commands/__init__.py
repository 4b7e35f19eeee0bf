"""
Sprocket - Commands Package
===========================

Slash command implementations, one Cog per file.

DESIGN:
    Each command file contains a Cog class with related commands and an
    async def setup(bot) function. Cogs listed in COMMAND_COGS are loaded
    by the bot with load_extension() on startup.

Available Commands:
    /announce: Draft an announcement for Discord and email
    /archive: Move channels to/from the archived category, or schedule it
    /assignrole: Assign a role below your own (Manage Roles)
    /userinfo: Show member details
    /encourage: Quotes and the sad-word encouragement list
    /lfs: Random canned message
    /setavatar: Change the bot avatar (Manage Server)

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "sprocket.commands.announce",
    "sprocket.commands.archive",
    "sprocket.commands.roles",
    "sprocket.commands.userinfo",
    "sprocket.commands.encourage",
    "sprocket.commands.fun",
    "sprocket.commands.avatar",
]
"""List of command cog module paths for dynamic loading."""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "COMMAND_COGS",
]
