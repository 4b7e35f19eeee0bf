#!/usr/bin/env python3
"""
Sprocket - Engineering Club Discord Bot Entry Point
===================================================

Discord bot for the McRoberts Engineering Club.

Features:
- /announce drafts with Discord + email delivery
- Channel archiving (immediate and scheduled)
- Introduction roles, encouragement replies and utility commands
- Health check endpoint for the hosting platform

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
import sys

from dotenv import load_dotenv

# Load .env before anything reads the environment
load_dotenv()

from sprocket.core.config import ConfigValidationError, validate_and_log_config
from sprocket.core.logger import logger
from sprocket.utils.error_handler import ErrorHandler


async def main() -> None:
    """
    Main entry point for Sprocket.

    Handles the complete bot lifecycle:
    1. Validates configuration (fails fast on missing required vars)
    2. Initializes the bot instance
    3. Connects to Discord and runs until interrupted

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start
    """
    logger.tree("SPROCKET STARTING", [
        ("Server", "McRoberts Engineering Club"),
        ("Commands", "/announce, /archive, /assignrole, /encourage, /userinfo, /lfs, /setavatar"),
    ], emoji="⚙️")

    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("❌ Invalid configuration", [("Error", str(e))])
        logger.error("   Please check your .env file")
        sys.exit(1)

    if config.error_webhook_url:
        logger.set_webhook(config.error_webhook_url)

    from sprocket.bot import SprocketBot

    try:
        bot = SprocketBot()
        logger.info("🤖 Bot instance created successfully")

        async with bot:
            await bot.start(config.discord_token)

    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.main",
            critical=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
