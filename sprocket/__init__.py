"""
Sprocket - Source Package
=========================

Discord bot for the McRoberts Engineering Club. Drafts announcements
that go out to a Discord channel and by email to the member list, plus
channel archiving, role and utility commands.

Package Structure:
- bot.py: Main Discord bot class and lifecycle
- commands/: Slash command cogs
- core/: Configuration, logging, database and health server
- events/: Event listener cogs
- handlers/: Interaction and message handlers
- services/: Announcement workflow, email delivery, archiving
- utils/: Retry, error handling and embed helpers
- views/: Announcement panel buttons and modals

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
Version: v1.0.0
"""
