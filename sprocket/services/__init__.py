"""
Sprocket - Services Package
===========================

Domain services used by the bot.

DESIGN:
    Services hold the logic that does not depend on a Discord
    interaction. Import from the subpackages directly; this package
    does not re-export them.

Available Services:
    announcements: Draft store, state machine and expiry sweeper
    email: Google Sheets recipient fetch and SMTP bulk delivery
    archive: Category moves and the scheduled archive runner

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""
