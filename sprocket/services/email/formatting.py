"""
Sprocket - Email Formatting
===========================

Convert the lightweight Discord-style markup used in announcements into
the HTML alternative part of an email.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import html
import re


# =============================================================================
# Patterns
# =============================================================================

BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")
ITALIC_PATTERN = re.compile(r"\*(.*?)\*")
CODE_PATTERN = re.compile(r"`(.*?)`")


# =============================================================================
# Formatting
# =============================================================================

def format_email_html(text: str) -> str:
    """
    Render announcement text as HTML.

    The text is HTML-escaped first, then newlines become <br> and
    **bold**, *italic* and `code` spans become tags. Bold runs before
    italic so double asterisks are never read as two italics.

    Args:
        text: Plain announcement body.

    Returns:
        HTML fragment.
    """
    escaped = html.escape(text, quote=False)
    escaped = escaped.replace("\n", "<br>")
    escaped = BOLD_PATTERN.sub(r"<strong>\1</strong>", escaped)
    escaped = ITALIC_PATTERN.sub(r"<em>\1</em>", escaped)
    escaped = CODE_PATTERN.sub(r"<code>\1</code>", escaped)
    return escaped


__all__ = ["format_email_html"]
