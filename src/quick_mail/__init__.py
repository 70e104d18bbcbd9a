"""Quick Mail - read, archive and reply to Gmail threads over IMAP.

This package resolves displayable content from MIME messages, groups messages
into conversation threads and applies mailbox-side operations such as
archiving a thread.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from quick_mail.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
