"""Error types shared by the CMS core and the test harness.

Configuration errors are raised immediately and never caught locally.
Database errors from SQLAlchemy are not wrapped; they propagate unchanged.
"""

from __future__ import annotations


class CmsError(Exception):
    """Base class for errors raised by the CMS package."""


class InvalidConfigError(CmsError):
    """Raised when configuration names something that cannot be resolved.

    Examples: an unbound content descriptor asked for its table name, an
    unknown plugin handle, or an unknown component id on a container.
    """


__all__ = ["CmsError", "InvalidConfigError"]
