"""Domain enumerations for the member directory.

Enums represent fixed sets of domain values (e.g. directory entry status).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TenantStatus(_ValuesMixin, str, Enum):
    """Tenant (chapter) lifecycle status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class EntryStatus(_ValuesMixin, str, Enum):
    """Directory entry status. Only member and visitor are searchable by default."""

    PROSPECT = "prospect"
    VISITOR = "visitor"
    MEMBER = "member"
    ALUMNI = "alumni"
    DECLINED = "declined"


class QueryKind(_ValuesMixin, str, Enum):
    """What a search (and its pagination token) is keyed on."""

    TERM = "t"
    CATEGORY = "c"


class MessageKind(_ValuesMixin, str, Enum):
    """Shape of an outgoing channel message."""

    CARD = "card"
    CAROUSEL = "carousel"
    TEXT = "text"
