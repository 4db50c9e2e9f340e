"""
Stored record types.
"""

from dataclasses import dataclass, field

from .base import Entity


@dataclass
class Image(Entity):
    """
    An uploaded image.

    ``public_id`` is derived from ``id`` after insert and ``tags`` from
    ``description`` at insert time; neither is set by callers.
    """

    description: str | None = None
    url: str | None = None
    user_id: str | None = None
    public_id: str | None = None
    tags: list[str] = field(default_factory=list)
    likes: int = 0
    liked: bool = False


@dataclass
class User(Entity):
    """A registered user. ``password`` always holds a digest once stored."""

    username: str = ""
    password: str = ""
    name: str | None = None
    email: str | None = None
