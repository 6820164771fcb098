from enum import Enum


class Role(str, Enum):
    """Platform roles carried in the `roles` claim of identity-issued tokens."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
