from app.models.block import Block
from app.models.connection import Connection
from app.models.follow import Follow
from app.models.report import Report
from app.models.user import User

__all__ = [
    "User",
    "Connection",
    "Follow",
    "Block",
    "Report",
]
