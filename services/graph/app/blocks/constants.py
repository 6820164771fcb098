"""
Blocks domain — report enums.
"""
from __future__ import annotations

import enum


class ReportTargetType(str, enum.Enum):
    USER = "USER"
    POST = "POST"
    COMMENT = "COMMENT"
    MESSAGE = "MESSAGE"


class ReportReason(str, enum.Enum):
    SPAM = "SPAM"
    HARASSMENT = "HARASSMENT"
    MISINFORMATION = "MISINFORMATION"
    INAPPROPRIATE = "INAPPROPRIATE"
    OTHER = "OTHER"


class ReportStatus(str, enum.Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    ACTIONED = "ACTIONED"
    DISMISSED = "DISMISSED"


REPORT_DESCRIPTION_MAX_LENGTH: int = 1000
