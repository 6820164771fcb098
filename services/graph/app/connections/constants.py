"""
Connections domain — enums and policy limits.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import timedelta

# Defaults; overridable per environment via Settings (CONNECTION_* env vars).
MAX_PENDING_OUTGOING: int = 100
COOLDOWN_DAYS: int = 30
EXPIRY_DAYS: int = 90

MESSAGE_MAX_LENGTH: int = 300


class ConnectionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


ACTIVE_STATUSES: tuple[ConnectionStatus, ...] = (
    ConnectionStatus.PENDING,
    ConnectionStatus.ACCEPTED,
)


@dataclass(frozen=True, slots=True)
class ConnectionPolicy:
    pending_limit: int = MAX_PENDING_OUTGOING
    cooldown_days: int = COOLDOWN_DAYS
    expiry_days: int = EXPIRY_DAYS
    enforce_expiry: bool = False

    @property
    def cooldown(self) -> timedelta:
        return timedelta(days=self.cooldown_days)

    @property
    def expiry(self) -> timedelta:
        return timedelta(days=self.expiry_days)

    @classmethod
    def from_settings(cls, settings) -> ConnectionPolicy:
        return cls(
            pending_limit=settings.connection_pending_limit,
            cooldown_days=settings.connection_cooldown_days,
            expiry_days=settings.connection_expiry_days,
            enforce_expiry=settings.connection_enforce_expiry,
        )
