"""
Shared enums and constants used across the application.
"""

from enum import Enum


class UserRole(str, Enum):
    """Merchant roles stored on the users table and in session tokens"""
    ADMIN = "admin"
    END_USER = "end_user"


class SyncStatus(str, Enum):
    """State of a product linkage on a merchant's store"""
    ACTIVE = "active"
    DELETED = "deleted"
    ERROR = "error"

    @classmethod
    def live(cls):
        # Linkages still present on the remote store
        return (cls.ACTIVE.value, cls.ERROR.value)


class CardCondition(str, Enum):
    """Condition variants created for single cards"""
    NEAR_MINT = "Near Mint"
    LIGHTLY_PLAYED = "Lightly Played"
    MODERATELY_PLAYED = "Moderately Played"

    @property
    def code(self) -> str:
        return {
            CardCondition.NEAR_MINT: "NM",
            CardCondition.LIGHTLY_PLAYED: "LP",
            CardCondition.MODERATELY_PLAYED: "MP",
        }[self]

    @property
    def price_fraction(self) -> float:
        return {
            CardCondition.NEAR_MINT: 1.0,
            CardCondition.LIGHTLY_PLAYED: 0.8,
            CardCondition.MODERATELY_PLAYED: 0.6,
        }[self]
