"""
Core module exports.
"""
from .enums import (
    UserRole,
    SyncStatus,
    CardCondition
)
