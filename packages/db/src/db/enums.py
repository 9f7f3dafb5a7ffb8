# This project was developed with assistance from AI tools.
"""
Domain enums for the broker/lender portal.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class UserRole(str, enum.Enum):
    LENDER = "lender"
    BROKER = "broker"
    ADMIN = "admin"


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class StorageBucket(str, enum.Enum):
    """Storage buckets holding uploaded objects, one per owning role."""

    BROKER_FILES = "broker_files"
    LENDER_FILES = "lender_files"
