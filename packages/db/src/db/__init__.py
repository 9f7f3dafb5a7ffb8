# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base
from .enums import StorageBucket, SubscriptionTier, UserRole
from .models import (
    ROLE_PROFILE_MODELS,
    AdminNote,
    Broker,
    BrokerFile,
    Lender,
    LenderFile,
    Profile,
)

__all__ = [
    "Base",
    "__version__",
    # Enums
    "UserRole",
    "SubscriptionTier",
    "StorageBucket",
    # Models
    "Profile",
    "Lender",
    "Broker",
    "LenderFile",
    "BrokerFile",
    "AdminNote",
    "ROLE_PROFILE_MODELS",
]
