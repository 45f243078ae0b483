"""Database model type definitions."""

from src.models.connection import ConnectionRequest, ConnectionRequestStatus, SenderSnapshot
from src.models.contact import Contact
from src.models.profile import Profile

__all__ = [
    "Profile",
    "ConnectionRequest",
    "ConnectionRequestStatus",
    "SenderSnapshot",
    "Contact",
]
