"""Database models."""
from app.models.user import User
from app.models.address import Address
from app.models.preference import Preference

__all__ = ["User", "Address", "Preference"]
