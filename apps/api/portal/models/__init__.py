"""Expose ORM models."""
from .base import Base
from .invoice import Invoice
from .profile import Profile
from .property import Property
from .user_property import UserProperty
from .user_redirect import RedirectType, UserRedirect
from .user_role import AppRole, UserRole

__all__ = [
    "AppRole",
    "Base",
    "Invoice",
    "Profile",
    "Property",
    "RedirectType",
    "UserProperty",
    "UserRedirect",
    "UserRole",
]
