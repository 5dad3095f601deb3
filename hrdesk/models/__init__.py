from .records import ContactMessage, Payment, Review, WorkEntry
from .user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "WorkEntry",
    "Payment",
    "Review",
    "ContactMessage",
]
