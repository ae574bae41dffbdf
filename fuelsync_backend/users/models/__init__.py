from .plan import Plan
from .user import User, UserManager

__all__ = ["Plan", "User", "UserManager"]
