"""Token, password and request authorization primitives."""

from .passwords import PasswordHasher
from .security_manager import SecurityManager
from .validation import Validate

__all__ = ["PasswordHasher", "SecurityManager", "Validate"]
