"""Common data models and utilities for the application."""

from .user import Identity, Role

__all__ = ["Identity", "Role"]
