"""Fundamental identity data model for the app."""

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Closed set of role tags carried in access tokens."""

    USER = "user"
    ADMIN = "admin"

    def check_permission(self, required_role: "Role") -> bool:
        """Check if the current role may call a route requiring ``required_role``.

        Roles are tags, not a hierarchy: only an exact match passes.

        :param required_role: Role the route requires
        :return: True if the current role has permission, False otherwise
        """
        return self is required_role


DEFAULT_ROLE = Role.USER


@dataclass(frozen=True)
class Identity:
    """Caller identity established from a verified access token."""

    subject_id: str
    role: Role
