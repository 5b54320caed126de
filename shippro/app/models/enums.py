"""
User roles enumeration.

Roles are carried in the identity provider's public metadata.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Operations staff with access to the admin dashboard
        USER: Any other signed-in user (default)
    """
    ADMIN = "admin"
    USER = "user"
