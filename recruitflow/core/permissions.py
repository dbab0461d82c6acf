"""
Role-based permission helpers for pipeline operations.

Identity comes from the upstream auth provider; these helpers only decide
whether an already-identified actor may mutate pipeline state.
"""

from typing import List
from fastapi import HTTPException, status


class Roles:
    """Standard roles in the ATS system."""
    ADMIN = "admin"
    RECRUITER = "recruiter"
    HEADHUNTER = "headhunter"
    SALES = "sales"
    VIEWER = "viewer"

    ALL = [ADMIN, RECRUITER, HEADHUNTER, SALES, VIEWER]

    # admin: everything
    # recruiter / headhunter: candidates and pipelines
    # sales: clients
    # viewer: read-only


def check_role_permission(user_role: str, allowed_roles: List[str]) -> bool:
    """
    Check if user's role is in the list of allowed roles.

    Args:
        user_role: The user's current role
        allowed_roles: List of roles that are permitted

    Returns:
        True if user has permission, False otherwise
    """
    if not user_role or not allowed_roles:
        return False
    return user_role in allowed_roles


def check_can_write_pipelines(user_role: str) -> bool:
    """Check if user can move candidates, edit stage fields, change statuses."""
    return check_role_permission(user_role, [Roles.ADMIN, Roles.RECRUITER, Roles.HEADHUNTER])


def check_can_write_clients(user_role: str) -> bool:
    """Check if user can change client lifecycle stage."""
    return check_role_permission(user_role, [Roles.ADMIN, Roles.SALES, Roles.RECRUITER])


def raise_if_forbidden(allowed: bool, action: str) -> None:
    """
    Raise 403 error when the permission check failed.

    Raises:
        HTTPException: 403 with a message naming the blocked action
    """
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Your role cannot {action}. Contact your administrator for write access.",
        )
