"""Authorization checks on the caller's role and identity claims."""

from staffauth.services.errors import AuthorizationError

ADMIN_ROLE = "ADMIN"
USER_ROLE = "USER"


def require_role(caller_role: str | None, required_role: str) -> None:
    """Raise AuthorizationError unless the caller holds `required_role`."""
    if caller_role != required_role:
        raise AuthorizationError("Unauthorized to access this resource")


def require_self_or_role(
    caller_user_id: str | None,
    caller_role: str | None,
    target_user_id: str,
    required_role: str = ADMIN_ROLE,
) -> None:
    """
    Allow the caller to act on their own record, or on any record when they hold
    `required_role`. Raise AuthorizationError otherwise.
    """
    if caller_user_id and caller_user_id == target_user_id:
        return
    if caller_role == required_role:
        return
    raise AuthorizationError("Unauthorized to access this resource")
