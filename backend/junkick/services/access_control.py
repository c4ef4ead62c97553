"""
Junkick Backend — Access-Control Evaluator
============================================

What:  Decides whether a caller may perform an action on a resource.
Why:   Every ownership, role and self-or-admin rule lives in one pure function,
       so it can be unit-tested exhaustively without a database or HTTP.
How:   `authorize()` takes only primitive inputs (caller id and role, resource
       owner id, target id) and returns a `Decision`. Services call it and
       hand the result to `require()`, which raises the matching exception.

Rules (first match wins):
    1. No caller               → DENY AUTHENTICATION_REQUIRED
                                 (CREATE_APPLICATION allows anonymous callers)
    2. Admin, owner-gated      → ALLOW when admin_bypass is on
    3. UPDATE_PROFILE          → ALLOW self or admin, else PROFILE_ACCESS_DENIED
    4. Owner-gated actions     → ALLOW owner, else PROJECT_ACCESS_DENIED /
                                 APPLICATION_ACCESS_DENIED
    5. CREATE_PROJECT          → ALLOW team-lead, client, admin,
                                 else PROJECT_CREATION_DENIED
    6. LIST_PROJECT_APPLICATIONS → ALLOW admin, else INSUFFICIENT_PERMISSIONS
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from junkick.enums import PROJECT_CREATOR_ROLES, UserRole
from junkick.exceptions import AccessDeniedError, AuthenticationRequiredError


class Action(str, enum.Enum):
    LIST_PROJECTS = "list_projects"
    VIEW_PROJECT = "view_project"
    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    ADD_TEAM_MEMBER = "add_team_member"
    REMOVE_TEAM_MEMBER = "remove_team_member"
    CREATE_APPLICATION = "create_application"
    LIST_PROJECT_APPLICATIONS = "list_project_applications"
    LIST_OWN_APPLICATIONS = "list_own_applications"
    UPDATE_APPLICATION_STATUS = "update_application_status"
    VIEW_PROFILE = "view_profile"
    UPDATE_PROFILE = "update_profile"
    CHANGE_ROLE = "change_role"


# Actions open to everyone, identity or not
PUBLIC_ACTIONS = frozenset({Action.LIST_PROJECTS, Action.VIEW_PROJECT})

# Actions gated on owning the (parent) project
OWNER_GATED_ACTIONS = frozenset({
    Action.UPDATE_PROJECT,
    Action.DELETE_PROJECT,
    Action.ADD_TEAM_MEMBER,
    Action.REMOVE_TEAM_MEMBER,
    Action.UPDATE_APPLICATION_STATUS,
})

# Actions only an admin may perform
ADMIN_ONLY_ACTIONS = frozenset({Action.LIST_PROJECT_APPLICATIONS, Action.CHANGE_ROLE})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    code: Optional[str] = None
    message: Optional[str] = None

    @property
    def requires_authentication(self) -> bool:
        return self.code == "AUTHENTICATION_REQUIRED"


ALLOW = Decision(allowed=True)


def _deny(code: str, message: str) -> Decision:
    return Decision(allowed=False, code=code, message=message)


def authorize(
    action: Action,
    caller_id: Optional[uuid.UUID],
    caller_role: Optional[UserRole],
    resource_owner_id: Optional[uuid.UUID] = None,
    target_id: Optional[uuid.UUID] = None,
    admin_bypass: bool = True,
) -> Decision:
    """
    Evaluate a single authorization request.

    Args:
        action:            What the caller wants to do.
        caller_id:         Caller's user id, None for anonymous requests.
        caller_role:       Caller's role, None for anonymous requests.
        resource_owner_id: Owner of the project the action touches (for
                           application status changes: the project's owner).
        target_id:         User id the action targets (profile edits).
        admin_bypass:      Whether admins pass ownership checks.

    Returns:
        ALLOW, or a DENY Decision carrying the stable error code.
    """
    if action in PUBLIC_ACTIONS:
        return ALLOW

    # Rule 1
    if caller_id is None or caller_role is None:
        if action is Action.CREATE_APPLICATION:
            return ALLOW
        return _deny("AUTHENTICATION_REQUIRED", "Authentication required")

    is_admin = caller_role is UserRole.ADMIN

    # Rule 2
    if is_admin and admin_bypass and action in OWNER_GATED_ACTIONS:
        return ALLOW

    # Rule 3
    if action is Action.UPDATE_PROFILE:
        if is_admin or (target_id is not None and caller_id == target_id):
            return ALLOW
        return _deny("PROFILE_ACCESS_DENIED", "You can only edit your own profile")

    # Rule 4
    if action in OWNER_GATED_ACTIONS:
        if resource_owner_id is not None and caller_id == resource_owner_id:
            return ALLOW
        if action is Action.UPDATE_APPLICATION_STATUS:
            return _deny(
                "APPLICATION_ACCESS_DENIED",
                "Only the project owner can change the status of this application",
            )
        return _deny("PROJECT_ACCESS_DENIED", "You do not have access to this project")

    # Rule 5
    if action is Action.CREATE_PROJECT:
        if caller_role in PROJECT_CREATOR_ROLES:
            return ALLOW
        return _deny(
            "PROJECT_CREATION_DENIED",
            "Only team leads and clients can create projects",
        )

    # Rule 6
    if action in ADMIN_ONLY_ACTIONS:
        if is_admin:
            return ALLOW
        return _deny("INSUFFICIENT_PERMISSIONS", "Insufficient permissions")

    # Remaining actions (create application, own applications, view profile)
    # only need an identity, which rule 1 already established
    return ALLOW


def require(decision: Decision) -> None:
    """Raise the exception matching a DENY decision; no-op on ALLOW."""
    if decision.allowed:
        return
    if decision.requires_authentication:
        raise AuthenticationRequiredError(message=decision.message, code=decision.code)
    raise AccessDeniedError(message=decision.message, code=decision.code)
