"""
Junkick Backend — Access-Control Evaluator Tests
==================================================

What:  Exhaustive checks of `authorize()` rule precedence and `require()`.
How:   Pure function, no fixtures needed.
"""

import uuid

import pytest

from junkick.enums import UserRole
from junkick.exceptions import AccessDeniedError, AuthenticationRequiredError
from junkick.services.access_control import (
    ALLOW,
    OWNER_GATED_ACTIONS,
    Action,
    Decision,
    authorize,
    require,
)

OWNER = uuid.uuid4()
STRANGER = uuid.uuid4()
ADMIN = uuid.uuid4()

NON_CREATOR_ROLES = [UserRole.DEVELOPER, UserRole.DESIGNER, UserRole.TESTER, UserRole.JUNIOR]


class TestAnonymousCallers:

    @pytest.mark.parametrize("action", [a for a in Action if a not in (
        Action.LIST_PROJECTS, Action.VIEW_PROJECT, Action.CREATE_APPLICATION
    )])
    def test_identity_required(self, action):
        decision = authorize(action, None, None, resource_owner_id=OWNER)
        assert not decision.allowed
        assert decision.code == "AUTHENTICATION_REQUIRED"
        assert decision.requires_authentication

    def test_anonymous_application_allowed(self):
        assert authorize(Action.CREATE_APPLICATION, None, None).allowed

    @pytest.mark.parametrize("action", [Action.LIST_PROJECTS, Action.VIEW_PROJECT])
    def test_public_actions(self, action):
        assert authorize(action, None, None) == ALLOW


class TestOwnerGatedActions:

    @pytest.mark.parametrize("action", sorted(OWNER_GATED_ACTIONS, key=lambda a: a.value))
    def test_owner_allowed(self, action):
        assert authorize(action, OWNER, UserRole.TEAM_LEAD, resource_owner_id=OWNER).allowed

    @pytest.mark.parametrize("action", [
        Action.UPDATE_PROJECT,
        Action.DELETE_PROJECT,
        Action.ADD_TEAM_MEMBER,
        Action.REMOVE_TEAM_MEMBER,
    ])
    def test_non_owner_denied_project_access(self, action):
        decision = authorize(action, STRANGER, UserRole.TEAM_LEAD, resource_owner_id=OWNER)
        assert not decision.allowed
        assert decision.code == "PROJECT_ACCESS_DENIED"

    def test_non_owner_status_change_denied(self):
        decision = authorize(
            Action.UPDATE_APPLICATION_STATUS, STRANGER, UserRole.CLIENT, resource_owner_id=OWNER
        )
        assert decision.code == "APPLICATION_ACCESS_DENIED"

    @pytest.mark.parametrize("action", sorted(OWNER_GATED_ACTIONS, key=lambda a: a.value))
    def test_admin_bypass_on(self, action):
        assert authorize(action, ADMIN, UserRole.ADMIN, resource_owner_id=OWNER).allowed

    @pytest.mark.parametrize("action", sorted(OWNER_GATED_ACTIONS, key=lambda a: a.value))
    def test_admin_bypass_off(self, action):
        decision = authorize(
            action, ADMIN, UserRole.ADMIN, resource_owner_id=OWNER, admin_bypass=False
        )
        assert not decision.allowed
        assert decision.code in ("PROJECT_ACCESS_DENIED", "APPLICATION_ACCESS_DENIED")

    def test_admin_owner_allowed_without_bypass(self):
        assert authorize(
            Action.DELETE_PROJECT, ADMIN, UserRole.ADMIN, resource_owner_id=ADMIN, admin_bypass=False
        ).allowed


class TestProfileRules:

    def test_self_allowed(self):
        assert authorize(Action.UPDATE_PROFILE, OWNER, UserRole.JUNIOR, target_id=OWNER).allowed

    def test_other_denied(self):
        decision = authorize(Action.UPDATE_PROFILE, STRANGER, UserRole.TEAM_LEAD, target_id=OWNER)
        assert decision.code == "PROFILE_ACCESS_DENIED"

    def test_admin_allowed_even_without_bypass(self):
        assert authorize(
            Action.UPDATE_PROFILE, ADMIN, UserRole.ADMIN, target_id=OWNER, admin_bypass=False
        ).allowed

    def test_role_change_admin_only(self):
        assert authorize(Action.CHANGE_ROLE, ADMIN, UserRole.ADMIN).allowed
        decision = authorize(Action.CHANGE_ROLE, OWNER, UserRole.TEAM_LEAD)
        assert decision.code == "INSUFFICIENT_PERMISSIONS"


class TestCreationAndAdminRules:

    @pytest.mark.parametrize("role", [UserRole.TEAM_LEAD, UserRole.CLIENT, UserRole.ADMIN])
    def test_creator_roles(self, role):
        assert authorize(Action.CREATE_PROJECT, OWNER, role).allowed

    @pytest.mark.parametrize("role", NON_CREATOR_ROLES)
    def test_other_roles_cannot_create(self, role):
        decision = authorize(Action.CREATE_PROJECT, OWNER, role)
        assert decision.code == "PROJECT_CREATION_DENIED"

    def test_project_applications_listing_is_admin_only(self):
        assert authorize(Action.LIST_PROJECT_APPLICATIONS, ADMIN, UserRole.ADMIN).allowed
        # Owning the project does not help
        decision = authorize(
            Action.LIST_PROJECT_APPLICATIONS, OWNER, UserRole.TEAM_LEAD, resource_owner_id=OWNER
        )
        assert decision.code == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.parametrize("action", [Action.LIST_OWN_APPLICATIONS, Action.VIEW_PROFILE])
    def test_identity_only_actions(self, action):
        assert authorize(action, OWNER, UserRole.JUNIOR).allowed


class TestRequire:

    def test_allow_is_noop(self):
        require(ALLOW)

    def test_authentication_denial(self):
        with pytest.raises(AuthenticationRequiredError) as exc_info:
            require(Decision(False, "AUTHENTICATION_REQUIRED", "Authentication required"))
        assert exc_info.value.status_code == 401

    def test_access_denial_keeps_code(self):
        with pytest.raises(AccessDeniedError) as exc_info:
            require(Decision(False, "PROJECT_ACCESS_DENIED", "nope"))
        assert exc_info.value.code == "PROJECT_ACCESS_DENIED"
        assert exc_info.value.status_code == 403
