"""
Junkick Backend — User Service
================================

What:  Profile lookup and profile updates.
Why:   Profile edits are self-or-admin, and a role change is an admin-only
       action on top of that; both checks go through the access-control
       evaluator like every other gated operation.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from junkick.exceptions import NotFoundError
from junkick.models.user import User
from junkick.schemas.user import UserResponse, UserUpdateRequest
from junkick.services.access_control import Action, authorize, require
from junkick.services.identifiers import parse_reference

logger = logging.getLogger(__name__)

# Never writable through a profile update
PROTECTED_FIELDS = ("id", "email", "password", "password_hash", "created_at", "legacy_id")


class UserService:

    async def load_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        """
        Raises:
            InvalidReferenceError: Malformed id
            NotFoundError: USER_NOT_FOUND
        """
        user = await self.load_user(db, parse_reference(user_id, "user"))
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: str,
        payload: UserUpdateRequest,
        caller: Optional[User],
    ) -> UserResponse:
        """
        Apply a partial profile update.

        Raises:
            AccessDeniedError: PROFILE_ACCESS_DENIED (not self, not admin);
                               INSUFFICIENT_PERMISSIONS (role change by non-admin)
            NotFoundError: USER_NOT_FOUND
        """
        target_id = parse_reference(user_id, "user")
        caller_id = caller.id if caller else None
        caller_role = caller.role if caller else None

        require(authorize(Action.UPDATE_PROFILE, caller_id, caller_role, target_id=target_id))
        user = await self.load_user(db, target_id)

        data = payload.model_dump(exclude_unset=True)
        for key in PROTECTED_FIELDS:
            data.pop(key, None)
        # name, role, skills and experience are NOT NULL
        for key in ("name", "role", "skills", "experience"):
            if key in data and data[key] is None:
                data.pop(key)

        if "role" in data and data["role"] != user.role:
            decision = authorize(Action.CHANGE_ROLE, caller_id, caller_role)
            if not decision.allowed:
                logger.warning("Denied role change of %s by %s", user.id, caller_id)
            require(decision)

        for key, value in data.items():
            setattr(user, key, value)
        await db.flush()

        logger.info("User %s updated by %s: %s", user.id, caller_id, sorted(data))
        return UserResponse.model_validate(user)


user_service = UserService()
