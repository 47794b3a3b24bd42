"""
User service for account lifecycle and admin management.

Handles creation, credential checks, verification/reset codes,
profile edits, and organization-scoped admin listings.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.auth import JWTAuth
from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from config.messages import ErrorMessages
from nhc.services.auth.roles import (
    Role,
    UserStatus,
    can_assign_role,
    is_global_admin,
    parse_role,
)
from nhc.services.registration.scorecard import generate_scorecard

logger = logging.getLogger(__name__)


LIMITED_USER_FIELDS = (
    "email",
    "firstName",
    "lastName",
    "family",
    "organization",
    "team",
    "comment",
    "referral",
    "role",
    "status",
    "lastLogin",
)

AUTH_STATUS_FIELDS = ("email", "firstName", "lastName", "picture", "role", "status")

ADMIN_EDITABLE_FIELDS = LIMITED_USER_FIELDS[:-1]

OAUTH_PROVIDER_FIELDS = ("facebook", "google")


def generate_code() -> str:
    """Random URL-safe code for e-mail confirmation and password resets."""
    return secrets.token_urlsafe(32)


class UserService:
    """
    Manages user accounts.
    """

    def __init__(self, db: AsyncIOMotorDatabase, jwt_auth: JWTAuth):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
            jwt_auth: For password hashing
        """
        self._db = db
        self._jwt_auth = jwt_auth
        self._users_collection = db["users"]

    # ─────────────────────────────────────────────────────────────────
    # Creation and lookup
    # ─────────────────────────────────────────────────────────────────

    async def create_user(
        self,
        email: str,
        password: Optional[str] = None,
        first_name: str = "",
        last_name: str = "",
        status: UserStatus = UserStatus.UNCONFIRMED,
        role: Role = Role.USER,
        code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> dict:
        """
        Create a new user record.

        Args:
            email: Login e-mail (stored lower-cased)
            password: Plain password; None for social-only accounts
            first_name: First name
            last_name: Last name
            status: Initial account status
            role: Initial role
            code: E-mail confirmation code
            extra: Additional fields (provider ids, picture, participants)

        Returns:
            Created user document

        Raises:
            ConflictException: E-mail or provider id already taken
        """
        now = datetime.now(timezone.utc)

        user_doc = {
            "email": email.strip().lower(),
            "password": self._jwt_auth.hash_password(password) if password else None,
            "firstName": first_name,
            "lastName": last_name,
            "role": Role(role).value,
            "status": UserStatus(status).value,
            "participants": [],
            "createdOn": now,
            "lastLogin": now,
            **(extra or {}),
        }
        if code:
            user_doc["code"] = code

        try:
            result = await self._users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            raise ConflictException(
                message="User already exists. Please log in instead.",
                code="USER_EXISTS"
            )

        user_doc["_id"] = result.inserted_id
        logger.info(f"User created: {result.inserted_id}")
        return user_doc

    async def get_by_id(self, user_id: Union[str, ObjectId]) -> Optional[dict]:
        if not isinstance(user_id, ObjectId):
            if not ObjectId.is_valid(user_id):
                return None
            user_id = ObjectId(user_id)
        return await self._users_collection.find_one({"_id": user_id})

    async def get_by_email(self, email: str) -> Optional[dict]:
        if not email:
            return None
        return await self._users_collection.find_one({"email": email.strip().lower()})

    async def get_by_provider(self, provider: str, subject: str) -> Optional[dict]:
        """Find the user linked to an OAuth provider account."""
        if provider not in OAUTH_PROVIDER_FIELDS or not subject:
            return None
        return await self._users_collection.find_one({provider: subject})

    async def get_by_code(self, code: str) -> Optional[dict]:
        if not code:
            return None
        return await self._users_collection.find_one({"code": code})

    async def get_by_reset_code(self, reset_code: str) -> Optional[dict]:
        if not reset_code:
            return None
        return await self._users_collection.find_one({"resetCode": reset_code})

    # ─────────────────────────────────────────────────────────────────
    # Credentials and codes
    # ─────────────────────────────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> dict:
        """
        Check login credentials.

        Returns:
            The matching user document

        Raises:
            NotFoundException: No account with this e-mail
            UnauthorizedException: Wrong password or social-only account
        """
        user = await self.get_by_email(email)
        if not user:
            raise NotFoundException(
                message="User wasn't found on our servers",
                code="USER_NOT_FOUND"
            )

        if not user.get("password"):
            raise UnauthorizedException(
                message="This account signs in with Facebook or Google.",
                code="SOCIAL_ACCOUNT"
            )

        if not self._jwt_auth.verify_password(password, user["password"]):
            raise UnauthorizedException(
                message="Incorrect password",
                code="INCORRECT_PASSWORD"
            )

        return user

    async def touch_last_login(self, user_id: ObjectId) -> None:
        await self._users_collection.update_one(
            {"_id": user_id},
            {"$set": {"lastLogin": datetime.now(timezone.utc)}}
        )

    async def mark_verified(self, user: dict) -> None:
        """Consume the confirmation code and allow the user to register."""
        await self._users_collection.update_one(
            {"_id": user["_id"]},
            {
                "$set": {"status": UserStatus.UNREGISTERED.value},
                "$unset": {"code": ""},
            }
        )
        logger.info(f"User verified e-mail: {user['_id']}")

    async def set_confirmation_code(self, user_id: ObjectId) -> str:
        code = generate_code()
        await self._users_collection.update_one(
            {"_id": user_id},
            {"$set": {"code": code}}
        )
        return code

    async def set_reset_code(self, user_id: ObjectId) -> str:
        reset_code = generate_code()
        await self._users_collection.update_one(
            {"_id": user_id},
            {"$set": {"resetCode": reset_code}}
        )
        return reset_code

    async def change_password(self, user_id: ObjectId, new_password: str) -> None:
        """Store a new password hash and consume any pending reset code."""
        await self._users_collection.update_one(
            {"_id": user_id},
            {
                "$set": {"password": self._jwt_auth.hash_password(new_password)},
                "$unset": {"resetCode": ""},
            }
        )
        logger.info(f"Password changed for user {user_id}")

    # ─────────────────────────────────────────────────────────────────
    # Updates
    # ─────────────────────────────────────────────────────────────────

    async def update_fields(
        self,
        user_id: ObjectId,
        set_fields: Dict[str, Any],
        unset_fields: Iterable[str] = (),
    ) -> dict:
        """
        Apply a partial update and return the updated document.

        Raises:
            NotFoundException: User no longer exists
            ConflictException: Update collides with a unique index
        """
        update: Dict[str, Any] = {}
        if set_fields:
            update["$set"] = set_fields
        unset = {field: "" for field in unset_fields}
        if unset:
            update["$unset"] = unset

        try:
            updated = await self._users_collection.find_one_and_update(
                {"_id": user_id},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(
                message="That e-mail or linked account already belongs to another user.",
                code="USER_CONFLICT"
            )

        if not updated:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")
        return updated

    async def link_provider(
        self,
        user: dict,
        provider: str,
        subject: str,
        picture: Optional[str] = None,
    ) -> dict:
        """Attach an OAuth account to an existing user."""
        updates: Dict[str, Any] = {provider: subject}
        if picture and not user.get("picture"):
            updates["picture"] = picture
        linked = await self.update_fields(user["_id"], updates)
        logger.info(f"Linked {provider} account to user {user['_id']}")
        return linked

    async def update_self(
        self,
        user: dict,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> dict:
        """
        Update the caller's own profile.

        Moving to a different organization drops any admin role.
        """
        updates: Dict[str, Any] = {}
        if first_name is not None:
            updates["firstName"] = first_name
        if last_name is not None:
            updates["lastName"] = last_name
        if organization is not None and organization != user.get("organization"):
            updates["organization"] = organization
            updates["role"] = Role.USER.value

        if not updates:
            return user
        return await self.update_fields(user["_id"], updates)

    async def admin_update(self, actor: dict, email: str, updates: Dict[str, Any]) -> dict:
        """
        Edit another user as an administrator.

        Global admins may edit anyone and change role/status. Organization
        admins may only edit users of their own organization, and role and
        status changes are dropped.

        Args:
            actor: The admin performing the edit
            email: E-mail of the user to edit
            updates: Fields to change (camelCase)

        Returns:
            Limited view of the updated user
        """
        target = await self.get_by_email(email)
        if not target:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        changes = {k: v for k, v in updates.items() if k in ADMIN_EDITABLE_FIELDS and v is not None}

        if not is_global_admin(actor.get("role")):
            if target.get("organization") != actor.get("organization"):
                raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="FORBIDDEN")
            changes.pop("role", None)
            changes.pop("status", None)

        if "role" in changes:
            role = parse_role(changes["role"])
            if role is None:
                raise BadRequestException(message=ErrorMessages.BAD_CHOICE, code="INVALID_ROLE")
            if not can_assign_role(actor.get("role"), role):
                raise ForbiddenException(message=ErrorMessages.FORBIDDEN, code="FORBIDDEN")
            changes["role"] = role.value

        if "status" in changes:
            try:
                changes["status"] = UserStatus(changes["status"]).value
            except ValueError:
                raise BadRequestException(message=ErrorMessages.BAD_CHOICE, code="INVALID_STATUS")

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()

        updated = await self.update_fields(target["_id"], changes) if changes else target
        logger.info(f"User {target['_id']} edited by admin {actor['_id']}: {sorted(changes)}")
        return self.format_limited(updated)

    async def update_participant_scorecard(
        self,
        user_id: ObjectId,
        participant_id: int,
        scorecard: List[List[int]],
        points: int,
    ) -> None:
        """
        Store a participant's normalized scorecard and points.

        Raises:
            NotFoundException: The user has no participant with this id
        """
        result = await self._users_collection.update_one(
            {"_id": user_id, "participants.id": participant_id},
            {
                "$set": {
                    "participants.$.scorecard": scorecard,
                    "participants.$.points": points,
                }
            }
        )
        if result.matched_count == 0:
            raise NotFoundException(message="Participant not found", code="PARTICIPANT_NOT_FOUND")

    # ─────────────────────────────────────────────────────────────────
    # Admin listings
    # ─────────────────────────────────────────────────────────────────

    def _scope_query(self, actor: dict, query: Optional[dict] = None) -> dict:
        scoped = dict(query or {})
        if not is_global_admin(actor.get("role")):
            scoped["organization"] = actor.get("organization")
        return scoped

    async def list_limited(self, actor: dict) -> List[dict]:
        """Users visible to an admin: everyone for global admins, else their organization."""
        projection = {field: 1 for field in LIMITED_USER_FIELDS}
        cursor = self._users_collection.find(self._scope_query(actor), projection)
        users = await cursor.to_list(length=None)
        return [self.format_limited(u) for u in users]

    async def list_participants(self, actor: dict) -> List[dict]:
        """Participants of registered users visible to an admin."""
        query = self._scope_query(actor, {"status": UserStatus.REGISTERED.value})
        cursor = self._users_collection.find(
            query,
            {"email": 1, "organization": 1, "family": 1, "team": 1, "participants": 1},
        )
        users = await cursor.to_list(length=None)

        participants = []
        for user in users:
            for participant in user.get("participants") or []:
                participants.append({
                    **participant,
                    "email": user.get("email"),
                    "organization": user.get("organization"),
                    "family": user.get("family"),
                    "team": user.get("team"),
                })
        return participants

    async def find_recipient_emails(self, query: dict) -> List[str]:
        cursor = self._users_collection.find(query, {"email": 1})
        users = await cursor.to_list(length=None)
        return [u["email"] for u in users if u.get("email")]

    # ─────────────────────────────────────────────────────────────────
    # Integrity maintenance
    # ─────────────────────────────────────────────────────────────────

    async def promote_pending(self) -> int:
        """Move every pending user to registered."""
        result = await self._users_collection.update_many(
            {"status": UserStatus.PENDING.value},
            {"$set": {"status": UserStatus.REGISTERED.value}}
        )
        return result.modified_count

    async def backfill_scorecards(self, challenge_length: int) -> int:
        """
        Give every participant that lacks a scorecard an empty one.

        Existing scorecards are left untouched.

        Returns:
            Number of users updated
        """
        cursor = self._users_collection.find(
            {"participants": {"$elemMatch": {"scorecard": {"$in": [None, []]}}}},
            {"participants": 1},
        )
        users = await cursor.to_list(length=None)

        updated = 0
        for user in users:
            participants = user.get("participants") or []
            for participant in participants:
                if not participant.get("scorecard"):
                    participant["scorecard"] = generate_scorecard(challenge_length)
                    participant["points"] = 0
            await self._users_collection.update_one(
                {"_id": user["_id"]},
                {"$set": {"participants": participants}}
            )
            updated += 1

        return updated

    # ─────────────────────────────────────────────────────────────────
    # Formatting
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def format_limited(user: dict) -> dict:
        """Admin-facing view without credentials or participants."""
        formatted = {"id": str(user["_id"])} if user.get("_id") else {}
        for field in LIMITED_USER_FIELDS:
            value = user.get(field)
            if isinstance(value, datetime):
                value = value.isoformat()
            formatted[field] = value
        return formatted

    @staticmethod
    def format_auth_status(user: dict) -> dict:
        return {field: user.get(field) for field in AUTH_STATUS_FIELDS}
