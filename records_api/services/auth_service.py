"""
Authentication and identity related use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import uuid

from records_api.core.errors import ValidationError, ensure_utf8
from records_api.core.security import hash_password, needs_rehash, verify_password
from records_api.repositories.json_storage import RecordStore, StorageError, find_one, upsert_mutate
from records_api.repositories.models import RecordId, UserRecord
from records_api.services.session_service import issue_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class InvalidCredentialsError(ValidationError):
    pass


class AccountExistsError(ValidationError):
    pass


@dataclass
class LoginSuccess:
    user_id: RecordId
    token: str


def _normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def _same_email(record: UserRecord, email: str) -> bool:
    return _normalize_email(record.email) == email


class AuthService:
    """Handles registration and login against the users collection."""

    def __init__(self, users: RecordStore[UserRecord]) -> None:
        self.users = users

    def login(self, email: str | None, password: str | None) -> LoginSuccess:
        email = _normalize_email(email)
        if not email or not password:
            raise ValidationError("All input is required.")
        ensure_utf8(email, password)
        user = find_one(self.users.load(), lambda u: _same_email(u, email))
        if not user or not verify_password(password, user.password):
            logger.info("Failed login for %s", email)
            raise InvalidCredentialsError("Invalid credentials.")
        if needs_rehash(user.password):
            self._upgrade_hash(user, password)
        return LoginSuccess(user_id=user.id, token=issue_token(user.id))

    def _upgrade_hash(self, user: UserRecord, password: str) -> None:
        """Replace a legacy or outdated hash once the password is known to be right."""
        new_hash = hash_password(password)

        def _is_user(u: UserRecord) -> bool:
            return u.id == user.id and u.password == user.password

        try:
            self.users.mutate(
                lambda users: upsert_mutate(users, _is_user, lambda u: u.model_copy(update={"password": new_hash}))
            )
        except StorageError:
            logger.warning("Could not upgrade password hash for user %s", user.id, exc_info=True)
            return
        logger.info("Upgraded password hash for user %s", user.id)

    def register(
        self,
        email: str | None,
        password: str | None,
        first_name: str | None,
        last_name: str | None,
    ) -> UserRecord:
        email = _normalize_email(email)
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not (email and password and first_name and last_name):
            raise ValidationError("All input is required.")
        ensure_utf8(email, password, first_name, last_name)
        if "@" not in email:
            raise ValidationError("A valid email is required.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters long.")

        password_hash = hash_password(password)
        created: list[UserRecord] = []

        def _append(users: list[UserRecord]) -> list[UserRecord]:
            if find_one(users, lambda u: _same_email(u, email)):
                raise AccountExistsError("Email is already registered.")
            taken = {u.id for u in users}
            user_id = str(uuid.uuid4())
            while user_id in taken:
                user_id = str(uuid.uuid4())
            user = UserRecord(
                id=user_id,
                email=email,
                password=password_hash,
                first_name=first_name,
                last_name=last_name,
            )
            created.append(user)
            return [*users, user]

        self.users.mutate(_append)
        logger.info("Registered user %s", created[0].id)
        return created[0]
