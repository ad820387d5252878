"""
Profile updates.

The users collection is rewritten first; post-commit hooks (the "profile
updated" email by default) only see users whose change is already on disk.
Hooks are handed back to the caller for scheduling, so a failing hook can
never undo the update.
"""

from __future__ import annotations

from typing import Callable
import logging

from records_api.core.errors import NotFoundError, ValidationError, ensure_utf8
from records_api.core.mailer import send_email
from records_api.repositories.json_storage import RecordStore, find_one, upsert_mutate
from records_api.repositories.models import RecordId, UserRecord

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[UserRecord], None]


def notify_profile_updated(user: UserRecord) -> None:
    send_email(
        "Profile Updated",
        user.email,
        "Your profile has been updated successfully.",
    )


def run_hook(hook: PostCommitHook, user: UserRecord) -> None:
    """Run ``hook`` and log, rather than propagate, any failure."""
    try:
        hook(user)
    except Exception:
        logger.exception("Post-commit hook %r failed for user %s", hook, user.id)


class ProfileService:
    def __init__(self, users: RecordStore[UserRecord], hooks: list[PostCommitHook] | None = None) -> None:
        self.users = users
        self.post_commit_hooks: list[PostCommitHook] = list(hooks) if hooks is not None else [notify_profile_updated]

    def add_hook(self, hook: PostCommitHook) -> None:
        self.post_commit_hooks.append(hook)

    def update_profile(self, user_id: RecordId, first_name: str | None, last_name: str | None) -> UserRecord:
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not first_name or not last_name:
            raise ValidationError("First name and last name are required.")
        ensure_utf8(first_name, last_name)

        def _is_caller(user: UserRecord) -> bool:
            return user.id == user_id

        def _rename(users: list[UserRecord]) -> list[UserRecord]:
            if not find_one(users, _is_caller):
                raise NotFoundError("User not found.")
            return upsert_mutate(
                users,
                _is_caller,
                lambda u: u.model_copy(update={"first_name": first_name, "last_name": last_name}),
            )

        saved = self.users.mutate(_rename)
        user = find_one(saved, _is_caller)
        logger.info("Updated profile of user %s", user_id)
        return user
