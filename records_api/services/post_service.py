"""Post use cases (create, list own posts, delete)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import uuid

from records_api.core.errors import AuthorizationError, ValidationError, ensure_utf8
from records_api.repositories.json_storage import RecordStore, find_one, remove_where
from records_api.repositories.models import PostRecord, RecordId, UserRecord

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10


class PostNotFoundError(AuthorizationError):
    """No post with that id belongs to the caller."""


@dataclass
class PostView:
    title: str
    description: str
    date: str
    author_name: str


def validate_post_fields(title: str | None, description: str | None) -> None:
    if not title or len(title) < MIN_TITLE_LENGTH:
        raise ValidationError(
            f"Title is required and should be at least {MIN_TITLE_LENGTH} characters long."
        )
    if not description or len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description is required and should be at least {MIN_DESCRIPTION_LENGTH} characters long."
        )
    ensure_utf8(title, description)


def _new_post_id(posts: list[PostRecord]) -> str:
    taken = {p.id for p in posts}
    post_id = str(uuid.uuid4())
    while post_id in taken:
        post_id = str(uuid.uuid4())
    return post_id


class PostService:
    def __init__(self, posts: RecordStore[PostRecord], users: RecordStore[UserRecord]) -> None:
        self.posts = posts
        self.users = users

    def create_post(self, user_id: RecordId, title: str | None, description: str | None) -> PostRecord:
        validate_post_fields(title, description)
        created: list[PostRecord] = []

        def _append(posts: list[PostRecord]) -> list[PostRecord]:
            post = PostRecord(
                id=_new_post_id(posts),
                title=title,
                description=description,
                date=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                user_id=user_id,
            )
            created.append(post)
            return [*posts, post]

        self.posts.mutate(_append)
        logger.info("User %s created post %s", user_id, created[0].id)
        return created[0]

    def list_posts(self, user_id: RecordId) -> list[PostView]:
        posts = self.posts.load()
        user = find_one(self.users.load(), lambda u: u.id == user_id)
        author = user.full_name if user else ""
        return [
            PostView(title=p.title, description=p.description, date=p.date, author_name=author)
            for p in posts
            if p.user_id == user_id
        ]

    def delete_post(self, user_id: RecordId, post_id: str | None) -> None:
        post_id = (post_id or "").strip()
        if not post_id:
            raise ValidationError("Post ID is required.")

        def _owned(post: PostRecord) -> bool:
            return str(post.id) == post_id and post.user_id == user_id

        def _remove(posts: list[PostRecord]) -> list[PostRecord]:
            if not find_one(posts, _owned):
                raise PostNotFoundError("Post not found.")
            return remove_where(posts, _owned)

        self.posts.mutate(_remove)
        logger.info("User %s deleted post %s", user_id, post_id)
