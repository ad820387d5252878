from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from records_api.repositories.models import RecordId
from records_api.services.post_service import PostService
from records_api.services.session_service import current_user_id

router = APIRouter(tags=["posts"])


class PostBody(BaseModel):
    title: str | None = None
    description: str | None = None


def _get_post_service(request: Request) -> PostService:
    svc = getattr(getattr(request.app, "state", None), "post_service", None)
    if not svc:
        raise RuntimeError("PostService not configured")
    return svc


@router.post("/post")
def create_post(body: PostBody, request: Request, user_id: RecordId = Depends(current_user_id)):
    _get_post_service(request).create_post(user_id, body.title, body.description)
    return PlainTextResponse("Post created successfully.", status_code=201)


@router.get("/post")
def list_posts(request: Request, user_id: RecordId = Depends(current_user_id)):
    views = _get_post_service(request).list_posts(user_id)
    return [
        {
            "title": v.title,
            "description": v.description,
            "date": v.date,
            "authorName": v.author_name,
        }
        for v in views
    ]


# Kept at 201 for compatibility with existing clients.
@router.delete("/post/{post_id}")
def delete_post(post_id: str, request: Request, user_id: RecordId = Depends(current_user_id)):
    _get_post_service(request).delete_post(user_id, post_id)
    return PlainTextResponse("Post deleted successfully.", status_code=201)
