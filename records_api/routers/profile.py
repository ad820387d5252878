from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from records_api.repositories.models import RecordId
from records_api.services.profile_service import ProfileService, run_hook
from records_api.services.session_service import current_user_id

router = APIRouter(tags=["profile"])


class ProfileBody(BaseModel):
    firstName: str | None = None
    lastName: str | None = None


def _get_profile_service(request: Request) -> ProfileService:
    svc = getattr(getattr(request.app, "state", None), "profile_service", None)
    if not svc:
        raise RuntimeError("ProfileService not configured")
    return svc


@router.put("/profile-update")
def profile_update(
    body: ProfileBody,
    request: Request,
    background_tasks: BackgroundTasks,
    user_id: RecordId = Depends(current_user_id),
):
    svc = _get_profile_service(request)
    user = svc.update_profile(user_id, body.firstName, body.lastName)
    # hooks run after the response is sent
    for hook in svc.post_commit_hooks:
        background_tasks.add_task(run_hook, hook, user)
    return PlainTextResponse("Profile updated successfully.")
