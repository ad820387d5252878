from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from records_api.services.auth_service import AuthService

router = APIRouter(tags=["auth"])


class LoginBody(BaseModel):
    email: str | None = None
    password: str | None = None


class RegisterBody(BaseModel):
    email: str | None = None
    password: str | None = None
    firstName: str | None = None
    lastName: str | None = None


def _get_auth_service(request: Request) -> AuthService:
    svc = getattr(getattr(request.app, "state", None), "auth_service", None)
    if not svc:
        raise RuntimeError("AuthService not configured")
    return svc


@router.post("/login")
def login(body: LoginBody, request: Request):
    result = _get_auth_service(request).login(body.email, body.password)
    return {"token": result.token}


@router.post("/register", status_code=201)
def register(body: RegisterBody, request: Request):
    user = _get_auth_service(request).register(body.email, body.password, body.firstName, body.lastName)
    return {"id": user.id}
