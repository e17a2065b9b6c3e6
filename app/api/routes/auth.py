from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.auth.credentials import authenticate
from app.dependencies.services import RecordStoreDep

router = APIRouter(tags=["auth"])


class AuthenticateRequest(BaseModel):
    email: str = ""
    password: str = ""


@router.post("/authenticate")
async def authenticate_user(payload: AuthenticateRequest, store: RecordStoreDep) -> dict[str, Any]:
    return await authenticate(store, payload.email, payload.password)
