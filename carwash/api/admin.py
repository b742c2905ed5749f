"""Admin mode toggle: lets the UI check the password before unlocking screens."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from carwash.core.auth import Authorizer, get_authorizer

router = APIRouter(prefix="/admin", tags=["admin"])


class PasswordPayload(BaseModel):
    password: str


@router.post("/validate")
def validate_admin(payload: PasswordPayload, authorizer: Authorizer = Depends(get_authorizer)):
    if authorizer.is_authorized("admin:unlock", payload.password):
        return {"valid": True}
    return JSONResponse(status_code=401, content={"valid": False, "detail": "Incorrect password"})
