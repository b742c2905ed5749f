"""
Admin gate. Mutating endpoints declare ``Depends(require_admin("<action>"))``;
the check itself lives behind the ``Authorizer`` protocol so the shared
password can be swapped for per-user credentials without touching routes.
"""
from __future__ import annotations

import hmac
import json
import logging
from typing import Protocol

from fastapi import Depends, Header, Request

from carwash.core.config import settings
from carwash.core.errors import AuthorizationError

logger = logging.getLogger(__name__)


class Authorizer(Protocol):
    def is_authorized(self, action: str, credential: str | None) -> bool: ...


class SharedSecretAuthorizer:
    """Every admin action is unlocked by the same static password."""

    def __init__(self, secret: str):
        self._secret = secret or ""

    def is_authorized(self, action: str, credential: str | None) -> bool:
        if not self._secret or not credential:
            return False
        return hmac.compare_digest(credential.encode("utf-8"), self._secret.encode("utf-8"))


def get_authorizer() -> Authorizer:
    return SharedSecretAuthorizer(settings.admin_password)


async def _password_from_body(request: Request) -> str | None:
    raw = await request.body()
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if isinstance(payload, dict):
        value = payload.get("password")
        if isinstance(value, str):
            return value
    return None


def require_admin(action: str):
    async def guard(
        request: Request,
        x_admin_password: str | None = Header(default=None),
        authorizer: Authorizer = Depends(get_authorizer),
    ) -> None:
        credential = x_admin_password or await _password_from_body(request)
        if not authorizer.is_authorized(action, credential):
            logger.warning("admin_denied action=%s path=%s", action, request.url.path)
            raise AuthorizationError()

    return guard
