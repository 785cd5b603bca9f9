#!/usr/bin/env python3
"""
Bearer token resolution.

Tokens are HS256 JWTs carrying `sub` (user id), `role`, `iat` and `exp`.
Issuing tokens (login, registration) happens elsewhere; `issue_token`
exists for local tooling and tests.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

import jwt
from fastapi import Depends, HTTPException, Request

from core.context import RequestContext, utcnow
from core.exceptions import AuthorizationError
from core.lifecycle.states import UserRole
from .config import AppConfig
from .dependencies import get_app_config

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(hours=24)


def issue_token(
    user_id: uuid.UUID,
    role: str,
    secret: str,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    now: Optional[datetime] = None
) -> str:
    issued = now or utcnow()
    claims = {
        'sub': str(user_id),
        'role': str(role),
        'iat': issued,
        'exp': issued + ttl,
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> Optional[Tuple[uuid.UUID, UserRole]]:
    """Return (user_id, role) for a valid, unexpired token, None otherwise."""
    try:
        claims = jwt.decode(
            token, secret, algorithms=[ALGORITHM], options={'require': ['exp', 'sub']}
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired bearer token")
        return None
    except jwt.InvalidTokenError:
        return None

    try:
        return uuid.UUID(claims['sub']), UserRole(claims.get('role'))
    except (TypeError, ValueError):
        return None


def _bearer(request: Request) -> Optional[str]:
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def get_optional_context(
    request: Request,
    config: AppConfig = Depends(get_app_config)
) -> Optional[RequestContext]:
    """Context for the caller when a valid token is present, None otherwise."""
    token = _bearer(request)
    if token is None:
        return None
    identity = decode_token(token, config.auth.secret)
    if identity is None:
        return None
    return RequestContext.build(*identity)


def get_request_context(
    request: Request,
    config: AppConfig = Depends(get_app_config)
) -> RequestContext:
    token = _bearer(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    identity = decode_token(token, config.auth.secret)
    if identity is None:
        logger.info(f"Rejected invalid bearer token on {request.url.path}")
        raise HTTPException(status_code=401, detail="Not authorized, token failed")
    return RequestContext.build(*identity)


def require_role(*roles: UserRole):
    """Dependency factory that admits only the given roles."""
    allowed = {UserRole(r) for r in roles}

    def dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if ctx.role not in allowed:
            raise AuthorizationError(
                f"User role '{ctx.role.value}' is not authorized to access this route"
            )
        return ctx

    return dependency


require_candidate = require_role(UserRole.CANDIDATE)
require_employer = require_role(UserRole.EMPLOYER)
require_admin = require_role(UserRole.ADMIN)
