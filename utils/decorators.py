from __future__ import annotations
from functools import wraps
from typing import Iterable, Optional

from flask import request, g, abort, current_app

from models.account import ADMIN, USER
from utils.exceptions import Unauthorized
from utils.security import ACCESS, TokenClaims, TokenError, TokenService

USER_ROLES = frozenset({USER, ADMIN})
ADMIN_ROLES = frozenset({ADMIN})

BEARER = "Bearer "


def authorize(header: Optional[str], allowed_roles: Iterable[str], tokens: TokenService) -> TokenClaims:
    """
    Check a raw Authorization header value against the allowed roles.
    Returns the access token claims, raises Unauthorized otherwise.
    """
    if not header or header.strip() in ("", BEARER.strip()):
        raise Unauthorized("missing token")
    if not header.startswith(BEARER):
        raise Unauthorized("invalid token")
    token = header[len(BEARER):].strip()
    if not token:
        raise Unauthorized("missing token")
    try:
        claims = tokens.validate(token, expected_type=ACCESS)
    except TokenError as exc:
        raise Unauthorized("invalid token") from exc

    if claims.role not in set(allowed_roles):
        raise Unauthorized("invalid role")
    return claims


def token_service() -> TokenService:
    return current_app.extensions["token_service"]


def jwt_required(allowed_roles: Iterable[str] = USER_ROLES):
    allowed = frozenset(allowed_roles)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                claims = authorize(request.headers.get("Authorization"), allowed, token_service())
            except Unauthorized as e:
                abort(401, description=e.message)
            g.claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator


user_required = jwt_required(USER_ROLES)
admin_required = jwt_required(ADMIN_ROLES)


def require_self_or_admin(account_id: str) -> None:
    """Deny (403) when the caller acts on an account that is not their own."""
    claims: TokenClaims = g.claims
    if claims.role != ADMIN and claims.subject != account_id:
        abort(403, description="Not allowed to act on another account")
