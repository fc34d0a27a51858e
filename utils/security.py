"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT issuance/validation via PyJWT (HMAC family only)
- Typed claims decoded straight from the validated payload
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
ACCESS = "access"
REFRESH = "refresh"

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Base class for token validation failures."""


class InvalidSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class MalformedToken(TokenError):
    pass


@dataclass(frozen=True)
class TokenConfig:
    """Signing settings, built once at startup and never reloaded."""
    secret: str
    algorithm: str = "HS256"
    issuer: str = "run-tracker-api"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(hours=168)

    def __post_init__(self):
        if not self.secret:
            raise ValueError("JWT secret must not be empty")
        if self.algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"JWT algorithm must be one of {HMAC_ALGORITHMS}, got {self.algorithm!r}")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "TokenConfig":
        return cls(
            secret=config.get("JWT_SECRET") or "",
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "run-tracker-api"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", timedelta(hours=168)),
        )


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    role: str
    token_type: str
    issuer: str
    jti: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        try:
            return cls(
                subject=str(payload["sub"]),
                role=str(payload["role"]),
                token_type=str(payload["type"]),
                issuer=str(payload["iss"]),
                jti=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedToken(f"Invalid token claims: {exc}") from exc


class TokenService:
    """
    Issues and validates HMAC-signed JWTs.

    Access tokens are short lived, refresh tokens long lived; both carry the
    account id (sub), its role, the token type and a random jti so two tokens
    issued within the same second never collide.
    """

    def __init__(self, config: TokenConfig):
        self._config = config

    def _issue(self, subject: str, role: str, token_type: str, ttl: timedelta) -> str:
        now = _now()
        payload = {
            "iss": self._config.issuer,
            "sub": str(subject),
            "iat": now,
            "exp": now + ttl,
            "type": token_type,
            "jti": generate_jti(),
            "role": role,
        }
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def issue_access_token(self, subject: str, role: str) -> str:
        return self._issue(subject, role, ACCESS, self._config.access_ttl)

    def issue_refresh_token(self, subject: str, role: str) -> str:
        return self._issue(subject, role, REFRESH, self._config.refresh_ttl)

    def validate(self, token: str, expected_type: Optional[str] = None) -> TokenClaims:
        """
        Decode and validate a JWT. Raises InvalidSignature, ExpiredToken or
        MalformedToken. Only the configured HMAC algorithm is accepted.
        """
        if not isinstance(token, str) or not token:
            raise MalformedToken("Token is empty")
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                issuer=self._config.issuer,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredToken("Token expired") from exc
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise InvalidSignature(f"Invalid signature: {exc}") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(f"Invalid token: {exc}") from exc

        claims = TokenClaims.from_payload(payload)
        if expected_type and claims.token_type != expected_type:
            raise MalformedToken("Wrong token type")
        return claims
