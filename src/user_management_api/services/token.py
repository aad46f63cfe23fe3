"""
JWT issuance and validation for authenticated users.

Signing key, issuer and audience are read from the configuration source on
every call (``JWT_KEY``, ``JWT_ISSUER``, ``JWT_AUDIENCE`` in the environment
by default). Tokens are signed with HS256 and expire one hour after issue.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

import jwt
from jwt.exceptions import InvalidTokenError

from user_management_api.models.user import User

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=1)
MIN_KEY_BITS = 256

KEY_SETTING = "JWT_KEY"
ISSUER_SETTING = "JWT_ISSUER"
AUDIENCE_SETTING = "JWT_AUDIENCE"

MISSING_CONFIG_ERROR = "JWT configuration is missing or incomplete"
WEAK_KEY_ERROR = "The JWT key size is insufficient. It should be at least 256 bits."


@dataclass(frozen=True)
class TokenResult:
    """
    Outcome of a token issuance attempt.

    Exactly one side is populated: ``token`` and ``expires`` on success,
    ``error_message`` on failure.
    """
    is_success: bool
    token: Optional[str] = None
    expires: Optional[datetime] = None
    error_message: Optional[str] = None

    @classmethod
    def success(cls, token: str, expires: datetime) -> "TokenResult":
        return cls(is_success=True, token=token, expires=expires)

    @classmethod
    def failure(cls, error_message: str) -> "TokenResult":
        return cls(is_success=False, error_message=error_message)


@dataclass(frozen=True)
class _JwtSettings:
    key: str
    issuer: str
    audience: str


class TokenIssuer:
    def __init__(self, config: Optional[Mapping[str, str]] = None):
        self._config = config

    def _lookup(self, name: str) -> Optional[str]:
        source = self._config if self._config is not None else os.environ
        return source.get(name)

    def _load_settings(self) -> _JwtSettings:
        """
        Read the signing settings, raising ValueError with a caller-safe reason
        when they cannot be used to sign securely.
        """
        key = self._lookup(KEY_SETTING)
        issuer = self._lookup(ISSUER_SETTING)
        audience = self._lookup(AUDIENCE_SETTING)
        if not key or not issuer or not audience:
            raise ValueError(MISSING_CONFIG_ERROR)
        if len(key.encode("utf-8")) * 8 < MIN_KEY_BITS:
            raise ValueError(WEAK_KEY_ERROR)
        return _JwtSettings(key=key, issuer=issuer, audience=audience)

    def issue(self, user: User) -> TokenResult:
        """
        Produce a signed bearer token for ``user``.

        Never raises: misconfiguration and signing errors come back as a failed
        TokenResult and no token is produced.
        """
        try:
            settings = self._load_settings()
        except ValueError as e:
            return TokenResult.failure(str(e))

        # JWT expiry has one-second resolution; truncate so the claim and the
        # returned value are the same instant.
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expires = now + TOKEN_LIFETIME
        claims = {
            "sub": str(user.id),
            "name": user.username,
            "iss": settings.issuer,
            "aud": settings.audience,
            "iat": now,
            "exp": expires,
        }
        try:
            token = jwt.encode(claims, settings.key, algorithm=ALGORITHM)
        except Exception as e:
            logging.error(e, exc_info=True)
            return TokenResult.failure(f"Token signing failed: {e}")
        return TokenResult.success(token, expires)

    def decode(self, token: str) -> Optional[dict]:
        """
        Validate signature, expiry, issuer and audience of ``token``.

        Returns the claims, or None when the token is invalid or the issuer is
        not configured well enough to validate it.
        """
        try:
            settings = self._load_settings()
        except ValueError as e:
            logging.error(f"Cannot validate bearer token: {e}")
            return None
        try:
            return jwt.decode(
                token,
                settings.key,
                algorithms=[ALGORITHM],
                audience=settings.audience,
                issuer=settings.issuer,
                options={"require": ["exp", "sub"]},
            )
        except InvalidTokenError:
            return None
