"""Accounts for the organiser API: password hashing, access tokens and role dependencies.

Roles are ordered: an ``admin`` may do everything a ``user`` may. The role is
read from the database on each request, so a role change applies to tokens
already handed out.
"""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy import select

import config
from tournament.models import User
from tournament.models.base import async_session_factory

logger = logging.getLogger("courtside.auth")

ROLES = ("user", "admin")
_RANK = {role: rank for rank, role in enumerate(ROLES)}

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class TokenError(Exception):
    """Access token missing, malformed, expired or naming an unknown account."""


def _bcrypt_secret(password: str) -> str:
    # bcrypt ignores everything past 72 bytes
    raw = password.encode("utf-8")
    return hashlib.sha256(raw).hexdigest() if len(raw) > 72 else password


def hash_password(password: str) -> str:
    return pwd_context.hash(_bcrypt_secret(password))


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(_bcrypt_secret(password), password_hash)


def create_access_token(email: str, role: str, lifetime: Optional[timedelta] = None) -> str:
    """Signed token with the account email as subject. ``role`` is informational for clients."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": email,
        "role": role,
        "iat": issued,
        "exp": issued + (lifetime if lifetime is not None else timedelta(days=config.JWT_EXPIRE_DAYS)),
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def token_subject(token: str) -> str:
    """Email the token was issued to. Raises TokenError."""
    try:
        claims = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc
    if not claims.get("sub"):
        raise TokenError("Invalid token")
    return claims["sub"]


async def get_user_by_email(email: str) -> Optional[User]:
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()


async def _authenticate(credentials: Optional[HTTPAuthorizationCredentials]) -> User:
    if credentials is None or not credentials.credentials:
        raise TokenError("Not authenticated")
    user = await get_user_by_email(token_subject(credentials.credentials))
    if user is None:
        raise TokenError("Account no longer exists")
    return user


async def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """Current user, or None for anonymous and invalid tokens."""
    try:
        return await _authenticate(credentials)
    except TokenError:
        return None


def requires(role: str):
    """Dependency factory: the caller must hold ``role`` or a higher one. 401 without a valid token, 403 below the role."""
    needed = _RANK[role]

    async def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> User:
        try:
            user = await _authenticate(credentials)
        except TokenError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        if _RANK.get(user.role, -1) < needed:
            logger.warning("%s (role %s) denied %s access", user.email, user.role, role)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role.capitalize()} access required")
        return user

    return dependency


require_user = requires("user")
require_admin_user = requires("admin")
