"""Auth API routes: register, login, current user, role management."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import select

import config
from tournament.models import User
from tournament.models.base import async_session_factory
from web.auth import (
    ROLES,
    create_access_token,
    get_user_by_email,
    hash_password,
    optional_user,
    require_admin_user,
    require_user,
    verify_password,
)

logger = logging.getLogger("courtside.auth")

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    email: str
    role: str


class UserResponse(BaseModel):
    email: str
    role: str


class UpdateRoleRequest(BaseModel):
    role: str


async def _bootstrap_admin(email: str, password: str) -> Optional[User]:
    """Create the configured initial admin on first login with the configured password."""
    if not (
        config.INITIAL_ADMIN_PASSWORD
        and email == config.INITIAL_ADMIN_EMAIL
        and password == config.INITIAL_ADMIN_PASSWORD
    ):
        return None
    async with async_session_factory() as session:
        user = User(
            email=config.INITIAL_ADMIN_EMAIL,
            password_hash=hash_password(config.INITIAL_ADMIN_PASSWORD),
            role="admin",
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
    logger.info("Bootstrapped initial admin %s", user.email)
    return user


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(body: RegisterRequest):
    """Create a regular user account."""
    email = body.email.lower()
    async with async_session_factory() as session:
        existing = await session.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none():
            raise HTTPException(409, "Email already registered")
        user = User(email=email, password_hash=hash_password(body.password), role="user")
        session.add(user)
        await session.commit()
        return UserResponse(email=user.email, role=user.role)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """Authenticate and return JWT."""
    email = body.email.strip().lower()
    user = await get_user_by_email(email)
    if not user:
        user = await _bootstrap_admin(email, body.password)
        if not user:
            raise HTTPException(status_code=401, detail="Invalid email or password")
    elif not verify_password(body.password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token(user.email, user.role)
    return LoginResponse(access_token=token, email=user.email, role=user.role)


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(require_user)):
    """Get current authenticated user."""
    return UserResponse(email=user.email, role=user.role)


@router.get("/me/optional")
async def get_me_optional(user: Optional[User] = Depends(optional_user)):
    """Get current user if logged in, else null."""
    if not user:
        return None
    return {"email": user.email, "role": user.role}


@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: User = Depends(require_admin_user)):
    """List all users (admin only)."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).order_by(User.email))
        return [UserResponse(email=u.email, role=u.role) for u in result.scalars().all()]


@router.patch("/users/{email}", response_model=UserResponse)
async def update_user_role(email: str, body: UpdateRoleRequest, admin: User = Depends(require_admin_user)):
    """Change a user's role (admin only)."""
    if body.role not in ROLES:
        raise HTTPException(400, "Invalid role")
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if not user:
            raise HTTPException(404, "User not found")
        user.role = body.role
        await session.commit()
        return UserResponse(email=user.email, role=user.role)
