"""Auth API routes: login, current user, user management."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select

import config
from gallery.models import User
from gallery.models.base import async_session_factory
from gallery.models.user import ADMIN, USER_TYPES
from gallery.schemas import CamelModel
from web.auth import (
    create_access_token,
    get_user_by_username,
    hash_password,
    require_admin_user,
    require_user,
    verify_password,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    type: str


class UserResponse(CamelModel):
    username: str
    first_name: str
    last_name: str
    display_name: Optional[str] = None
    hometown: Optional[str] = None
    type: str


class CreateUserRequest(CamelModel):
    username: str
    first_name: str = ""
    last_name: str = ""
    display_name: Optional[str] = None
    hometown: Optional[str] = None
    type: str = "student"  # student, judge, admin
    password: Optional[str] = None  # students normally sign in through SSO


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """Authenticate and return JWT."""
    user = await get_user_by_username(body.username)
    if not user:
        # Bootstrap: if INITIAL_ADMIN_PASSWORD is set and matches, create admin
        if (
            config.INITIAL_ADMIN_PASSWORD
            and body.username == config.INITIAL_ADMIN_USERNAME
            and body.password == config.INITIAL_ADMIN_PASSWORD
        ):
            async with async_session_factory() as session:
                user = User(
                    username=config.INITIAL_ADMIN_USERNAME,
                    first_name="Gallery",
                    last_name="Admin",
                    password_hash=hash_password(config.INITIAL_ADMIN_PASSWORD),
                    type=ADMIN,
                )
                session.add(user)
                await session.commit()
                await session.refresh(user)
                token = create_access_token(user.username, user.type)
                return LoginResponse(access_token=token, username=user.username, type=user.type)
        raise HTTPException(status_code=401, detail="Invalid username or password")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    token = create_access_token(user.username, user.type)
    return LoginResponse(access_token=token, username=user.username, type=user.type)


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(require_user)):
    """Get current authenticated user."""
    return UserResponse.model_validate(user)


@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: User = Depends(require_admin_user)):
    """List all users (admin only)."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).order_by(User.username))
        return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.post("/users", response_model=UserResponse)
async def create_user(body: CreateUserRequest, admin: User = Depends(require_admin_user)):
    """Create a new user (admin only)."""
    if body.type not in USER_TYPES:
        raise HTTPException(400, "Invalid user type")
    async with async_session_factory() as session:
        if await session.get(User, body.username):
            raise HTTPException(400, "Username already exists")
        user = User(
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            display_name=body.display_name,
            hometown=body.hometown,
            type=body.type,
            password_hash=hash_password(body.password) if body.password else None,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return UserResponse.model_validate(user)
