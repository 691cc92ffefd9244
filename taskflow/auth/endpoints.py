from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth import security
from taskflow.auth.dependencies import get_current_user, get_current_user_db
from taskflow.auth.schemas import SignupOut, Token, UserCreate, UserOut
from taskflow.db.dependencies import get_db_session
from taskflow.tasks import services
from taskflow.tasks.models import User
from taskflow.utils import translate_service_errors

router = APIRouter()


# -----------------------
# Authentication endpoints
# -----------------------
@router.post(
    "/auth/signup",
    response_model=SignupOut,
    status_code=status.HTTP_201_CREATED,
)
@translate_service_errors
async def signup(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Public endpoint for user registration. New accounts are developers;
    managers are provisioned out of band (see ``taskflow.db.seed``).
    """
    user = await services.create_user(
        session,
        name=payload.name,
        email=str(payload.email),
        password=payload.password,
    )
    return {"message": "User registered successfully", "user": user}


@router.post("/auth/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Standard OAuth2 password flow. The ``username`` field carries the email.
    """
    user = await services.authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = security.create_access_token(
        data={"sub": str(user.id), "role": user.role.value}
    )
    return {"access_token": access_token, "token_type": "bearer"}


# -----------------------
# User endpoints
# -----------------------
@router.get("/users/me", response_model=UserOut)
async def read_users_me(current_user: UserOut = Depends(get_current_user)):
    return current_user


@router.get("/users", response_model=List[UserOut])
async def list_users(
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Everyone who can be assigned a task."""
    return await services.list_users(session)
