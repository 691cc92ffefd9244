from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth import security
from taskflow.auth.schemas import UserOut
from taskflow.db.dependencies import get_db_session
from taskflow.tasks.models import User

# --- OAuth2 Scheme ---
# This tells FastAPI where to look for the token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


async def get_current_user_db(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Dependency that decodes a JWT token and returns the full SQLAlchemy User object.
    Every task and time-entry rule needs the acting user's id and role, so
    the endpoints depend on this one.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        # The 'sub' claim in the JWT should contain the user's ID
        payload = jwt.decode(
            token, security.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        user_id_str = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = int(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await session.get(User, user_id)
    if user is None:
        raise credentials_exception

    return user


async def get_current_user(
    user: User = Depends(get_current_user_db),
) -> UserOut:
    """Dependency that returns the public-facing UserOut model."""
    return UserOut.model_validate(user)
