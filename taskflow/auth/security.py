from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt

from taskflow.settings import settings
from taskflow.utils import utcnow

SECRET_KEY = settings.secret_key
ALGORITHM = settings.jwt_algorithm
# bcrypt work factor
ROUNDS = 10


def get_password_hash(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash, or a password longer than bcrypt accepts
        return False


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign ``data`` as a JWT that expires after ``expires_delta``."""
    to_encode = dict(data)
    expire = utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
