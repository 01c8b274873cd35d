# stockbook/core/jwt.py

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from stockbook.core.config import settings

TOKEN_TYPE = "access"


def create_access_token(user_id: int, username: str, expires_delta: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    claims = {
        "sub": str(user_id),
        "username": username,
        "iat": issued_at,
        "exp": expire,
        "type": TOKEN_TYPE,
    }

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_user_id(token: str) -> int | None:
    """Return the user id carried by a valid access token, else None."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None

    return int(subject)
