# stockbook/core/auth.py

"""
Access boundary: turns a bearer token into the current User.

Everything past this dependency trusts ``current_user.id`` and passes it
explicitly to the services.
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.models.users import User
from stockbook.core.errors import StorageFailure, Unauthorized
from stockbook.core.jwt import decode_user_id

# auto_error is off so a missing token goes through our own 401 shape
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def load_user(db: Session, *criteria):
    """First user matching `criteria`, or None. Store errors become StorageFailure."""
    try:
        return db.query(User).filter(*criteria).first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure("Unable to load user") from exc


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    if not token:
        raise Unauthorized("Not authenticated")

    user_id = decode_user_id(token)

    if user_id is None:
        raise Unauthorized("Invalid or expired token")

    user = load_user(db, User.id == user_id)

    if user is None:
        raise Unauthorized("User not found")

    return user
