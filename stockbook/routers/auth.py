from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from stockbook.database import get_db
from stockbook.models.users import User
from stockbook.schemas.user import UserCreate, TokenResponse
from stockbook.core.auth import load_user
from stockbook.core.errors import StorageFailure
from stockbook.core.hashing import hash_password, verify_password
from stockbook.core.jwt import create_access_token
from stockbook.core.rate_limiter import limiter

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger("stockbook.auth")


# ---------------- REGISTER ----------------
@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
def register(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    if load_user(db, User.username == user_data.username):
        raise HTTPException(status_code=409, detail="Username already exists")

    try:
        user = User(
            username=user_data.username,
            password_hash=hash_password(user_data.password),
            full_name=user_data.full_name,
            email=user_data.email,
        )
        db.add(user)
        db.commit()

    except IntegrityError:
        # Lost a race with another signup for the same handle
        db.rollback()
        raise HTTPException(status_code=409, detail="Username already exists")

    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure("Unable to create account") from exc

    logger.info("User %s registered", user.id)
    return {"id": user.id}

# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = load_user(db, User.username == form_data.username)

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.id, user.username)

    return {
        "access_token": token,
        "token_type": "bearer",
        "username": user.username,
    }


# ---------------- LOGOUT ----------------
# Tokens are stateless; the client simply forgets its token
@router.post("/logout")
def logout():
    return {"message": "Logged out successfully"}
