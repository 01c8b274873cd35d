# stockbook/routers/profile.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from stockbook.database import get_db
from stockbook.core.auth import get_current_user
from stockbook.core.errors import StorageFailure
from stockbook.schemas.user import ProfileUpdate, UserResponse

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
)


@router.get("", response_model=UserResponse)
def get_profile(current_user=Depends(get_current_user)):
    return current_user


@router.put("", response_model=UserResponse)
def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    # Only fields present in the body are touched; null clears a field
    changes = profile_data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        setattr(current_user, field, value)

    try:
        db.commit()
        db.refresh(current_user)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure("Unable to update profile") from exc

    return current_user
