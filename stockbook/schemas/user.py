from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Unique login handle")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    full_name: str | None = Field(None, max_length=120)
    email: EmailStr | None = None

class UserResponse(BaseModel):
    id: int
    username: str
    full_name: str | None
    email: str | None
    created_at: datetime

    class Config:
        from_attributes = True

class ProfileUpdate(BaseModel):
    full_name: str | None = Field(None, max_length=120)
    email: EmailStr | None = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
