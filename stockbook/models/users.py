# stockbook/models/users.py

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from stockbook.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # Profile fields, editable from /profile
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
